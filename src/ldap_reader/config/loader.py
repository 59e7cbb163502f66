# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Configuration loader for LDAP Reader."""

import json
import logging
import os
from pathlib import Path

from .models import Config

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LDAP_READER_CONFIG"


def load_config(config_path: str | None = None) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to configuration file. If None, uses the LDAP_READER_CONFIG
                    environment variable.

    Returns:
        Config: Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
        json.JSONDecodeError: If config file is not valid JSON
    """
    if config_path is None:
        config_path = os.getenv(CONFIG_ENV_VAR)
        if not config_path:
            raise ValueError(
                "No configuration file specified. Either provide config_path or "
                f"set {CONFIG_ENV_VAR} environment variable."
            )

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from: {config_path}")

    try:
        with open(config_file, encoding="utf-8") as f:
            config_data = json.load(f)

        config = Config(**config_data)
        logger.info("Configuration loaded successfully")

        _log_config_summary(config)

        return config

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in configuration file: {e}")
        raise
    except Exception as e:
        logger.error(f"Error loading configuration: {e}")
        raise


def _log_config_summary(config: Config) -> None:
    """Log configuration summary without sensitive information."""
    logger.debug(f"LDAP Server: {config.ldap.server}")
    logger.debug(f"Bind DN: {config.ldap.bind_dn or '(anonymous)'}")
    logger.debug(f"Protocol Version: {config.ldap.version}")
    logger.debug(f"Page Size: {config.paging.page_size}")
    logger.debug(f"Paging Critical: {config.paging.paging_critical}")

    if config.search:
        logger.debug(f"Search Base: {config.search.base}")
        logger.debug(f"Search Filter: {config.search.filter}")

    logger.debug(f"Logging Level: {config.logging.level}")


def validate_config(config: Config) -> None:
    """
    Perform additional validation on configuration.

    Args:
        config: Configuration to validate

    Raises:
        ValueError: If configuration is invalid
    """
    if bool(config.ldap.bind_dn) != bool(config.ldap.password):
        raise ValueError("Simple bind requires both bind_dn and password")

    if config.ldap.use_ssl and not config.ldap.server.startswith("ldaps://"):
        logger.warning("use_ssl is enabled but server URI doesn't use ldaps://")

    if config.ldap.version not in (None, 0, 3):
        logger.warning(
            f"Protocol version {config.ldap.version} requested; servers usually accept only 3"
        )

    if config.search and len(config.search.attributes) > config.paging.max_attributes:
        raise ValueError(
            f"Search requests {len(config.search.attributes)} attributes, "
            f"maximum is {config.paging.max_attributes}"
        )

    if not config.paging.paging_critical:
        logger.warning(
            "Paging control is not critical; servers without paging support may "
            "answer without a paging response and the search will fail"
        )

    logger.info("Configuration validation completed")


def create_sample_config(output_path: str) -> None:
    """
    Create a sample configuration file.

    Args:
        output_path: Path where to create the sample config
    """
    sample_config = {
        "ldap": {
            "server": "ldap://ldapserver.example.org",
            "bind_dn": "cn=ldapbinduser,ou=Service Accounts,dc=example,dc=org",
            "password": "Password",
            "version": 3,
            "timeout": 30,
            "use_ssl": False,
        },
        "paging": {"page_size": 1000, "paging_critical": True, "max_attributes": 50},
        "search": {
            "base": "ou=SSO,dc=example,dc=org",
            "filter": "(objectClass=user)",
            "attributes": ["sAMAccountName", "memberOf"],
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    }

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(sample_config, f, indent=2, ensure_ascii=False)

    logger.info(f"Sample configuration created at: {output_path}")
