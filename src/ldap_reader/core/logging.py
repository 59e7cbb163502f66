# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Logging configuration and audit helpers for LDAP Reader."""

import logging
import sys

from ..config.models import LoggingConfig

ROOT_LOGGER = "ldap-reader"
AUDIT_LOGGER = "audit"


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: LoggingConfig) -> None:
    """
    Route the ldap-reader logger hierarchy to stderr and, optionally, a file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        config: Logging configuration
    """
    level = getattr(logging, config.level)
    formatter = logging.Formatter(config.format)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(_handler(logging.StreamHandler(sys.stderr), level, formatter))

    if config.file:
        try:
            file_handler = logging.FileHandler(config.file, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to setup file logging: {e}")
        else:
            logger.addHandler(_handler(file_handler, level, formatter))
            logger.info(f"Logging to file: {config.file}")

    logger.info(f"Logging initialized at level: {config.level}")


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ldap-reader hierarchy."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_ldap_operation(operation: str, dn: str, success: bool, details: str | None = None) -> None:
    """
    Write an audit line for a bind or search.

    Failures are logged at WARNING, successes at INFO. Never pass secrets in details.

    Args:
        operation: Operation name (e.g., 'search', 'bind')
        dn: Bind DN or search base involved
        success: Whether operation succeeded
        details: Server diagnostic or summary
    """
    status = "SUCCESS" if success else "FAILURE"
    message = f"LDAP {operation.upper()}: {status} - DN: {dn}"
    if details:
        message += f" - Details: {details}"

    get_logger(AUDIT_LOGGER).log(logging.INFO if success else logging.WARNING, message)


def log_page_fetch(search_base: str, page_number: int, entry_count: int, cookie: bytes) -> None:
    """
    Write a DEBUG audit line for one page of a paged search.

    Only the presence of the continuation cookie is logged, never its value.
    """
    continuation = "cookie returned" if cookie else "last page"
    get_logger(AUDIT_LOGGER).debug(
        f"LDAP PAGE: {page_number} - DN: {search_base} - Entries: {entry_count} - {continuation}"
    )
