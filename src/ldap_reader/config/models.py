# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Configuration models for LDAP Reader."""

from pydantic import BaseModel, Field, field_validator

DEFAULT_PROTOCOL_VERSION = 3
DEFAULT_PAGE_SIZE = 1000
DEFAULT_PAGING_CRITICAL = True
DEFAULT_MAX_ATTRIBUTES = 50


class LDAPConfig(BaseModel):
    """LDAP connection configuration."""

    server: str = Field(..., description="LDAP server URI (ldap:// or ldaps://)")
    bind_dn: str | None = Field(default=None, description="Full DN of the bind user")
    password: str | None = Field(default=None, description="Password of the bind user")
    version: int | None = Field(
        default=DEFAULT_PROTOCOL_VERSION,
        description="LDAP protocol version. None or 0 keeps the library default",
    )
    timeout: int = Field(default=30, description="Connection timeout in seconds")
    receive_timeout: int = Field(default=10, description="Receive timeout in seconds")
    use_ssl: bool = Field(default=False, description="Use SSL/TLS connection")

    @field_validator("server")
    @classmethod
    def validate_server(cls, v):
        """Validate server URI format."""
        if not v.startswith(("ldap://", "ldaps://")):
            raise ValueError("Server must start with ldap:// or ldaps://")
        return v

    @field_validator("timeout", "receive_timeout")
    @classmethod
    def validate_timeout(cls, v):
        """Validate timeouts."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class SecurityConfig(BaseModel):
    """Security configuration for LDAP connections."""

    enable_tls: bool = Field(default=False, description="Enable TLS encryption")
    validate_certificate: bool = Field(default=True, description="Validate server certificate")
    ca_cert_file: str | None = Field(default=None, description="CA certificate file path")


class PagingConfig(BaseModel):
    """Paged search configuration."""

    page_size: int = Field(default=DEFAULT_PAGE_SIZE, description="Entries requested per page")
    paging_critical: bool = Field(
        default=DEFAULT_PAGING_CRITICAL,
        description="Mark the paging control critical so servers without paging refuse the search",
    )
    max_attributes: int = Field(
        default=DEFAULT_MAX_ATTRIBUTES,
        description="Maximum number of attribute names accepted by one query",
    )

    @field_validator("page_size", "max_attributes")
    @classmethod
    def validate_positive_int(cls, v):
        """Validate positive integers."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v


class SearchConfig(BaseModel):
    """Default search parameters used by the command line reader."""

    base: str = Field(..., description="Search base DN")
    filter: str = Field(default="(objectClass=*)", description="LDAP search filter")
    attributes: list[str] = Field(
        default_factory=list, description="Attributes to retrieve, empty means all"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    file: str | None = Field(default=None, description="Log file path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Level must be one of: {valid_levels}")
        return v.upper()


class Config(BaseModel):
    """Main configuration class for LDAP Reader."""

    ldap: LDAPConfig
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    paging: PagingConfig = Field(default_factory=PagingConfig)
    search: SearchConfig | None = None
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
