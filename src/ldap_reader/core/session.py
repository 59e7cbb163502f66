# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""LDAP session: connection ownership, protocol version and bind state."""

from enum import Enum
from typing import Any

from ..config.models import DEFAULT_PROTOCOL_VERSION, LDAPConfig, SecurityConfig
from .exceptions import LDAPReaderError, StateError
from .gateway import DirectoryGateway, LDAP3Gateway
from .logging import get_logger, log_ldap_operation

logger = get_logger(__name__)


class BindState(str, Enum):
    """Bind state of a session."""

    UNBOUND = "unbound"
    BOUND = "bound"


class LDAPSession:
    """
    One connection to a directory server and its bind state.

    Constructing a session initializes the connection and sets the protocol
    version. When credentials are passed the session binds immediately; if any
    step fails the connection is released and the error propagates.
    """

    def __init__(
        self,
        uri: str,
        bind_dn: str | None = None,
        password: str | None = None,
        version: int | None = DEFAULT_PROTOCOL_VERSION,
        gateway: DirectoryGateway | None = None,
    ):
        """
        Initialize the session.

        Args:
            uri: Server connection URI, e.g. "ldap://example.org:389"
            bind_dn: Full DN of the bind user
            password: Password of the bind user
            version: Protocol version. None or 0 keeps the library default
            gateway: Directory gateway, an LDAP3Gateway by default
        """
        self.uri = uri
        self.gateway = gateway or LDAP3Gateway()
        self.version: int | None = None
        self.bind_state = BindState.UNBOUND
        self.server_credentials: bytes | None = None

        self._bind_dn: str | None = None
        self._secret: bytearray | None = None
        self._connection: Any = None

        self._connection = self.gateway.initialize(uri)
        logger.debug(f"Session initialized for {uri}")

        try:
            if version:
                self.gateway.set_protocol_version(self._connection, version)
                self.version = version

            if bind_dn is not None or password is not None:
                self.bind(bind_dn or "", password or "")
        except LDAPReaderError:
            self.close()
            raise

    @classmethod
    def from_config(
        cls, ldap_config: LDAPConfig, security_config: SecurityConfig | None = None
    ) -> "LDAPSession":
        """
        Build a session from configuration, binding when a bind DN is configured.

        Args:
            ldap_config: LDAP connection configuration
            security_config: Security configuration
        """
        gateway = LDAP3Gateway(
            security_config,
            timeout=ldap_config.timeout,
            receive_timeout=ldap_config.receive_timeout,
            use_ssl=ldap_config.use_ssl,
        )
        return cls(
            ldap_config.server,
            bind_dn=ldap_config.bind_dn,
            password=ldap_config.password,
            version=ldap_config.version,
            gateway=gateway,
        )

    @property
    def connection(self) -> Any:
        """The live connection handle."""
        if self._connection is None:
            raise StateError("Session closed")
        return self._connection

    @property
    def bind_dn(self) -> str | None:
        return self._bind_dn

    @property
    def has_credentials(self) -> bool:
        return self._secret is not None

    @property
    def is_bound(self) -> bool:
        return self.bind_state is BindState.BOUND

    @property
    def closed(self) -> bool:
        return self._connection is None

    def bind(
        self, bind_dn: str | None = None, password: str | None = None, rebind: bool = False
    ) -> None:
        """
        Bind to the server.

        With no credentials the ones set earlier are used. Passing credentials
        replaces the stored ones before binding.

        Args:
            bind_dn: Full DN of the bind user, e.g. "cn=user1,ou=Accounts,dc=example,dc=org"
            password: Password of the bind user
            rebind: Bind again even if already bound, e.g. to switch accounts

        Raises:
            StateError: If already bound without rebind, no credentials are set,
                        or the session is closed
            ProtocolError: If the server rejects the bind
        """
        connection = self.connection

        if self.is_bound and not rebind:
            raise StateError("Already bound")

        if bind_dn is not None or password is not None:
            self._set_credentials(bind_dn or "", password or "")
        elif not self.has_credentials:
            raise StateError("No credentials set")

        dn = self._bind_dn or ""
        try:
            self.server_credentials = self.gateway.bind(
                connection, dn, self._secret.decode("utf-8")
            )
        except LDAPReaderError as e:
            # the server dropped any earlier association along with the failed bind
            self.bind_state = BindState.UNBOUND
            log_ldap_operation("bind", dn or "(anonymous)", False, str(e))
            raise

        self.bind_state = BindState.BOUND
        log_ldap_operation("bind", dn or "(anonymous)", True)

    def _set_credentials(self, bind_dn: str, password: str) -> None:
        self._discard_secret()
        self._bind_dn = bind_dn
        self._secret = bytearray(password.encode("utf-8"))

    def _discard_secret(self) -> None:
        if self._secret is not None:
            for i in range(len(self._secret)):
                self._secret[i] = 0
            self._secret = None

    def close(self) -> None:
        """Unbind, release the connection and discard credentials."""
        connection, self._connection = self._connection, None
        self.bind_state = BindState.UNBOUND
        self._discard_secret()
        if connection is not None:
            self.gateway.unbind(connection)
            logger.debug(f"Session for {self.uri} closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
