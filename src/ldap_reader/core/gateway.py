# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Directory protocol gateway built on ldap3."""

import ssl
from typing import Any, Protocol

import ldap3
from ldap3 import ALL_ATTRIBUTES, NONE, SUBTREE, Connection, Server
from ldap3.core.exceptions import LDAPCommunicationError, LDAPException
from ldap3.core.results import RESULT_SUCCESS
from ldap3.protocol.rfc2696 import paged_search_control
from pyasn1.error import PyAsn1Error
from pydantic import BaseModel, Field

from ..config.models import SecurityConfig
from .exceptions import LDAPConnectionError, ProtocolError
from .logging import get_logger

logger = get_logger(__name__)

PAGED_RESULTS_OID = "1.2.840.113556.1.4.319"
SUPPORTED_VERSIONS = (2, 3)


class SearchResult(BaseModel):
    """Entries and response controls of one search round trip."""

    entries: list[dict[str, Any]] = Field(default_factory=list)
    controls: dict[str, Any] = Field(default_factory=dict)


class DirectoryGateway(Protocol):
    """Operations the session and paging engine need from the directory protocol."""

    def initialize(self, uri: str) -> Any: ...

    def set_protocol_version(self, connection: Any, version: int) -> None: ...

    def bind(self, connection: Any, principal: str, secret: str) -> bytes | None: ...

    def create_paging_control(self, page_size: int, cookie: bytes, critical: bool) -> Any: ...

    def search(
        self,
        connection: Any,
        search_base: str,
        search_filter: str,
        attributes: list[str] | None,
        controls: list[Any],
    ) -> SearchResult: ...

    def parse_paging_control(self, result: SearchResult) -> tuple[int, bytes] | None: ...

    def get_values(self, entry: dict[str, Any], attribute: str) -> list[bytes] | None: ...

    def unbind(self, connection: Any) -> None: ...


def describe_result(result: dict[str, Any] | None) -> str:
    """Format an ldap3 result dictionary as a diagnostic string."""
    if not result:
        return "unknown error"
    description = result.get("description") or "unknown error"
    message = result.get("message")
    if message:
        return f"{description}: {message}"
    return description


class LDAP3Gateway:
    """
    Directory gateway backed by ldap3.

    Every ldap3 failure is translated into the LDAP Reader error taxonomy:
    socket level failures become LDAPConnectionError, everything else ProtocolError.
    """

    def __init__(
        self,
        security_config: SecurityConfig | None = None,
        timeout: int = 30,
        receive_timeout: int = 10,
        use_ssl: bool = False,
        client_strategy: str = ldap3.SYNC,
    ):
        """
        Initialize the gateway.

        Args:
            security_config: TLS settings
            timeout: Connection timeout in seconds
            receive_timeout: Receive timeout in seconds
            use_ssl: Force SSL even for ldap:// URIs
            client_strategy: ldap3 client strategy, e.g. ldap3.MOCK_SYNC for an in-memory directory
        """
        self.security_config = security_config or SecurityConfig()
        self.timeout = timeout
        self.receive_timeout = receive_timeout
        self.use_ssl = use_ssl
        self.client_strategy = client_strategy

    def _tls(self) -> ldap3.Tls | None:
        if not (self.security_config.enable_tls or self.use_ssl):
            return None
        return ldap3.Tls(
            validate=(
                ssl.CERT_REQUIRED if self.security_config.validate_certificate else ssl.CERT_NONE
            ),
            ca_certs_file=self.security_config.ca_cert_file,
        )

    def initialize(self, uri: str) -> Connection:
        """
        Create an unopened connection for the server URI.

        Raises:
            LDAPConnectionError: If the URI cannot be used to set up a server
        """
        try:
            server = Server(
                uri,
                use_ssl=self.use_ssl or uri.startswith("ldaps://"),
                get_info=NONE,
                tls=self._tls(),
                connect_timeout=self.timeout,
            )
            connection = Connection(
                server,
                authentication=ldap3.ANONYMOUS,
                client_strategy=self.client_strategy,
                receive_timeout=self.receive_timeout,
                check_names=True,
                raise_exceptions=False,
                return_empty_attributes=False,
            )
        except LDAPException as e:
            raise LDAPConnectionError(f"Cannot initialize connection to {uri}: {e}") from e

        logger.debug(f"Initialized connection to {uri}")
        return connection

    def set_protocol_version(self, connection: Connection, version: int) -> None:
        """
        Set the protocol version used by subsequent requests.

        Raises:
            ProtocolError: If the version is not supported
        """
        if version not in SUPPORTED_VERSIONS:
            raise ProtocolError(f"Unsupported LDAP protocol version: {version}")
        connection.version = version

    def bind(self, connection: Connection, principal: str, secret: str) -> bytes | None:
        """
        Perform a simple bind, or an anonymous bind when both values are empty.

        Returns:
            Server SASL credentials if the server sent any

        Raises:
            LDAPConnectionError: If the server cannot be reached
            ProtocolError: If the server rejects the bind
        """
        if principal or secret:
            connection.authentication = ldap3.SIMPLE
            connection.user = principal
            connection.password = secret
        else:
            connection.authentication = ldap3.ANONYMOUS
            connection.user = None
            connection.password = None

        try:
            success = connection.bind()
        except LDAPCommunicationError as e:
            raise LDAPConnectionError(str(e)) from e
        except LDAPException as e:
            raise ProtocolError(str(e)) from e

        result = connection.result or {}
        if not success:
            raise ProtocolError(describe_result(result), result.get("result"))

        return result.get("saslCreds")

    def create_paging_control(self, page_size: int, cookie: bytes, critical: bool) -> Any:
        """
        Encode a simple paged results request control.

        Raises:
            ProtocolError: If the control cannot be encoded
        """
        try:
            return paged_search_control(criticality=critical, size=page_size, cookie=cookie or None)
        except (LDAPException, PyAsn1Error) as e:
            raise ProtocolError(f"Cannot create paged results control: {e}") from e

    def search(
        self,
        connection: Connection,
        search_base: str,
        search_filter: str,
        attributes: list[str] | None,
        controls: list[Any],
    ) -> SearchResult:
        """
        Run a subtree search with no size or time limit.

        Raises:
            LDAPConnectionError: If the server cannot be reached
            ProtocolError: If the search does not complete successfully
        """
        try:
            connection.search(
                search_base=search_base,
                search_filter=search_filter,
                search_scope=SUBTREE,
                attributes=attributes if attributes else ALL_ATTRIBUTES,
                size_limit=0,
                time_limit=0,
                controls=controls,
            )
        except LDAPCommunicationError as e:
            raise LDAPConnectionError(str(e)) from e
        except LDAPException as e:
            raise ProtocolError(str(e)) from e

        # search() reports False for an empty page, so the result code decides
        result = connection.result or {}
        if result.get("result") != RESULT_SUCCESS:
            raise ProtocolError(describe_result(result), result.get("result"))

        entries = [
            entry for entry in (connection.response or []) if entry.get("type") == "searchResEntry"
        ]
        return SearchResult(entries=entries, controls=result.get("controls") or {})

    def parse_paging_control(self, result: SearchResult) -> tuple[int, bytes] | None:
        """
        Extract (count, cookie) from the paged results response control.

        Returns:
            None when the server did not return the control

        Raises:
            ProtocolError: If the control is present but malformed
        """
        control = result.controls.get(PAGED_RESULTS_OID)
        if control is None:
            return None

        value = control.get("value") if isinstance(control, dict) else None
        if not isinstance(value, dict) or "cookie" not in value:
            raise ProtocolError("Malformed paged results response control")

        return value.get("size") or 0, value["cookie"] or b""

    def get_values(self, entry: dict[str, Any], attribute: str) -> list[bytes] | None:
        """Return the raw values of an attribute, or None when the entry lacks it."""
        raw_attributes = entry.get("raw_attributes") or {}
        values = raw_attributes.get(attribute)
        if values is None:
            return None
        return list(values)

    def unbind(self, connection: Connection) -> None:
        """Unbind and close the connection."""
        try:
            connection.unbind()
        except LDAPException as e:
            logger.warning(f"Error during unbind: {e}")
