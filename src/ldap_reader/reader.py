# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Single-object reader API combining session, paging, cursor and attributes."""

from collections.abc import Iterator, Sequence
from typing import Any

from .config.models import DEFAULT_PROTOCOL_VERSION, Config, PagingConfig
from .core.attributes import AttributeAccessor, AttributeValueSet
from .core.cursor import ResultCursor
from .core.gateway import DirectoryGateway
from .core.paging import PagedQueryEngine, PageState
from .core.session import BindState, LDAPSession


class LDAPReader:
    """
    Paged LDAP reader.

    Example:
        with LDAPReader("ldap://ldap.example.org", bind_dn, password) as reader:
            reader.query("(objectClass=user)", "ou=SSO,dc=example,dc=org",
                         ["sAMAccountName", "memberOf"])
            while reader.fetch():
                with reader.get_attribute("sAMAccountName") as values:
                    ...
    """

    def __init__(
        self,
        uri: str,
        bind_dn: str | None = None,
        password: str | None = None,
        version: int | None = DEFAULT_PROTOCOL_VERSION,
        paging_config: PagingConfig | None = None,
        gateway: DirectoryGateway | None = None,
    ):
        """
        Initialize the session and bind when credentials are given.

        Args:
            uri: Server connection URI, e.g. "ldap://example.org:389"
            bind_dn: Full DN of the bind user
            password: Password of the bind user
            version: Preferred protocol version. None or 0 keeps the library default
            paging_config: Page size, criticality and attribute limit
            gateway: Directory gateway, an LDAP3Gateway by default
        """
        session = LDAPSession(uri, bind_dn, password, version=version, gateway=gateway)
        self._setup(session, paging_config)

    @classmethod
    def from_session(
        cls, session: LDAPSession, paging_config: PagingConfig | None = None
    ) -> "LDAPReader":
        """Wrap an existing session."""
        reader = cls.__new__(cls)
        reader._setup(session, paging_config)
        return reader

    @classmethod
    def from_config(cls, config: Config) -> "LDAPReader":
        """Build a reader from a loaded configuration."""
        session = LDAPSession.from_config(config.ldap, config.security)
        return cls.from_session(session, config.paging)

    def _setup(self, session: LDAPSession, paging_config: PagingConfig | None) -> None:
        self.session = session
        self.engine = PagedQueryEngine(session, paging_config)
        self.cursor = ResultCursor(self.engine)
        self.accessor = AttributeAccessor(self.cursor)

    @property
    def bind_state(self) -> BindState:
        return self.session.bind_state

    @property
    def page_state(self) -> PageState:
        return self.engine.page_state

    def bind(
        self, bind_dn: str | None = None, password: str | None = None, rebind: bool = False
    ) -> None:
        """Bind to the server, see LDAPSession.bind."""
        self.session.bind(bind_dn, password, rebind=rebind)

    def set_page_size(self, page_size: int) -> None:
        """Set page size for subsequent queries. Default is 1000."""
        self.engine.set_page_size(page_size)

    def query(
        self, search_filter: str, search_base: str, attributes: Sequence[str] | None = None
    ) -> None:
        """Start a paged search, see PagedQueryEngine.query."""
        self.engine.query(search_filter, search_base, attributes)

    def fetch(self) -> bool:
        """Move to the next entry. Returns False when there are no more entries."""
        return self.cursor.fetch()

    @property
    def current_dn(self) -> str | None:
        return self.cursor.current_dn

    def entries(self) -> Iterator[dict[str, Any]]:
        """Yield the remaining entries of the current query."""
        return self.cursor.entries()

    def get_attribute(self, name: str) -> AttributeValueSet:
        """Get attribute values of the current entry, see AttributeAccessor.get_attribute."""
        return self.accessor.get_attribute(name)

    @staticmethod
    def clear_values(value_set: AttributeValueSet) -> None:
        """Release a value set obtained from get_attribute."""
        AttributeAccessor.release(value_set)

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
