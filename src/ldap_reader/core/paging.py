# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Paged query engine driving the simple paged results control."""

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..config.models import PagingConfig
from .exceptions import LDAPReaderError, ProtocolError, StateError, ValidationError
from .logging import get_logger, log_ldap_operation, log_page_fetch
from .session import LDAPSession

logger = get_logger(__name__)


class Query(BaseModel):
    """Parameters of one search, fixed for its whole page sequence."""

    model_config = ConfigDict(frozen=True)

    search_filter: str = Field(description="LDAP search filter")
    search_base: str = Field(description="Search base DN")
    attributes: tuple[str, ...] | None = Field(
        default=None, description="Requested attribute names, None for all attributes"
    )
    page_size: int = Field(description="Entries requested per page")
    critical: bool = Field(description="Criticality of the paging control")


class PageState(BaseModel):
    """Continuation state between pages."""

    cookie: bytes = b""
    more_pages: bool = False
    result_count: int = 0
    pages_fetched: int = 0


class ResultPage(BaseModel):
    """Entries of one fetched page, in server order."""

    model_config = ConfigDict(frozen=True)

    number: int
    entries: tuple[dict[str, Any], ...] = ()

    def __len__(self) -> int:
        return len(self.entries)


class PagedQueryEngine:
    """
    Issues one paged search at a time over a bound session.

    The first page is fetched by query(); later pages are fetched on demand
    by fetch_next_page(), normally driven by a ResultCursor.
    """

    def __init__(self, session: LDAPSession, paging_config: PagingConfig | None = None):
        """
        Initialize the engine.

        Args:
            session: Session used for searches
            paging_config: Page size, criticality and attribute limit
        """
        self.session = session
        self.paging_config = paging_config or PagingConfig()

        self._page_size = self.paging_config.page_size
        self._query: Query | None = None
        self._page: ResultPage | None = None
        self._state = PageState()
        self._controls: list[Any] | None = None

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def page(self) -> ResultPage | None:
        """The current result page, None when no usable page exists."""
        return self._page

    @property
    def page_state(self) -> PageState:
        return self._state.model_copy()

    @property
    def current_query(self) -> Query | None:
        return self._query

    @property
    def more_pages(self) -> bool:
        return self._state.more_pages

    def set_page_size(self, page_size: int) -> None:
        """
        Set the page size for subsequent queries.

        Raises:
            ValidationError: If page_size is not a positive integer
        """
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
            raise ValidationError(f"Page size must be a positive integer, got {page_size!r}")
        self._page_size = page_size

    def query(
        self,
        search_filter: str,
        search_base: str,
        attributes: Sequence[str] | None = None,
    ) -> ResultPage:
        """
        Start a new paged search and fetch its first page.

        Args:
            search_filter: LDAP search filter, e.g. "(&(objectClass=user)(uidNumber=*))"
            search_base: Search base, e.g. "ou=users,dc=example,dc=org"
            attributes: Requested attribute names, None or empty for all attributes

        Returns:
            The first result page

        Raises:
            ValidationError: If attributes is a string or exceeds the configured maximum
            StateError: If the session is not bound
            ProtocolError: If the first page cannot be fetched
        """
        if isinstance(attributes, (str, bytes)):
            raise ValidationError("Attributes must be a sequence of names, not a single string")

        names = tuple(attributes) if attributes else None
        if names and len(names) > self.paging_config.max_attributes:
            raise ValidationError(
                f"Too many attributes requested: {len(names)} "
                f"(maximum {self.paging_config.max_attributes})"
            )

        try:
            query = Query(
                search_filter=search_filter,
                search_base=search_base,
                attributes=names,
                page_size=self._page_size,
                critical=self.paging_config.paging_critical,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid query: {e}") from e

        if self.session.closed:
            raise StateError("Session closed")
        if not self.session.is_bound:
            raise StateError("Session is not bound")

        self._page = None
        self._controls = None
        self._state = PageState()
        self._query = query
        logger.debug(
            f"Query: base={search_base}, filter={search_filter}, "
            f"attributes={list(names) if names else 'all'}, page_size={self._page_size}"
        )

        return self._fetch_page()

    def fetch_next_page(self) -> ResultPage:
        """
        Fetch the page following the current one.

        Raises:
            StateError: If there is no active query or no further page
            ProtocolError: If the page cannot be fetched
        """
        if self._query is None or self._page is None:
            raise StateError("No active query")
        if not self._state.more_pages:
            raise StateError("No more pages available")

        return self._fetch_page()

    def _fetch_page(self) -> ResultPage:
        query = self._query
        try:
            return self._request_page(query)
        except LDAPReaderError as e:
            self._abort()
            log_ldap_operation("search", query.search_base, False, str(e))
            raise

    def _request_page(self, query: Query) -> ResultPage:
        gateway = self.session.gateway
        connection = self.session.connection

        self._controls = None
        control = gateway.create_paging_control(
            query.page_size, self._state.cookie, query.critical
        )
        self._controls = [control]

        result = gateway.search(
            connection,
            query.search_base,
            query.search_filter,
            list(query.attributes) if query.attributes else None,
            self._controls,
        )

        paging = gateway.parse_paging_control(result)
        if paging is None:
            raise ProtocolError("Server did not return a paged results control")
        count, cookie = paging

        self._state = PageState(
            cookie=cookie,
            more_pages=bool(cookie),
            result_count=count,
            pages_fetched=self._state.pages_fetched + 1,
        )
        self._page = ResultPage(number=self._state.pages_fetched, entries=tuple(result.entries))

        log_page_fetch(query.search_base, self._page.number, len(self._page), cookie)
        if not self._state.more_pages:
            log_ldap_operation(
                "search", query.search_base, True, f"{self._state.pages_fetched} page(s)"
            )
        return self._page

    def _abort(self) -> None:
        self._page = None
        self._controls = None
        self._state = PageState(pages_fetched=self._state.pages_fetched)
