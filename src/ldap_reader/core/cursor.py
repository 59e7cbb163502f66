# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Lazy cursor over the entries of a paged search."""

from collections.abc import Iterator
from typing import Any

from .logging import get_logger
from .paging import PagedQueryEngine, ResultPage

logger = get_logger(__name__)


class ResultCursor:
    """
    Walks the entries of the engine's current query across all of its pages.

    The position is tied to the page it was taken on. Once the engine holds a
    different page (next page, new query, failed fetch) the old position is
    never reported again.
    """

    def __init__(self, engine: PagedQueryEngine):
        self.engine = engine
        self._page: ResultPage | None = None
        self._index = -1

    def fetch(self) -> bool:
        """
        Move to the next entry, fetching further pages as needed.

        Returns:
            True if positioned on an entry, False when the query is exhausted
            or there is no usable result page
        """
        while True:
            page = self.engine.page
            if page is None:
                self._page = None
                self._index = -1
                return False

            if page is not self._page:
                self._page = page
                self._index = -1

            if self._index < len(page):
                self._index += 1
            if self._index < len(page):
                return True

            if not self.engine.more_pages:
                return False

            logger.debug(f"Page {page.number} exhausted, fetching next page")
            self.engine.fetch_next_page()

    @property
    def current_entry(self) -> dict[str, Any] | None:
        """The entry under the cursor, None if unpositioned or stale."""
        page = self._page
        if page is None or page is not self.engine.page:
            return None
        if 0 <= self._index < len(page):
            return page.entries[self._index]
        return None

    @property
    def current_dn(self) -> str | None:
        entry = self.current_entry
        return entry.get("dn") if entry is not None else None

    def entries(self) -> Iterator[dict[str, Any]]:
        """Yield the remaining entries of the query."""
        while self.fetch():
            yield self.current_entry
