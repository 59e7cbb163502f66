# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Shared fixtures: an in-memory directory gateway that serves paged results."""

import logging
from unittest.mock import Mock

import pytest

from ldap_reader.core.exceptions import ProtocolError
from ldap_reader.core.gateway import PAGED_RESULTS_OID, SearchResult
from ldap_reader.core.logging import ROOT_LOGGER


def make_entry(index: int, **attributes) -> dict:
    """Build an ldap3-style search result entry."""
    raw = {"uid": [f"user{index}".encode()], "cn": [f"User {index}".encode()]}
    raw.update(attributes)
    return {
        "type": "searchResEntry",
        "dn": f"uid=user{index},ou=people,dc=example,dc=org",
        "raw_attributes": raw,
        "attributes": {key: [v.decode() for v in values] for key, values in raw.items()},
    }


def paged_result(entries: list[dict], cookie: bytes = b"", size: int = 0) -> SearchResult:
    """Build a search result carrying a paged results response control."""
    return SearchResult(
        entries=entries,
        controls={
            PAGED_RESULTS_OID: {
                "description": "SimplePagedResults",
                "criticality": False,
                "value": {"size": size, "cookie": cookie},
            }
        },
    )


class FakeGateway:
    """
    Directory gateway double.

    By default it serves ``entries`` in slices of the requested page size,
    using the offset of the next slice as cookie. ``scripted`` results, when
    given, are returned in order instead.
    """

    def __init__(self, entries=None, scripted=None):
        self.entries = list(entries or [])
        self.scripted = list(scripted) if scripted is not None else None

        self.connection = Mock(name="connection")
        self.versions: list[int] = []
        self.bind_calls: list[tuple[str, str]] = []
        self.control_calls: list[tuple[int, bytes, bool]] = []
        self.search_calls: list[dict] = []
        self.returned_cookies: list[bytes] = []
        self.unbind_calls = 0

        self.init_error: Exception | None = None
        self.bind_error: Exception | None = None
        self.search_errors: dict[int, Exception] = {}

    def initialize(self, uri):
        if self.init_error:
            raise self.init_error
        return self.connection

    def set_protocol_version(self, connection, version):
        if version not in (2, 3):
            raise ProtocolError(f"Unsupported LDAP protocol version: {version}")
        self.versions.append(version)

    def bind(self, connection, principal, secret):
        self.bind_calls.append((principal, secret))
        if self.bind_error:
            raise self.bind_error
        return None

    def create_paging_control(self, page_size, cookie, critical):
        self.control_calls.append((page_size, cookie, critical))
        return (PAGED_RESULTS_OID, critical, {"size": page_size, "cookie": cookie})

    def search(self, connection, search_base, search_filter, attributes, controls):
        call_number = len(self.search_calls)
        _, _, value = controls[0]
        self.search_calls.append(
            {
                "base": search_base,
                "filter": search_filter,
                "attributes": attributes,
                "page_size": value["size"],
                "cookie": value["cookie"],
            }
        )
        if call_number in self.search_errors:
            raise self.search_errors[call_number]

        if self.scripted is not None:
            result = self.scripted.pop(0)
        else:
            offset = int(value["cookie"]) if value["cookie"] else 0
            end = offset + value["size"]
            cookie = str(end).encode() if end < len(self.entries) else b""
            result = paged_result(self.entries[offset:end], cookie, len(self.entries))

        paging = result.controls.get(PAGED_RESULTS_OID)
        if paging:
            self.returned_cookies.append(paging["value"]["cookie"])
        return result

    def parse_paging_control(self, result):
        control = result.controls.get(PAGED_RESULTS_OID)
        if control is None:
            return None
        return control["value"]["size"], control["value"]["cookie"]

    def get_values(self, entry, attribute):
        values = entry["raw_attributes"].get(attribute)
        return None if values is None else list(values)

    def unbind(self, connection):
        self.unbind_calls += 1


@pytest.fixture
def gateway():
    """Gateway serving 5 entries."""
    return FakeGateway(entries=[make_entry(i) for i in range(5)])


@pytest.fixture(autouse=True)
def reset_ldap_reader_logger():
    """Undo setup_logging() between tests."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
