# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""LDAP Reader - paged LDAP search client with a lazy cross-page cursor."""

from .core.attributes import AttributeAccessor, AttributeValueSet
from .core.cursor import ResultCursor
from .core.exceptions import (
    LDAPConnectionError,
    LDAPReaderError,
    ProtocolError,
    StateError,
    ValidationError,
)
from .core.paging import PagedQueryEngine, PageState, Query, ResultPage
from .core.session import BindState, LDAPSession
from .reader import LDAPReader

__version__ = "0.1.0"
__description__ = "Paged LDAP search client with lazy cross-page entry iteration"

__all__ = [
    "AttributeAccessor",
    "AttributeValueSet",
    "BindState",
    "LDAPConnectionError",
    "LDAPReader",
    "LDAPReaderError",
    "LDAPSession",
    "PageState",
    "PagedQueryEngine",
    "ProtocolError",
    "Query",
    "ResultCursor",
    "ResultPage",
    "StateError",
    "ValidationError",
]
