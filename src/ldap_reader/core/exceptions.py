# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Error taxonomy for LDAP Reader."""


class LDAPReaderError(Exception):
    """Base class for every error raised by LDAP Reader."""


class LDAPConnectionError(LDAPReaderError, ConnectionError):
    """The connection to the directory server could not be initialized or opened."""


class ProtocolError(LDAPReaderError):
    """
    A directory operation returned a non-success status.

    The message is the diagnostic text reported by the server or the LDAP library.
    """

    def __init__(self, message: str, result_code: int | None = None):
        super().__init__(message)
        self.result_code = result_code


class StateError(LDAPReaderError):
    """An operation was invoked while the session, query or cursor was in the wrong state."""


class ValidationError(LDAPReaderError, ValueError):
    """Caller supplied data that violates a constraint."""
