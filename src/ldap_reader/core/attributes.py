# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Attribute value extraction for the entry under a cursor."""

from collections.abc import Iterator

from .cursor import ResultCursor
from .exceptions import StateError


class AttributeValueSet:
    """
    Values of one attribute of one entry.

    A value set is released exactly once, either explicitly or by leaving a
    ``with`` block. An absent attribute yields a set with ``present`` False;
    a present attribute without values yields an empty set with ``present`` True.
    """

    def __init__(self, name: str, values: list[bytes] | None):
        self.name = name
        self.present = values is not None
        self._values: list[bytes] | None = list(values) if values is not None else []
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    @property
    def values(self) -> list[bytes]:
        if self._released:
            raise StateError(f"Values of {self.name!r} already released")
        return list(self._values)

    def decode(self, encoding: str = "utf-8", errors: str = "replace") -> list[str]:
        """Return the values as text."""
        return [value.decode(encoding, errors) for value in self.values]

    def release(self) -> None:
        """
        Release the values.

        Raises:
            StateError: If the set was already released
        """
        if self._released:
            raise StateError(f"Values of {self.name!r} already released")
        self._values = None
        self._released = True

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.values)

    def __getitem__(self, index: int) -> bytes:
        return self.values[index]

    def __bool__(self) -> bool:
        return not self._released and bool(self._values)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._released:
            self.release()

    def __repr__(self) -> str:
        if self._released:
            return f"<AttributeValueSet {self.name!r} released>"
        return f"<AttributeValueSet {self.name!r} present={self.present} values={len(self._values)}>"


class AttributeAccessor:
    """Reads attribute values of the cursor's current entry."""

    def __init__(self, cursor: ResultCursor):
        self.cursor = cursor

    def get_attribute(self, name: str) -> AttributeValueSet:
        """
        Get the values of an attribute of the current entry.

        Args:
            name: Attribute name, e.g. "uidNumber"

        Raises:
            StateError: If the cursor is not positioned on an entry
        """
        entry = self.cursor.current_entry
        if entry is None:
            raise StateError("No entry retrieved from server")

        gateway = self.cursor.engine.session.gateway
        return AttributeValueSet(name, gateway.get_values(entry, name))

    @staticmethod
    def release(value_set: AttributeValueSet) -> None:
        """Release a value set obtained from get_attribute."""
        value_set.release()
