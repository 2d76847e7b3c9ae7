"""
Element types for the tuple layer.

This module defines the closed set of values a tuple can hold and the
type codes that identify them on the wire:
- TypeCode: First byte of every encoded element
- ElementKind: Python-side variant of an element
- SingleFloat: IEEE-754 single precision float
- Versionstamp: Commit version + batch number + optional user data

Python values map to kinds as follows:

    None                          -> NULL
    bytes, bytearray, memoryview  -> BYTES
    str                           -> STRING
    bool                          -> BOOLEAN
    int                           -> INTEGER
    SingleFloat                   -> FLOAT
    float                         -> DOUBLE
    uuid.UUID                     -> UUID
    Versionstamp                  -> VERSIONSTAMP
    tuple, list                   -> TUPLE

Invariants:
    - Type codes are part of the storage format and never change
    - A versionstamp is incomplete iff commit_version and batch_number
      both hold their all-ones sentinel
    - Element values are immutable

Example:
    >>> from sdk.fdb_tuple.elements import Versionstamp, classify, ElementKind
    >>> Versionstamp().is_complete
    False
    >>> classify(Versionstamp(42, 7)) is ElementKind.VERSIONSTAMP
    True
"""

from __future__ import annotations

import struct
import uuid
from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import total_ordering
from typing import Any, Optional, Tuple

NULL = 0x00
NULL_ESCAPE = b"\x00\xff"

INCOMPLETE_COMMIT_VERSION = 0xFFFFFFFFFFFFFFFF
INCOMPLETE_BATCH_NUMBER = 0xFFFF

_MAX_UINT16 = 0xFFFF


class TypeCode(IntEnum):
    """Tuple type codes."""

    NULL = 0x00
    BYTES = 0x01
    STRING = 0x02
    NESTED = 0x05
    NEG_INT_ARBITRARY = 0x0B  # length-prefixed negative integer, not supported
    INT_ZERO = 0x14
    POS_INT_ARBITRARY = 0x1D  # length-prefixed positive integer, decodes as unknown
    FLOAT = 0x20
    DOUBLE = 0x21
    FALSE = 0x26
    TRUE = 0x27
    UUID = 0x30
    VERSIONSTAMP_80 = 0x32
    VERSIONSTAMP_96 = 0x33


class ElementKind(Enum):
    """Supported element variants."""

    NULL = "null"
    BYTES = "bytes"
    STRING = "str"
    INTEGER = "int"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "bool"
    UUID = "uuid"
    VERSIONSTAMP = "versionstamp"
    TUPLE = "tuple"


@dataclass(frozen=True, order=True)
class SingleFloat:
    """A 32-bit float element.

    Python floats are doubles, so single precision values are wrapped to
    select the 4-byte encoding. The value is rounded to single precision
    on construction.

    Attributes:
        value: The float, rounded to IEEE-754 single precision
    """

    value: float

    def __post_init__(self) -> None:
        rounded = struct.unpack(">f", struct.pack(">f", float(self.value)))[0]
        object.__setattr__(self, "value", rounded)

    def __float__(self) -> float:
        return self.value


@total_ordering
@dataclass(frozen=True, eq=True)
class Versionstamp:
    """Versionstamp element.

    An 80-bit versionstamp holds the commit version and batch number; a
    96-bit one adds two bytes of user data for ordering writes within a
    single transaction.

    Attributes:
        commit_version: Big-endian unsigned commit version (8 bytes)
        batch_number: Orders transactions committed at the same version (2 bytes)
        user_data: Optional ordering within one transaction (2 bytes)

    Example:
        >>> stamp = Versionstamp(user_data=3)
        >>> stamp.is_complete, stamp.size
        (False, 12)
    """

    commit_version: int = INCOMPLETE_COMMIT_VERSION
    batch_number: int = INCOMPLETE_BATCH_NUMBER
    user_data: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0 <= self.commit_version <= INCOMPLETE_COMMIT_VERSION:
            raise ValueError(
                f"commit_version must be between 0 and 2^64-1, got {self.commit_version}"
            )
        if not 0 <= self.batch_number <= _MAX_UINT16:
            raise ValueError(f"batch_number must be between 0 and 65535, got {self.batch_number}")
        if self.user_data is not None and not 0 <= self.user_data <= _MAX_UINT16:
            raise ValueError(f"user_data must be between 0 and 65535, got {self.user_data}")

    @classmethod
    def incomplete(cls, user_data: Optional[int] = None) -> Versionstamp:
        """Create a placeholder to be filled in by the store at commit time."""
        return cls(user_data=user_data)

    @property
    def is_complete(self) -> bool:
        """Whether the store has assigned this versionstamp."""
        return not (
            self.commit_version == INCOMPLETE_COMMIT_VERSION
            and self.batch_number == INCOMPLETE_BATCH_NUMBER
        )

    @property
    def size(self) -> int:
        """Encoded size in bytes, excluding the type code."""
        return 10 if self.user_data is None else 12

    @property
    def type_code(self) -> TypeCode:
        return TypeCode.VERSIONSTAMP_80 if self.user_data is None else TypeCode.VERSIONSTAMP_96

    def to_bytes(self) -> bytes:
        """Serialize the fields (without type code)."""
        data = struct.pack(">QH", self.commit_version, self.batch_number)
        if self.user_data is not None:
            data += struct.pack(">H", self.user_data)
        return data

    @classmethod
    def from_bytes(cls, data: bytes) -> Versionstamp:
        """Deserialize 10 or 12 bytes of versionstamp fields.

        Raises:
            ValueError: If data is not 10 or 12 bytes long
        """
        if len(data) == 10:
            commit_version, batch_number = struct.unpack(">QH", data)
            return cls(commit_version, batch_number)
        if len(data) == 12:
            commit_version, batch_number, user_data = struct.unpack(">QHH", data)
            return cls(commit_version, batch_number, user_data)
        raise ValueError(f"Versionstamp must be 10 or 12 bytes, got {len(data)}")

    def _sort_key(self) -> Tuple[int, int, int, int]:
        # 80-bit stamps sort before 96-bit ones because their type code is lower
        return (
            0 if self.user_data is None else 1,
            self.commit_version,
            self.batch_number,
            self.user_data or 0,
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Versionstamp):
            return NotImplemented
        return self._sort_key() < other._sort_key()


_BYTES_TYPES = (bytes, bytearray, memoryview)


def classify(value: Any) -> ElementKind:
    """Return the element kind of a Python value.

    Args:
        value: Value to classify

    Returns:
        The ElementKind the value is encoded as

    Raises:
        TypeError: If the value has no tuple representation
    """
    if value is None:
        return ElementKind.NULL
    # bool is a subclass of int and must be checked first
    if isinstance(value, bool):
        return ElementKind.BOOLEAN
    if isinstance(value, int):
        return ElementKind.INTEGER
    if isinstance(value, str):
        return ElementKind.STRING
    if isinstance(value, _BYTES_TYPES):
        return ElementKind.BYTES
    if isinstance(value, SingleFloat):
        return ElementKind.FLOAT
    if isinstance(value, float):
        return ElementKind.DOUBLE
    if isinstance(value, uuid.UUID):
        return ElementKind.UUID
    if isinstance(value, Versionstamp):
        return ElementKind.VERSIONSTAMP
    if isinstance(value, (tuple, list)):
        return ElementKind.TUPLE
    raise TypeError(f"Unsupported tuple element type: {type(value).__name__}")
