"""
Versionstamped key support.

A key that embeds an incomplete versionstamp is submitted to the store
together with the offset of that versionstamp, so the store can overwrite
it with the real commit version at commit time. This module finds that
offset in packed bytes and builds the key parameter.

Invariants:
    - The offset points at the first byte of the commit version field,
      i.e. one past the versionstamp's type code
    - Offsets are absolute within the packed bytes, nested tuples included
    - Only the first incomplete versionstamp (depth first) is reported

Example:
    >>> from sdk.fdb_tuple import Versionstamp, pack
    >>> locate_incomplete_versionstamp(pack(("foo", Versionstamp())))
    6
"""

from __future__ import annotations

import logging
import struct
from typing import Any, List, Optional, Sequence

from .config import TupleSettings, get_settings
from .decoder import decode_element
from .elements import NULL, NULL_ESCAPE, TypeCode, Versionstamp
from .encoder import pack
from .errors import InvalidBoundariesError, MissingIncompleteVersionstampError

logger = logging.getLogger(__name__)

_VERSIONSTAMP_CODES = (TypeCode.VERSIONSTAMP_80, TypeCode.VERSIONSTAMP_96)


def _scan(data: bytes) -> Optional[int]:
    """Walk the packed elements once; return the offset found, or None.

    Nested tuples are entered in place rather than decoded, so every byte
    is visited at most once whatever the nesting depth.
    """
    open_tuples: List[int] = []
    length = len(data)
    pos = 0
    while pos < length:
        code = data[pos]
        if open_tuples and code == NULL:
            if pos + 1 < length and data[pos + 1] == NULL_ESCAPE[1]:
                pos += 2
                continue
            open_tuples.pop()
            pos += 1
            continue
        if code == TypeCode.NESTED:
            open_tuples.append(pos)
            pos += 1
            continue
        value, end = decode_element(data, pos)
        if code in _VERSIONSTAMP_CODES and not value.is_complete:
            return pos + 1
        pos = end
    if open_tuples:
        raise InvalidBoundariesError(open_tuples[-1], pos + 1, length)
    return None


def locate_incomplete_versionstamp(data: bytes) -> int:
    """Find the offset of the first incomplete versionstamp in packed bytes.

    Args:
        data: Output of pack()

    Returns:
        Offset of the versionstamp's commit version field

    Raises:
        MissingIncompleteVersionstampError: If there is no incomplete versionstamp
        TupleUnpackError: If data is not a valid packed tuple
    """
    data = bytes(data)
    offset = _scan(data)
    if offset is None:
        logger.debug(
            "No incomplete versionstamp in packed tuple",
            extra={"length": len(data)},
        )
        raise MissingIncompleteVersionstampError(len(data))
    return offset


def has_incomplete_versionstamp(values: Sequence[Any]) -> bool:
    """Whether any value, at any nesting depth, is an incomplete versionstamp."""
    for value in values:
        if isinstance(value, Versionstamp) and not value.is_complete:
            return True
        if isinstance(value, (tuple, list)) and has_incomplete_versionstamp(value):
            return True
    return False


def pack_with_versionstamp(
    values: Sequence[Any],
    prefix: bytes = b"",
    settings: Optional[TupleSettings] = None,
) -> bytes:
    """Pack values into a versionstamped key or value parameter.

    The result is prefix + pack(values) followed by the little-endian
    offset of the incomplete versionstamp, measured from the start of
    prefix.

    Args:
        values: Elements to pack; one must be an incomplete Versionstamp
        prefix: Raw bytes prepended to the packed tuple
        settings: Overrides the process-wide settings

    Returns:
        Bytes ready for a versionstamped key or value mutation

    Raises:
        MissingIncompleteVersionstampError: If values hold no incomplete versionstamp
    """
    settings = settings or get_settings()
    packed = pack(values)
    offset = len(prefix) + locate_incomplete_versionstamp(packed)
    fmt = "<L" if settings.versionstamp_offset_size == 4 else "<H"
    return bytes(prefix) + packed + struct.pack(fmt, offset)
