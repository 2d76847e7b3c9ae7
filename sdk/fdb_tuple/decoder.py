"""
Tuple decoder.

Single-pass parser over packed tuple bytes. Each call reads the type code
at a position, dispatches to the reader for that code and returns the
value together with the position just past it. The position is the only
state, so decoding is safe on independent buffers from any thread.

Invariants:
    - unpack(pack(values)) == tuple(values) for every supported value
    - Malformed input raises a TupleUnpackError subclass, never IndexError
    - Nested tuples decode to Python tuples; lists do not round-trip as lists
"""

from __future__ import annotations

import logging
import struct
import uuid
from typing import Any, Callable, Dict, List, Tuple

from .elements import NULL, NULL_ESCAPE, SingleFloat, TypeCode, Versionstamp
from .encoder import SIZE_LIMITS, transform_float
from .errors import (
    EmptyInputError,
    InvalidBoundariesError,
    InvalidStringError,
    TooLargeIntegerError,
    TupleUnpackError,
    UnknownCodeError,
)

logger = logging.getLogger(__name__)

_ESCAPE_TAIL = NULL_ESCAPE[1]


def find_terminator(data: bytes, pos: int) -> int:
    """Find the first NULL at or after pos that is not an escaped NULL.

    Returns:
        Offset of the terminator, or len(data) if there is none
    """
    length = len(data)
    while True:
        pos = data.find(NULL, pos)
        if pos < 0:
            return length
        if pos + 1 == length or data[pos + 1] != _ESCAPE_TAIL:
            return pos
        pos += 2


def _read_fixed(data: bytes, pos: int, size: int) -> bytes:
    """Read size bytes following the type code at pos."""
    end = pos + 1 + size
    if end > len(data):
        raise InvalidBoundariesError(pos, end, len(data))
    return data[pos + 1 : end]


def _read_escaped(data: bytes, pos: int) -> Tuple[bytes, int]:
    """Unescaped payload of the string at pos and the offset of its terminator."""
    end = find_terminator(data, pos + 1)
    return data[pos + 1 : end].replace(NULL_ESCAPE, bytes([NULL])), end


def _check_terminated(data: bytes, pos: int, end: int) -> None:
    if end >= len(data):
        raise InvalidBoundariesError(pos, end + 1, len(data))


def _decode_null(data: bytes, pos: int) -> Tuple[Any, int]:
    return None, pos + 1


def _decode_bytes(data: bytes, pos: int) -> Tuple[Any, int]:
    raw, end = _read_escaped(data, pos)
    _check_terminated(data, pos, end)
    return raw, end + 1


def _decode_string(data: bytes, pos: int) -> Tuple[Any, int]:
    raw, end = _read_escaped(data, pos)
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidStringError(pos, e.reason) from e
    _check_terminated(data, pos, end)
    return text, end + 1


def _decode_positive_int(data: bytes, pos: int) -> Tuple[Any, int]:
    n = data[pos] - TypeCode.INT_ZERO
    return int.from_bytes(_read_fixed(data, pos, n), "big"), pos + 1 + n


def _decode_negative_int(data: bytes, pos: int) -> Tuple[Any, int]:
    n = TypeCode.INT_ZERO - data[pos]
    if n >= len(SIZE_LIMITS):
        raise TooLargeIntegerError(data[pos], pos)
    magnitude = int.from_bytes(_read_fixed(data, pos, n), "big")
    return magnitude - SIZE_LIMITS[n], pos + 1 + n


def _decode_nested(data: bytes, pos: int) -> Tuple[Any, int]:
    # Open tuples live on an explicit stack; depth is bounded only by input length
    stack: List[Tuple[int, List[Any]]] = [(pos, [])]
    length = len(data)
    cursor = pos + 1
    while cursor < length:
        code = data[cursor]
        items = stack[-1][1]
        if code == NULL:
            if cursor + 1 < length and data[cursor + 1] == _ESCAPE_TAIL:
                items.append(None)
                cursor += 2
                continue
            stack.pop()
            cursor += 1
            if not stack:
                return tuple(items), cursor
            stack[-1][1].append(tuple(items))
        elif code == TypeCode.NESTED:
            stack.append((cursor, []))
            cursor += 1
        else:
            value, cursor = decode_element(data, cursor)
            items.append(value)
    raise InvalidBoundariesError(stack[-1][0], cursor + 1, length)


def _decode_float(data: bytes, pos: int) -> Tuple[Any, int]:
    raw = transform_float(_read_fixed(data, pos, 4), encode=False)
    return SingleFloat(struct.unpack(">f", raw)[0]), pos + 5


def _decode_double(data: bytes, pos: int) -> Tuple[Any, int]:
    raw = transform_float(_read_fixed(data, pos, 8), encode=False)
    return struct.unpack(">d", raw)[0], pos + 9


def _decode_false(data: bytes, pos: int) -> Tuple[Any, int]:
    return False, pos + 1


def _decode_true(data: bytes, pos: int) -> Tuple[Any, int]:
    return True, pos + 1


def _decode_uuid(data: bytes, pos: int) -> Tuple[Any, int]:
    return uuid.UUID(bytes=_read_fixed(data, pos, 16)), pos + 17


def _decode_versionstamp(data: bytes, pos: int) -> Tuple[Any, int]:
    size = 10 if data[pos] == TypeCode.VERSIONSTAMP_80 else 12
    return Versionstamp.from_bytes(_read_fixed(data, pos, size)), pos + 1 + size


_DECODERS: Dict[int, Callable[[bytes, int], Tuple[Any, int]]] = {
    TypeCode.NULL: _decode_null,
    TypeCode.BYTES: _decode_bytes,
    TypeCode.STRING: _decode_string,
    TypeCode.NESTED: _decode_nested,
    TypeCode.FLOAT: _decode_float,
    TypeCode.DOUBLE: _decode_double,
    TypeCode.FALSE: _decode_false,
    TypeCode.TRUE: _decode_true,
    TypeCode.UUID: _decode_uuid,
    TypeCode.VERSIONSTAMP_80: _decode_versionstamp,
    TypeCode.VERSIONSTAMP_96: _decode_versionstamp,
}
for _code in range(TypeCode.NEG_INT_ARBITRARY, TypeCode.INT_ZERO):
    _DECODERS[_code] = _decode_negative_int
for _code in range(TypeCode.INT_ZERO, TypeCode.POS_INT_ARBITRARY):
    _DECODERS[_code] = _decode_positive_int


def decode_element(data: bytes, pos: int = 0) -> Tuple[Any, int]:
    """Decode the element starting at pos.

    Args:
        data: Packed tuple bytes
        pos: Offset of the element's type code

    Returns:
        Tuple of (value, offset just past the element)

    Raises:
        UnknownCodeError: If the type code is not recognized
        InvalidBoundariesError: If the element runs past the end of data
        InvalidStringError: If a UTF-8 string is malformed
        TooLargeIntegerError: If a negative integer is wider than 8 bytes
    """
    if pos >= len(data):
        raise InvalidBoundariesError(pos, pos + 1, len(data))
    code = data[pos]
    decoder = _DECODERS.get(code)
    if decoder is None:
        raise UnknownCodeError(code, pos)
    return decoder(data, pos)


def unpack(data: bytes) -> Tuple[Any, ...]:
    """Unpack a tuple key into its elements.

    Args:
        data: Bytes produced by pack()

    Returns:
        The decoded elements as a tuple

    Raises:
        EmptyInputError: If data is empty
        TupleUnpackError: If data is not a valid packed tuple
    """
    data = bytes(data)
    try:
        if not data:
            raise EmptyInputError()
        items: List[Any] = []
        pos = 0
        while pos < len(data):
            value, pos = decode_element(data, pos)
            items.append(value)
        return tuple(items)
    except TupleUnpackError as e:
        logger.debug(
            f"Failed to unpack tuple: {e.message}",
            extra={"code": e.code, "position": e.position, "length": len(data)},
        )
        raise
