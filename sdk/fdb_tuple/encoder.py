"""
Tuple encoder.

Packs a sequence of elements into a byte string whose lexicographic
order matches the order of the values it encodes. Elements are written
left to right with no separators; variable-length elements carry their
own terminator.

Invariants:
    - Encoding is deterministic: equal values always pack to equal bytes
    - For two values of the same kind, pack(a) < pack(b) iff a < b
    - Input values are never mutated

Example:
    >>> from sdk.fdb_tuple.encoder import pack
    >>> pack((322, "a", None))
    b'\\x16\\x01B\\x02a\\x00\\x00'
"""

from __future__ import annotations

import struct
from typing import Any, Callable, Dict, Sequence

from .elements import (
    NULL,
    NULL_ESCAPE,
    ElementKind,
    SingleFloat,
    TypeCode,
    Versionstamp,
    classify,
)

# SIZE_LIMITS[n] is the largest magnitude that fits in n bytes
SIZE_LIMITS = tuple((1 << (i * 8)) - 1 for i in range(9))


def byte_count(magnitude: int) -> int:
    """Smallest n such that magnitude fits in n bytes.

    Raises:
        ValueError: If magnitude needs more than 8 bytes
    """
    for n, limit in enumerate(SIZE_LIMITS):
        if magnitude <= limit:
            return n
    raise ValueError(f"Integer magnitude {magnitude} does not fit in {len(SIZE_LIMITS) - 1} bytes")


def transform_float(data: bytes, encode: bool) -> bytes:
    """Apply or reverse the sign-order transform on IEEE-754 bytes.

    Negative numbers have every bit flipped so larger magnitudes sort
    lower; non-negative numbers only get the sign bit set so they sort
    after all negatives.

    Args:
        data: Big-endian float bytes (encode) or encoded bytes (decode)
        encode: Direction of the transform

    Returns:
        Transformed bytes of the same length
    """
    sign_set = bool(data[0] & 0x80)
    if sign_set != encode:
        return bytes([data[0] ^ 0x80]) + data[1:]
    return bytes(b ^ 0xFF for b in data)


def escape_nulls(data: bytes) -> bytes:
    return bytes(data).replace(b"\x00", NULL_ESCAPE)


def _encode_null(value: None, nested: bool) -> bytes:
    return NULL_ESCAPE if nested else bytes([NULL])


def _encode_bytes(value: bytes, nested: bool) -> bytes:
    return bytes([TypeCode.BYTES]) + escape_nulls(value) + bytes([NULL])


def _encode_string(value: str, nested: bool) -> bytes:
    return bytes([TypeCode.STRING]) + escape_nulls(value.encode("utf-8")) + bytes([NULL])


def _encode_int(value: int, nested: bool) -> bytes:
    if value == 0:
        return bytes([TypeCode.INT_ZERO])
    if value > 0:
        n = byte_count(value)
        return bytes([TypeCode.INT_ZERO + n]) + value.to_bytes(n, "big")
    n = byte_count(-value)
    return bytes([TypeCode.INT_ZERO - n]) + (SIZE_LIMITS[n] + value).to_bytes(n, "big")


def _encode_float(value: SingleFloat, nested: bool) -> bytes:
    return bytes([TypeCode.FLOAT]) + transform_float(struct.pack(">f", value.value), encode=True)


def _encode_double(value: float, nested: bool) -> bytes:
    return bytes([TypeCode.DOUBLE]) + transform_float(struct.pack(">d", value), encode=True)


def _encode_bool(value: bool, nested: bool) -> bytes:
    return bytes([TypeCode.TRUE if value else TypeCode.FALSE])


def _encode_uuid(value: Any, nested: bool) -> bytes:
    return bytes([TypeCode.UUID]) + value.bytes


def _encode_versionstamp(value: Versionstamp, nested: bool) -> bytes:
    return bytes([value.type_code]) + value.to_bytes()


def _encode_tuple(value: Sequence[Any], nested: bool) -> bytes:
    parts = [bytes([TypeCode.NESTED])]
    parts.extend(encode_element(item, nested=True) for item in value)
    parts.append(bytes([NULL]))
    return b"".join(parts)


_ENCODERS: Dict[ElementKind, Callable[[Any, bool], bytes]] = {
    ElementKind.NULL: _encode_null,
    ElementKind.BYTES: _encode_bytes,
    ElementKind.STRING: _encode_string,
    ElementKind.INTEGER: _encode_int,
    ElementKind.FLOAT: _encode_float,
    ElementKind.DOUBLE: _encode_double,
    ElementKind.BOOLEAN: _encode_bool,
    ElementKind.UUID: _encode_uuid,
    ElementKind.VERSIONSTAMP: _encode_versionstamp,
    ElementKind.TUPLE: _encode_tuple,
}


def encode_element(value: Any, nested: bool = False) -> bytes:
    """Encode a single element.

    Args:
        value: Element to encode
        nested: Whether the element sits inside a nested tuple, which
            changes how None is written

    Returns:
        Encoded bytes, starting with the element's type code

    Raises:
        TypeError: If the value has no tuple representation
        ValueError: If an integer is outside +/-(2^64-1)
    """
    return _ENCODERS[classify(value)](value, nested)


def pack(values: Sequence[Any]) -> bytes:
    """Pack a sequence of elements into a tuple key.

    Encoding is total over the element types classify() accepts, with
    integers restricted to magnitudes below 2**64 (which covers every
    signed 64-bit value). Values outside that domain are rejected before
    any bytes are produced.

    Args:
        values: Elements to pack, in order

    Returns:
        Concatenated element encodings

    Raises:
        TypeError: If an element has no tuple representation
        ValueError: If an integer is outside +/-(2^64-1)
    """
    return b"".join(encode_element(value) for value in values)
