"""
fdb-tuple - Order-preserving tuple encoding for key-value store keys.

This package packs heterogeneous typed values into byte strings whose
lexicographic order matches the order of the values, and unpacks them
again:
- pack / unpack for tuples of elements
- Element types (SingleFloat, Versionstamp)
- Versionstamped key support for commit-time key assignment
- Subspace for managing key prefixes

Example:
    >>> from sdk.fdb_tuple import Subspace, Versionstamp, pack, unpack
    >>>
    >>> key = pack(("users", 42, None))
    >>> unpack(key)
    ('users', 42, None)
    >>>
    >>> events = Subspace(("events",))
    >>> param = events.pack_with_versionstamp((Versionstamp(),))

Invariants:
    - Packed bytes order like the values they encode
    - Unpacking never mutates shared state
    - Malformed input raises a TupleUnpackError subclass

Version: 1.0.0
"""

__version__ = "1.0.0"

from .config import TupleSettings, get_settings
from .decoder import decode_element, unpack
from .elements import ElementKind, SingleFloat, TypeCode, Versionstamp, classify
from .encoder import encode_element, pack
from .errors import (
    EmptyInputError,
    InvalidBoundariesError,
    InvalidStringError,
    MissingIncompleteVersionstampError,
    TooLargeIntegerError,
    TupleError,
    TupleUnpackError,
    UnknownCodeError,
)
from .subspace import Subspace, key_range
from .versionstamp import (
    has_incomplete_versionstamp,
    locate_incomplete_versionstamp,
    pack_with_versionstamp,
)

__all__ = [
    # Version
    "__version__",
    # Codec
    "pack",
    "unpack",
    "encode_element",
    "decode_element",
    # Element types
    "ElementKind",
    "SingleFloat",
    "TypeCode",
    "Versionstamp",
    "classify",
    # Versionstamps
    "locate_incomplete_versionstamp",
    "has_incomplete_versionstamp",
    "pack_with_versionstamp",
    # Subspaces
    "Subspace",
    "key_range",
    # Settings
    "TupleSettings",
    "get_settings",
    # Errors
    "TupleError",
    "TupleUnpackError",
    "EmptyInputError",
    "TooLargeIntegerError",
    "UnknownCodeError",
    "InvalidBoundariesError",
    "InvalidStringError",
    "MissingIncompleteVersionstampError",
]
