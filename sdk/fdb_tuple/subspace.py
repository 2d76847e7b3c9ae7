"""
Subspaces: tuple-encoded key prefixes.

A subspace owns every key that starts with its prefix. Because packed
tuples preserve order, all keys of a subspace form one contiguous range
that can be scanned with range().

Example:
    >>> users = Subspace(("app", "users"))
    >>> key = users.pack((42, "email"))
    >>> users.unpack(key)
    (42, 'email')
    >>> users[42].contains(key)
    True
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

from .config import TupleSettings
from .decoder import unpack
from .encoder import pack
from .versionstamp import pack_with_versionstamp


def key_range(values: Sequence[Any] = ()) -> Tuple[bytes, bytes]:
    """Begin and end keys spanning every tuple that extends values.

    Returns:
        Tuple of (begin, end); begin is inclusive, end exclusive
    """
    packed = pack(values)
    return packed + b"\x00", packed + b"\xff"


class Subspace:
    """Key prefix built from raw bytes followed by a packed tuple.

    Attributes:
        key: The full prefix bytes
    """

    def __init__(self, prefix_values: Sequence[Any] = (), raw_prefix: bytes = b"") -> None:
        self._key = bytes(raw_prefix) + pack(prefix_values)

    def __repr__(self) -> str:
        return f"Subspace(raw_prefix={self._key!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Subspace):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    @property
    def key(self) -> bytes:
        """Prefix bytes of this subspace."""
        return self._key

    def pack(self, values: Sequence[Any] = ()) -> bytes:
        """Key for values inside this subspace."""
        return self._key + pack(values)

    def pack_with_versionstamp(
        self,
        values: Sequence[Any],
        settings: Optional[TupleSettings] = None,
    ) -> bytes:
        """Versionstamped key parameter for values inside this subspace."""
        return pack_with_versionstamp(values, prefix=self._key, settings=settings)

    def unpack(self, key: bytes) -> Tuple[Any, ...]:
        """Decode the tuple stored after this subspace's prefix.

        Raises:
            ValueError: If key does not belong to this subspace
        """
        key = bytes(key)
        if not self.contains(key):
            raise ValueError(f"Key {key!r} is not in subspace {self._key!r}")
        if len(key) == len(self._key):
            return ()
        return unpack(key[len(self._key) :])

    def contains(self, key: bytes) -> bool:
        return bytes(key).startswith(self._key)

    def __contains__(self, key: bytes) -> bool:
        return self.contains(key)

    def range(self, values: Sequence[Any] = ()) -> Tuple[bytes, bytes]:
        """Begin and end keys spanning every key under values in this subspace."""
        begin, end = key_range(values)
        return self._key + begin, self._key + end

    def subspace(self, values: Sequence[Any]) -> Subspace:
        """Child subspace extending this prefix with values."""
        return Subspace(values, raw_prefix=self._key)

    def __getitem__(self, item: Any) -> Subspace:
        return self.subspace((item,))
