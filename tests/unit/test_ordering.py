"""
Unit tests for order preservation.

For every element kind, sorting packed bytes must give the same order as
sorting the values themselves. Samples are drawn from a seeded generator
so failures are reproducible.

Tests cover:
- Integers across the zero boundary and every width
- Doubles and single floats across sign, including subnormals and infinities
- Byte strings and text with embedded NULLs
- Nested tuples, UUIDs, booleans and versionstamps
"""

import math
import random
import uuid

import pytest

from sdk.fdb_tuple.elements import SingleFloat, Versionstamp
from sdk.fdb_tuple.encoder import pack


def assert_order_preserved(values):
    by_value = sorted(values)
    by_bytes = sorted(values, key=lambda v: pack((v,)))
    assert by_bytes == by_value


@pytest.fixture
def rng():
    """Seeded random generator."""
    return random.Random(20240611)


class TestOrdering:
    """Tests that packed order matches value order."""

    def test_integers(self, rng):
        """Integers order correctly across widths and sign."""
        values = {0, 1, -1, 255, 256, -255, -256, 2**64 - 1, -(2**64 - 1), 2**63, -(2**63)}
        for _ in range(500):
            width = rng.randrange(0, 65)
            values.add(rng.randrange(-(2**width) + 1, 2**width) if width else 0)
        assert_order_preserved(list(values))

    def test_adjacent_integer_pairs(self):
        """Each integer packs below its successor near width boundaries."""
        for n in range(1, 9):
            limit = (1 << (8 * n)) - 1
            candidates = [limit - 1, -limit]
            if n < 8:
                candidates += [limit, -limit - 1]
            for a in candidates:
                assert pack((a,)) < pack((a + 1,))

    def test_doubles(self, rng):
        """Doubles order correctly, including subnormals and infinities."""
        values = {0.0, 5e-324, -5e-324, 1.0, -1.0, math.inf, -math.inf, 1.7976931348623157e308}
        for _ in range(500):
            magnitude = math.ldexp(rng.random(), rng.randint(-1074, 1023))
            values.add(magnitude if rng.random() < 0.5 else -magnitude)
        assert_order_preserved(list(values))

    def test_single_floats(self, rng):
        """Single floats order correctly across sign."""
        values = {SingleFloat(0.0), SingleFloat(1e-45), SingleFloat(-1e-45)}
        for _ in range(300):
            values.add(SingleFloat(rng.uniform(-1e30, 1e30)))
            values.add(SingleFloat(rng.uniform(-1.0, 1.0)))
        assert_order_preserved(list(values))

    def test_negative_zero_sorts_before_zero(self):
        """-0.0 packs just below 0.0."""
        assert pack((-0.0,)) < pack((0.0,))

    def test_byte_strings(self, rng):
        """Byte strings order lexicographically, NULLs included."""
        values = {b"", b"\x00", b"\x00\x00", b"\x00\xff", b"\x01", b"a", b"a\x00", b"a\x00b", b"a\x01"}
        for _ in range(300):
            values.add(bytes(rng.choice(b"\x00\x01\xfe\xffab") for _ in range(rng.randrange(6))))
        assert_order_preserved(list(values))

    def test_text(self, rng):
        """Text orders by code point, which matches UTF-8 byte order."""
        alphabet = "\x00aZÔ€\U0001f600"
        values = {""}
        for _ in range(300):
            values.add("".join(rng.choice(alphabet) for _ in range(rng.randrange(5))))
        assert_order_preserved(list(values))

    def test_nested_tuples(self, rng):
        """Nested tuples order element by element, shorter prefixes first."""
        values = {(), (0,), (0, 0), (1,), (-1,), (1, -1), (1, 0), (2,)}
        for _ in range(200):
            values.add(tuple(rng.randrange(-300, 300) for _ in range(rng.randrange(4))))
        assert_order_preserved(list(values))

    def test_uuids(self, rng):
        """UUIDs order like their integer value."""
        values = [uuid.UUID(int=rng.getrandbits(128)) for _ in range(200)]
        assert_order_preserved(values)

    def test_booleans(self):
        """False packs before True."""
        assert pack((False,)) < pack((True,))

    def test_versionstamps(self, rng):
        """Versionstamps of the same width order by their fields."""
        short = {Versionstamp(rng.getrandbits(64), rng.getrandbits(16)) for _ in range(200)}
        long = {
            Versionstamp(rng.getrandbits(64), rng.getrandbits(16), rng.getrandbits(16))
            for _ in range(200)
        }
        assert_order_preserved(list(short))
        assert_order_preserved(list(long))
