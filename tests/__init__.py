"""
fdb-tuple Test Suite.

This package contains:
- unit/: Unit tests (pure codec, no external services)
"""
