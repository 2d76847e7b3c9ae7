"""
Error types for the tuple codec.

This module defines all exception types raised while unpacking tuples
and locating versionstamps:
- TupleError: Base exception
- TupleUnpackError: Base for malformed input found while decoding
- EmptyInputError: Nothing to decode
- TooLargeIntegerError: Integer wider than the supported size table
- UnknownCodeError: Type code is not part of the tuple format
- InvalidBoundariesError: Field runs past the end of the input
- InvalidStringError: UTF-8 string field is not valid UTF-8
- MissingIncompleteVersionstampError: No incomplete versionstamp to patch

Invariants:
    - All errors inherit from TupleError
    - Malformed input is permanent; nothing here is retryable
    - Errors carry the offending position for debugging
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TupleError(Exception):
    """Base exception for all tuple codec errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "TUPLE_ERROR"
        self.details = details or {}


class TupleUnpackError(TupleError):
    """Packed bytes could not be decoded.

    Attributes:
        position: Offset in the input where decoding failed
    """

    def __init__(
        self,
        message: str,
        code: str,
        position: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        details["position"] = position
        super().__init__(message, code=code, details=details)
        self.position = position


class EmptyInputError(TupleUnpackError):
    """Unpack was called on a zero-length buffer."""

    def __init__(self) -> None:
        super().__init__("Cannot unpack empty input", code="EMPTY_INPUT", position=0)


class TooLargeIntegerError(TupleUnpackError):
    """Integer type code implies more bytes than the size table supports.

    Attributes:
        type_code: The integer type code that was read
    """

    def __init__(self, type_code: int, position: int) -> None:
        super().__init__(
            f"Integer with type code 0x{type_code:02x} at position {position} is too large to unpack",
            code="TOO_LARGE_INTEGER",
            position=position,
            details={"type_code": type_code},
        )
        self.type_code = type_code


class UnknownCodeError(TupleUnpackError):
    """Type code does not match any tuple element.

    Attributes:
        type_code: The unrecognized byte
    """

    def __init__(self, type_code: int, position: int) -> None:
        super().__init__(
            f"Unknown type code 0x{type_code:02x} at position {position}",
            code="UNKNOWN_CODE",
            position=position,
            details={"type_code": type_code},
        )
        self.type_code = type_code


class InvalidBoundariesError(TupleUnpackError):
    """Field extends beyond the end of the input.

    Raised when:
    - A fixed-width field (integer, float, UUID, versionstamp) is truncated
    - A string or nested tuple has no terminator

    Attributes:
        end: Offset the field would have needed to reach
        length: Actual input length
    """

    def __init__(self, position: int, end: int, length: int) -> None:
        super().__init__(
            f"Field at position {position} needs input up to offset {end}, "
            f"but input is only {length} bytes long",
            code="INVALID_BOUNDARIES",
            position=position,
            details={"end": end, "length": length},
        )
        self.end = end
        self.length = length


class InvalidStringError(TupleUnpackError):
    """UTF-8 string field holds bytes that are not valid UTF-8."""

    def __init__(self, position: int, reason: str) -> None:
        super().__init__(
            f"Invalid UTF-8 string at position {position}: {reason}",
            code="INVALID_STRING",
            position=position,
            details={"reason": reason},
        )


class MissingIncompleteVersionstampError(TupleError):
    """Packed tuple contains no incomplete versionstamp.

    Raised when a versionstamped key or value is requested for a tuple
    whose versionstamps (if any) are all complete.
    """

    def __init__(self, length: int) -> None:
        super().__init__(
            "No incomplete versionstamp found in packed tuple",
            code="MISSING_INCOMPLETE_VERSIONSTAMP",
            details={"length": length},
        )
