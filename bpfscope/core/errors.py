"""
bpfscope Error Taxonomy
========================

Flat exception hierarchy for every failure the decoder can raise.  All
errors derive from :class:`DecodeError` so callers can catch a single
type; each subclass corresponds to exactly one failure kind and carries a
fixed message plus an optional detail string.

Errors are raised at the point of failure and propagate unchanged -- the
decoder has no partial-success mode.
"""

from __future__ import annotations


class DecodeError(Exception):
    """Base class for all bpfscope decode failures."""

    message: str = "Decode error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        text = f"{self.message}: {detail}" if detail else self.message
        super().__init__(text)


class CursorError(DecodeError):
    """A read ran past the end of the buffer."""

    message = "Failed to read from cursor"


class NonStandardElfHeader(DecodeError):
    """The ELF header lies outside the supported eBPF profile."""

    message = "Non-standard ELF header"


class InvalidProgramType(DecodeError):
    message = "Invalid Program Type"


class InvalidSectionHeaderType(DecodeError):
    message = "Invalid Section Header Type"


class InvalidOpcode(DecodeError):
    message = "Invalid OpCode"


class InvalidImmediate(DecodeError):
    """Wide-immediate padding was non-zero, or an endian width is not 16/32/64."""

    message = "Invalid Immediate"


class InvalidDataLength(DecodeError):
    """A code section payload is not a whole number of instruction slots."""

    message = "Invalid data length"


class InvalidString(DecodeError):
    """A section name could not be bounded inside the string table."""

    message = "Invalid string"


__all__ = [
    "DecodeError",
    "CursorError",
    "NonStandardElfHeader",
    "InvalidProgramType",
    "InvalidSectionHeaderType",
    "InvalidOpcode",
    "InvalidImmediate",
    "InvalidDataLength",
    "InvalidString",
]
