"""
Byte Cursor
============

Positional little-endian reader over an immutable byte buffer.  Every
fixed-width read is performed with :mod:`struct` against the underlying
:class:`memoryview`; any read that would run past the end of the buffer
raises :class:`~bpfscope.core.errors.CursorError`.

After a failed read the cursor position is unspecified and the caller
must stop reading.

Usage::

    cur = ByteCursor(data)
    magic = cur.read_bytes(4)
    cur.seek(header.e_phoff)
    p_type = cur.read_u32()
"""

from __future__ import annotations

import struct

from bpfscope.core.errors import CursorError


# ---------------------------------------------------------------------------
# Pre-compiled little-endian formats
# ---------------------------------------------------------------------------

_U8 = struct.Struct("<B")
_I8 = struct.Struct("<b")
_U16 = struct.Struct("<H")
_I16 = struct.Struct("<h")
_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")
_U64 = struct.Struct("<Q")
_I64 = struct.Struct("<q")


class ByteCursor:
    """Movable read position over a borrowed byte buffer."""

    __slots__ = ("_buf", "_pos")

    def __init__(self, data: bytes | bytearray | memoryview, position: int = 0) -> None:
        self._buf: memoryview = memoryview(data).cast("B")
        self._pos: int = position

    # ------------------------------------------------------------------ #
    #  Position
    # ------------------------------------------------------------------ #

    @property
    def position(self) -> int:
        """Absolute offset of the next byte to be read."""
        return self._pos

    def seek(self, offset: int) -> None:
        """Reposition to an absolute *offset*.

        Seeking past the end is allowed; the next read will fail.
        """
        if offset < 0:
            raise CursorError(f"negative seek to {offset}")
        self._pos = offset

    def remainder(self) -> int:
        """Number of unread bytes (0 when positioned at or past the end)."""
        return max(len(self._buf) - self._pos, 0)

    def __len__(self) -> int:
        return len(self._buf)

    # ------------------------------------------------------------------ #
    #  Primitive reads
    # ------------------------------------------------------------------ #

    def _unpack(self, fmt: struct.Struct) -> int:
        end = self._pos + fmt.size
        if end > len(self._buf):
            raise CursorError(
                f"need {fmt.size} bytes at offset {self._pos}, "
                f"{self.remainder()} available"
            )
        (value,) = fmt.unpack_from(self._buf, self._pos)
        self._pos = end
        return value

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_i8(self) -> int:
        return self._unpack(_I8)

    def read_u16(self) -> int:
        return self._unpack(_U16)

    def read_i16(self) -> int:
        return self._unpack(_I16)

    def read_u32(self) -> int:
        return self._unpack(_U32)

    def read_i32(self) -> int:
        return self._unpack(_I32)

    def read_u64(self) -> int:
        return self._unpack(_U64)

    def read_i64(self) -> int:
        return self._unpack(_I64)

    def read_bytes(self, length: int) -> bytes:
        """Read exactly *length* raw bytes as an owned :class:`bytes` copy."""
        if length < 0:
            raise CursorError(f"negative read length {length}")
        end = self._pos + length
        if end > len(self._buf):
            raise CursorError(
                f"need {length} bytes at offset {self._pos}, "
                f"{self.remainder()} available"
            )
        chunk = bytes(self._buf[self._pos:end])
        self._pos = end
        return chunk
