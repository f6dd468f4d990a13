"""
sBPF Instruction Codec
=======================

Decode and encode single instructions and whole code streams.

Ordinary instruction (8 bytes)::

    opcode:8 | src:4 dst:4 | off:16 | imm:32

The wide immediate load ``lddw`` occupies two consecutive slots.  The
first slot carries the low 32 bits of the immediate; the second slot's
opcode, register and offset bytes must be zero and its immediate field
carries the high 32 bits::

    18 0d oooo LLLLLLLL | 00 00 0000 HHHHHHHH

A stream decoder must treat ``lddw`` as one 16-byte unit.
"""

from __future__ import annotations

import struct
from typing import Callable, Optional

from bpfscope.core.cursor import ByteCursor
from bpfscope.core.errors import DecodeError, InvalidDataLength, InvalidImmediate
from bpfscope.core.models import Instruction
from bpfscope.parsers.opcodes import SLOT_SIZE, OpCode, OperandForm


_HEAD = struct.Struct("<BBh")
_U32 = struct.Struct("<I")

_MASK32: int = 0xFFFFFFFF
_MASK64: int = 0xFFFFFFFFFFFFFFFF

StreamErrorHandler = Callable[[int, DecodeError], None]


def _signed64(value: int) -> int:
    value &= _MASK64
    return value - (1 << 64) if value & (1 << 63) else value


def read_wide_immediate(cur: ByteCursor) -> int:
    """Read the split 64-bit immediate of ``lddw``.

    Consumes 12 bytes: low half, 4 zero bytes, high half.

    Raises:
        InvalidImmediate: The 4 bytes between the halves are not zero.
    """
    low = cur.read_u32()
    pad = cur.read_u32()
    if pad != 0:
        raise InvalidImmediate(f"wide immediate padding 0x{pad:08x}")
    high = cur.read_u32()
    return _signed64(low | (high << 32))


def read_instruction(cur: ByteCursor) -> Instruction:
    """Read one instruction (8 or 16 bytes) at the cursor position.

    Raises:
        CursorError: The buffer ends inside the instruction.
        InvalidOpcode: The opcode byte is not defined.
        InvalidImmediate: ``lddw`` padding is not zero.
    """
    op = OpCode.from_byte(cur.read_u8())
    reg = cur.read_u8()
    off = cur.read_i16()
    if op.form is OperandForm.WIDE_IMM:
        imm = read_wide_immediate(cur)
    else:
        imm = cur.read_i32()
    return Instruction(op=op, src=reg >> 4, dst=reg & 0x0F, off=off, imm=imm)


def decode_instruction(data: bytes) -> Instruction:
    """Decode the instruction at the start of *data*."""
    return read_instruction(ByteCursor(data))


def encode_instruction(ix: Instruction) -> bytes:
    """Encode *ix* into 8 bytes, or 16 for ``lddw``."""
    imm = ix.imm & _MASK64
    out = _HEAD.pack(int(ix.op), (ix.src << 4) | ix.dst, ix.off) + _U32.pack(imm & _MASK32)
    if ix.is_wide:
        out += bytes(4) + _U32.pack(imm >> 32)
    return out


def decode_instructions(
    data: bytes,
    *,
    lenient: bool = True,
    on_error: Optional[StreamErrorHandler] = None,
) -> list[Instruction]:
    """Decode a code section payload as a sequential instruction stream.

    Args:
        data: Section payload; its length must be a multiple of 8.
        lenient: When ``True`` decoding stops quietly at the first bad
            instruction and the instructions before it are returned.
            When ``False`` the error propagates.
        on_error: Called with ``(byte_offset, error)`` when lenient
            decoding stops early.

    Raises:
        InvalidDataLength: ``len(data)`` is not a multiple of 8.
    """
    if len(data) % SLOT_SIZE != 0:
        raise InvalidDataLength(f"{len(data)} bytes is not a multiple of {SLOT_SIZE}")

    cur = ByteCursor(data)
    ixs: list[Instruction] = []
    while cur.remainder() > 0:
        start = cur.position
        try:
            ixs.append(read_instruction(cur))
        except DecodeError as exc:
            if not lenient:
                raise
            if on_error is not None:
                on_error(start, exc)
            break
    return ixs


def encode_instructions(ixs: list[Instruction]) -> bytes:
    return b"".join(encode_instruction(ix) for ix in ixs)


__all__ = [
    "read_wide_immediate",
    "read_instruction",
    "decode_instruction",
    "encode_instruction",
    "decode_instructions",
    "encode_instructions",
]
