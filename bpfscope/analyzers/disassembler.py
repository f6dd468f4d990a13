"""
sBPF Disassembler
==================

Renders one decoded :class:`~bpfscope.core.models.Instruction` as
assembly text.  The output depends only on the instruction itself -- no
jump targets are resolved and no basic blocks are formed.

Forms::

    lddw r1, 4294967296
    ldxw r2, [r1+16]
    stw [r10-8], 0
    stxdw [r10-16], r1
    neg64 r3
    be32r1
    add64 r1, -4
    mov64 r0, r1
    ja +4
    jeq r1, 0, -3
    jgt r1, r2, +1
    call 1234
    call r5
    exit
"""

from __future__ import annotations

from bpfscope.core.errors import InvalidImmediate
from bpfscope.core.models import Instruction
from bpfscope.parsers.opcodes import OperandForm


ENDIAN_WIDTHS: frozenset[int] = frozenset({16, 32, 64})


def format_offset(off: int) -> str:
    """Signed offset with an explicit ``+`` for non-negative values."""
    return f"{off:+d}"


def _mem(reg: int, off: int) -> str:
    return f"[r{reg}{format_offset(off)}]"


def disassemble(ix: Instruction) -> str:
    """Return the assembly text for *ix*.

    Raises:
        InvalidImmediate: An endian conversion whose immediate is not
            16, 32 or 64.
    """
    op = ix.op
    form = op.form
    m = op.mnemonic

    if form is OperandForm.WIDE_IMM:
        return f"{m} r{ix.dst}, {ix.imm}"
    if form is OperandForm.LOAD:
        return f"{m} r{ix.dst}, {_mem(ix.src, ix.off)}"
    if form is OperandForm.STORE_IMM:
        return f"{m} {_mem(ix.dst, ix.off)}, {ix.imm}"
    if form is OperandForm.STORE_REG:
        return f"{m} {_mem(ix.dst, ix.off)}, r{ix.src}"
    if form is OperandForm.UNARY:
        return f"{m} r{ix.dst}"
    if form is OperandForm.ENDIAN:
        if ix.imm not in ENDIAN_WIDTHS:
            raise InvalidImmediate(f"{m} width {ix.imm}")
        return f"{m}{ix.imm}r{ix.dst}"
    if form is OperandForm.ALU_IMM:
        return f"{m} r{ix.dst}, {ix.imm}"
    if form is OperandForm.ALU_REG:
        return f"{m} r{ix.dst}, r{ix.src}"
    if form is OperandForm.JUMP:
        return f"{m} {format_offset(ix.off)}"
    if form is OperandForm.JUMP_IMM:
        return f"{m} r{ix.dst}, {ix.imm}, {format_offset(ix.off)}"
    if form is OperandForm.JUMP_REG:
        return f"{m} r{ix.dst}, r{ix.src}, {format_offset(ix.off)}"
    if form is OperandForm.CALL_IMM:
        return f"call {ix.imm}"
    if form is OperandForm.CALL_REG:
        return f"call r{ix.src}"
    # OperandForm.EXIT
    return m


def disassemble_all(ixs: list[Instruction]) -> list[str]:
    return [disassemble(ix) for ix in ixs]


__all__ = ["ENDIAN_WIDTHS", "format_offset", "disassemble", "disassemble_all"]
