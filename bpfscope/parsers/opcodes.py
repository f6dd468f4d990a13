"""
sBPF Opcode Table
==================

Every operation code of the Solana-flavoured eBPF instruction set, one
enum member per byte value.  Each member carries its assembly mnemonic and
the :class:`OperandForm` that decides how the disassembler renders its
operands.  Disassembly groups do not follow the numeric layout of the
opcode byte (``jeq`` imm and ``jeq`` reg differ only in bit 3, while
``neg32`` shares the ALU class with ``add32``), so forms are assigned per
member rather than derived from bit masks.

Opcode byte layout (for reference)::

    7 6 5 4 | 3      | 2 1 0
    op      | source | class

References:
    - Linux kernel Documentation/bpf/standardization/instruction-set.rst
    - solana-labs/rbpf ``src/ebpf.rs`` opcode constants.
"""

from __future__ import annotations

import enum

from bpfscope.core.errors import InvalidOpcode


# ---------------------------------------------------------------------------
# Instruction classes (low three bits)
# ---------------------------------------------------------------------------

BPF_LD: int = 0x00
BPF_LDX: int = 0x01
BPF_ST: int = 0x02
BPF_STX: int = 0x03
BPF_ALU: int = 0x04
BPF_JMP: int = 0x05
BPF_PQR: int = 0x06
BPF_ALU64: int = 0x07

BPF_CLASS_MASK: int = 0x07

# Instruction slot width in bytes
SLOT_SIZE: int = 8
WIDE_SLOT_SIZE: int = 16


class OperandForm(str, enum.Enum):
    """How an instruction's operands are written in assembly."""

    WIDE_IMM = "wide_imm"          # lddw r1, 42
    LOAD = "load"                  # ldxw r1, [r2+4]
    STORE_IMM = "store_imm"        # stw [r1+4], 42
    STORE_REG = "store_reg"        # stxw [r1+4], r2
    UNARY = "unary"                # neg64 r1
    ENDIAN = "endian"              # be32r1
    ALU_IMM = "alu_imm"            # add64 r1, 42
    ALU_REG = "alu_reg"            # add64 r1, r2
    JUMP = "jump"                  # ja +4
    JUMP_IMM = "jump_imm"          # jeq r1, 42, +4
    JUMP_REG = "jump_reg"          # jeq r1, r2, +4
    CALL_IMM = "call_imm"          # call 42
    CALL_REG = "call_reg"          # call r2
    EXIT = "exit"                  # exit


_F = OperandForm


class OpCode(enum.IntEnum):
    """A single sBPF operation code.

    Members are constructed from ``(byte, mnemonic, form)`` triples; the
    integer value is the opcode byte so ``OpCode(0x95)`` decodes and
    ``int(op)`` encodes.
    """

    mnemonic: str
    form: OperandForm

    def __new__(cls, value: int, mnemonic: str, form: OperandForm) -> "OpCode":
        obj = int.__new__(cls, value)
        obj._value_ = value
        obj.mnemonic = mnemonic
        obj.form = form
        return obj

    # Wide immediate load (two slots)
    LDDW = (0x18, "lddw", _F.WIDE_IMM)

    # Memory loads
    LDXB = (0x71, "ldxb", _F.LOAD)
    LDXH = (0x69, "ldxh", _F.LOAD)
    LDXW = (0x61, "ldxw", _F.LOAD)
    LDXDW = (0x79, "ldxdw", _F.LOAD)

    # Immediate stores (deprecated)
    STB = (0x72, "stb", _F.STORE_IMM)
    STH = (0x6A, "sth", _F.STORE_IMM)
    STW = (0x62, "stw", _F.STORE_IMM)
    STDW = (0x7A, "stdw", _F.STORE_IMM)

    # Register stores
    STXB = (0x73, "stxb", _F.STORE_REG)
    STXH = (0x6B, "stxh", _F.STORE_REG)
    STXW = (0x63, "stxw", _F.STORE_REG)
    STXDW = (0x7B, "stxdw", _F.STORE_REG)

    # 32-bit ALU
    ADD32_IMM = (0x04, "add32", _F.ALU_IMM)
    ADD32_REG = (0x0C, "add32", _F.ALU_REG)
    SUB32_IMM = (0x14, "sub32", _F.ALU_IMM)
    SUB32_REG = (0x1C, "sub32", _F.ALU_REG)
    MUL32_IMM = (0x24, "mul32", _F.ALU_IMM)
    MUL32_REG = (0x2C, "mul32", _F.ALU_REG)
    DIV32_IMM = (0x34, "div32", _F.ALU_IMM)
    DIV32_REG = (0x3C, "div32", _F.ALU_REG)
    OR32_IMM = (0x44, "or32", _F.ALU_IMM)
    OR32_REG = (0x4C, "or32", _F.ALU_REG)
    AND32_IMM = (0x54, "and32", _F.ALU_IMM)
    AND32_REG = (0x5C, "and32", _F.ALU_REG)
    LSH32_IMM = (0x64, "lsh32", _F.ALU_IMM)
    LSH32_REG = (0x6C, "lsh32", _F.ALU_REG)
    RSH32_IMM = (0x74, "rsh32", _F.ALU_IMM)
    RSH32_REG = (0x7C, "rsh32", _F.ALU_REG)
    NEG32 = (0x84, "neg32", _F.UNARY)
    MOD32_IMM = (0x94, "mod32", _F.ALU_IMM)
    MOD32_REG = (0x9C, "mod32", _F.ALU_REG)
    XOR32_IMM = (0xA4, "xor32", _F.ALU_IMM)
    XOR32_REG = (0xAC, "xor32", _F.ALU_REG)
    MOV32_IMM = (0xB4, "mov32", _F.ALU_IMM)
    MOV32_REG = (0xBC, "mov32", _F.ALU_REG)
    ARSH32_IMM = (0xC4, "arsh32", _F.ALU_IMM)
    ARSH32_REG = (0xCC, "arsh32", _F.ALU_REG)
    LE = (0xD4, "le", _F.ENDIAN)
    BE = (0xDC, "be", _F.ENDIAN)

    # 32-bit product / quotient / remainder
    LMUL32_IMM = (0x86, "lmul32", _F.ALU_IMM)
    LMUL32_REG = (0x8E, "lmul32", _F.ALU_REG)
    UDIV32_IMM = (0x46, "udiv32", _F.ALU_IMM)
    UDIV32_REG = (0x4E, "udiv32", _F.ALU_REG)
    UREM32_IMM = (0x66, "urem32", _F.ALU_IMM)
    UREM32_REG = (0x6E, "urem32", _F.ALU_REG)
    SDIV32_IMM = (0xC6, "sdiv32", _F.ALU_IMM)
    SDIV32_REG = (0xCE, "sdiv32", _F.ALU_REG)
    SREM32_IMM = (0xE6, "srem32", _F.ALU_IMM)
    SREM32_REG = (0xEE, "srem32", _F.ALU_REG)

    # 64-bit ALU
    ADD64_IMM = (0x07, "add64", _F.ALU_IMM)
    ADD64_REG = (0x0F, "add64", _F.ALU_REG)
    SUB64_IMM = (0x17, "sub64", _F.ALU_IMM)
    SUB64_REG = (0x1F, "sub64", _F.ALU_REG)
    MUL64_IMM = (0x27, "mul64", _F.ALU_IMM)
    MUL64_REG = (0x2F, "mul64", _F.ALU_REG)
    DIV64_IMM = (0x37, "div64", _F.ALU_IMM)
    DIV64_REG = (0x3F, "div64", _F.ALU_REG)
    OR64_IMM = (0x47, "or64", _F.ALU_IMM)
    OR64_REG = (0x4F, "or64", _F.ALU_REG)
    AND64_IMM = (0x57, "and64", _F.ALU_IMM)
    AND64_REG = (0x5F, "and64", _F.ALU_REG)
    LSH64_IMM = (0x67, "lsh64", _F.ALU_IMM)
    LSH64_REG = (0x6F, "lsh64", _F.ALU_REG)
    RSH64_IMM = (0x77, "rsh64", _F.ALU_IMM)
    RSH64_REG = (0x7F, "rsh64", _F.ALU_REG)
    NEG64 = (0x87, "neg64", _F.UNARY)
    MOD64_IMM = (0x97, "mod64", _F.ALU_IMM)
    MOD64_REG = (0x9F, "mod64", _F.ALU_REG)
    XOR64_IMM = (0xA7, "xor64", _F.ALU_IMM)
    XOR64_REG = (0xAF, "xor64", _F.ALU_REG)
    MOV64_IMM = (0xB7, "mov64", _F.ALU_IMM)
    MOV64_REG = (0xBF, "mov64", _F.ALU_REG)
    ARSH64_IMM = (0xC7, "arsh64", _F.ALU_IMM)
    ARSH64_REG = (0xCF, "arsh64", _F.ALU_REG)
    HOR64_IMM = (0xF7, "hor64", _F.ALU_IMM)

    # 64-bit product / quotient / remainder
    LMUL64_IMM = (0x96, "lmul64", _F.ALU_IMM)
    LMUL64_REG = (0x9E, "lmul64", _F.ALU_REG)
    UHMUL64_IMM = (0x36, "uhmul64", _F.ALU_IMM)
    UHMUL64_REG = (0x3E, "uhmul64", _F.ALU_REG)
    UDIV64_IMM = (0x56, "udiv64", _F.ALU_IMM)
    UDIV64_REG = (0x5E, "udiv64", _F.ALU_REG)
    UREM64_IMM = (0x76, "urem64", _F.ALU_IMM)
    UREM64_REG = (0x7E, "urem64", _F.ALU_REG)
    SHMUL64_IMM = (0xB6, "shmul64", _F.ALU_IMM)
    SHMUL64_REG = (0xBE, "shmul64", _F.ALU_REG)
    SDIV64_IMM = (0xD6, "sdiv64", _F.ALU_IMM)
    SDIV64_REG = (0xDE, "sdiv64", _F.ALU_REG)
    SREM64_IMM = (0xF6, "srem64", _F.ALU_IMM)
    SREM64_REG = (0xFE, "srem64", _F.ALU_REG)

    # Jumps
    JA = (0x05, "ja", _F.JUMP)
    JEQ_IMM = (0x15, "jeq", _F.JUMP_IMM)
    JEQ_REG = (0x1D, "jeq", _F.JUMP_REG)
    JGT_IMM = (0x25, "jgt", _F.JUMP_IMM)
    JGT_REG = (0x2D, "jgt", _F.JUMP_REG)
    JGE_IMM = (0x35, "jge", _F.JUMP_IMM)
    JGE_REG = (0x3D, "jge", _F.JUMP_REG)
    JLT_IMM = (0xA5, "jlt", _F.JUMP_IMM)
    JLT_REG = (0xAD, "jlt", _F.JUMP_REG)
    JLE_IMM = (0xB5, "jle", _F.JUMP_IMM)
    JLE_REG = (0xBD, "jle", _F.JUMP_REG)
    JSET_IMM = (0x45, "jset", _F.JUMP_IMM)
    JSET_REG = (0x4D, "jset", _F.JUMP_REG)
    JNE_IMM = (0x55, "jne", _F.JUMP_IMM)
    JNE_REG = (0x5D, "jne", _F.JUMP_REG)
    JSGT_IMM = (0x65, "jsgt", _F.JUMP_IMM)
    JSGT_REG = (0x6D, "jsgt", _F.JUMP_REG)
    JSGE_IMM = (0x75, "jsge", _F.JUMP_IMM)
    JSGE_REG = (0x7D, "jsge", _F.JUMP_REG)
    JSLT_IMM = (0xC5, "jslt", _F.JUMP_IMM)
    JSLT_REG = (0xCD, "jslt", _F.JUMP_REG)
    JSLE_IMM = (0xD5, "jsle", _F.JUMP_IMM)
    JSLE_REG = (0xDD, "jsle", _F.JUMP_REG)

    # Calls
    CALL = (0x85, "call", _F.CALL_IMM)
    CALLX = (0x8D, "call", _F.CALL_REG)
    EXIT = (0x95, "exit", _F.EXIT)

    # ------------------------------------------------------------------ #

    @classmethod
    def from_byte(cls, value: int) -> OpCode:
        """Resolve an opcode byte, raising :class:`InvalidOpcode` if undefined."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidOpcode(f"0x{value:02x}") from None

    @property
    def label(self) -> str:
        return self.mnemonic

    @property
    def instruction_class(self) -> int:
        """The low three class bits of the opcode byte."""
        return self.value & BPF_CLASS_MASK

    @property
    def width(self) -> int:
        """Encoded width in bytes (16 for the wide immediate load)."""
        return WIDE_SLOT_SIZE if self.form is OperandForm.WIDE_IMM else SLOT_SIZE

    def __str__(self) -> str:
        return self.mnemonic


__all__ = [
    "BPF_LD", "BPF_LDX", "BPF_ST", "BPF_STX", "BPF_ALU", "BPF_JMP",
    "BPF_PQR", "BPF_ALU64", "BPF_CLASS_MASK",
    "SLOT_SIZE", "WIDE_SLOT_SIZE",
    "OperandForm", "OpCode",
]
