"""Tests for the instruction codec, stream decoding and the opcode table."""

from __future__ import annotations

import pytest

from bpfscope.core.errors import (
    CursorError,
    DecodeError,
    InvalidDataLength,
    InvalidImmediate,
    InvalidOpcode,
)
from bpfscope.core.models import Instruction
from bpfscope.parsers.instruction import (
    decode_instruction,
    decode_instructions,
    encode_instruction,
    encode_instructions,
)
from bpfscope.parsers.opcodes import (
    BPF_ALU64,
    BPF_JMP,
    BPF_LD,
    BPF_PQR,
    SLOT_SIZE,
    WIDE_SLOT_SIZE,
    OpCode,
    OperandForm,
)


EXIT = bytes.fromhex("9500000000000000")


class TestSingleInstruction:
    def test_ordinary_round_trip(self) -> None:
        data = bytes.fromhex("9700000000000000")
        ix = Instruction.from_bytes(data)
        assert ix.op is OpCode.MOD64_IMM
        assert (ix.dst, ix.src, ix.off, ix.imm) == (0, 0, 0, 0)
        assert ix.to_bytes() == data

    def test_lddw_round_trip(self) -> None:
        data = bytes.fromhex("18010000000000000000000000000000")
        ix = Instruction.from_bytes(data)
        assert ix.op is OpCode.LDDW
        assert ix.dst == 1
        assert ix.imm == 0
        assert ix.is_wide
        assert ix.width == WIDE_SLOT_SIZE
        assert ix.to_bytes() == data

    def test_register_nibbles(self) -> None:
        # reg byte 0x12: src in the high nibble, dst in the low nibble
        ix = decode_instruction(bytes.fromhex("7912a00000000000"))
        assert ix.op is OpCode.LDXDW
        assert ix.src == 1
        assert ix.dst == 2
        assert ix.off == 160

    def test_signed_offset_and_immediate(self) -> None:
        ix = decode_instruction(bytes.fromhex("1501fdfffeffffff"))
        assert ix.off == -3
        assert ix.imm == -2
        assert encode_instruction(ix) == bytes.fromhex("1501fdfffeffffff")

    def test_lddw_splits_immediate(self) -> None:
        ix = Instruction(op=OpCode.LDDW, dst=3, imm=0x1122334455667788)
        data = ix.to_bytes()
        assert data == bytes.fromhex("18030000887766550000000044332211")
        assert decode_instruction(data) == ix

    def test_lddw_negative_immediate(self) -> None:
        data = bytes.fromhex("18010000ffffffff00000000ffffffff")
        ix = decode_instruction(data)
        assert ix.imm == -1
        assert ix.to_bytes() == data

    def test_lddw_half_edit_reencodes_exactly(self) -> None:
        data = bytearray.fromhex("18010000000000000000000000000000")
        data[4:8] = b"\x01\x02\x03\x04"
        data[12:16] = b"\x05\x06\x07\x08"
        ix = decode_instruction(bytes(data))
        assert ix.imm == 0x0807060504030201
        assert ix.to_bytes() == bytes(data)

    def test_lddw_nonzero_padding(self) -> None:
        data = bytes.fromhex("18010000000000000100000000000000")
        with pytest.raises(InvalidImmediate, match="Invalid Immediate"):
            decode_instruction(data)

    def test_lddw_truncated(self) -> None:
        with pytest.raises(CursorError):
            decode_instruction(bytes.fromhex("1801000000000000"))

    def test_invalid_opcode(self) -> None:
        with pytest.raises(InvalidOpcode, match="Invalid OpCode"):
            decode_instruction(bytes.fromhex("0000000000000000"))

    def test_short_instruction(self) -> None:
        with pytest.raises(CursorError):
            decode_instruction(EXIT[:7])

    def test_field_ranges(self) -> None:
        with pytest.raises(ValueError):
            Instruction(op=OpCode.EXIT, dst=16)
        with pytest.raises(ValueError):
            Instruction(op=OpCode.JA, off=0x8000)


class TestStream:
    def test_lddw_then_exit(self, text_bytes: bytes) -> None:
        ixs = decode_instructions(text_bytes)
        assert [ix.op for ix in ixs] == [OpCode.LDDW, OpCode.EXIT]
        assert ixs[0].dst == 1
        assert encode_instructions(ixs) == text_bytes

    def test_empty_payload(self) -> None:
        assert decode_instructions(b"") == []

    @pytest.mark.parametrize("length", [1, 7, 9, 20])
    def test_length_not_slot_multiple(self, length: int) -> None:
        with pytest.raises(InvalidDataLength, match="Invalid data length"):
            decode_instructions(bytes(length))

    def test_lenient_stop_at_bad_opcode(self) -> None:
        data = EXIT + bytes.fromhex("ff00000000000000") + EXIT
        seen: list[tuple[int, DecodeError]] = []
        ixs = decode_instructions(data, on_error=lambda off, exc: seen.append((off, exc)))
        assert [ix.op for ix in ixs] == [OpCode.EXIT]
        assert len(seen) == 1
        assert seen[0][0] == 8
        assert isinstance(seen[0][1], InvalidOpcode)

    def test_lenient_stop_at_truncated_lddw(self) -> None:
        data = EXIT + bytes.fromhex("1801000000000000")
        assert [ix.op for ix in decode_instructions(data)] == [OpCode.EXIT]

    def test_strict_stream_propagates(self) -> None:
        data = EXIT + bytes.fromhex("ff00000000000000")
        with pytest.raises(InvalidOpcode):
            decode_instructions(data, lenient=False)


class TestOpcodeTable:
    def test_no_aliased_members(self) -> None:
        assert len(OpCode.__members__) == len(OpCode)

    def test_table_size(self) -> None:
        assert len(OpCode) == 116

    def test_every_byte_resolves_or_fails(self) -> None:
        defined = {int(op) for op in OpCode}
        for byte in range(256):
            if byte in defined:
                assert int(OpCode.from_byte(byte)) == byte
            else:
                with pytest.raises(InvalidOpcode):
                    OpCode.from_byte(byte)

    def test_only_lddw_is_wide(self) -> None:
        wide = [op for op in OpCode if op.width == WIDE_SLOT_SIZE]
        assert wide == [OpCode.LDDW]
        assert all(op.width == SLOT_SIZE for op in OpCode if op is not OpCode.LDDW)

    def test_labels_and_classes(self) -> None:
        assert OpCode.LDDW.label == "lddw"
        assert str(OpCode.MOV64_IMM) == "mov64"
        assert OpCode.LDDW.instruction_class == BPF_LD
        assert OpCode.ADD64_REG.instruction_class == BPF_ALU64
        assert OpCode.UDIV64_IMM.instruction_class == BPF_PQR
        assert OpCode.EXIT.instruction_class == BPF_JMP

    def test_call_forms(self) -> None:
        assert OpCode.CALL.form is OperandForm.CALL_IMM
        assert OpCode.CALLX.form is OperandForm.CALL_REG
        assert OpCode.CALLX.mnemonic == "call"
