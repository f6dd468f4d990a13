"""Tests for the tag enumerations and value models."""

from __future__ import annotations

import pydantic
import pytest

from bpfscope.core.errors import InvalidProgramType, InvalidSectionHeaderType
from bpfscope.core.models import (
    Instruction,
    ProgramFlags,
    ProgramType,
    SectionHeaderEntry,
    SectionHeaderType,
)
from bpfscope.parsers.opcodes import OpCode


class TestTags:
    def test_program_type_bidirectional(self) -> None:
        assert ProgramType.from_raw(1) is ProgramType.PT_LOAD
        assert int(ProgramType.PT_TLS) == 7
        assert ProgramType.PT_DYNAMIC.label == "PT_DYNAMIC"
        assert str(ProgramType.PT_NOTE) == "PT_NOTE"

    def test_program_type_unknown(self) -> None:
        with pytest.raises(InvalidProgramType):
            ProgramType.from_raw(0x6474E551)

    def test_section_type_bidirectional(self) -> None:
        assert SectionHeaderType.from_raw(0x0B) is SectionHeaderType.SHT_DYNSYM
        assert str(SectionHeaderType.SHT_NUM) == "SHT_NUM"
        with pytest.raises(InvalidSectionHeaderType):
            SectionHeaderType.from_raw(0x0C)

    @pytest.mark.parametrize(
        "raw, text",
        [
            (0, "*/*/*"),
            (1, "*/*/X"),
            (4, "R/*/*"),
            (5, "R/*/X"),
            (6, "R/W/*"),
            (7, "R/W/X"),
            (0xF5, "R/*/X"),
        ],
    )
    def test_flags_text(self, raw: int, text: str) -> None:
        assert str(ProgramFlags.from_raw(raw)) == text

    def test_flag_predicates(self) -> None:
        flags = ProgramFlags.from_raw(6)
        assert flags.readable and flags.writable
        assert not flags.executable


class TestModels:
    def test_frozen(self) -> None:
        ix = Instruction(op=OpCode.EXIT)
        with pytest.raises(pydantic.ValidationError):
            ix.dst = 1  # type: ignore[misc]

    def test_entry_name_strips_terminator(self) -> None:
        entry = SectionHeaderEntry(label=".rodata\x00", offset=0)
        assert entry.name == ".rodata"
        assert entry.to_bytes() == b""
        assert entry.to_instructions() == []

    def test_entry_equality_is_structural(self) -> None:
        a = SectionHeaderEntry(label=".s\x00", offset=8, data=b"ab", utf8="ab")
        b = SectionHeaderEntry(label=".s\x00", offset=8, data=b"ab", utf8="ab")
        assert a == b
