"""Tests for the ELF header, program header and section header codecs."""

from __future__ import annotations

import pytest

from bpfscope.core.cursor import ByteCursor
from bpfscope.core.errors import (
    CursorError,
    InvalidProgramType,
    InvalidSectionHeaderType,
    NonStandardElfHeader,
)
from bpfscope.core.models import (
    ElfHeader,
    ProgramFlags,
    ProgramHeader,
    ProgramType,
    SectionHeader,
    SectionHeaderType,
)
from bpfscope.parsers.elf_parser import (
    ELF_HEADER_SIZE,
    PROGRAM_HEADER_SIZE,
    SECTION_HEADER_SIZE,
    read_program_header,
)


def _patch(data: bytes, offset: int, value: bytes) -> bytes:
    return data[:offset] + value + data[offset + len(value):]


class TestElfHeader:
    def test_decode_fields(self, elf_header_bytes: bytes) -> None:
        h = ElfHeader.from_bytes(elf_header_bytes)
        assert h.ei_magic == b"\x7fELF"
        assert h.e_type == 3
        assert h.e_machine == 0xF7
        assert h.e_entry == 0x78
        assert h.e_phoff == 0x40
        assert h.e_shoff == 0x90
        assert h.e_ehsize == 64
        assert h.e_phentsize == 56
        assert h.e_phnum == 1
        assert h.e_shentsize == 64
        assert h.e_shnum == 3
        assert h.e_shstrndx == 2

    def test_round_trip(self, elf_header_bytes: bytes) -> None:
        assert ElfHeader.from_bytes(elf_header_bytes).to_bytes() == elf_header_bytes

    def test_record_size(self) -> None:
        assert ELF_HEADER_SIZE == 64

    def test_accepts_sbpf_machine(self, elf_header_bytes: bytes) -> None:
        data = _patch(elf_header_bytes, 18, (0x107).to_bytes(2, "little"))
        h = ElfHeader.from_bytes(data)
        assert h.e_machine == 0x107
        assert h.to_bytes() == data

    @pytest.mark.parametrize(
        "offset, value",
        [
            (0, b"\x00"),            # magic
            (4, b"\x01"),            # 32-bit class
            (5, b"\x02"),            # big-endian
            (6, b"\x02"),            # ident version
            (7, b"\x03"),            # osabi
            (8, b"\x01"),            # abi version
            (12, b"\x01"),           # padding
            (16, b"\x02\x00"),       # ET_EXEC
            (18, b"\x3e\x00"),       # x86-64
            (20, b"\x02\x00\x00\x00"),  # version
        ],
    )
    def test_rejects_profile_mismatch(
        self, elf_header_bytes: bytes, offset: int, value: bytes
    ) -> None:
        with pytest.raises(NonStandardElfHeader, match="Non-standard ELF header"):
            ElfHeader.from_bytes(_patch(elf_header_bytes, offset, value))

    def test_truncated_header(self, elf_header_bytes: bytes) -> None:
        with pytest.raises(CursorError):
            ElfHeader.from_bytes(elf_header_bytes[:63])

    def test_profile_checked_before_remaining_fields(self) -> None:
        # Only the first 24 bytes are present; the bad magic is reported
        # instead of a short read.
        with pytest.raises(NonStandardElfHeader):
            ElfHeader.from_bytes(b"MZ\x90\x00" + bytes(20))


class TestProgramHeader:
    def test_decode_fields(self, program_header_bytes: bytes) -> None:
        ph = ProgramHeader.from_bytes(program_header_bytes)
        assert ph.p_type is ProgramType.PT_LOAD
        assert ph.p_flags == ProgramFlags.PF_R | ProgramFlags.PF_X
        assert ph.p_offset == 0x78
        assert ph.p_vaddr == 0x78
        assert ph.p_paddr == 0x78
        assert ph.p_filesz == 8
        assert ph.p_memsz == 8
        assert ph.p_align == 0x1000

    def test_round_trip(self, program_header_bytes: bytes) -> None:
        ph = ProgramHeader.from_bytes(program_header_bytes)
        assert ph.to_bytes() == program_header_bytes
        assert len(ph.to_bytes()) == PROGRAM_HEADER_SIZE

    def test_flags_masked_to_low_bits(self, program_header_bytes: bytes) -> None:
        data = _patch(program_header_bytes, 4, b"\xff\xff\xff\xff")
        ph = ProgramHeader.from_bytes(data)
        assert int(ph.p_flags) == 7
        assert ph.to_bytes()[4:8] == b"\x07\x00\x00\x00"

    def test_invalid_type(self, program_header_bytes: bytes) -> None:
        data = _patch(program_header_bytes, 0, (8).to_bytes(4, "little"))
        with pytest.raises(InvalidProgramType, match="Invalid Program Type"):
            ProgramHeader.from_bytes(data)

    def test_short_record(self, program_header_bytes: bytes) -> None:
        with pytest.raises(CursorError):
            ProgramHeader.from_bytes(program_header_bytes[:55])

    def test_reader_advances_cursor(self, program_header_bytes: bytes) -> None:
        cur = ByteCursor(program_header_bytes * 2)
        read_program_header(cur)
        assert cur.position == PROGRAM_HEADER_SIZE
        read_program_header(cur)
        assert cur.remainder() == 0

    def test_model_masks_raw_flags(self) -> None:
        ph = ProgramHeader(
            p_type=ProgramType.PT_LOAD,
            p_flags=0x1_0000_0006,
            p_offset=0,
            p_vaddr=0,
            p_paddr=0,
            p_filesz=0,
            p_memsz=0,
            p_align=0,
        )
        assert ph.p_flags == ProgramFlags.PF_R | ProgramFlags.PF_W


class TestSectionHeader:
    def test_decode_fields(self, section_header_bytes: bytes) -> None:
        sh = SectionHeader.from_bytes(section_header_bytes)
        assert sh.sh_name == 7
        assert sh.sh_type is SectionHeaderType.SHT_STRTAB
        assert sh.sh_offset == 0x80
        assert sh.sh_size == 0x0A
        assert sh.sh_addralign == 1

    def test_round_trip(self, section_header_bytes: bytes) -> None:
        sh = SectionHeader.from_bytes(section_header_bytes)
        assert sh.to_bytes() == section_header_bytes
        assert len(sh.to_bytes()) == SECTION_HEADER_SIZE

    @pytest.mark.parametrize("raw", [0x0C, 0x0D, 0x14, 0x6FFFFFF6])
    def test_invalid_type(self, section_header_bytes: bytes, raw: int) -> None:
        data = _patch(section_header_bytes, 4, raw.to_bytes(4, "little"))
        with pytest.raises(InvalidSectionHeaderType):
            SectionHeader.from_bytes(data)

    def test_short_record(self, section_header_bytes: bytes) -> None:
        with pytest.raises(CursorError):
            SectionHeader.from_bytes(section_header_bytes[:40])
