"""
bpfscope Data Models
=====================

Pydantic v2 value models for every structure the decoder produces:
the ELF file header, program (segment) headers, section headers, decoded
sBPF instructions, resolved section entries and the assembled program.

All models are frozen -- a decoded structure is never mutated.  Each
wire-encoded model offers ``from_bytes`` / ``to_bytes`` helpers that
delegate to the codec functions in :mod:`bpfscope.parsers`.

Enumerated tag fields use one bidirectional :class:`enum.IntEnum` per
field: ``Tag(raw)`` validates on decode, ``int(tag)`` encodes and
``tag.label`` is the display name.

References:
    - TIS Committee. (1995). Executable and Linkable Format (ELF) Specification.
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bpfscope.core.errors import InvalidProgramType, InvalidSectionHeaderType
from bpfscope.parsers.opcodes import OpCode, OperandForm


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ProgramType(enum.IntEnum):
    """Program header segment type (``p_type``)."""

    PT_NULL = 0x00     # Unused entry
    PT_LOAD = 0x01     # Loadable segment
    PT_DYNAMIC = 0x02  # Dynamic linking information
    PT_INTERP = 0x03   # Interpreter path
    PT_NOTE = 0x04     # Auxiliary information
    PT_SHLIB = 0x05    # Reserved
    PT_PHDR = 0x06     # The program header table itself
    PT_TLS = 0x07      # Thread-local storage template

    @classmethod
    def from_raw(cls, value: int) -> ProgramType:
        try:
            return cls(value)
        except ValueError:
            raise InvalidProgramType(f"0x{value:x}") from None

    @property
    def label(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


class SectionHeaderType(enum.IntEnum):
    """Section header type (``sh_type``)."""

    SHT_NULL = 0x00
    SHT_PROGBITS = 0x01
    SHT_SYMTAB = 0x02
    SHT_STRTAB = 0x03
    SHT_RELA = 0x04
    SHT_HASH = 0x05
    SHT_DYNAMIC = 0x06
    SHT_NOTE = 0x07
    SHT_NOBITS = 0x08
    SHT_REL = 0x09
    SHT_SHLIB = 0x0A
    SHT_DYNSYM = 0x0B
    SHT_INIT_ARRAY = 0x0E
    SHT_FINI_ARRAY = 0x0F
    SHT_PREINIT_ARRAY = 0x10
    SHT_GROUP = 0x11
    SHT_SYMTAB_SHNDX = 0x12
    SHT_NUM = 0x13

    @classmethod
    def from_raw(cls, value: int) -> SectionHeaderType:
        try:
            return cls(value)
        except ValueError:
            raise InvalidSectionHeaderType(f"0x{value:x}") from None

    @property
    def label(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


class ProgramFlags(enum.IntFlag):
    """Segment permission bits; only the low three bits are kept."""

    PF_X = 0x1
    PF_W = 0x2
    PF_R = 0x4

    @classmethod
    def from_raw(cls, value: int) -> ProgramFlags:
        return cls(value & 0x7)

    @property
    def readable(self) -> bool:
        return bool(self & ProgramFlags.PF_R)

    @property
    def writable(self) -> bool:
        return bool(self & ProgramFlags.PF_W)

    @property
    def executable(self) -> bool:
        return bool(self & ProgramFlags.PF_X)

    def __str__(self) -> str:
        r = "R" if self.readable else "*"
        w = "W" if self.writable else "*"
        x = "X" if self.executable else "*"
        return f"{r}/{w}/{x}"


# ---------------------------------------------------------------------------
# ELF structures
# ---------------------------------------------------------------------------

class ElfHeader(BaseModel):
    """The 64-byte ELF identification and file header.

    Attributes:
        ei_magic: Magic bytes (``b"\\x7fELF"``).
        ei_class: File class (2 = 64-bit).
        ei_data: Data encoding (1 = little-endian).
        ei_version: Identification version.
        ei_osabi: OS/ABI identifier.
        ei_abiversion: ABI version.
        ei_pad: Seven reserved bytes.
        e_type: Object file type.
        e_machine: Target machine.
        e_version: Object file version.
        e_entry: Entry point virtual address.
        e_phoff: Program header table file offset.
        e_shoff: Section header table file offset.
        e_flags: Processor-specific flags.
        e_ehsize: ELF header size.
        e_phentsize: Program header entry size.
        e_phnum: Number of program headers.
        e_shentsize: Section header entry size.
        e_shnum: Number of section headers.
        e_shstrndx: Index of the section-name string table.
    """

    model_config = ConfigDict(frozen=True)

    ei_magic: bytes = Field(..., min_length=4, max_length=4)
    ei_class: int
    ei_data: int
    ei_version: int
    ei_osabi: int
    ei_abiversion: int
    ei_pad: bytes = Field(..., min_length=7, max_length=7)
    e_type: int
    e_machine: int
    e_version: int
    e_entry: int
    e_phoff: int
    e_shoff: int
    e_flags: int
    e_ehsize: int
    e_phentsize: int
    e_phnum: int
    e_shentsize: int
    e_shnum: int
    e_shstrndx: int

    @classmethod
    def from_bytes(cls, data: bytes) -> ElfHeader:
        from bpfscope.parsers.elf_parser import decode_elf_header
        return decode_elf_header(data)

    def to_bytes(self) -> bytes:
        from bpfscope.parsers.elf_parser import encode_elf_header
        return encode_elf_header(self)


class ProgramHeader(BaseModel):
    """A 56-byte program (segment) header.

    ``p_align`` is 0, 1 or a power of two and, when larger than one,
    ``p_vaddr % p_align == p_offset % p_align``.  The decoder does not
    enforce this but preserves it across a decode/encode cycle.
    """

    model_config = ConfigDict(frozen=True)

    p_type: ProgramType
    p_flags: ProgramFlags
    p_offset: int
    p_vaddr: int
    p_paddr: int
    p_filesz: int
    p_memsz: int
    p_align: int

    @field_validator("p_flags", mode="before")
    @classmethod
    def _mask_flags(cls, v: Any) -> ProgramFlags:
        if isinstance(v, ProgramFlags):
            return v
        return ProgramFlags.from_raw(int(v))

    @classmethod
    def from_bytes(cls, data: bytes) -> ProgramHeader:
        from bpfscope.parsers.elf_parser import decode_program_header
        return decode_program_header(data)

    def to_bytes(self) -> bytes:
        from bpfscope.parsers.elf_parser import encode_program_header
        return encode_program_header(self)


class SectionHeader(BaseModel):
    """A 64-byte section header.

    Attributes:
        sh_name: Byte offset of the section name in the name string table.
        sh_type: Section type tag.
        sh_flags: Attribute flags.
        sh_addr: Virtual address when loaded.
        sh_offset: File offset of the section payload.
        sh_size: Payload size in bytes.
        sh_link: Index of an associated section.
        sh_info: Extra, type-dependent information.
        sh_addralign: Required alignment.
        sh_entsize: Entry size for fixed-size tables, otherwise 0.
    """

    model_config = ConfigDict(frozen=True)

    sh_name: int
    sh_type: SectionHeaderType
    sh_flags: int
    sh_addr: int
    sh_offset: int
    sh_size: int
    sh_link: int
    sh_info: int
    sh_addralign: int
    sh_entsize: int

    @classmethod
    def from_bytes(cls, data: bytes) -> SectionHeader:
        from bpfscope.parsers.elf_parser import decode_section_header
        return decode_section_header(data)

    def to_bytes(self) -> bytes:
        from bpfscope.parsers.elf_parser import encode_section_header
        return encode_section_header(self)


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------

class Instruction(BaseModel):
    """One decoded sBPF instruction.

    ``imm`` is the sign-extended 32-bit immediate for ordinary
    instructions and the full signed 64-bit value for ``lddw``.
    """

    model_config = ConfigDict(frozen=True)

    op: OpCode
    dst: int = Field(0, ge=0, le=15)
    src: int = Field(0, ge=0, le=15)
    off: int = Field(0, ge=-0x8000, le=0x7FFF)
    imm: int = Field(0, ge=-(1 << 63), le=(1 << 63) - 1)

    @property
    def is_wide(self) -> bool:
        return self.op.form is OperandForm.WIDE_IMM

    @property
    def width(self) -> int:
        return self.op.width

    @classmethod
    def from_bytes(cls, data: bytes) -> Instruction:
        from bpfscope.parsers.instruction import decode_instruction
        return decode_instruction(data)

    def to_bytes(self) -> bytes:
        from bpfscope.parsers.instruction import encode_instruction
        return encode_instruction(self)

    def to_asm(self) -> str:
        from bpfscope.analyzers.disassembler import disassemble
        return disassemble(self)


# ---------------------------------------------------------------------------
# Resolved sections and the assembled program
# ---------------------------------------------------------------------------

class SectionHeaderEntry(BaseModel):
    """A section resolved against the file: name, payload and decodings.

    Attributes:
        label: Section name bytes from the string table, decoded as UTF-8
            (including the trailing NUL when present).
        offset: File offset of the payload.
        data: Owned copy of the payload bytes.
        ixs: Decoded instructions (executable code section only).
        utf8: The payload decoded as UTF-8, when it is valid UTF-8.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    offset: int
    data: bytes = b""
    ixs: tuple[Instruction, ...] = ()
    utf8: Optional[str] = None

    @property
    def name(self) -> str:
        """The label without its NUL terminator."""
        return self.label.rstrip("\x00")

    def to_bytes(self) -> bytes:
        return bytes(self.data)

    def to_instructions(self) -> list[Instruction]:
        """Re-decode the payload as an instruction stream."""
        from bpfscope.parsers.instruction import decode_instructions
        return decode_instructions(self.data)


class Program(BaseModel):
    """The fully decoded ELF image.

    ``section_header_entries`` follows section-header table order, not
    file-offset order.
    """

    model_config = ConfigDict(frozen=True)

    elf_header: ElfHeader
    program_headers: tuple[ProgramHeader, ...] = ()
    section_headers: tuple[SectionHeader, ...] = ()
    section_header_entries: tuple[SectionHeaderEntry, ...] = ()

    @classmethod
    def from_bytes(cls, data: bytes) -> Program:
        from bpfscope.core.engine import decode_program
        return decode_program(data)

    def code_sections(self) -> list[SectionHeaderEntry]:
        """Entries that carry at least one decoded instruction."""
        return [e for e in self.section_header_entries if e.ixs]

    def assembly(self) -> str:
        """Assembly text of every code section, one instruction per line."""
        return "\n".join(
            "\n".join(ix.to_asm() for ix in entry.ixs)
            for entry in self.code_sections()
        )


__all__ = [
    "ProgramType",
    "SectionHeaderType",
    "ProgramFlags",
    "ElfHeader",
    "ProgramHeader",
    "SectionHeader",
    "Instruction",
    "SectionHeaderEntry",
    "Program",
]
