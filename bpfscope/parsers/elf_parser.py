"""
ELF Structural Codecs
======================

Decode and encode the three fixed-size ELF64 records an sBPF object
carries: the file header, program headers and section headers.

Unlike a general-purpose ELF reader, the header decoder accepts only the
single profile used by eBPF/sBPF shared objects -- ELF64, little-endian,
System V ABI, ``ET_DYN`` and machine ``EM_BPF`` or ``EM_SBPF``.  Anything
else is rejected with :class:`~bpfscope.core.errors.NonStandardElfHeader`;
there is no lenient mode.

Record sizes::

    ELF header       64 bytes
    Program header   56 bytes
    Section header   64 bytes

All integers are little-endian.  Decoders read from a
:class:`~bpfscope.core.cursor.ByteCursor` and advance it past the record;
encoders are the exact field-order inverse.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - Linux man page: elf(5).
"""

from __future__ import annotations

import struct

from bpfscope.core.cursor import ByteCursor
from bpfscope.core.errors import NonStandardElfHeader
from bpfscope.core.models import (
    ElfHeader,
    ProgramFlags,
    ProgramHeader,
    ProgramType,
    SectionHeader,
    SectionHeaderType,
)


# ---------------------------------------------------------------------------
# Accepted profile
# ---------------------------------------------------------------------------

EI_MAGIC: bytes = b"\x7fELF"
EI_CLASS: int = 0x02        # ELFCLASS64
EI_DATA: int = 0x01         # ELFDATA2LSB
EI_VERSION: int = 0x01      # EV_CURRENT
EI_OSABI: int = 0x00        # System V
EI_ABIVERSION: int = 0x00
EI_PAD: bytes = bytes(7)
E_TYPE: int = 0x03          # ET_DYN
E_MACHINE: int = 0xF7       # EM_BPF
E_MACHINE_SBPF: int = 0x107  # EM_SBPF
E_VERSION: int = 0x01

ACCEPTED_MACHINES: frozenset[int] = frozenset({E_MACHINE, E_MACHINE_SBPF})

# ---------------------------------------------------------------------------
# Record layouts
# ---------------------------------------------------------------------------

_ELF_HEADER = struct.Struct("<4sBBBBB7sHHIQQQIHHHHHH")
_PROGRAM_HEADER = struct.Struct("<IIQQQQQQ")
_SECTION_HEADER = struct.Struct("<IIQQQQIIQQ")

ELF_HEADER_SIZE: int = _ELF_HEADER.size          # 64
PROGRAM_HEADER_SIZE: int = _PROGRAM_HEADER.size  # 56
SECTION_HEADER_SIZE: int = _SECTION_HEADER.size  # 64


# ---------------------------------------------------------------------------
# ELF header
# ---------------------------------------------------------------------------

def _check_profile(
    magic: bytes,
    ei_class: int,
    ei_data: int,
    ei_version: int,
    ei_osabi: int,
    ei_abiversion: int,
    ei_pad: bytes,
    e_type: int,
    e_machine: int,
    e_version: int,
) -> None:
    mismatches: list[str] = []
    if magic != EI_MAGIC:
        mismatches.append(f"magic={magic!r}")
    if ei_class != EI_CLASS:
        mismatches.append(f"class={ei_class}")
    if ei_data != EI_DATA:
        mismatches.append(f"data={ei_data}")
    if ei_version != EI_VERSION:
        mismatches.append(f"ident version={ei_version}")
    if ei_osabi != EI_OSABI:
        mismatches.append(f"osabi={ei_osabi}")
    if ei_abiversion != EI_ABIVERSION:
        mismatches.append(f"abiversion={ei_abiversion}")
    if ei_pad != EI_PAD:
        mismatches.append("padding not zero")
    if e_type != E_TYPE:
        mismatches.append(f"type={e_type}")
    if e_machine not in ACCEPTED_MACHINES:
        mismatches.append(f"machine=0x{e_machine:x}")
    if e_version != E_VERSION:
        mismatches.append(f"version={e_version}")
    if mismatches:
        raise NonStandardElfHeader(", ".join(mismatches))


def read_elf_header(cur: ByteCursor) -> ElfHeader:
    """Read and validate the ELF header at the cursor position.

    The identification block, type, machine and version are validated
    before the remaining fields are read.

    Raises:
        CursorError: The buffer ends inside the header.
        NonStandardElfHeader: A profile field holds an unsupported value.
    """
    ei_magic = cur.read_bytes(4)
    ei_class = cur.read_u8()
    ei_data = cur.read_u8()
    ei_version = cur.read_u8()
    ei_osabi = cur.read_u8()
    ei_abiversion = cur.read_u8()
    ei_pad = cur.read_bytes(7)
    e_type = cur.read_u16()
    e_machine = cur.read_u16()
    e_version = cur.read_u32()

    _check_profile(
        ei_magic, ei_class, ei_data, ei_version, ei_osabi,
        ei_abiversion, ei_pad, e_type, e_machine, e_version,
    )

    return ElfHeader(
        ei_magic=ei_magic,
        ei_class=ei_class,
        ei_data=ei_data,
        ei_version=ei_version,
        ei_osabi=ei_osabi,
        ei_abiversion=ei_abiversion,
        ei_pad=ei_pad,
        e_type=e_type,
        e_machine=e_machine,
        e_version=e_version,
        e_entry=cur.read_u64(),
        e_phoff=cur.read_u64(),
        e_shoff=cur.read_u64(),
        e_flags=cur.read_u32(),
        e_ehsize=cur.read_u16(),
        e_phentsize=cur.read_u16(),
        e_phnum=cur.read_u16(),
        e_shentsize=cur.read_u16(),
        e_shnum=cur.read_u16(),
        e_shstrndx=cur.read_u16(),
    )


def decode_elf_header(data: bytes) -> ElfHeader:
    """Decode an ELF header from the start of *data*."""
    return read_elf_header(ByteCursor(data))


def encode_elf_header(h: ElfHeader) -> bytes:
    """Encode *h* back into its 64-byte wire form."""
    return _ELF_HEADER.pack(
        h.ei_magic,
        h.ei_class,
        h.ei_data,
        h.ei_version,
        h.ei_osabi,
        h.ei_abiversion,
        h.ei_pad,
        h.e_type,
        h.e_machine,
        h.e_version,
        h.e_entry,
        h.e_phoff,
        h.e_shoff,
        h.e_flags,
        h.e_ehsize,
        h.e_phentsize,
        h.e_phnum,
        h.e_shentsize,
        h.e_shnum,
        h.e_shstrndx,
    )


# ---------------------------------------------------------------------------
# Program headers
# ---------------------------------------------------------------------------

def read_program_header(cur: ByteCursor) -> ProgramHeader:
    """Read one program header; flags are masked to their low three bits.

    Raises:
        CursorError: Fewer than 56 bytes remain.
        InvalidProgramType: ``p_type`` is not one of the eight defined types.
    """
    p_type = ProgramType.from_raw(cur.read_u32())
    p_flags = ProgramFlags.from_raw(cur.read_u32())
    return ProgramHeader(
        p_type=p_type,
        p_flags=p_flags,
        p_offset=cur.read_u64(),
        p_vaddr=cur.read_u64(),
        p_paddr=cur.read_u64(),
        p_filesz=cur.read_u64(),
        p_memsz=cur.read_u64(),
        p_align=cur.read_u64(),
    )


def decode_program_header(data: bytes) -> ProgramHeader:
    return read_program_header(ByteCursor(data))


def encode_program_header(ph: ProgramHeader) -> bytes:
    return _PROGRAM_HEADER.pack(
        int(ph.p_type),
        int(ph.p_flags),
        ph.p_offset,
        ph.p_vaddr,
        ph.p_paddr,
        ph.p_filesz,
        ph.p_memsz,
        ph.p_align,
    )


# ---------------------------------------------------------------------------
# Section headers
# ---------------------------------------------------------------------------

def read_section_header(cur: ByteCursor) -> SectionHeader:
    """Read one section header.

    Raises:
        CursorError: Fewer than 64 bytes remain.
        InvalidSectionHeaderType: ``sh_type`` is not a defined type.
    """
    sh_name = cur.read_u32()
    sh_type = SectionHeaderType.from_raw(cur.read_u32())
    return SectionHeader(
        sh_name=sh_name,
        sh_type=sh_type,
        sh_flags=cur.read_u64(),
        sh_addr=cur.read_u64(),
        sh_offset=cur.read_u64(),
        sh_size=cur.read_u64(),
        sh_link=cur.read_u32(),
        sh_info=cur.read_u32(),
        sh_addralign=cur.read_u64(),
        sh_entsize=cur.read_u64(),
    )


def decode_section_header(data: bytes) -> SectionHeader:
    return read_section_header(ByteCursor(data))


def encode_section_header(sh: SectionHeader) -> bytes:
    return _SECTION_HEADER.pack(
        sh.sh_name,
        int(sh.sh_type),
        sh.sh_flags,
        sh.sh_addr,
        sh.sh_offset,
        sh.sh_size,
        sh.sh_link,
        sh.sh_info,
        sh.sh_addralign,
        sh.sh_entsize,
    )


__all__ = [
    "EI_MAGIC", "EI_CLASS", "EI_DATA", "EI_VERSION", "EI_OSABI",
    "EI_ABIVERSION", "EI_PAD", "E_TYPE", "E_MACHINE", "E_MACHINE_SBPF",
    "E_VERSION", "ACCEPTED_MACHINES",
    "ELF_HEADER_SIZE", "PROGRAM_HEADER_SIZE", "SECTION_HEADER_SIZE",
    "read_elf_header", "decode_elf_header", "encode_elf_header",
    "read_program_header", "decode_program_header", "encode_program_header",
    "read_section_header", "decode_section_header", "encode_section_header",
]
