"""Shared fixtures: hex-literal ELF records and a small ELF image builder."""

from __future__ import annotations

from typing import Callable, Sequence

import pytest

from bpfscope.core.models import ElfHeader, ProgramHeader, SectionHeader


ELF_HEADER_HEX = (
    "7F454C460201010000000000000000000300F700010000007800000000000000"
    "4000000000000000900000000000000000000000400038000100400003000200"
)

PROGRAM_HEADER_HEX = (
    "0100000005000000780000000000000078000000000000007800000000000000"
    "080000000000000008000000000000000010000000000000"
)

SECTION_HEADER_HEX = (
    "07000000030000000000000000000000000000000000000080000000000000000A"
    "00000000000000000000000000000001000000000000000000000000000000"
)

# lddw r1, 0 ; exit
TEXT_HEX = "180100000000000000000000000000009500000000000000"

# One PT_LOAD segment, sections: null, .text (exit), .s (string table).
MINIMAL_ELF_HEX = (
    "7F454C460201010000000000000000000300F700010000007800000000000000"
    "4000000000000000900000000000000000000000400038000100400003000200"
    "0100000005000000780000000000000078000000000000007800000000000000"
    "0800000000000000080000000000000000100000000000009500000000000000"
    "002E74657874002E730000000000000000000000000000000000000000000000"
    "0000000000000000000000000000000000000000000000000000000000000000"
    "0000000000000000000000000000000001000000010000000600000000000000"
    "7800000000000000780000000000000008000000000000000000000000000000"
    "0400000000000000000000000000000007000000030000000000000000000000"
    "000000000000000080000000000000000A000000000000000000000000000000"
    "01000000000000000000000000000000"
)

# Entrypoint program: three segments, six sections including .dynamic,
# .dynsym, .dynstr and .shstrtab.
SAMPLE_ELF_HEX = (
    "7F454C460201010000000000000000000300F700010000002001000000000000"
    "4000000000000000280200000000000000000000400038000300400006000500"
    "0100000005000000200100000000000020010000000000002001000000000000"
    "3000000000000000300000000000000000100000000000000100000004000000"
    "C001000000000000C001000000000000C0010000000000003C00000000000000"
    "3C00000000000000001000000000000002000000060000005001000000000000"
    "5001000000000000500100000000000070000000000000007000000000000000"
    "0800000000000000000000000000000000000000000000000000000000000000"
    "0000000000000000000000000000000000000000000000000000000000000000"
    "7912A000000000007911182900000000B7000000010000002D21010000000000"
    "B70000000000000095000000000000001E000000000000000400000000000000"
    "0600000000000000C0010000000000000B000000000000001800000000000000"
    "0500000000000000F0010000000000000A000000000000000C00000000000000"
    "1600000000000000000000000000000000000000000000000000000000000000"
    "0000000000000000000000000000000000000000000000000100000012000100"
    "2001000000000000300000000000000000656E747279706F696E7400002E7465"
    "7874002E64796E737472002E64796E73796D002E64796E616D6963002E736873"
    "7472746162000000000000000000000000000000000000000000000000000000"
    "0000000000000000000000000000000000000000000000000000000000000000"
    "0000000000000000010000000100000006000000000000002001000000000000"
    "2001000000000000300000000000000000000000000000000800000000000000"
    "0000000000000000170000000600000003000000000000005001000000000000"
    "5001000000000000700000000000000004000000000000000800000000000000"
    "10000000000000000F0000000B0000000200000000000000C001000000000000"
    "C001000000000000300000000000000004000000010000000800000000000000"
    "180000000000000007000000030000000200000000000000F001000000000000"
    "F0010000000000000C0000000000000000000000000000000100000000000000"
    "0000000000000000200000000300000000000000000000000000000000000000"
    "FC010000000000002A0000000000000000000000000000000100000000000000"
    "0000000000000000"
)

SectionSpec = tuple[int, int, bytes]
ElfBuilder = Callable[..., bytes]


def build_elf(
    sections: Sequence[SectionSpec],
    *,
    shstrndx: int,
    program_headers: Sequence[ProgramHeader] = (),
    machine: int = 0xF7,
) -> bytes:
    """Lay out a little-endian ELF64 image.

    *sections* holds ``(sh_name, sh_type, payload)`` triples.  Payloads are
    packed back to back after the program headers and the section header
    table follows them.
    """
    ph_bytes = b"".join(ph.to_bytes() for ph in program_headers)
    base = 64 + len(ph_bytes)

    body = b""
    headers: list[SectionHeader] = []
    for sh_name, sh_type, payload in sections:
        headers.append(
            SectionHeader(
                sh_name=sh_name,
                sh_type=sh_type,
                sh_flags=0,
                sh_addr=0,
                sh_offset=base + len(body),
                sh_size=len(payload),
                sh_link=0,
                sh_info=0,
                sh_addralign=1,
                sh_entsize=0,
            )
        )
        body += payload

    header = ElfHeader(
        ei_magic=b"\x7fELF",
        ei_class=2,
        ei_data=1,
        ei_version=1,
        ei_osabi=0,
        ei_abiversion=0,
        ei_pad=bytes(7),
        e_type=3,
        e_machine=machine,
        e_version=1,
        e_entry=0,
        e_phoff=64,
        e_shoff=base + len(body),
        e_flags=0,
        e_ehsize=64,
        e_phentsize=56,
        e_phnum=len(program_headers),
        e_shentsize=64,
        e_shnum=len(headers),
        e_shstrndx=shstrndx,
    )
    return header.to_bytes() + ph_bytes + body + b"".join(sh.to_bytes() for sh in headers)


@pytest.fixture
def elf_header_bytes() -> bytes:
    return bytes.fromhex(ELF_HEADER_HEX)


@pytest.fixture
def program_header_bytes() -> bytes:
    return bytes.fromhex(PROGRAM_HEADER_HEX)


@pytest.fixture
def section_header_bytes() -> bytes:
    return bytes.fromhex(SECTION_HEADER_HEX)


@pytest.fixture
def text_bytes() -> bytes:
    return bytes.fromhex(TEXT_HEX)


@pytest.fixture
def minimal_elf() -> bytes:
    return bytes.fromhex(MINIMAL_ELF_HEX)


@pytest.fixture
def sample_elf() -> bytes:
    return bytes.fromhex(SAMPLE_ELF_HEX)


@pytest.fixture
def elf_builder() -> ElfBuilder:
    return build_elf


@pytest.fixture
def text_elf(text_bytes: bytes) -> bytes:
    """Null section, ``.text`` holding ``lddw r1, 0; exit``, string table."""
    strtab = b"\x00.text\x00.strtab\x00"
    return build_elf(
        [(0, 0, b""), (1, 1, text_bytes), (7, 3, strtab)],
        shstrndx=2,
    )
