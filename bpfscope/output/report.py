"""
bpfscope Structured Report
===========================

Builds the structured view of a decoded :class:`Program`: a plain,
JSON-serialisable mapping with four keys, ``elf_header``,
``program_headers``, ``section_headers`` and
``section_header_entries``.

Rendering rules:
    - ELF header integers stay integers; the magic is shown as a lossy
      UTF-8 string (``"\\x7fELF"``) and the padding as a list of ints.
    - Tag fields render as their label (``PT_LOAD``, ``SHT_STRTAB``);
      program flags render as their integer value.
    - Each section entry has ``label``, ``offset`` and ``data`` (list of
      byte values).  ``ixs`` holds one assembly line per instruction and
      is omitted when there are none; ``utf8`` is omitted when absent or
      empty.

An instruction that cannot be disassembled (an endian conversion with an
unsupported width) raises :class:`~bpfscope.core.errors.InvalidImmediate`.
"""

from __future__ import annotations

import json
from typing import Any

from bpfscope.core.models import (
    ElfHeader,
    Program,
    ProgramHeader,
    SectionHeader,
    SectionHeaderEntry,
)


def _elf_header_view(h: ElfHeader) -> dict[str, Any]:
    return {
        "ei_magic": h.ei_magic.decode("utf-8", errors="replace"),
        "ei_class": h.ei_class,
        "ei_data": h.ei_data,
        "ei_version": h.ei_version,
        "ei_osabi": h.ei_osabi,
        "ei_abiversion": h.ei_abiversion,
        "ei_pad": list(h.ei_pad),
        "e_type": h.e_type,
        "e_machine": h.e_machine,
        "e_version": h.e_version,
        "e_entry": h.e_entry,
        "e_phoff": h.e_phoff,
        "e_shoff": h.e_shoff,
        "e_flags": h.e_flags,
        "e_ehsize": h.e_ehsize,
        "e_phentsize": h.e_phentsize,
        "e_phnum": h.e_phnum,
        "e_shentsize": h.e_shentsize,
        "e_shnum": h.e_shnum,
        "e_shstrndx": h.e_shstrndx,
    }


def _program_header_view(ph: ProgramHeader) -> dict[str, Any]:
    return {
        "p_type": ph.p_type.label,
        "p_flags": int(ph.p_flags),
        "p_offset": ph.p_offset,
        "p_vaddr": ph.p_vaddr,
        "p_paddr": ph.p_paddr,
        "p_filesz": ph.p_filesz,
        "p_memsz": ph.p_memsz,
        "p_align": ph.p_align,
    }


def _section_header_view(sh: SectionHeader) -> dict[str, Any]:
    return {
        "sh_name": sh.sh_name,
        "sh_type": sh.sh_type.label,
        "sh_flags": sh.sh_flags,
        "sh_addr": sh.sh_addr,
        "sh_offset": sh.sh_offset,
        "sh_size": sh.sh_size,
        "sh_link": sh.sh_link,
        "sh_info": sh.sh_info,
        "sh_addralign": sh.sh_addralign,
        "sh_entsize": sh.sh_entsize,
    }


def _entry_view(entry: SectionHeaderEntry) -> dict[str, Any]:
    view: dict[str, Any] = {
        "label": entry.label,
        "offset": entry.offset,
        "data": list(entry.data),
    }
    if entry.ixs:
        view["ixs"] = [ix.to_asm() for ix in entry.ixs]
    if entry.utf8:
        view["utf8"] = entry.utf8
    return view


def structured_view(program: Program) -> dict[str, Any]:
    """Return the JSON-ready structured view of *program*."""
    return {
        "elf_header": _elf_header_view(program.elf_header),
        "program_headers": [_program_header_view(p) for p in program.program_headers],
        "section_headers": [_section_header_view(s) for s in program.section_headers],
        "section_header_entries": [
            _entry_view(e) for e in program.section_header_entries
        ],
    }


def to_json(program: Program, indent: int | None = 2) -> str:
    """Serialise :func:`structured_view` as a JSON document."""
    return json.dumps(structured_view(program), indent=indent, ensure_ascii=True)


__all__ = ["structured_view", "to_json"]
