"""
Section Resolver
=================

Turns raw section headers into :class:`SectionHeaderEntry` values: a
name from the section-header string table, an owned copy of the payload,
decoded instructions for the code section and an advisory UTF-8
rendering of the payload.

Name resolution
---------------
Linkers share string-table bytes between names (``.rel.text`` may end in
the bytes of ``.text``), so a name cannot be delimited by scanning for the
NUL terminator alone.  Instead every section's ``sh_name`` offset, plus a
sentinel equal to the table size, is collected into a sorted set; a
name's bytes run from its own offset up to the next *distinct greater*
offset in that set.  Duplicate offsets therefore resolve to the same
label, and the trailing NUL is kept as part of the label.

A label whose bytes are not valid UTF-8 is replaced with a fallback
string rather than failing the decode.
"""

from __future__ import annotations

import bisect
from typing import Optional, Sequence

from bpfscope.core.errors import CursorError, InvalidString
from bpfscope.core.models import SectionHeader, SectionHeaderEntry
from bpfscope.parsers.instruction import StreamErrorHandler, decode_instructions


DEFAULT_LABEL: str = "default"
TEXT_LABEL: str = ".text\x00"


def section_payload(data: bytes, sh: SectionHeader) -> bytes:
    """Return ``data[sh_offset : sh_offset + sh_size]`` as an owned copy.

    Raises:
        CursorError: The range runs past the end of *data*.
    """
    start = sh.sh_offset
    end = start + sh.sh_size
    if end > len(data):
        raise CursorError(
            f"section payload [{start}, {end}) exceeds {len(data)}-byte buffer"
        )
    return bytes(data[start:end])


def name_boundaries(section_headers: Sequence[SectionHeader], table_size: int) -> list[int]:
    """Sorted distinct name offsets plus the table-size sentinel."""
    return sorted({sh.sh_name for sh in section_headers} | {table_size})


def resolve_label(
    strtab: bytes,
    name_offset: int,
    boundaries: Sequence[int],
    fallback: str = DEFAULT_LABEL,
) -> str:
    """Slice a name out of *strtab* using the next greater boundary.

    Raises:
        InvalidString: No boundary lies beyond *name_offset*.
    """
    idx = bisect.bisect_right(boundaries, name_offset)
    if idx >= len(boundaries):
        raise InvalidString(f"no string boundary after offset {name_offset}")
    end = boundaries[idx]
    try:
        return strtab[name_offset:end].decode("utf-8")
    except UnicodeDecodeError:
        return fallback


def try_utf8(payload: bytes) -> Optional[str]:
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError:
        return None


def build_entry(
    label: str,
    offset: int,
    payload: bytes,
    *,
    code_label: str = TEXT_LABEL,
    lenient: bool = True,
    on_stream_error: Optional[StreamErrorHandler] = None,
) -> SectionHeaderEntry:
    """Assemble one entry, decoding instructions when *label* is the code section.

    Raises:
        InvalidDataLength: The code payload is not a multiple of 8 bytes.
    """
    ixs = ()
    if label == code_label:
        ixs = tuple(
            decode_instructions(payload, lenient=lenient, on_error=on_stream_error)
        )
    return SectionHeaderEntry(
        label=label,
        offset=offset,
        data=payload,
        ixs=ixs,
        utf8=try_utf8(payload),
    )


def resolve_sections(
    section_headers: Sequence[SectionHeader],
    data: bytes,
    shstrndx: int,
    *,
    fallback_label: str = DEFAULT_LABEL,
    code_label: str = TEXT_LABEL,
    lenient: bool = True,
    on_stream_error: Optional[StreamErrorHandler] = None,
) -> list[SectionHeaderEntry]:
    """Resolve every section header against the file buffer.

    Args:
        section_headers: Headers in section-header-table order.
        data: The complete file buffer.
        shstrndx: Index of the section-name string table.
        fallback_label: Label used when a name is not valid UTF-8.
        code_label: Label identifying the executable code section.
        lenient: Stop the code stream quietly at the first bad instruction.
        on_stream_error: Notified when a lenient stream stops early.

    Returns:
        One entry per header, in the same order.

    Raises:
        InvalidString: *shstrndx* names no section, or a name cannot be
            bounded.
        CursorError: A payload range exceeds the buffer.
        InvalidDataLength: The code section length is not a multiple of 8.
    """
    if not 0 <= shstrndx < len(section_headers):
        raise InvalidString(
            f"string table index {shstrndx} out of range "
            f"({len(section_headers)} sections)"
        )

    strtab = section_payload(data, section_headers[shstrndx])
    boundaries = name_boundaries(section_headers, len(strtab))

    entries: list[SectionHeaderEntry] = []
    for sh in section_headers:
        label = resolve_label(strtab, sh.sh_name, boundaries, fallback_label)
        entries.append(
            build_entry(
                label,
                sh.sh_offset,
                section_payload(data, sh),
                code_label=code_label,
                lenient=lenient,
                on_stream_error=on_stream_error,
            )
        )
    return entries


__all__ = [
    "DEFAULT_LABEL",
    "TEXT_LABEL",
    "section_payload",
    "name_boundaries",
    "resolve_label",
    "try_utf8",
    "build_entry",
    "resolve_sections",
]
