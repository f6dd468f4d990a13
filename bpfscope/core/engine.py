"""
bpfscope Decode Engine
=======================

Assembles a complete :class:`~bpfscope.core.models.Program` from an ELF
byte buffer and wraps the pipeline in a configurable, logging facade.

Decode Pipeline:
    1. Read and validate the ELF header at offset 0
    2. Seek to ``e_phoff`` and read ``e_phnum`` program headers
    3. Seek to ``e_shoff`` and read ``e_shnum`` section headers
    4. Resolve section names and payloads against the string table
       at ``e_shstrndx``; decode the code section's instructions
    5. Assemble the immutable Program

:func:`decode_program` is pure: it neither logs nor reads configuration.
:class:`DecoderEngine` supplies configuration, file handling and logging
for the command line and other embedding applications.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from shared.config import ScopeConfig
from shared.logger import ScopeLogger

from bpfscope.analyzers.sections import DEFAULT_LABEL, TEXT_LABEL, resolve_sections
from bpfscope.core.cursor import ByteCursor
from bpfscope.core.errors import DecodeError
from bpfscope.core.models import (
    ElfHeader,
    Instruction,
    Program,
    ProgramHeader,
    SectionHeader,
)
from bpfscope.parsers.elf_parser import (
    encode_elf_header,
    encode_program_header,
    encode_section_header,
    read_elf_header,
    read_program_header,
    read_section_header,
)
from bpfscope.parsers.instruction import StreamErrorHandler, encode_instruction


# ---------------------------------------------------------------------------
# Program Assembler
# ---------------------------------------------------------------------------

def decode_program(
    data: bytes,
    *,
    fallback_label: str = DEFAULT_LABEL,
    code_label: str = TEXT_LABEL,
    lenient_code_stream: bool = True,
    on_stream_error: Optional[StreamErrorHandler] = None,
) -> Program:
    """Decode a complete ELF image.

    Args:
        data: The whole file.
        fallback_label: Label for section names that are not valid UTF-8.
        code_label: Label of the section whose payload is decoded as code.
        lenient_code_stream: Stop the code stream quietly at the first
            bad instruction instead of raising.
        on_stream_error: Called with ``(offset, error)`` when the code
            stream stops early.

    Returns:
        The decoded Program.

    Raises:
        DecodeError: Any structural failure; no partial Program is returned.
    """
    cur = ByteCursor(data)
    elf_header = read_elf_header(cur)

    cur.seek(elf_header.e_phoff)
    program_headers = [read_program_header(cur) for _ in range(elf_header.e_phnum)]

    cur.seek(elf_header.e_shoff)
    section_headers = [read_section_header(cur) for _ in range(elf_header.e_shnum)]

    entries = resolve_sections(
        section_headers,
        data,
        elf_header.e_shstrndx,
        fallback_label=fallback_label,
        code_label=code_label,
        lenient=lenient_code_stream,
        on_stream_error=on_stream_error,
    )

    return Program(
        elf_header=elf_header,
        program_headers=tuple(program_headers),
        section_headers=tuple(section_headers),
        section_header_entries=tuple(entries),
    )


# ---------------------------------------------------------------------------
# Generic encoder
# ---------------------------------------------------------------------------

_ENCODERS = (
    (ElfHeader, encode_elf_header),
    (ProgramHeader, encode_program_header),
    (SectionHeader, encode_section_header),
    (Instruction, encode_instruction),
)


def encode(value: ElfHeader | ProgramHeader | SectionHeader | Instruction) -> bytes:
    """Encode any wire model to its byte form.

    Raises:
        TypeError: *value* has no wire encoding.
    """
    for model, encoder in _ENCODERS:
        if isinstance(value, model):
            return encoder(value)
    raise TypeError(f"cannot encode {type(value).__name__}")


# ---------------------------------------------------------------------------
# DecoderEngine
# ---------------------------------------------------------------------------

class DecoderEngine:
    """Configured, logging front end to :func:`decode_program`.

    Usage::

        engine = DecoderEngine()
        program = engine.decode_file("/path/to/program.so")
        print(program.assembly())
    """

    def __init__(
        self,
        config: ScopeConfig | None = None,
        logger: ScopeLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: bpfscope configuration.  Defaults are used if not provided.
            logger: Logger instance.  One is built from *config* if not provided.
        """
        self._config: ScopeConfig = config or ScopeConfig()
        self._logger: ScopeLogger = logger or ScopeLogger.from_config(
            "engine", self._config
        )

    @property
    def config(self) -> ScopeConfig:
        return self._config

    def decode(self, data: bytes, source: str = "<memory>") -> Program:
        """Decode *data* using the configured labels and stream policy.

        Raises:
            DecodeError: Propagated unchanged from the decoder.
        """
        dec = self._config.decoder

        def _stream_stopped(offset: int, exc: DecodeError) -> None:
            self._logger.warning(
                "Code stream in %s stopped at byte %d: %s",
                source, offset, exc,
                offset=offset,
            )

        with self._logger.operation("decode_program"):
            self._logger.info("Decoding %s (%d bytes)", source, len(data))
            with self._logger.timed(f"decode {source}"):
                try:
                    program = decode_program(
                        data,
                        fallback_label=dec.fallback_label,
                        code_label=dec.code_section_label,
                        lenient_code_stream=dec.lenient_code_stream,
                        on_stream_error=_stream_stopped,
                    )
                except DecodeError as exc:
                    self._logger.error("Decode of %s failed: %s", source, exc)
                    raise

            self._logger.debug(
                "Program headers: %d | Section headers: %d | Instructions: %d",
                len(program.program_headers),
                len(program.section_headers),
                sum(len(e.ixs) for e in program.section_header_entries),
            )
        return program

    def decode_file(self, file_path: str | Path) -> Program:
        """Read *file_path* and decode it.

        Raises:
            FileNotFoundError: The file does not exist.
            ValueError: The file exceeds ``decoder.max_file_size``.
            DecodeError: The contents are not a decodable program.
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {file_path}")

        file_size = path.stat().st_size
        max_size = self._config.decoder.max_file_size
        if file_size > max_size:
            msg = f"File too large: {file_size:,} bytes (max: {max_size:,} bytes)"
            self._logger.error(msg)
            raise ValueError(msg)

        return self.decode(path.read_bytes(), source=str(path))


__all__ = ["decode_program", "encode", "DecoderEngine"]
