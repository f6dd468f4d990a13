"""
bpfscope -- eBPF/sBPF ELF Decoder
==================================

Decodes eBPF/sBPF ELF64 shared objects (the on-chain program format of
Solana-style runtimes) into immutable, structured values: the ELF header,
program and section headers, named section payloads and the decoded
instruction stream of the code section.  Every record can be encoded back
to bytes and every instruction rendered as assembly text.

Modules:
    - bpfscope.core.cursor: Bounds-checked little-endian reader
    - bpfscope.core.models: Pydantic data models and tag enumerations
    - bpfscope.core.engine: Program assembler and engine facade
    - bpfscope.parsers: ELF record and instruction codecs, opcode table
    - bpfscope.analyzers: Disassembler and section resolver
    - bpfscope.output: Structured view, JSON and console rendering
    - bpfscope.cli: Click-based command-line interface

References:
    - TIS Committee. (1995). ELF Specification, Version 1.2.
    - Linux kernel documentation. BPF Instruction Set Architecture.
    - Solana Labs. sBPF instruction set reference.
"""

from bpfscope.core.errors import (
    CursorError,
    DecodeError,
    InvalidDataLength,
    InvalidImmediate,
    InvalidOpcode,
    InvalidProgramType,
    InvalidSectionHeaderType,
    InvalidString,
    NonStandardElfHeader,
)
from bpfscope.core.models import (
    ElfHeader,
    Instruction,
    Program,
    ProgramFlags,
    ProgramHeader,
    ProgramType,
    SectionHeader,
    SectionHeaderEntry,
    SectionHeaderType,
)
from bpfscope.parsers.opcodes import OpCode
from bpfscope.core.engine import DecoderEngine, decode_program, encode
from bpfscope.analyzers.disassembler import disassemble
from bpfscope.output.report import structured_view

__version__ = "1.0.0"
__tool_name__ = "bpfscope"

__all__ = [
    "CursorError",
    "DecodeError",
    "DecoderEngine",
    "ElfHeader",
    "Instruction",
    "InvalidDataLength",
    "InvalidImmediate",
    "InvalidOpcode",
    "InvalidProgramType",
    "InvalidSectionHeaderType",
    "InvalidString",
    "NonStandardElfHeader",
    "OpCode",
    "Program",
    "ProgramFlags",
    "ProgramHeader",
    "ProgramType",
    "SectionHeader",
    "SectionHeaderEntry",
    "SectionHeaderType",
    "decode_program",
    "disassemble",
    "encode",
    "structured_view",
]
