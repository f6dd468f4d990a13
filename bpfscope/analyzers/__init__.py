"""
bpfscope Analyzers
===================

Instruction disassembly and section name/payload resolution.
"""

from bpfscope.analyzers.disassembler import disassemble, disassemble_all
from bpfscope.analyzers.sections import resolve_sections

__all__ = [
    "disassemble",
    "disassemble_all",
    "resolve_sections",
]
