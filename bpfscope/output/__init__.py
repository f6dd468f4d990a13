"""
bpfscope Output Module
=======================

Structured view, JSON document and Rich console rendering of a decoded
program.
"""

from bpfscope.output.console import ProgramConsoleOutput
from bpfscope.output.report import structured_view, to_json

__all__ = [
    "ProgramConsoleOutput",
    "structured_view",
    "to_json",
]
