"""
bpfscope Parsers
=================

Wire codecs for the ELF header, program and section headers and sBPF
instructions, plus the opcode table.
"""
