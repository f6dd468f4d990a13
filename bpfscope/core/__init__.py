"""
bpfscope Core Module
=====================

Error taxonomy, byte cursor, pydantic data models and the decode engine.
"""
