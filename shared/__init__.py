"""
bpfscope Shared Module
=======================

Configuration, structured logging and console presentation used by the
bpfscope decoder and its command line.
"""

from shared.config import ScopeConfig, get_config
from shared.console import ScopeConsole
from shared.logger import ScopeLogger

__all__ = [
    "ScopeConfig",
    "ScopeConsole",
    "ScopeLogger",
    "get_config",
]
