"""
bpfscope Module Entry Point
============================

Allows running the bpfscope CLI via: python -m bpfscope
"""

from bpfscope.cli import main

if __name__ == "__main__":
    main()
