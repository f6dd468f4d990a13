"""
bpfscope CLI -- sBPF ELF Decoder
=================================

Click-based command-line interface.  Decodes one eBPF/sBPF ELF object and
prints it to stdout as the structured JSON view (default), as assembly
text or as Rich tables.  Diagnostics go to stderr; no files are written.

Usage::

    # Structured view as JSON
    bpfscope program.so

    # Assembly text of the code section
    bpfscope program.so --asm

    # Rich tables
    bpfscope program.so --table

    # Custom configuration and debug logging
    bpfscope program.so --config bpfscope.toml --verbose

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys

import click
from rich.markup import escape

from shared.config import ScopeConfig
from shared.console import ScopeConsole
from shared.logger import ScopeLogger

from bpfscope.core.engine import DecoderEngine
from bpfscope.core.errors import DecodeError
from bpfscope.output.console import ProgramConsoleOutput
from bpfscope.output.report import to_json


@click.command("bpfscope")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--asm", "-a",
    "asm_output",
    is_flag=True,
    default=False,
    help="Print the disassembly of the code section.",
)
@click.option(
    "--json/--table",
    "json_output",
    default=True,
    help="Structured JSON view (default) or Rich tables.",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="TOML configuration file.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging on stderr.",
)
def bpfscope_cli(
    path: str,
    asm_output: bool,
    json_output: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """bpfscope -- decode an eBPF/sBPF ELF shared object.

    PATH is the ELF file to decode.

    Examples:

    \b
        python -m bpfscope program.so
        python -m bpfscope program.so --asm
        python -m bpfscope program.so --table
    """
    err_console = ScopeConsole(stderr=True)

    try:
        config = ScopeConfig.load(config_path)
    except FileNotFoundError as exc:
        err_console.error(escape(str(exc)))
        sys.exit(1)
    except ValueError as exc:
        err_console.error(f"Invalid configuration: {escape(str(exc))}")
        sys.exit(1)

    logger = ScopeLogger(
        "cli",
        log_level="DEBUG" if verbose or config.global_settings.debug else "WARNING",
        log_file=config.global_settings.log_file,
        json_logs=config.global_settings.log_json,
    )
    engine = DecoderEngine(config=config, logger=logger)

    try:
        program = engine.decode_file(path)
    except DecodeError as exc:
        err_console.error(f"Decode failed: {escape(str(exc))}")
        sys.exit(1)
    except (OSError, ValueError) as exc:
        err_console.error(escape(str(exc)))
        sys.exit(1)

    if asm_output:
        try:
            click.echo(program.assembly())
        except DecodeError as exc:
            err_console.error(f"Disassembly failed: {escape(str(exc))}")
            sys.exit(1)
        return

    if json_output:
        try:
            click.echo(to_json(program, indent=config.decoder.json_indent))
        except DecodeError as exc:
            err_console.error(f"Disassembly failed: {escape(str(exc))}")
            sys.exit(1)
        return

    ProgramConsoleOutput(console=ScopeConsole()).display(program, source=path)


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for ``bpfscope`` and ``python -m bpfscope``."""
    bpfscope_cli()


if __name__ == "__main__":
    main()
