"""
bpfscope Console Output
========================

Rich-powered terminal display of a decoded :class:`Program`: an ELF
header panel, program and section header tables, the resolved section
list and a per-section disassembly listing.

Uses the :class:`~shared.console.ScopeConsole` abstraction for
consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from shared.console import ScopeConsole

from bpfscope.core.models import (
    ElfHeader,
    Program,
    ProgramHeader,
    SectionHeader,
    SectionHeaderEntry,
)


_MACHINE_NAMES: dict[int, str] = {
    0xF7: "EM_BPF",
    0x107: "EM_SBPF",
}


def _flags_colour(executable: bool, writable: bool) -> str:
    if executable and writable:
        return "bright_red"
    if executable:
        return "bright_green"
    if writable:
        return "yellow"
    return "dim"


# ---------------------------------------------------------------------------
# ProgramConsoleOutput
# ---------------------------------------------------------------------------

class ProgramConsoleOutput:
    """Rich terminal display for decoded sBPF programs.

    Usage::

        output = ProgramConsoleOutput()
        output.display(program)
    """

    def __init__(self, console: ScopeConsole | None = None) -> None:
        """Initialise the output renderer.

        Args:
            console: Optional ScopeConsole instance.  A new one is
                     created if not provided.
        """
        self._console: ScopeConsole = console or ScopeConsole()

    def display(self, program: Program, source: str = "") -> None:
        """Display the complete decoded program."""
        self._console.section("bpfscope -- sBPF ELF Decoder")

        self.display_header(program.elf_header, source)

        if program.program_headers:
            self.display_program_headers(list(program.program_headers))

        if program.section_headers:
            self.display_sections(
                list(program.section_headers),
                list(program.section_header_entries),
            )

        for entry in program.code_sections():
            self.display_disassembly(entry)

        self._console.divider()

    def display_header(self, h: ElfHeader, source: str = "") -> None:
        """Display the ELF header panel."""
        machine = _MACHINE_NAMES.get(h.e_machine, f"0x{h.e_machine:x}")
        lines: list[str] = []
        if source:
            lines.append(f"[bold]File:[/bold]          {escape(source)}")
        lines.extend(
            [
                f"[bold]Class:[/bold]         ELF64 (ei_class={h.ei_class})",
                f"[bold]Encoding:[/bold]      little-endian (ei_data={h.ei_data})",
                f"[bold]Type:[/bold]          ET_DYN ({h.e_type})",
                f"[bold]Machine:[/bold]       {machine}",
                f"[bold]Entry Point:[/bold]   0x{h.e_entry:x}",
                f"[bold]Flags:[/bold]         0x{h.e_flags:x}",
                f"[bold]Program Headers:[/bold] {h.e_phnum} @ 0x{h.e_phoff:x}",
                f"[bold]Section Headers:[/bold] {h.e_shnum} @ 0x{h.e_shoff:x}",
                f"[bold]String Table:[/bold]  index {h.e_shstrndx}",
            ]
        )
        panel = Panel(
            "\n".join(lines),
            title="[bold bright_cyan]ELF Header[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        )
        self._console.rich.print(panel)
        self._console.blank()

    def display_program_headers(self, headers: list[ProgramHeader]) -> None:
        self._console.section("Program Headers")

        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        tbl.add_column("#", style="dim", width=4, justify="right")
        tbl.add_column("Type", style="bold")
        tbl.add_column("Flags")
        tbl.add_column("Offset", justify="right")
        tbl.add_column("VAddr", justify="right")
        tbl.add_column("FileSz", justify="right")
        tbl.add_column("MemSz", justify="right")
        tbl.add_column("Align", justify="right")

        for i, ph in enumerate(headers):
            colour = _flags_colour(ph.p_flags.executable, ph.p_flags.writable)
            tbl.add_row(
                str(i),
                ph.p_type.label,
                f"[{colour}]{ph.p_flags}[/{colour}]",
                f"0x{ph.p_offset:x}",
                f"0x{ph.p_vaddr:x}",
                f"{ph.p_filesz:,}",
                f"{ph.p_memsz:,}",
                f"0x{ph.p_align:x}",
            )

        self._console.rich.print(tbl)
        self._console.blank()

    def display_sections(
        self,
        headers: list[SectionHeader],
        entries: list[SectionHeaderEntry],
    ) -> None:
        """Display section headers alongside their resolved names."""
        self._console.section("Sections")

        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        tbl.add_column("#", style="dim", width=4, justify="right")
        tbl.add_column("Name", style="bold", min_width=12)
        tbl.add_column("Type")
        tbl.add_column("Offset", justify="right")
        tbl.add_column("Size", justify="right")
        tbl.add_column("Addr", justify="right")
        tbl.add_column("Flags", justify="right")
        tbl.add_column("Instructions", justify="right")

        for i, (sh, entry) in enumerate(zip(headers, entries)):
            tbl.add_row(
                str(i),
                escape(entry.name) or "<unnamed>",
                sh.sh_type.label,
                f"0x{sh.sh_offset:x}",
                f"{sh.sh_size:,}",
                f"0x{sh.sh_addr:x}",
                f"0x{sh.sh_flags:x}",
                str(len(entry.ixs)) if entry.ixs else "",
            )

        self._console.rich.print(tbl)
        self._console.blank()

    def display_disassembly(self, entry: SectionHeaderEntry) -> None:
        """Display the instruction listing of one code section."""
        self._console.section(f"Disassembly of {escape(entry.name)}")

        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_edge=False,
            padding=(0, 1),
        )
        tbl.add_column("Offset", style="scope.offset", justify="right")
        tbl.add_column("Bytes", style="dim")
        tbl.add_column("Instruction", style="scope.mnemonic")

        pos = entry.offset
        for ix in entry.ixs:
            raw = ix.to_bytes()
            tbl.add_row(f"0x{pos:x}", raw.hex(" "), escape(ix.to_asm()))
            pos += len(raw)

        self._console.rich.print(tbl)
        self._console.blank()


__all__ = ["ProgramConsoleOutput"]
