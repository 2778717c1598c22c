"""Human-readable console report for a finished run."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .logging_utils import console
from .models import RunReport


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]


def printable(text: str) -> str:
    """Escape lone surrogates so the text can be written to a UTF-8 stream."""
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


def print_summary(report: RunReport, label: str = "diagrams", out: Optional[Console] = None) -> None:
    out = out or console()
    table = Table(title=f"Mermaid validation: {escape(label)}", show_header=False)
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value", justify="right")
    table.add_row("Total", str(report.total))
    table.add_row("Valid", f"[green]{report.valid_count}[/]")
    table.add_row("Invalid", f"[red]{report.invalid_count}[/]" if report.invalid_count else "0")
    table.add_row("Success rate", f"{report.success_rate}%")
    out.print(table)


def print_valid(report: RunReport, out: Optional[Console] = None) -> None:
    out = out or console()
    valid = report.valid
    if not valid:
        return
    out.rule(f"[bold green]Now valid ({len(valid)})")
    for v in valid:
        out.print(f"✓ {escape(printable(v.title))} ({escape(printable(v.id))})", highlight=False)


def print_invalid(report: RunReport, limit: int = 500, out: Optional[Console] = None) -> None:
    """Title, id, truncated diagnostic and full source for every invalid outcome."""
    out = out or console()
    invalid = report.invalid
    if not invalid:
        return
    out.rule(f"[bold red]Invalid ({len(invalid)})")
    for b in invalid:
        out.print(f"\n[bold]--- {escape(printable(b.title))} ({escape(printable(b.id))}) ---[/]", highlight=False)
        # soft_wrap: long lines are emitted verbatim, never folded at the console width
        out.print(f"Error: {printable(truncate(b.diagnostic, limit))}", markup=False, highlight=False, soft_wrap=True)
        out.print(f"Source:\n{printable(b.source)}", markup=False, highlight=False, soft_wrap=True)


def print_report(
    report: RunReport,
    label: str = "diagrams",
    limit: int = 500,
    show_valid: bool = False,
    out: Optional[Console] = None,
) -> None:
    print_summary(report, label=label, out=out)
    if show_valid:
        print_valid(report, out=out)
    print_invalid(report, limit=limit, out=out)
