"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from presentation details.
- Tables and panels can be reused by several commands.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import RunResult


def print_banner(console: Console, *, dry_run: bool) -> None:
    """Print the start banner; dry runs are flagged so nobody mistakes the output."""

    title = Text("jellyfin-cleaner", style="bold cyan")
    mode = Text("TEST MODE - nothing will be deleted", style="bold yellow") if dry_run else Text(
        "Watched media retention", style="dim"
    )
    body = Align.center(Text.assemble(title, "\n", mode), vertical="middle")
    console.print(Panel(body, border_style="yellow" if dry_run else "cyan", padding=(1, 4)))


def build_summary_table(result: RunResult) -> Table:
    summary = result.summary
    title = "Cleanup summary (test mode)" if result.dry_run else "Cleanup summary"
    table = Table(title=title)
    table.add_column("Outcome", style="cyan", no_wrap=True)
    table.add_column("Count", style="white", justify="right")
    table.add_row("Picked", str(summary.picked))
    table.add_row("Deleted", str(summary.deleted), style="green" if summary.deleted else None)
    table.add_row("Ignored", str(summary.ignored))
    table.add_row("Failed", str(summary.failed), style="red" if summary.failed else None)
    return table
