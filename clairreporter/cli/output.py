"""Rich output helpers — run summary display."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from clairreporter.core.driver import RunSummary

console = Console()


def count_style(kind: str, count: int) -> str:
    if not count:
        return "dim"
    return {
        "created": "green",
        "duplicates": "yellow",
        "failed": "red",
    }.get(kind, "white")


def summary_table(summary: RunSummary) -> Table:
    table = Table(
        title=f"Findings for {summary.repo} ({summary.packages} packages)",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Emitter", style="bold")
    table.add_column("Attempted", justify="right")
    table.add_column("Created", justify="right")
    table.add_column("Open duplicates", justify="right")
    table.add_column("Failed", justify="right")

    for name, stats in summary.emitters.items():
        table.add_row(
            name,
            str(stats.attempted),
            Text(str(stats.created), style=count_style("created", stats.created)),
            Text(str(stats.duplicates), style=count_style("duplicates", stats.duplicates)),
            Text(str(stats.failed), style=count_style("failed", stats.failed)),
        )

    if summary.skipped_unmapped:
        table.caption = (
            f"{summary.skipped_unmapped} package(s) skipped: repository has no team mapping"
        )
    return table
