"""
Rich terminal output helpers for CLI.

Provides functions for printing lookup results, cache statistics and
status messages using the Rich library.
"""

from datetime import datetime
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mojangcache.core.models import (
    Failed,
    LookupKind,
    LookupResult,
    Provenance,
)

# Console instance for all output
console = Console()


def get_provenance_style(provenance: Provenance) -> str:
    """Get Rich style string for a provenance."""
    if provenance == Provenance.CACHE_HIT:
        return "green"
    return "cyan"


def format_age(seconds: float | None) -> str:
    """Format an age in seconds as a short human string."""
    if seconds is None:
        return "-"
    if seconds < 60:
        return f"{seconds:.0f}s"
    if seconds < 3600:
        return f"{seconds / 60:.0f}m"
    return f"{seconds / 3600:.1f}h"


def print_result(kind: LookupKind, key: str, result: LookupResult, now: datetime) -> None:
    """Print a single lookup result.

    Args:
        kind: Lookup kind.
        key: Requested key.
        result: Result returned by the lookup service.
        now: Current time, used to show the entry age.
    """
    if isinstance(result, Failed):
        print_error(f"Lookup for {key} failed: {result}")
        if result.reason.is_transient:
            print_info("Nothing was cached. Try again later.")
        return

    style = get_provenance_style(result.provenance)
    subtitle = (
        f"[{style}]{result.provenance.value}[/] "
        f"[dim]established {result.established_at:%Y-%m-%d %H:%M:%S} UTC "
        f"({format_age((now - result.established_at).total_seconds())} ago)[/]"
    )

    if result.value is None:
        body = Text("No such profile", style="yellow")
    elif kind == LookupKind.NAME_TO_UUID:
        body = Text(result.value, style="bold")
    else:
        body = Text()
        body.append("value: ", style="bold")
        body.append(_truncate(result.value.value, 60))
        body.append("\nsignature: ", style="bold")
        body.append(_truncate(result.value.signature, 60) or "-")

    console.print()
    console.print(Panel(body, title=f"[bold]{key}[/]", subtitle=subtitle))


def print_stats(stats: dict[str, Any]) -> None:
    """Print durable cache statistics.

    Args:
        stats: Output of ``DurableStore.stats()``.
    """
    table = Table(
        title="Cache Statistics",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Table", style="dim")
    table.add_column("Rows", justify="right")
    table.add_column("Negatives", justify="right")
    table.add_column("Oldest", justify="right")

    max_rows = stats["max_rows"]
    for kind_value, info in stats["kinds"].items():
        rows = info["rows"]
        rows_style = "red" if rows >= max_rows else "white"
        table.add_row(
            kind_value,
            info["table"],
            Text(f"{rows:,}", style=rows_style),
            f"{info['negative_rows']:,}",
            format_age(info["oldest_age_seconds"]),
        )

    console.print()
    console.print(table)
    console.print(f"  Database: {stats['db_path']}")
    console.print(f"  Size: {stats['db_size_bytes'] / 1024:.1f} KB")
    console.print(f"  Row limit per kind: {max_rows:,}")


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[cyan]Info:[/] {message}")
