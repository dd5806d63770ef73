"""Rich formatting helpers for the gitbatch CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from gitbatch.models.push import PushResult
    from gitbatch.models.tree import TreeEntry


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_push_result(result: PushResult, console: Console) -> None:
    """Display the outcome of a push."""
    if not result.commits:
        console.print(f"[dim]No changes; {escape(str(result.branch))} left at {result.base[:8]}.[/dim]")
        return

    verb = "Force-pushed" if result.forced else "Pushed"
    console.print(
        f"{verb} [cyan]{result.commit_count}[/cyan] commit(s) "
        f"([green]{result.files_changed}[/green] file(s)) to "
        f"[bold]{escape(str(result.branch))}[/bold]"
    )
    for sha in result.commits:
        console.print(f"  [yellow]{sha[:8]}[/yellow]")
    console.print(f"  {result.base[:8]}..{result.head[:8]}", style="dim")


def format_tree(entries: dict[str, TreeEntry], console: Console) -> None:
    """Display a flattened tree as a table."""
    if not entries:
        console.print("[dim]Empty tree.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Mode", style="cyan", width=6)
    table.add_column("Object", style="yellow", width=8)
    table.add_column("Path")

    for path in sorted(entries):
        entry = entries[path]
        table.add_row(entry.mode.value, entry.oid[:8], escape(path))

    console.print(table)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
