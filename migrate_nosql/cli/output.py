"""Output formatting utilities for CLI."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table

console = Console()
error_console = Console(stderr=True)


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(data, default=str, indent=2))


def print_error(message: str, details: dict | None = None) -> None:
    """Print an error message."""
    error_console.print(f"[red]Error:[/red] {message}")
    if details:
        for key, value in details.items():
            error_console.print(f"  [dim]{key}:[/dim] {value}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def print_batch_result(summary: dict) -> None:
    """Print a batch summary as a table."""
    table = Table(title="Batch Result", show_header=True)
    table.add_column("Handled", style="white")
    table.add_column("Upgraded", style="green")
    table.add_column("Steps", style="cyan")
    table.add_column("Time (ms)", style="dim")
    table.add_row(
        str(summary["handled"]),
        str(summary["upgraded"]),
        str(summary["total"]),
        str(summary["duration_ms"]),
    )
    console.print(table)
