"""Rich-powered diagnostic output for gochanged.

Everything here goes to stderr so stdout stays a clean list of packages.
"""

from __future__ import annotations

import logging

from rich.console import Console as RichConsole
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table


class Console:
    """Terminal diagnostics for gochanged using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole(stderr=True)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}", highlight=False)

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}", highlight=False)

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {escape(message)}", highlight=False)

    def show_stats(self, stats: dict) -> None:
        """Display run statistics in a table."""
        table = Table(title="Change Detection Statistics", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right", style="cyan")

        table.add_row("Primary packages", str(stats.get("primary", 0)))
        table.add_row("Auxiliary packages", str(stats.get("auxiliary", 0)))
        table.add_row("Total Edges", str(stats.get("total_edges", 0)))
        if "changed_files" in stats:
            table.add_row("Changed files", str(stats["changed_files"]))
            table.add_row("Changed directories", str(stats.get("changed_dirs", 0)))
            table.add_row("Dependency changes", str(stats.get("dependency_changes", 0)))
            table.add_row("Propagation passes", str(stats.get("passes", 0)))
        table.add_row("Affected packages", str(stats.get("affected", 0)))

        edge_types = stats.get("edge_types", {})
        if edge_types:
            table.add_section()
            for kind, count in sorted(edge_types.items(), key=lambda x: -x[1]):
                table.add_row(f"  {kind} edges", str(count))

        self.console.print(table)

    def log_handler(self) -> logging.Handler:
        return RichHandler(console=self.console, show_path=False)
