"""Rich Formatting Utilities for CLI Output"""

from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()


def print_success(message: str):
    """Print success message with green styling"""
    console.print(f"[green]✓ {message}[/green]")


def print_error(message: str):
    """Print error message with red styling"""
    console.print(f"[red]✗ {message}[/red]")


def print_warning(message: str):
    """Print warning message with yellow styling"""
    console.print(f"[yellow]⚠ {message}[/yellow]")


def print_info(message: str):
    """Print info message with blue styling"""
    console.print(f"[blue]ℹ {message}[/blue]")


def create_enqueue_result_panel(task_identifier: str, result: dict[str, Any]) -> Panel:
    """Create formatted panel for an enqueue result"""
    succeeded = result.get("succeeded", False)
    strategy = result.get("strategy_used", "none")
    color = "green" if succeeded else "red"
    if succeeded and strategy != "rpc":
        color = "yellow"

    content = (
        f"• Task: [cyan]{task_identifier}[/cyan]\n"
        f"• Status: [{color}]{'enqueued' if succeeded else 'failed'}[/{color}]\n"
        f"• Strategy: [magenta]{strategy}[/magenta]\n"
        f"• Attempts: [yellow]{result.get('attempts_used', 0)}[/yellow]\n"
        f"• Elapsed: [blue]{result.get('elapsed_ms', 0)}ms[/blue]"
    )
    if result.get("error_code"):
        content += (
            f"\n• Error: [red]{result['error_code']}[/red]"
            f"\n  [dim]{result.get('error_message') or ''}[/dim]"
        )

    return Panel(content, title="Enqueue Result", border_style=color)


def create_stats_table(stats: dict[str, Any]) -> Table:
    """Create formatted table for queue client statistics"""
    table = Table(title="Queue Client", box=box.ROUNDED)

    table.add_column("Setting", justify="left", style="cyan", no_wrap=True)
    table.add_column("Value", justify="left", style="yellow")

    table.add_row("Status", stats.get("status", "unknown"))
    for key, value in stats.get("config", {}).items():
        table.add_row(key, str(value))
    table.add_row("Strategies", " → ".join(stats.get("strategies", [])) or "-")
    table.add_row("Reported", stats.get("timestamp", "-"))

    return table
