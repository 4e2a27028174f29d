"""Job Relay CLI - Main Entry Point"""

import typer
from rich.console import Console
from rich.panel import Panel

from . import __version__
from .client.base import JobRelayError
from .client.endpoints import JobRelayClient
from .commands import config, jobs
from .utils.config_manager import config as config_manager
from .utils.formatting import print_error, print_info

console = Console()

# Create main Typer app
app = typer.Typer(
    name="jobrelay",
    help="📨 Job Relay - enqueue background jobs with retries",
    rich_markup_mode="rich",
)

# Add command subapps
app.add_typer(jobs.app, name="jobs")
app.add_typer(config.app, name="config")


@app.command()
def status():
    """📊 Check relay and backend connectivity"""
    base_url = config_manager.get("api.base_url")
    print_info(f"Checking connection to: {base_url}")

    try:
        with JobRelayClient(base_url) as client:
            health = client.health_check()
    except JobRelayError as e:
        print_error(f"Failed to connect: {e}")
        console.print(Panel(
            f"🚫 [red]Connection Failed[/red]\n\n"
            f"Make sure the Job Relay API is running at:\n"
            f"[blue]{base_url}[/blue]\n\n"
            f"You can update the API URL with:\n"
            f"[cyan]jobrelay config set api.base_url <url>[/cyan]",
            title="Connection Error",
            border_style="red"
        ))
        raise typer.Exit(1) from None

    backend = health.get("backend", {})
    backend_state = (
        "[green]connected[/green]" if backend.get("connected") else "[red]unreachable[/red]"
    )
    console.print(Panel(
        f"🚀 [green]Connected Successfully![/green]\n\n"
        f"• Version: [cyan]{health.get('version', 'unknown')}[/cyan]\n"
        f"• Environment: [yellow]{health.get('environment', 'unknown')}[/yellow]\n"
        f"• Backend: [magenta]{backend.get('kind', 'unknown')}[/magenta] {backend_state}\n"
        f"• API URL: [blue]{base_url}[/blue]",
        title="System Status",
        border_style="green" if health.get("ok") else "yellow"
    ))


@app.command()
def version():
    """📎 Show CLI version information"""
    console.print(Panel(
        f"📨 [bold cyan]Job Relay CLI[/bold cyan]\n\n"
        f"• Version: [green]{__version__}[/green]\n"
        f"• Type: [yellow]Command Line Interface[/yellow]",
        title="Version Info",
        border_style="cyan"
    ))


if __name__ == "__main__":
    app()
