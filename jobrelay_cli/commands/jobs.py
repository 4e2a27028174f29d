"""Job Commands - enqueue jobs and inspect the queue client"""

import json
from datetime import datetime

import typer
from rich.console import Console

from ..client.base import JobRelayError
from ..client.endpoints import JobRelayClient
from ..utils.config_manager import config
from ..utils.formatting import (
    create_enqueue_result_panel,
    create_stats_table,
    print_error,
    print_success,
    print_warning,
)

console = Console()
app = typer.Typer(name="jobs", help="Enqueue background jobs")


def _parse_payload(raw: str | None) -> dict | None:
    if raw is None:
        return None
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"Payload is not valid JSON: {e}") from None
    if not isinstance(payload, dict):
        raise typer.BadParameter("Payload must be a JSON object")
    return payload


def _parse_run_at(raw: str | None) -> str | None:
    if raw is None:
        return None
    try:
        return datetime.fromisoformat(raw).isoformat()
    except ValueError:
        raise typer.BadParameter(f"run-at must be an ISO-8601 timestamp: {raw}") from None


@app.command("enqueue")
def enqueue(
    task_identifier: str = typer.Argument(..., help="Backend task handler name"),
    payload: str | None = typer.Option(
        None, "--payload", "-p", help="Job payload as a JSON object"
    ),
    run_at: str | None = typer.Option(
        None, "--run-at", help="Earliest run time (ISO-8601)"
    ),
    max_attempts: int | None = typer.Option(
        None, "--max-attempts", min=1, help="Execution attempts hint for the backend"
    ),
):
    """📨 Enqueue a job"""
    parsed_payload = _parse_payload(payload)
    parsed_run_at = _parse_run_at(run_at)
    if max_attempts is None:
        max_attempts = config.get("jobs.default_max_attempts")

    try:
        with JobRelayClient() as client:
            result = client.enqueue_job(
                task_identifier,
                payload=parsed_payload,
                run_at=parsed_run_at,
                max_attempts=max_attempts,
            )
    except JobRelayError as e:
        if e.details:
            console.print(create_enqueue_result_panel(task_identifier, e.details))
        print_error(f"Failed to enqueue job: {e}")
        raise typer.Exit(1) from None

    console.print(create_enqueue_result_panel(task_identifier, result))
    if result.get("strategy_used") == "rpc":
        print_success(f"Enqueued {task_identifier}")
    else:
        print_warning(
            f"Enqueued {task_identifier} via {result.get('strategy_used')} fallback"
        )


@app.command("stats")
def stats():
    """📊 Show queue client statistics"""
    try:
        with JobRelayClient() as client:
            data = client.get_queue_stats()
    except JobRelayError as e:
        print_error(f"Failed to get queue stats: {e}")
        raise typer.Exit(1) from None

    console.print(create_stats_table(data))
