from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_average, render_missing_readings, render_record_page


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the temperature record service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("ingest")
def ingest_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON file holding an array of readings."
    ),
) -> None:
    """Submit a batch of readings."""
    state = _get_state(ctx)
    typer.echo(f"Submitting {file} to {state.config.base_url} ...")
    missing = state.client.ingest_file(file)
    typer.secho("Batch accepted.", fg=typer.colors.GREEN)
    typer.echo()
    render_missing_readings(missing)


@app.command("average")
def average_command(
    ctx: typer.Context,
    device_name: str = typer.Argument(..., help="Device to average."),
    date: str = typer.Argument(..., help="Calendar date, YYYY-MM-DD."),
    hour: int = typer.Argument(..., min=0, max=23, help="Hour of the day (0-23)."),
) -> None:
    """Show the average temperature of a device for one hour."""
    state = _get_state(ctx)
    average = state.client.average_temperature(device_name, date, hour)
    render_average(device_name, date, hour, average)


@app.command("list")
def list_command(
    ctx: typer.Context,
    device_name: Optional[str] = typer.Option(None, "--device-name", "-d", help="Only this device."),
    page: int = typer.Option(1, "--page", help="1-based page number."),
    size: int = typer.Option(10, "--size", help="Records per page."),
    sort_by: Optional[str] = typer.Option(None, "--sort-by", help="Field to sort by."),
    sort_direction: Optional[str] = typer.Option(None, "--sort-direction", help="asc or desc."),
) -> None:
    """List stored readings."""
    state = _get_state(ctx)
    payload = state.client.list_records(
        device_name=device_name,
        page=page,
        size=size,
        sort_by=sort_by,
        sort_direction=sort_direction,
    )
    render_record_page(payload or {})


@app.command("delete-all")
def delete_all_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Delete every stored reading."""
    state = _get_state(ctx)
    if not yes:
        typer.confirm("Delete all temperature records?", abort=True)
    message = state.client.delete_all()
    typer.secho(str(message), fg=typer.colors.GREEN)
