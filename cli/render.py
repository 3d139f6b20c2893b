from __future__ import annotations

import math
from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_missing_readings(missing: Dict[str, str]) -> None:
    echo_heading("Missing Readings")
    if not missing:
        typer.echo("No missing readings reported.")
        return
    for device_name, message in sorted(missing.items()):
        typer.echo(f"  - {device_name}: {message}")


def render_average(device_name: str, date: str, hour: int, average: float | None) -> None:
    echo_heading("Average Temperature")
    echo_key_values([("device_name", device_name), ("date", date), ("hour", hour)])
    if average is None or math.isnan(average):
        typer.echo("average: no readings in this hour")
    else:
        typer.echo(f"average: {average:.2f}")


def render_record_page(payload: Dict[str, Any]) -> None:
    echo_heading("Temperature Records")
    records = payload.get("temperatureRecords") or []
    if records:
        for record in records:
            typer.echo(
                f"  - {record.get('deviceName')} @ {record.get('location')}: "
                f"{record.get('temperature')} at {record.get('time')}"
            )
    else:
        typer.echo("No records found.")

    typer.echo()
    echo_heading("Pagination")
    echo_key_values(
        [
            ("page", payload.get("page")),
            ("size", payload.get("size")),
            ("total_count", payload.get("totalCount")),
            ("has_next_record", payload.get("hasNextRecord")),
        ]
    )
