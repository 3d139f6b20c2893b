from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig

API_PREFIX = "/api/v1/temperatureRecord"


class ApiClient:
    """Minimal HTTP client for the temperature record service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def ingest_file(self, path: Path) -> Dict[str, str]:
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise typer.BadParameter(f"Could not read readings from {path}: {exc}") from exc
        if not isinstance(records, list):
            raise typer.BadParameter(f"{path} must contain a JSON array of readings.")
        return self._request("POST", "/processRecords", json=records) or {}

    def average_temperature(self, device_name: str, date: str, hour: int) -> float:
        params = {"deviceName": device_name, "date": date, "hour": hour}
        return self._request("GET", "/average-temperature", params=params)

    def list_records(
        self,
        device_name: Optional[str] = None,
        page: int = 1,
        size: int = 10,
        sort_by: Optional[str] = None,
        sort_direction: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "size": size}
        if sort_by:
            params["sortBy"] = sort_by
        if sort_direction:
            params["sortDirection"] = sort_direction
        if device_name:
            params["deviceName"] = device_name
            return self._request("GET", "/deviceName", params=params)
        return self._request("GET", "/all", params=params)

    def delete_all(self) -> str:
        return self._request("DELETE", "/all")

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, f"{API_PREFIX}{path}", **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            typer.secho(f"Could not reach {self._config.base_url}: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc
        # averages may be the non-standard NaN token, which json.loads accepts
        return response.json().get("data")

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("responseMessage")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

