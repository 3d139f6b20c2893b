"""Pydantic schemas and the response envelope for the HTTP API layer."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TemperatureReadingIn(CamelModel):
    """A reading as submitted by a device."""

    device_name: str = Field(..., description="Name of the reporting device.")
    location: Optional[str] = Field(default=None, description="Physical location label.")
    temperature: Optional[float] = Field(
        default=None, description="Measured value; null marks a missing reading."
    )
    time: Optional[str] = Field(
        default=None,
        description="Local measurement time, ISO-8601 without offset (e.g. 2025-01-09T07:01:00).",
    )


class TemperatureReadingOut(CamelModel):
    """Transport form of a stored reading."""

    device_name: str
    location: Optional[str] = None
    temperature: Optional[float] = None
    time: Optional[str] = None
    actual_time: Optional[datetime] = None


class PageableRequest(CamelModel):
    """Page/size/sort parameters as received from the client."""

    size: int = 10
    page: int = 1
    sort_by: Optional[str] = "createdAt"
    sort_direction: Optional[str] = "desc"


class PageableResponse(CamelModel):
    has_next_record: bool = False
    total_count: int = 0
    size: int = 0
    page: int = 0


class TemperatureRecordList(PageableResponse):
    temperature_records: List[TemperatureReadingOut] = Field(default_factory=list)


class ResponseEnvelope(CamelModel):
    """Documented shape of every response body."""

    response_code: int
    response_message: str
    data: Any = None


class EnvelopeResponse(JSONResponse):
    """JSON response that writes NaN averages as the ``NaN`` token."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=True,
            indent=None,
            separators=(",", ":"),
        ).encode("utf-8")


def build_envelope(response_code: int, response_message: str, data: Any = None) -> Dict[str, Any]:
    return {
        "responseCode": response_code,
        "responseMessage": response_message,
        "data": jsonable_encoder(data, by_alias=True),
    }
