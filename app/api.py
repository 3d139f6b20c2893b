"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from app.errors import ResponseCode
from app.schemas import (
    EnvelopeResponse,
    PageableRequest,
    ResponseEnvelope,
    TemperatureReadingIn,
    build_envelope,
)
from services.records import TemperatureRecordService, build_default_service
from settings import get_settings

router = APIRouter(prefix="/api/v1/temperatureRecord", tags=["temperature records"])
health_router = APIRouter()

DELETE_ALL_MESSAGE = "All records deleted successfully."


def get_service() -> TemperatureRecordService:
    return build_default_service()


def get_pageable_request(
    size: int = Query(10, description="Records per page; values above the maximum are clamped."),
    page: int = Query(1, description="1-based page number."),
    sort_by: Optional[str] = Query("createdAt", alias="sortBy"),
    sort_direction: Optional[str] = Query("desc", alias="sortDirection"),
) -> PageableRequest:
    return PageableRequest(
        size=size, page=page, sort_by=sort_by, sort_direction=sort_direction
    )


def success_response(data: object) -> EnvelopeResponse:
    return EnvelopeResponse(
        status_code=status.HTTP_200_OK,
        content=build_envelope(
            ResponseCode.SUCCESSFUL.code, ResponseCode.SUCCESSFUL.message, data
        ),
    )


@router.post(
    "/processRecords",
    response_model=ResponseEnvelope,
    summary="Ingest a batch of readings and report missing ones per device.",
)
def process_records(
    records: List[TemperatureReadingIn] = Body(...),
    service: TemperatureRecordService = Depends(get_service),
) -> EnvelopeResponse:
    wait = get_settings().ingestion_await_persistence
    return success_response(service.process_records(records, wait=wait))


@router.get(
    "/average-temperature",
    response_model=ResponseEnvelope,
    summary="Average temperature of a device over one hour of a day.",
)
def average_temperature(
    device_name: str = Query(..., alias="deviceName"),
    day: date = Query(..., alias="date", description="Calendar date, YYYY-MM-DD."),
    hour: int = Query(..., ge=0, le=23),
    service: TemperatureRecordService = Depends(get_service),
) -> EnvelopeResponse:
    return success_response(service.calculate_average_temperature(device_name, day, hour))


@router.get(
    "/all",
    response_model=ResponseEnvelope,
    summary="Page through all stored readings.",
)
def get_all_records(
    pageable: PageableRequest = Depends(get_pageable_request),
    service: TemperatureRecordService = Depends(get_service),
) -> EnvelopeResponse:
    return success_response(service.get_all_records(pageable))


@router.get(
    "/deviceName",
    response_model=ResponseEnvelope,
    summary="Page through the readings of one device.",
)
def get_records_by_device_name(
    device_name: str = Query(..., alias="deviceName"),
    pageable: PageableRequest = Depends(get_pageable_request),
    service: TemperatureRecordService = Depends(get_service),
) -> EnvelopeResponse:
    return success_response(service.get_records_by_device_name(device_name, pageable))


@router.delete(
    "/all",
    response_model=ResponseEnvelope,
    summary="Delete every stored reading.",
)
def delete_all_records(
    service: TemperatureRecordService = Depends(get_service),
) -> EnvelopeResponse:
    service.delete_all_records()
    return success_response(f"{ResponseCode.SUCCESSFUL.code} {DELETE_ALL_MESSAGE}")


@health_router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
