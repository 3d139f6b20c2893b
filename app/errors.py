"""Typed application errors and their conversion to the response envelope."""

from __future__ import annotations

import logging
from enum import Enum
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.schemas import EnvelopeResponse, build_envelope

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body. Please check your request data."
VALIDATION_FAILED_MESSAGE = "Validation failed for request."
DATABASE_ERROR_MESSAGE = "Database error occurred."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


class ResponseCode(Enum):
    """Response codes carried in the envelope, mirroring HTTP statuses."""

    SUCCESSFUL = HTTPStatus.OK
    BAD_REQUEST = HTTPStatus.BAD_REQUEST
    AUTHENTICATION_ERROR = HTTPStatus.UNAUTHORIZED
    RECORD_NOT_FOUND = HTTPStatus.NOT_FOUND
    ALREADY_EXIST = HTTPStatus.CONFLICT
    ERROR_PROCESSING = HTTPStatus.INTERNAL_SERVER_ERROR
    TIMEOUT_ERROR = HTTPStatus.GATEWAY_TIMEOUT

    @property
    def code(self) -> int:
        return self.value.value

    @property
    def message(self) -> str:
        return self.value.name


class GeneralError(Exception):
    """Error carrying the response code and message to report to the client."""

    def __init__(self, response_code: int, response_message: str) -> None:
        super().__init__(response_message)
        self.response_code = response_code
        self.response_message = response_message


def failure_response(response_code: int, response_message: str) -> EnvelopeResponse:
    logger.info(
        "Returning failure response: %s",
        response_message,
        extra={"response_code": response_code},
    )
    return EnvelopeResponse(
        status_code=response_code,
        content=build_envelope(response_code, response_message),
    )


async def general_error_handler(_request: Request, exc: GeneralError) -> EnvelopeResponse:
    return failure_response(exc.response_code, exc.response_message)


async def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> EnvelopeResponse:
    errors = exc.errors()
    logger.error("Request validation failed: %s", errors)
    body_error = any(error.get("loc", ("",))[0] == "body" for error in errors)
    message = INVALID_BODY_MESSAGE if body_error else VALIDATION_FAILED_MESSAGE
    return failure_response(ResponseCode.BAD_REQUEST.code, message)


async def database_error_handler(_request: Request, exc: SQLAlchemyError) -> EnvelopeResponse:
    logger.error("Database error: %s", exc, exc_info=exc)
    return failure_response(ResponseCode.ALREADY_EXIST.code, DATABASE_ERROR_MESSAGE)


async def http_error_handler(
    _request: Request, exc: StarletteHTTPException
) -> EnvelopeResponse:
    return failure_response(exc.status_code, str(exc.detail))


async def unexpected_error_handler(_request: Request, exc: Exception) -> EnvelopeResponse:
    logger.exception("Unhandled error while processing request", exc_info=exc)
    return failure_response(ResponseCode.ERROR_PROCESSING.code, UNEXPECTED_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GeneralError, general_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
