"""Error handling utilities and custom exceptions."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "app_error",
        http_status: int = status.HTTP_400_BAD_REQUEST,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "message": self.message}


class BadRequestError(AppError):
    def __init__(self, message: str, *, code: str = "bad_request") -> None:
        super().__init__(message, code=code, http_status=status.HTTP_400_BAD_REQUEST)


class InvalidAudioError(BadRequestError):
    """Audio payload is missing, not base64, or decodes to nothing."""

    def __init__(self, message: str = "Audio data is required") -> None:
        super().__init__(message, code="invalid_audio")


class NotFoundError(AppError):
    def __init__(self, message: str = "Meeting not found", *, code: str = "not_found") -> None:
        super().__init__(message, code=code, http_status=status.HTTP_404_NOT_FOUND)


class ForbiddenError(AppError):
    def __init__(self, message: str, *, code: str = "forbidden") -> None:
        super().__init__(message, code=code, http_status=status.HTTP_403_FORBIDDEN)


class StatusTransitionError(AppError):
    """Meeting status may only move forward: active -> archived -> deleted."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            f"Cannot change meeting status from {current!r} to {requested!r}",
            code="invalid_status_transition",
            http_status=status.HTTP_409_CONFLICT,
        )
        self.current = current
        self.requested = requested


class ProviderError(Exception):
    """An external provider call failed or returned an unusable payload.

    Raised and consumed inside the adapters; it never reaches callers.
    """


class EmailDeliveryError(Exception):
    """Sending a single email failed."""


class ErrorResponse(BaseModel):
    error: str
    message: str


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error(f"{exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    details: list[dict[str, Any]] = jsonable_encoder(exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "validation_error",
            "message": "Invalid request payload",
            "details": details,
        },
    )
