"""
Custom exception hierarchy for DailyFlow.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class DailyFlowException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class MobileRequiredError(DailyFlowException):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "MOBILE_REQUIRED"

    def __init__(self):
        super().__init__(message="Mobile is required.")


class MissingIdentityError(DailyFlowException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "MISSING_IDENTITY"

    def __init__(self, header: str):
        super().__init__(
            message="Missing mobile header.",
            details={"header": header},
        )


class UserNotFoundError(DailyFlowException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "USER_NOT_FOUND"

    def __init__(self, mobile: str):
        super().__init__(
            message="User not found.",
            details={"mobile": mobile},
        )


class StorageUnavailableError(DailyFlowException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STORAGE_UNAVAILABLE"

    def __init__(self, operation: str):
        super().__init__(
            message=f"Failed to {operation}.",
            details={"operation": operation},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def dailyflow_exception_handler(
    request: Request, exc: DailyFlowException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("%s %s failed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
