"""
Custom exception hierarchy for Cadence.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

The engine functions in cadence.services raise these directly; they never
guess a fallback value for malformed input. Callers decide whether to
degrade (no highlighting, "streak unavailable") or surface the error.
"""
from __future__ import annotations

from datetime import date
from typing import Any

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

log = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class CadenceException(Exception):
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


class ParseError(CadenceException):
    """Malformed or calendar-invalid YYYY-MM-DD input."""
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "PARSE_ERROR"

    def __init__(self, raw: Any, reason: str = "expected YYYY-MM-DD"):
        super().__init__(
            message=f"Invalid calendar date {raw!r}: {reason}.",
            details={"value": str(raw), "reason": reason},
        )


class UnknownRuleKind(CadenceException):
    """Rule identifier outside the closed RecurrenceRule enumeration."""
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "UNKNOWN_RULE_KIND"

    def __init__(self, rule: Any):
        super().__init__(
            message=f"Unknown recurrence rule {rule!r}.",
            details={"rule": str(rule)},
        )


class InvalidWindow(CadenceException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_WINDOW"

    def __init__(self, start: date, end: date, reason: str = "end is before start"):
        super().__init__(
            message=f"Invalid window [{start}, {end}]: {reason}.",
            details={"start": str(start), "end": str(end), "reason": reason},
        )


class TaskNotFoundError(CadenceException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: int):
        super().__init__(
            message=f"Task {task_id} does not exist.",
            details={"task_id": task_id},
        )


class ActivityLogUnavailable(CadenceException):
    """The activity log could not be read; the streak is unknown, not zero."""
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STREAK_UNAVAILABLE"

    def __init__(self, user_id: str):
        super().__init__(
            message="Streak unavailable: the activity log could not be read.",
            details={"user_id": user_id},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def cadence_exception_handler(request: Request, exc: CadenceException) -> JSONResponse:
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
    log.exception("unhandled_exception", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
