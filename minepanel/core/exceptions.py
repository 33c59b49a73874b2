"""
Error taxonomy and global exception handlers.

Handlers prevent stack-trace leakage to clients.

Every failure is rendered as ``{"error": <category>, "detail": ..., "success": false}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class PanelError(Exception):
    """Base class for errors that map to a stable category and HTTP status."""

    status_code = 500
    category = "InternalFailure"

    def __init__(self, detail: str = "Internal server error") -> None:
        self.detail = detail
        super().__init__(detail)


class Unauthenticated(PanelError):
    status_code = 401
    category = "Unauthenticated"


class InvalidToken(PanelError):
    status_code = 401
    category = "InvalidToken"


class Forbidden(PanelError):
    status_code = 403
    category = "Forbidden"


class ValidationFailed(PanelError):
    status_code = 400
    category = "ValidationFailed"


class NotFound(PanelError):
    status_code = 404
    category = "NotFound"


class Conflict(PanelError):
    status_code = 409
    category = "Conflict"


class PolicyDenied(PanelError):
    status_code = 403
    category = "PolicyDenied"


class UpstreamUnreachable(PanelError):
    status_code = 502
    category = "UpstreamUnreachable"


class InternalFailure(PanelError):
    status_code = 500
    category = "InternalFailure"


_STATUS_CATEGORIES = {
    400: "ValidationFailed",
    401: "Unauthenticated",
    403: "Forbidden",
    404: "NotFound",
    405: "MethodNotAllowed",
    409: "Conflict",
    429: "RateLimited",
    502: "UpstreamUnreachable",
}


def _error_body(category: str, detail: object) -> dict:
    return {"error": category, "detail": detail, "success": False}


async def _panel_error_handler(_request: Request, exc: PanelError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.category, exc.detail),
        headers=headers,
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    category = _STATUS_CATEGORIES.get(exc.status_code, "InternalFailure")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(category, exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={**_error_body("ValidationFailed", "Invalid input"), "fields": fields},
    )


async def _rate_limit_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    retry_after = int(getattr(exc, "retry_after", 60) or 60)
    return JSONResponse(
        status_code=429,
        content=_error_body("RateLimited", "Too many attempts, try again later"),
        headers={"Retry-After": str(retry_after)},
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content=_error_body("Conflict", "Database constraint violation"),
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content=_error_body("InternalFailure", "Internal database error"),
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content=_error_body("InternalFailure", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(PanelError, _panel_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
