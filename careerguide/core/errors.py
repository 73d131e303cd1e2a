"""
Error handling - exception types and FastAPI exception handlers.

Every error leaves the API as the standard envelope:
    {"success": false, "message": "..."}

Taxonomy:
- 400 validation / conflict (missing fields, duplicate email, duplicate application)
- 401 authentication (missing/invalid/expired token or credentials)
- 403 authorization (role mismatch)
- 404 not found
- 500 store failures and unexpected faults (detail logged, not returned)
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from careerguide.db.base import StoreError
from careerguide.utils.helpers import format_response

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """HTTPException that can carry extra top-level envelope fields."""

    def __init__(self, status_code: int, message: str, headers: Optional[dict] = None, **extra: Any):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.extra = extra


def describe_validation_errors(errors: list) -> str:
    """
    Turn pydantic errors into a single client message.

    Missing fields are listed together; otherwise the first error is reported.
    """
    missing = []
    for err in errors:
        if err.get("type") == "missing":
            loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
            if loc:
                missing.append(".".join(loc))
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc) or "request"
    reason = first.get("msg", "invalid value")
    if reason.startswith("Value error, "):
        reason = reason[len("Value error, "):]
    return f"Invalid {field}: {reason}"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    extra = getattr(exc, "extra", {}) or {}
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=format_response(False, message, **extra),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=format_response(False, describe_validation_errors(exc.errors())),
    )


async def store_exception_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.exception("Store error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=format_response(False, "Database error"))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=format_response(False, "Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StoreError, store_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
