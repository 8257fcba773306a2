"""
RFC 9457 Problem Details error handlers.

Ensures ALL error responses from the API use the ``application/problem+json``
content type with a structured body matching ``ProblemDetail``. Handles:
- FastAPI validation errors (422)
- Explicit HTTPException raises (4xx/5xx)
- Domain errors from the vote pipeline (409 duplicate, 5xx storage/upstream)
- Unhandled exceptions (500)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from countryvotes.api.schemas.common import ProblemDetail
from countryvotes.constants import ERROR_CODES
from countryvotes.exceptions import CountryVotesError

logger = logging.getLogger(__name__)

_PROBLEM_JSON = "application/problem+json"

_HTTP_STATUS_CODES = {
    404: ERROR_CODES["NOT_FOUND"],
    429: ERROR_CODES["RATE_LIMIT_EXCEEDED"],
}


def _problem_response(
    status: int,
    title: str,
    detail: str | None = None,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a RFC 9457 Problem Details JSON response."""
    body = ProblemDetail(
        type="about:blank",
        title=title,
        status=status,
        detail=detail,
        instance=instance,
    )
    content = body.model_dump(exclude_none=True)
    if extra:
        content.update(extra)
    return JSONResponse(
        status_code=status,
        content=jsonable_encoder(content),
        media_type=_PROBLEM_JSON,
        headers=headers,
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic/FastAPI request validation errors (422)."""
    errors = exc.errors()
    detail_parts: list[str] = []
    fields: list[dict[str, str]] = []
    for err in errors:
        loc = [str(x) for x in err.get("loc", []) if x != "body"]
        msg = err.get("msg", "validation error")
        detail_parts.append(f"{' -> '.join(loc)}: {msg}")
        fields.append({"field": loc[-1] if loc else "unknown", "message": msg})

    return _problem_response(
        status=422,
        title="Validation Error",
        detail="; ".join(detail_parts),
        instance=str(request.url),
        extra={"code": ERROR_CODES["VALIDATION_ERROR"], "errors": fields},
    )


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle explicit HTTPException raises (any status code)."""
    code = _HTTP_STATUS_CODES.get(exc.status_code)
    return _problem_response(
        status=exc.status_code,
        title=exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        instance=str(request.url),
        extra={"code": code} if code else None,
        headers=getattr(exc, "headers", None),
    )


async def _domain_error_handler(
    request: Request, exc: CountryVotesError
) -> JSONResponse:
    """Map pipeline errors to their status; hide causes of server errors."""
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s", type(exc).__name__, request.method, request.url.path,
            exc_info=exc,
        )
        detail = None
    else:
        detail = exc.message

    return _problem_response(
        status=exc.status_code,
        title=exc.message if exc.status_code < 500 else "Internal Server Error",
        detail=detail,
        instance=str(request.url),
        extra={"code": exc.code},
    )


async def _generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle unhandled exceptions as 500 Internal Server Error.

    Logs the full traceback but returns a generic message to the client.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url)
    return _problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred. Check server logs for details.",
        instance=str(request.url),
        extra={"code": ERROR_CODES["INTERNAL_ERROR"]},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI application.

    Called once during app factory setup. FastAPI dispatches by exception
    type (most specific first), not registration order.
    """
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(CountryVotesError, _domain_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)  # type: ignore[arg-type]
