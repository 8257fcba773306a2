"""
Access logging middleware.

One log line per request with method, path, status and wall-clock
duration. Responses with status >= 400 are logged at WARNING so they
stand out; everything else at INFO. The fields are also attached as
``extra`` so the JSON formatter emits them as structured keys.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response

logger = logging.getLogger("countryvotes.access")


def configure_request_logging(app: FastAPI) -> None:
    """Attach the access-log middleware to *app*."""

    @app.middleware("http")
    async def _log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 1),
            },
        )
        return response
