"""
Per-client fixed-window rate limiting via Redis atomic counters.

Uses ``INCR`` + ``EXPIRE`` for lock-free counting. Each client IP gets a
budget of ``rate_limit_requests`` per ``rate_limit_window`` seconds
(default 100 per minute). When exceeded, the request is rejected with
HTTP 429.

Fail-open policy: if Redis is unreachable, the request is allowed. A
broken rate limiter must never kill the API.

This is a FastAPI ``Depends()`` callable, NOT ASGI middleware.
"""

from __future__ import annotations

import logging
import time

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, Request

from countryvotes.api.deps import get_current_settings, get_redis
from countryvotes.settings import Settings

logger = logging.getLogger(__name__)


def client_identifier(request: Request) -> str:
    """Best-effort client address, honouring a single proxy hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


async def check_rate_limit(
    client_id: str,
    redis_client: aioredis.Redis,
    max_requests: int = 100,
    window_seconds: int = 60,
) -> None:
    """Check and increment the request count for a client in the current window.

    Uses Redis key ``ratelimit:{client_id}:{window_start}`` with atomic
    ``INCR`` + ``EXPIRE``. The EXPIRE is set only on the first increment
    (count == 1) to avoid extending the window on subsequent requests.

    Raises:
        HTTPException: 429 if the window budget is exceeded.
    """
    window = int(time.time()) // window_seconds
    key = f"ratelimit:{client_id}:{window}"
    try:
        count = await redis_client.incr(key)
        if count == 1:
            await redis_client.expire(key, window_seconds)
        if count > max_requests:
            logger.warning(
                "Rate limit exceeded for %s: %d/%d",
                client_id,
                count,
                max_requests,
            )
            raise HTTPException(
                status_code=429,
                detail="Too many requests. Please try again later.",
                headers={"Retry-After": str(window_seconds)},
            )
    except HTTPException:
        raise  # Re-raise our own 429 -- don't swallow it
    except Exception as exc:
        # Fail-open: Redis down -> allow the request
        logger.warning(
            "Rate limit check failed for %s (allowing request): %s",
            client_id,
            exc,
        )


async def rate_limit(
    request: Request,
    redis_client: aioredis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_current_settings),
) -> None:
    """Router-level dependency applying the configured per-client budget."""
    await check_rate_limit(
        client_identifier(request),
        redis_client,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window,
    )
