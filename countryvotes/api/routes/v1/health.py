"""
Subsystem inventory health endpoint.

Each check is wrapped in try/except -- the health endpoint NEVER crashes
regardless of backend availability. A down subsystem is reported as
unhealthy, not as a 500 error.

Subsystems:
    1. database       -- async SELECT 1
    2. redis          -- PING (rate limiter backend)
    3. country_cache  -- live entry count after an expiry sweep
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from countryvotes import __version__
from countryvotes.api.deps import get_cache, get_db, get_redis
from countryvotes.api.schemas.health import HealthResponse, SubsystemStatus
from countryvotes.api.services.cache_service import TTLCacheStore

logger = logging.getLogger(__name__)

router = APIRouter()


async def _check_database(db: AsyncSession) -> SubsystemStatus:
    """Attempt async SELECT 1."""
    now = datetime.now(timezone.utc)
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        return SubsystemStatus(
            name="database", healthy=True, detail="Database OK", checked_at=now
        )
    except Exception as exc:
        logger.warning("Health check: database unhealthy: %s", exc)
        return SubsystemStatus(
            name="database", healthy=False, detail=str(exc)[:200], checked_at=now
        )


async def _check_redis(redis_client: aioredis.Redis) -> SubsystemStatus:
    """Attempt PING on Redis."""
    now = datetime.now(timezone.utc)
    try:
        if await redis_client.ping():
            return SubsystemStatus(
                name="redis", healthy=True, detail="Redis PONG", checked_at=now
            )
        return SubsystemStatus(
            name="redis",
            healthy=False,
            detail="Redis unreachable, rate limiting disabled",
            checked_at=now,
        )
    except Exception as exc:
        logger.warning("Health check: redis unhealthy: %s", exc)
        return SubsystemStatus(
            name="redis", healthy=False, detail=str(exc)[:200], checked_at=now
        )


def _check_country_cache(cache: TTLCacheStore) -> SubsystemStatus:
    now = datetime.now(timezone.utc)
    stats = cache.stats()
    return SubsystemStatus(
        name="country_cache",
        healthy=True,
        detail=f"{stats.size} entries cached",
        checked_at=now,
    )


def _derive_status(subsystems: list[SubsystemStatus]) -> str:
    """Derive aggregate status from individual subsystem statuses.

    - "healthy": all subsystems healthy
    - "degraded": some unhealthy but the database is still up
    - "unhealthy": the database is down
    """
    unhealthy = [s for s in subsystems if not s.healthy]
    if not unhealthy:
        return "healthy"

    db_status = next((s for s in subsystems if s.name == "database"), None)
    if db_status and not db_status.healthy:
        return "unhealthy"

    return "degraded"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Subsystem health inventory",
    description="Reports database, Redis and cache status. No authentication required.",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    redis_client: aioredis.Redis = Depends(get_redis),
    cache: TTLCacheStore = Depends(get_cache),
) -> HealthResponse:
    subsystems = [
        await _check_database(db),
        await _check_redis(redis_client),
        _check_country_cache(cache),
    ]

    return HealthResponse(
        status=_derive_status(subsystems),
        subsystems=subsystems,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )
