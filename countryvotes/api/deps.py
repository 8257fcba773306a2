"""
FastAPI dependency injection providers.

Thin wrappers that adapt internal infrastructure (database sessions,
settings, Redis, the metadata cache and HTTP client) and assemble the
services from them. Keep this module free of business logic -- it's pure
plumbing.

The cache and the REST Countries client are built once in the app
lifespan and live on ``app.state``; nothing here holds them as module
globals. Tests swap any provider with ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator

import redis.asyncio as aioredis
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from countryvotes.api.services.aggregation_service import VoteAggregator
from countryvotes.api.services.cache_service import TTLCacheStore
from countryvotes.api.services.country_service import CountryService
from countryvotes.api.services.vote_service import VoteService
from countryvotes.db.engine import get_async_session
from countryvotes.db.vote_store import VoteStore
from countryvotes.restcountries_client import RestCountriesClient
from countryvotes.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Lazy-initialized on first access; only the rate limiter and health
# check talk to Redis.
_redis_client: aioredis.Redis | None = None


class NullRedis:
    """Noop Redis stub used when the real Redis server is unreachable.

    Every read returns None; every write is silently discarded. This lets
    the rate limiter fail open without branching on ``Optional``.
    """

    async def get(self, _key: str) -> None:
        return None

    async def incr(self, _key: str) -> int:
        return 0

    async def expire(self, _key: str, _ttl: int) -> None:
        return None

    async def ping(self) -> bool:
        return False

    async def aclose(self) -> None:
        return None


async def get_redis() -> aioredis.Redis:
    """Return a lazily-initialized async Redis client.

    On first call, connects to ``Settings.redis_url``. If the connection
    fails, returns a ``NullRedis`` stub so callers degrade gracefully.
    """
    global _redis_client  # noqa: PLW0603
    if _redis_client is not None:
        return _redis_client

    settings = get_settings()
    try:
        client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=2.0,
        )
        await client.ping()
        _redis_client = client
        logger.info("Redis connected: %s", settings.redis_url)
    except Exception as exc:
        logger.warning(
            "Redis unavailable (%s) -- rate limiting disabled: %s",
            settings.redis_url,
            exc,
        )
        _redis_client = NullRedis()  # type: ignore[assignment]

    return _redis_client  # type: ignore[return-value]


async def close_redis() -> None:
    """Gracefully close the Redis connection (call from app lifespan shutdown)."""
    global _redis_client  # noqa: PLW0603
    if _redis_client is not None:
        try:
            await _redis_client.aclose()
        except Exception as exc:
            logger.warning("Error closing Redis: %s", exc)
        _redis_client = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session with automatic commit/rollback.

    Usage::

        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async for session in get_async_session():
        yield session


def get_current_settings() -> Settings:
    """Return the cached settings singleton."""
    return get_settings()


def get_cache(request: Request) -> TTLCacheStore:
    """Return the application's metadata cache (built in the lifespan)."""
    return request.app.state.cache


def get_countries_client(request: Request) -> RestCountriesClient:
    return request.app.state.countries_client


# -----------------------------------------------------------------------
# Service assembly
# -----------------------------------------------------------------------


def get_vote_store(db: AsyncSession = Depends(get_db)) -> VoteStore:
    return VoteStore(db)


def get_vote_service(store: VoteStore = Depends(get_vote_store)) -> VoteService:
    return VoteService(store)


def get_vote_aggregator(store: VoteStore = Depends(get_vote_store)) -> VoteAggregator:
    return VoteAggregator(store)


def get_country_service(
    aggregator: VoteAggregator = Depends(get_vote_aggregator),
    cache: TTLCacheStore = Depends(get_cache),
    client: RestCountriesClient = Depends(get_countries_client),
    settings: Settings = Depends(get_current_settings),
) -> CountryService:
    return CountryService(
        aggregator=aggregator,
        cache=cache,
        client=client,
        cache_ttl=settings.country_cache_ttl,
    )
