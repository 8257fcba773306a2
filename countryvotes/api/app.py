"""
FastAPI application factory.

``create_app()`` builds the fully configured application with:
- Lifespan: logging setup, DB init/shutdown, metadata cache and HTTP client
- CORS and access-log middleware
- RFC 9457 error handlers
- Versioned router at ``/api/v1`` plus a bare ``/health`` liveness probe

Start with::

    uvicorn countryvotes.api.app:create_app --factory
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import aiohttp
from fastapi import FastAPI

from countryvotes import __version__
from countryvotes.api.deps import close_redis
from countryvotes.api.errors import register_error_handlers
from countryvotes.api.middleware.cors import configure_cors
from countryvotes.api.middleware.request_logging import configure_request_logging
from countryvotes.api.services.cache_service import TTLCacheStore
from countryvotes.db.engine import close_db, create_schema, init_db
from countryvotes.logging_config import setup_logging
from countryvotes.restcountries_client import RestCountriesClient
from countryvotes.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _build_lifespan(settings: Settings):  # noqa: ANN202
    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan: startup and shutdown hooks.

        Startup:
          1. Configure structured logging
          2. Initialize the async database engine (and schema in dev)
          3. Build the metadata cache and REST Countries client

        Shutdown:
          1. Close the HTTP session, Redis client and engine pool
        """
        # 1. Logging
        setup_logging(level=settings.log_level, json_format=settings.log_json)
        logger.info("Country votes API starting (env=%s)", settings.environment)

        # 2. Database
        init_db(settings.database_url)
        if settings.db_auto_create:
            await create_schema()

        # 3. Cache + lookup client, owned by this app instance
        app.state.cache = TTLCacheStore(maxsize=settings.cache_maxsize)
        http_session = aiohttp.ClientSession(
            headers={"User-Agent": f"countryvotes/{__version__}"}
        )
        app.state.countries_client = RestCountriesClient(
            http_session,
            base_url=settings.rest_countries_api,
            timeout=settings.country_lookup_timeout,
        )

        yield

        logger.info("Country votes API shutting down")
        await http_session.close()
        await close_redis()
        await close_db()

    return _lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application.

    This is the factory function for uvicorn::

        uvicorn countryvotes.api.app:create_app --factory

    Args:
        settings: Override the environment-derived settings (tests).

    Returns:
        Fully configured FastAPI instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Country Votes API",
        version=__version__,
        description=(
            "Cast one vote per email for a country and see the ranking, "
            "enriched with country metadata from REST Countries."
        ),
        lifespan=_build_lifespan(settings),
    )

    register_error_handlers(app)
    configure_cors(app, settings)
    if settings.is_development:
        configure_request_logging(app)

    @app.get("/health", tags=["health"], summary="Liveness probe")
    async def liveness() -> dict[str, str]:
        return {
            "status": "ok",
            "environment": settings.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    from countryvotes.api.routes.v1.router import v1_router

    app.include_router(v1_router, prefix="/api/v1")

    return app
