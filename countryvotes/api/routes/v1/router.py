"""
V1 API router -- aggregates all v1 sub-routers.

Included in the app at ``/api/v1`` prefix by ``create_app()``. Vote and
country routes share the per-client rate limit; health is exempt.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from countryvotes.api.middleware.rate_limit import rate_limit
from countryvotes.api.routes.v1.countries import router as countries_router
from countryvotes.api.routes.v1.health import router as health_router
from countryvotes.api.routes.v1.votes import router as votes_router

v1_router = APIRouter()

# Health is public and never rate limited
v1_router.include_router(health_router, tags=["health"])

v1_router.include_router(
    votes_router,
    prefix="/votes",
    tags=["votes"],
    dependencies=[Depends(rate_limit)],
)

v1_router.include_router(
    countries_router,
    prefix="/countries",
    tags=["countries"],
    dependencies=[Depends(rate_limit)],
)
