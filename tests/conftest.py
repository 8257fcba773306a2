"""
Shared fixtures: an isolated in-memory SQLite database per test, a
controllable clock for cache expiry, and canned REST Countries payloads.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from countryvotes.db.models import Base


class FakeClock:
    """Monotonic stand-in that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as s:
        yield s


def make_payload(
    common: str,
    official: str,
    cca2: str,
    cca3: str,
    capital: list[str] | None = None,
    region: str = "Europe",
    subregion: str | None = None,
) -> dict[str, Any]:
    """Country record in the shape the client returns after validation."""
    return {
        "name": {"common": common, "official": official},
        "cca2": cca2,
        "cca3": cca3,
        "capital": capital or [],
        "region": region,
        "subregion": subregion,
    }


PAYLOADS: dict[str, dict[str, Any]] = {
    "US": make_payload(
        "United States",
        "United States of America",
        "US",
        "USA",
        ["Washington, D.C."],
        "Americas",
        "North America",
    ),
    "DE": make_payload(
        "Germany", "Federal Republic of Germany", "DE", "DEU", ["Berlin"],
        "Europe", "Western Europe",
    ),
    "FR": make_payload(
        "France", "French Republic", "FR", "FRA", ["Paris"], "Europe", "Western Europe"
    ),
    "BR": make_payload(
        "Brazil", "Federative Republic of Brazil", "BR", "BRA", ["Brasília"],
        "Americas", "South America",
    ),
}
