"""
End-to-end tests for the HTTP surface.

Drives the FastAPI app through httpx's ASGI transport. The database is an
in-memory SQLite engine, Redis is the NullRedis stub, and the metadata
client is a mock -- nothing leaves the process.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from countryvotes.api.app import create_app
from countryvotes.api.deps import (
    NullRedis,
    get_cache,
    get_countries_client,
    get_current_settings,
    get_db,
    get_redis,
    get_vote_aggregator,
)
from countryvotes.api.services.aggregation_service import VoteAggregator
from countryvotes.api.services.cache_service import TTLCacheStore
from countryvotes.exceptions import AggregationFailedError, UpstreamUnavailableError
from countryvotes.restcountries_client import RestCountriesClient
from countryvotes.settings import Settings

from tests.conftest import PAYLOADS


async def _fetch(code: str) -> dict:
    if code not in PAYLOADS:
        raise UpstreamUnavailableError(code, "HTTP 404")
    return PAYLOADS[code]


def _build_app(session_factory, settings: Settings, redis_client=None):
    app = create_app(settings)

    async def _override_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    cache = TTLCacheStore()
    client = MagicMock(spec=RestCountriesClient)
    client.fetch_country = AsyncMock(side_effect=_fetch)
    redis_client = redis_client or NullRedis()

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_countries_client] = lambda: client
    app.dependency_overrides[get_redis] = lambda: redis_client
    app.dependency_overrides[get_current_settings] = lambda: settings
    app.state.test_client = client
    return app


@pytest_asyncio.fixture
async def app(session_factory):
    return _build_app(session_factory, Settings(environment="testing"))


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _post_vote(client: httpx.AsyncClient, name: str, email: str, country: str):
    return await client.post(
        "/api/v1/votes", json={"name": name, "email": email, "country": country}
    )


class TestVotes:
    @pytest.mark.asyncio
    async def test_create_vote_returns_201_camel_case(self, client) -> None:
        resp = await _post_vote(client, "  Ana ", "ANA@Example.com", "br")

        assert resp.status_code == 201
        body = resp.json()
        assert body["name"] == "Ana"
        assert body["email"] == "ana@example.com"
        assert body["country"] == "BR"
        assert isinstance(body["id"], int)
        assert "createdAt" in body

    @pytest.mark.asyncio
    async def test_duplicate_email_returns_409_problem(self, client) -> None:
        await _post_vote(client, "Ana", "ana@example.com", "BR")
        resp = await _post_vote(client, "Ana Two", "ANA@EXAMPLE.COM", "PT")

        assert resp.status_code == 409
        assert resp.headers["content-type"].startswith("application/problem+json")
        body = resp.json()
        assert body["code"] == "DUPLICATE_ENTRY"
        assert body["detail"] == "This email has already been used to vote"

    @pytest.mark.asyncio
    async def test_invalid_payload_returns_422_with_field_errors(self, client) -> None:
        resp = await _post_vote(client, "A", "not-an-email", "B1")

        assert resp.status_code == 422
        assert resp.headers["content-type"].startswith("application/problem+json")
        body = resp.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert {e["field"] for e in body["errors"]} == {"name", "email", "country"}

    @pytest.mark.asyncio
    async def test_missing_fields_return_422(self, client) -> None:
        resp = await client.post("/api/v1/votes", json={"name": "Ana"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_total_counts_only_successful_votes(self, client) -> None:
        assert (await client.get("/api/v1/votes/total")).json() == {"total": 0}

        await _post_vote(client, "Ana", "ana@example.com", "BR")
        await _post_vote(client, "Bob", "bob@example.com", "US")
        await _post_vote(client, "Bob Again", "bob@example.com", "DE")

        resp = await client.get("/api/v1/votes/total")
        assert resp.status_code == 200
        assert resp.json() == {"total": 2}

    @pytest.mark.asyncio
    async def test_aggregation_failure_returns_generic_500(self, app, client) -> None:
        aggregator = AsyncMock(spec=VoteAggregator)
        aggregator.get_total_votes.side_effect = AggregationFailedError()
        app.dependency_overrides[get_vote_aggregator] = lambda: aggregator

        resp = await client.get("/api/v1/votes/total")

        assert resp.status_code == 500
        body = resp.json()
        assert body["code"] == "INTERNAL_ERROR"
        assert body["title"] == "Internal Server Error"
        assert "detail" not in body


class TestCountries:
    @pytest.mark.asyncio
    async def test_top_countries_ranked_and_enriched(self, client) -> None:
        for i in range(3):
            await _post_vote(client, f"US {i}", f"us{i}@example.com", "US")
        for i in range(2):
            await _post_vote(client, f"DE {i}", f"de{i}@example.com", "DE")
        await _post_vote(client, "Zed", "zed@example.com", "ZZ")

        resp = await client.get("/api/v1/countries/top", params={"limit": "10"})

        assert resp.status_code == 200
        body = resp.json()
        assert [c["cca2"] for c in body] == ["US", "DE", "ZZ"]
        assert body[0]["officialName"] == "United States of America"
        assert body[0]["subRegion"] == "North America"
        assert body[0]["votes"] == 3
        assert body[2] == {
            "name": "ZZ",
            "officialName": "ZZ",
            "cca2": "ZZ",
            "cca3": "ZZ",
            "capital": [],
            "region": "Unknown",
            "subRegion": "Unknown",
            "votes": 1,
        }

    @pytest.mark.asyncio
    async def test_top_countries_bad_limit_falls_back(self, client) -> None:
        await _post_vote(client, "Ana", "ana@example.com", "BR")

        resp = await client.get("/api/v1/countries/top", params={"limit": "abc"})

        assert resp.status_code == 200
        assert len(resp.json()) == 1

    @pytest.mark.asyncio
    async def test_top_countries_limit_applies(self, client) -> None:
        for code in ("US", "DE", "FR"):
            await _post_vote(client, "Voter", f"{code.lower()}@example.com", code)

        resp = await client.get("/api/v1/countries/top", params={"limit": "2"})
        assert len(resp.json()) == 2

    @pytest.mark.asyncio
    async def test_top_countries_decimal_limit_truncates(self, client) -> None:
        for code in ("US", "DE", "FR"):
            await _post_vote(client, "Voter", f"{code.lower()}@example.com", code)

        resp = await client.get("/api/v1/countries/top", params={"limit": "2.9"})
        assert len(resp.json()) == 2

    @pytest.mark.asyncio
    async def test_top_countries_empty(self, app, client) -> None:
        resp = await client.get("/api/v1/countries/top")

        assert resp.status_code == 200
        assert resp.json() == []
        app.state.test_client.fetch_country.assert_not_called()

    @pytest.mark.asyncio
    async def test_country_by_code(self, client) -> None:
        resp = await client.get("/api/v1/countries/FR")

        assert resp.status_code == 200
        body = resp.json()
        assert body["name"] == "France"
        assert body["capital"] == ["Paris"]
        assert body["votes"] == 0

    @pytest.mark.asyncio
    async def test_unknown_country_returns_404(self, client) -> None:
        resp = await client.get("/api/v1/countries/ZZ")

        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")
        body = resp.json()
        assert body["title"] == "Country not found"
        assert body["code"] == "NOT_FOUND"


class TestInfrastructure:
    @pytest.mark.asyncio
    async def test_liveness(self, client) -> None:
        resp = await client.get("/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["environment"] == "testing"
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_health_inventory_degraded_without_redis(self, client) -> None:
        resp = await client.get("/api/v1/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "degraded"
        statuses = {s["name"]: s["healthy"] for s in body["subsystems"]}
        assert statuses == {"database": True, "redis": False, "country_cache": True}

    @pytest.mark.asyncio
    async def test_unknown_route_is_problem_json(self, client) -> None:
        resp = await client.get("/api/v1/nope")

        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")
        assert resp.json()["status"] == 404

    @pytest.mark.asyncio
    async def test_rate_limit_rejects_over_budget(self, session_factory) -> None:
        redis_mock = AsyncMock()
        redis_mock.incr = AsyncMock(return_value=101)
        redis_mock.expire = AsyncMock(return_value=True)
        app = _build_app(
            session_factory, Settings(environment="testing"), redis_client=redis_mock
        )

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            resp = await c.get("/api/v1/votes/total")
            health = await c.get("/api/v1/health")

        assert resp.status_code == 429
        assert resp.headers["retry-after"] == "60"
        assert resp.json()["code"] == "RATE_LIMIT_EXCEEDED"
        # Health is exempt
        assert health.status_code == 200

    @pytest.mark.asyncio
    async def test_access_log_in_development(self, session_factory, caplog) -> None:
        app = _build_app(session_factory, Settings(environment="development"))

        transport = httpx.ASGITransport(app=app)
        with caplog.at_level(logging.INFO, logger="countryvotes.access"):
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
                await c.get("/api/v1/votes/total")
                await c.get("/api/v1/countries/ZZ")

        records = [r for r in caplog.records if r.name == "countryvotes.access"]
        assert len(records) == 2
        assert records[0].levelno == logging.INFO
        assert records[0].path == "/api/v1/votes/total"
        assert records[1].levelno == logging.WARNING
        assert records[1].status == 404
