"""
Tests for the per-client fixed-window rate limiter.

All Redis interactions are mocked -- no running Redis server required.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException

from countryvotes.api.deps import NullRedis
from countryvotes.api.middleware.rate_limit import check_rate_limit, client_identifier


def _make_mock_redis() -> AsyncMock:
    """Create a mock Redis client with sensible defaults."""
    mock = AsyncMock()
    mock.incr = AsyncMock(return_value=1)
    mock.expire = AsyncMock(return_value=True)
    return mock


class TestRateLimiting:
    """Tests for the per-IP request budget."""

    @pytest.mark.asyncio
    async def test_rate_limit_allows_under_limit(self) -> None:
        redis_mock = _make_mock_redis()
        redis_mock.incr = AsyncMock(return_value=100)

        # Exactly at the budget is still allowed
        await check_rate_limit("10.0.0.1", redis_mock, max_requests=100)

    @pytest.mark.asyncio
    async def test_rate_limit_blocks_over_limit(self) -> None:
        redis_mock = _make_mock_redis()
        redis_mock.incr = AsyncMock(return_value=101)

        with pytest.raises(HTTPException) as exc_info:
            await check_rate_limit("10.0.0.1", redis_mock, max_requests=100)

        assert exc_info.value.status_code == 429
        assert exc_info.value.headers == {"Retry-After": "60"}

    @pytest.mark.asyncio
    async def test_expire_set_only_on_first_hit(self) -> None:
        redis_mock = _make_mock_redis()

        with patch("countryvotes.api.middleware.rate_limit.time.time", return_value=600.0):
            await check_rate_limit("10.0.0.1", redis_mock, window_seconds=60)

        redis_mock.incr.assert_awaited_once_with("ratelimit:10.0.0.1:10")
        redis_mock.expire.assert_awaited_once_with("ratelimit:10.0.0.1:10", 60)

        redis_mock.incr = AsyncMock(return_value=2)
        redis_mock.expire.reset_mock()
        await check_rate_limit("10.0.0.1", redis_mock)
        redis_mock.expire.assert_not_called()

    @pytest.mark.asyncio
    async def test_rate_limit_redis_error_fails_open(self) -> None:
        redis_mock = _make_mock_redis()
        redis_mock.incr = AsyncMock(side_effect=ConnectionError("Redis down"))

        # Should not raise
        await check_rate_limit("10.0.0.1", redis_mock)

    @pytest.mark.asyncio
    async def test_null_redis_never_limits(self) -> None:
        for _ in range(3):
            await check_rate_limit("10.0.0.1", NullRedis(), max_requests=1)


class TestClientIdentifier:
    def test_prefers_forwarded_for(self) -> None:
        request = MagicMock()
        request.headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1"}
        assert client_identifier(request) == "203.0.113.7"

    def test_falls_back_to_peer_address(self) -> None:
        request = MagicMock()
        request.headers = {}
        request.client.host = "192.0.2.5"
        assert client_identifier(request) == "192.0.2.5"

    def test_unknown_without_peer(self) -> None:
        request = MagicMock()
        request.headers = {}
        request.client = None
        assert client_identifier(request) == "unknown"
