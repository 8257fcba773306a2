"""Tests for the development seed set and clear/reset helpers."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from countryvotes.db.models import CountryVoteCount
from countryvotes.db.seed import (
    SEED_VOTES,
    clear_votes,
    reset_votes,
    seed_votes,
    vote_stats,
)
from countryvotes.db.vote_store import VoteStore
from countryvotes.exceptions import StorageFailureError


def test_seed_emails_are_unique() -> None:
    emails = [row["email"].lower() for row in SEED_VOTES]
    assert len(emails) == len(set(emails)) == 25


@pytest.mark.asyncio
async def test_seed_inserts_once(session) -> None:
    assert await seed_votes(session) == 25
    assert await seed_votes(session) == 0
    assert await VoteStore(session).count_all() == 25


@pytest.mark.asyncio
async def test_stats_ranking(session) -> None:
    await seed_votes(session)

    total, breakdown = await vote_stats(session)

    assert total == 25
    assert len(breakdown) == 10
    assert breakdown[:4] == [
        CountryVoteCount("US", 5),
        CountryVoteCount("DE", 4),
        CountryVoteCount("FR", 3),
        CountryVoteCount("JP", 3),
    ]
    # Ties at 2 and 1 vote resolve alphabetically
    assert [c.country for c in breakdown[4:]] == ["BR", "ES", "GB", "AU", "CA", "IT"]


@pytest.mark.asyncio
async def test_clear_and_reset(session) -> None:
    await seed_votes(session)

    assert await clear_votes(session) == 25
    assert await VoteStore(session).count_all() == 0

    assert await reset_votes(session) == 25
    assert await VoteStore(session).count_all() == 25


@pytest.mark.asyncio
async def test_clear_wraps_storage_failure(session) -> None:
    failure = OperationalError("DELETE FROM votes", {}, Exception("database is locked"))

    with patch.object(VoteStore, "delete_all", AsyncMock(side_effect=failure)):
        with pytest.raises(StorageFailureError) as exc_info:
            await clear_votes(session)

    assert exc_info.value.__cause__ is failure


@pytest.mark.asyncio
async def test_reset_stops_when_clear_fails(session) -> None:
    await seed_votes(session)
    failure = OperationalError("DELETE FROM votes", {}, Exception("disk I/O error"))

    with patch.object(VoteStore, "delete_all", AsyncMock(side_effect=failure)):
        with pytest.raises(StorageFailureError):
            await reset_votes(session)

    assert await VoteStore(session).count_all() == 25
