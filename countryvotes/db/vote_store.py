"""
VoteStore -- the query interface the vote services are written against.

Wraps a single ``AsyncSession`` (the caller owns its lifecycle, exactly
like the per-request session yielded by ``get_async_session``) and
exposes the handful of operations the pipeline needs:

    insert            -- with a distinct signal for unique-constraint conflicts
    find_by_email     -- exact match on the normalized email
    count_all         -- total ballots
    count_by_country  -- GROUP BY country ORDER BY count DESC, country ASC LIMIT n
    delete_all        -- administrative clear
    bulk_insert       -- administrative seeding

Grouping, ordering and the limit all run in SQL so the database does the
work, not Python.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from countryvotes.db.models import CountryVoteCount, Vote
from countryvotes.exceptions import UniqueViolationError

logger = logging.getLogger(__name__)


def _is_unique_violation(exc: IntegrityError) -> bool:
    """True when the driver error is a unique/duplicate-key conflict.

    SQLite reports ``UNIQUE constraint failed: votes.email``; PostgreSQL
    reports ``duplicate key value violates unique constraint``.
    """
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate key" in message


class VoteStore:
    """Async vote persistence over one session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def insert(self, name: str, email: str, country: str) -> Vote:
        """Insert a vote and flush so constraint errors surface here.

        Values are persisted as given; normalization is the caller's job.

        Raises:
            UniqueViolationError: The email already exists (the unique
                constraint fired, typically a race with another request).
            sqlalchemy.exc.SQLAlchemyError: Any other storage failure.
        """
        vote = Vote(name=name, email=email, country=country)
        self.session.add(vote)
        try:
            await self.session.flush()  # Assign id/defaults, raise constraint errors early
        except IntegrityError as exc:
            await self.session.rollback()
            if _is_unique_violation(exc):
                raise UniqueViolationError("email", email) from exc
            raise
        return vote

    async def find_by_email(self, email: str) -> Vote | None:
        result = await self.session.execute(select(Vote).where(Vote.email == email))
        return result.scalar_one_or_none()

    async def count_all(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Vote))
        return int(result.scalar_one())

    async def count_by_country(self, limit: int) -> list[CountryVoteCount]:
        """Per-country vote counts, highest first, ties by country code.

        Args:
            limit: Maximum number of groups returned (applied in SQL).
        """
        votes = func.count(Vote.id).label("votes")
        stmt = (
            select(Vote.country, votes)
            .group_by(Vote.country)
            .order_by(votes.desc(), Vote.country.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [
            CountryVoteCount(country=row.country, votes=int(row.votes))
            for row in result
        ]

    async def delete_all(self) -> int:
        """Remove every vote. Returns the number of rows deleted."""
        await self.session.flush()
        result = await self.session.execute(
            delete(Vote).execution_options(synchronize_session=False)
        )
        # SQLite may reuse ids after a full clear; drop stale identities
        self.session.expunge_all()
        deleted = result.rowcount or 0
        logger.info("Deleted %d votes", deleted)
        return deleted

    async def bulk_insert(self, rows: Iterable[Mapping[str, str]]) -> int:
        """Insert many already-normalized votes in one flush."""
        votes = [
            Vote(name=row["name"], email=row["email"], country=row["country"])
            for row in rows
        ]
        self.session.add_all(votes)
        await self.session.flush()
        return len(votes)
