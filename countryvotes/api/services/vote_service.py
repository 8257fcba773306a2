"""
VoteService -- the write path for ballots.

Responsibility:
    1. Normalize the submission (email lower-case, country upper-case)
    2. Enforce one vote per email
    3. Persist through ``VoteStore`` and return the ``VoteResponse`` DTO

Duplicate detection is two-layered. The ``find_by_email`` pre-check is an
early exit for the common case; the unique constraint on ``votes.email``
is the authoritative guard, and its conflict signal is mapped to the same
``DuplicateEmailError`` so concurrent submissions cannot slip through.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from countryvotes.api.schemas.vote import VoteCreate, VoteResponse
from countryvotes.db.vote_store import VoteStore
from countryvotes.exceptions import (
    CreateVoteFailedError,
    DuplicateEmailError,
    StorageFailureError,
    UniqueViolationError,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.lower()


def normalize_country(country: str) -> str:
    return country.upper()


class VoteService:
    """Vote ingestion over a ``VoteStore``.

    The caller (FastAPI dependency or script) manages the session behind
    the store.
    """

    def __init__(self, store: VoteStore) -> None:
        self.store = store

    async def create_vote(self, data: VoteCreate) -> VoteResponse:
        """Persist a new vote unless its email has already voted.

        Args:
            data: Validated submission.

        Returns:
            The stored vote, with normalized email and country.

        Raises:
            DuplicateEmailError: The normalized email already voted.
            CreateVoteFailedError: Any other storage failure.
        """
        email = normalize_email(str(data.email))
        country = normalize_country(data.country)

        try:
            existing = await self.store.find_by_email(email)
            if existing is not None:
                logger.info("Rejected duplicate vote for %s", email)
                raise DuplicateEmailError(email)

            vote = await self.store.insert(name=data.name, email=email, country=country)
        except UniqueViolationError as exc:
            # Lost a race with a concurrent submission for the same email
            logger.info("Unique constraint rejected duplicate vote for %s", email)
            raise DuplicateEmailError(email) from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to create vote for %s", email, exc_info=True)
            raise CreateVoteFailedError() from exc

        logger.info("Recorded vote %s (country=%s)", vote.id, vote.country)
        return VoteResponse(
            id=vote.id,
            name=vote.name,
            email=vote.email,
            country=vote.country,
            created_at=vote.created_at,
        )

    async def delete_all_votes(self) -> int:
        """Administrative clear. Returns the number of votes removed."""
        try:
            return await self.store.delete_all()
        except SQLAlchemyError as exc:
            logger.error("Failed to delete votes", exc_info=True)
            raise StorageFailureError("Failed to delete votes") from exc
