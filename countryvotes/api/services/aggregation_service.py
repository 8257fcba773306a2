"""
VoteAggregator -- the read path over stored ballots.

Turns raw vote rows into ranked per-country counts. Grouping, ordering
(count descending, then country code ascending) and the limit are all
pushed down to the store; this layer only translates storage errors.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from countryvotes.db.models import CountryVoteCount
from countryvotes.db.vote_store import VoteStore
from countryvotes.exceptions import AggregationFailedError

logger = logging.getLogger(__name__)


class VoteAggregator:
    def __init__(self, store: VoteStore) -> None:
        self.store = store

    async def get_vote_count_by_country(self, limit: int) -> list[CountryVoteCount]:
        """Return at most *limit* countries ranked by votes.

        *limit* is expected to be clamped already (see
        ``country_service.resolve_limit``).

        Raises:
            AggregationFailedError: The grouped query failed. No partial
                results are returned.
        """
        try:
            counts = await self.store.count_by_country(limit)
        except SQLAlchemyError as exc:
            logger.error("Grouped vote count failed (limit=%d)", limit, exc_info=True)
            raise AggregationFailedError() from exc

        logger.debug("Aggregated %d countries (limit=%d)", len(counts), limit)
        return counts

    async def get_total_votes(self) -> int:
        try:
            return await self.store.count_all()
        except SQLAlchemyError as exc:
            logger.error("Total vote count failed", exc_info=True)
            raise AggregationFailedError("Failed to get total votes") from exc
