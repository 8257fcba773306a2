"""
CountryService -- ranked countries enriched with REST Countries metadata.

``get_top_countries`` fans out one metadata lookup per ranked country,
concurrently, and fans back in before returning. Each lookup goes through
the shared ``TTLCacheStore`` (key ``country:<code>``, 5-minute TTL) and
only reaches the network on a miss. A failed lookup degrades that one
entry to fallback metadata; it never affects its neighbours or fails the
request.

``get_country_by_code`` performs the same cache-or-fetch for a single code
but has no fallback: any failure is reported as "not found" (None).

NOTE: the two paths disagree on failure handling -- ranking degrades per
entry, the single lookup fails outright. Callers of each rely on that.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Optional

from countryvotes.api.schemas.country import CountryDetails
from countryvotes.api.services.aggregation_service import VoteAggregator
from countryvotes.api.services.cache_service import (
    TTLCacheStore,
    cache_key_for_country,
)
from countryvotes.constants import (
    COUNTRY_CACHE_TTL,
    DEFAULT_TOP_LIMIT,
    MAX_TOP_LIMIT,
    MIN_TOP_LIMIT,
)
from countryvotes.db.models import CountryVoteCount
from countryvotes.exceptions import UpstreamUnavailableError
from countryvotes.restcountries_client import (
    RestCountriesClient,
    fallback_country_details,
    to_country_details,
)

logger = logging.getLogger(__name__)


def resolve_limit(raw: Any) -> int:
    """Turn a caller-supplied limit into a value in [1, 50].

    Missing or non-numeric input falls back to 10. Numeric input is
    truncated to its integer part and clamped.

    >>> resolve_limit("7"), resolve_limit("3.5"), resolve_limit(500), resolve_limit("abc")
    (7, 3, 50, 10)
    """
    if raw is None or isinstance(raw, bool):
        return DEFAULT_TOP_LIMIT
    if isinstance(raw, int):
        limit = raw
    else:
        try:
            value = float(str(raw).strip())
        except (TypeError, ValueError):
            return DEFAULT_TOP_LIMIT
        if not math.isfinite(value):
            return DEFAULT_TOP_LIMIT
        limit = int(value)
    return max(MIN_TOP_LIMIT, min(MAX_TOP_LIMIT, limit))


class CountryService:
    """Joins vote counts with cached country metadata.

    Args:
        aggregator: Source of ranked per-country vote counts.
        cache: Process-wide metadata cache.
        client: Metadata lookup client.
        cache_ttl: Seconds a fetched record stays cached.
    """

    def __init__(
        self,
        aggregator: VoteAggregator,
        cache: TTLCacheStore,
        client: RestCountriesClient,
        cache_ttl: int = COUNTRY_CACHE_TTL,
    ) -> None:
        self.aggregator = aggregator
        self.cache = cache
        self.client = client
        self.cache_ttl = cache_ttl

    async def _lookup(self, code: str) -> dict[str, Any]:
        """Cache-or-fetch the raw metadata record for *code*."""
        return await self.cache.get_or_set(
            cache_key_for_country(code),
            lambda: self.client.fetch_country(code),
            ttl=self.cache_ttl,
        )

    async def _enrich(self, count: CountryVoteCount) -> CountryDetails:
        """Resolve one ranked entry, degrading to fallback on any failure."""
        try:
            payload = await self._lookup(count.country)
            return to_country_details(payload, votes=count.votes)
        except UpstreamUnavailableError as exc:
            logger.warning(
                "Using fallback metadata for %s: %s", count.country, exc.reason
            )
        except Exception:
            logger.warning(
                "Using fallback metadata for %s", count.country, exc_info=True
            )
        return fallback_country_details(count.country, count.votes)

    async def get_top_countries(self, limit: Any = None) -> list[CountryDetails]:
        """Return the most-voted countries with metadata, in rank order.

        Args:
            limit: Requested size; normalized by ``resolve_limit``.

        Raises:
            AggregationFailedError: The vote counts could not be read.
                Metadata failures never raise.
        """
        resolved = resolve_limit(limit)
        counts = await self.aggregator.get_vote_count_by_country(resolved)
        if not counts:
            return []

        # Slot per rank so completion order can't reorder the output
        results: list[Optional[CountryDetails]] = [None] * len(counts)

        async def _fill(index: int, count: CountryVoteCount) -> None:
            results[index] = await self._enrich(count)

        await asyncio.gather(*(_fill(i, c) for i, c in enumerate(counts)))

        logger.info("Resolved top %d countries (limit=%d)", len(counts), resolved)
        return [details for details in results if details is not None]

    async def get_country_by_code(self, code: str) -> Optional[CountryDetails]:
        """Look up a single country by code, without fallback.

        The code is used verbatim for both the cache key and the upstream
        request.

        Returns:
            CountryDetails with ``votes=0``, or None if the lookup failed.
        """
        try:
            payload = await self._lookup(code)
            return to_country_details(payload, votes=0)
        except UpstreamUnavailableError as exc:
            logger.info("Country %s not resolved: %s", code, exc.reason)
        except Exception:
            logger.warning("Country %s lookup failed", code, exc_info=True)
        return None
