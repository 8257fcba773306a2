"""
Development seed data and administrative clear/reset helpers.

The seed set is 25 votes across 10 countries with a known ranking, handy
for exercising ``/countries/top`` locally:

    US 5, DE 4, FR 3, JP 3, BR 2, ES 2, GB 2, AU 1, CA 1, IT 1
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from countryvotes.api.services.vote_service import VoteService
from countryvotes.db.models import CountryVoteCount
from countryvotes.db.vote_store import VoteStore

logger = logging.getLogger(__name__)

SEED_VOTES: list[dict[str, str]] = [
    # United States (5)
    {"name": "John Smith", "email": "john.smith@example.com", "country": "US"},
    {"name": "Sarah Johnson", "email": "sarah.johnson@example.com", "country": "US"},
    {"name": "Michael Brown", "email": "michael.brown@example.com", "country": "US"},
    {"name": "Emily Davis", "email": "emily.davis@example.com", "country": "US"},
    {"name": "David Wilson", "email": "david.wilson@example.com", "country": "US"},
    # Germany (4)
    {"name": "Hans Mueller", "email": "hans.mueller@example.com", "country": "DE"},
    {"name": "Anna Schmidt", "email": "anna.schmidt@example.com", "country": "DE"},
    {"name": "Peter Weber", "email": "peter.weber@example.com", "country": "DE"},
    {"name": "Maria Fischer", "email": "maria.fischer@example.com", "country": "DE"},
    # France (3)
    {"name": "Pierre Dubois", "email": "pierre.dubois@example.com", "country": "FR"},
    {"name": "Marie Martin", "email": "marie.martin@example.com", "country": "FR"},
    {"name": "Jean Bernard", "email": "jean.bernard@example.com", "country": "FR"},
    # Japan (3)
    {"name": "Yuki Tanaka", "email": "yuki.tanaka@example.com", "country": "JP"},
    {"name": "Hiroshi Sato", "email": "hiroshi.sato@example.com", "country": "JP"},
    {"name": "Sakura Yamamoto", "email": "sakura.yamamoto@example.com", "country": "JP"},
    # Brazil (2)
    {"name": "Carlos Silva", "email": "carlos.silva@example.com", "country": "BR"},
    {"name": "Ana Santos", "email": "ana.santos@example.com", "country": "BR"},
    # United Kingdom (2)
    {"name": "James Taylor", "email": "james.taylor@example.com", "country": "GB"},
    {"name": "Emma Thompson", "email": "emma.thompson@example.com", "country": "GB"},
    # Spain (2)
    {"name": "Pablo Garcia", "email": "pablo.garcia@example.com", "country": "ES"},
    {"name": "Isabella Rodriguez", "email": "isabella.rodriguez@example.com", "country": "ES"},
    # Canada, Italy, Australia (1 each)
    {"name": "Sophie Tremblay", "email": "sophie.tremblay@example.com", "country": "CA"},
    {"name": "Marco Rossi", "email": "marco.rossi@example.com", "country": "IT"},
    {"name": "Olivia Mitchell", "email": "olivia.mitchell@example.com", "country": "AU"},
]


async def seed_votes(session: AsyncSession) -> int:
    """Insert the seed set unless the table already has votes.

    Returns:
        Number of votes inserted (0 when skipped).
    """
    store = VoteStore(session)
    existing = await store.count_all()
    if existing > 0:
        logger.info("Database already seeded (%d votes). Skipping", existing)
        return 0

    inserted = await store.bulk_insert(SEED_VOTES)
    logger.info("Seeded %d votes", inserted)
    return inserted


async def clear_votes(session: AsyncSession) -> int:
    """Delete every vote. Storage errors surface as StorageFailureError."""
    return await VoteService(VoteStore(session)).delete_all_votes()


async def reset_votes(session: AsyncSession) -> int:
    """Clear then reseed. Returns the number of votes inserted."""
    await clear_votes(session)
    return await seed_votes(session)


async def vote_stats(session: AsyncSession) -> tuple[int, list[CountryVoteCount]]:
    """Total votes plus the full per-country breakdown."""
    store = VoteStore(session)
    total = await store.count_all()
    # Upper bound on distinct country codes; ISO 3166-1 has fewer than 300
    breakdown = await store.count_by_country(limit=1000)
    return total, breakdown
