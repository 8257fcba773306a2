"""
Pydantic V2 DTO schemas for the country votes API.

All public DTOs are re-exported here for convenient import:

    from countryvotes.api.schemas import CountryDetails, VoteCreate

These schemas define the API contract with the frontend -- changes here
are breaking changes.
"""

from countryvotes.api.schemas.common import ProblemDetail
from countryvotes.api.schemas.country import CountryDetails
from countryvotes.api.schemas.health import HealthResponse, SubsystemStatus
from countryvotes.api.schemas.vote import (
    TotalVotesResponse,
    VoteCreate,
    VoteResponse,
)

__all__ = [
    # Votes
    "VoteCreate",
    "VoteResponse",
    "TotalVotesResponse",
    # Country
    "CountryDetails",
    # Health
    "HealthResponse",
    "SubsystemStatus",
    # Common
    "ProblemDetail",
]
