"""
Vote endpoints.

Endpoints:
    POST /votes        -- Cast a vote (one per email)
    GET  /votes/total  -- Total votes cast
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from countryvotes.api.deps import get_vote_aggregator, get_vote_service
from countryvotes.api.schemas.common import ProblemDetail
from countryvotes.api.schemas.vote import TotalVotesResponse, VoteCreate, VoteResponse
from countryvotes.api.services.aggregation_service import VoteAggregator
from countryvotes.api.services.vote_service import VoteService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=VoteResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
    summary="Cast a vote",
    description=(
        "Records a vote for a country. Email is compared case-insensitively; "
        "a second vote from the same address is rejected with 409."
    ),
    responses={409: {"model": ProblemDetail, "description": "Email already voted"}},
)
async def create_vote(
    payload: VoteCreate,
    service: VoteService = Depends(get_vote_service),
) -> VoteResponse:
    return await service.create_vote(payload)


@router.get(
    "/total",
    response_model=TotalVotesResponse,
    summary="Total votes cast",
)
async def get_total_votes(
    aggregator: VoteAggregator = Depends(get_vote_aggregator),
) -> TotalVotesResponse:
    total = await aggregator.get_total_votes()
    return TotalVotesResponse(total=total)
