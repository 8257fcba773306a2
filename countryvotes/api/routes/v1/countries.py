"""
Country ranking endpoints.

Endpoints:
    GET /countries/top          -- Most-voted countries with metadata
    GET /countries/{code}       -- Metadata for a single country
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from countryvotes.api.deps import get_country_service
from countryvotes.api.schemas.country import CountryDetails
from countryvotes.api.services.country_service import CountryService
from countryvotes.constants import COUNTRY_NOT_FOUND_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/top",
    response_model=list[CountryDetails],
    response_model_by_alias=True,
    summary="Top countries by votes",
    description=(
        "Returns countries ranked by vote count (ties by country code), each "
        "enriched with REST Countries metadata. ``limit`` is clamped to 1-50; "
        "non-numeric values fall back to 10. Countries whose metadata cannot "
        "be fetched are still returned with placeholder details."
    ),
)
async def get_top_countries(
    # Raw string on purpose: a bad limit means "default", not 422
    limit: Optional[str] = Query(None, description="Number of countries (1-50)"),
    service: CountryService = Depends(get_country_service),
) -> list[CountryDetails]:
    return await service.get_top_countries(limit)


@router.get(
    "/{code}",
    response_model=CountryDetails,
    response_model_by_alias=True,
    summary="Get country details",
    description="Returns metadata for a single country code. Votes are reported as 0.",
)
async def get_country_by_code(
    code: str,
    service: CountryService = Depends(get_country_service),
) -> CountryDetails:
    details = await service.get_country_by_code(code)
    if details is None:
        raise HTTPException(status_code=404, detail=COUNTRY_NOT_FOUND_MESSAGE)
    return details
