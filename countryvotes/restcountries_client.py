"""
REST Countries API client.

Fetches country metadata from ``GET <base>/alpha/<code>``. The upstream is
treated as slow and unreliable: every call carries an explicit total
timeout, and every failure mode -- timeout, connection error, non-2xx
status, undecodable body, unexpected shape -- is raised as a single
``UpstreamUnavailableError`` so callers handle one exception type.

The client validates the payload before returning it; the returned dict
is what gets cached, so a malformed response is never cached.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from countryvotes.api.schemas.country import CountryDetails
from countryvotes.constants import (
    COUNTRY_LOOKUP_TIMEOUT,
    REST_COUNTRIES_API,
    UNKNOWN_REGION,
)
from countryvotes.exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class _CountryName(BaseModel):
    model_config = ConfigDict(extra="ignore")

    common: str
    official: str


class RestCountryPayload(BaseModel):
    """The subset of a REST Countries record this service relies on."""

    model_config = ConfigDict(extra="ignore")

    name: _CountryName
    cca2: Optional[str] = None
    cca3: Optional[str] = None
    capital: list[str] = Field(default_factory=list)
    region: str
    subregion: Optional[str] = None


class RestCountriesClient:
    """Async client for the country metadata lookup service.

    Args:
        session: Shared ``aiohttp.ClientSession``; the owner closes it.
        base_url: API root, e.g. ``https://restcountries.com/v3.1``.
        timeout: Total per-request timeout in seconds.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str = REST_COUNTRIES_API,
        timeout: float = COUNTRY_LOOKUP_TIMEOUT,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def url_for(self, code: str) -> str:
        return f"{self._base_url}/alpha/{code}"

    async def fetch_country(self, code: str) -> dict[str, Any]:
        """Fetch and validate metadata for one country code.

        Args:
            code: Country code exactly as it should be sent upstream.

        Returns:
            Validated payload as a plain dict (safe to cache).

        Raises:
            UpstreamUnavailableError: On any lookup failure.
        """
        url = self.url_for(code)
        try:
            async with self._session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"Accept": "application/json"},
            ) as resp:
                if resp.status < 200 or resp.status >= 300:
                    raise UpstreamUnavailableError(code, f"HTTP {resp.status}")
                body = await resp.json(content_type=None)
        except UpstreamUnavailableError:
            raise
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailableError(
                code, f"timed out after {self._timeout}s"
            ) from exc
        except (aiohttp.ClientError, ValueError) as exc:
            raise UpstreamUnavailableError(code, str(exc) or type(exc).__name__) from exc

        # v3.1 answers /alpha/<code> with a one-element array
        if isinstance(body, list):
            if not body:
                raise UpstreamUnavailableError(code, "empty response")
            body = body[0]

        if not isinstance(body, dict):
            raise UpstreamUnavailableError(code, "unexpected response shape")

        try:
            payload = RestCountryPayload.model_validate(body)
        except ValidationError as exc:
            raise UpstreamUnavailableError(code, "malformed country record") from exc

        return payload.model_dump()


def to_country_details(payload: dict[str, Any], votes: int = 0) -> CountryDetails:
    """Map a validated (possibly cached) payload to the public DTO."""
    record = RestCountryPayload.model_validate(payload)
    return CountryDetails(
        name=record.name.common,
        official_name=record.name.official,
        cca2=record.cca2,
        cca3=record.cca3,
        capital=list(record.capital),
        region=record.region,
        sub_region=record.subregion or "",
        votes=votes,
    )


def fallback_country_details(code: str, votes: int) -> CountryDetails:
    """Degraded entry used when a lookup fails during aggregation."""
    return CountryDetails(
        name=code,
        official_name=code,
        cca2=code,
        cca3=code,
        capital=[],
        region=UNKNOWN_REGION,
        sub_region=UNKNOWN_REGION,
        votes=votes,
    )
