"""
Country details DTO.

One entry of the top-countries ranking, or the standalone by-code lookup.
Serialized with camelCase aliases (``officialName``, ``subRegion``) to
match the wire shape existing frontends consume.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CountryDetails(BaseModel):
    """Country metadata merged with a vote count.

    ``votes`` is the aggregated count on the ranking path and 0 on the
    by-code path. When the metadata lookup fails during ranking, the name
    and code fields all carry the raw country code and region/sub-region
    read "Unknown".
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    name: str = Field(..., description="Common country name")
    official_name: str = Field(..., description="Official country name")
    cca2: Optional[str] = Field(None, description="ISO 3166-1 alpha-2 code")
    cca3: Optional[str] = Field(None, description="ISO 3166-1 alpha-3 code")
    capital: list[str] = Field(
        default_factory=list, description="Capital cities (may be empty)"
    )
    region: str = Field(..., description="Geographic region")
    sub_region: str = Field("", description="Geographic sub-region")
    votes: int = Field(0, ge=0, description="Votes cast for this country")
