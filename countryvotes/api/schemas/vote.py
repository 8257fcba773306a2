"""
Vote request/response DTOs.

``VoteCreate`` is the request-validation layer: it trims input and rejects
malformed names, emails and country codes with a 422 before the vote
service is ever called. Normalization of case happens in the service.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class VoteCreate(BaseModel):
    """Ballot submitted by a client."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="Voter display name",
    )
    email: EmailStr = Field(..., description="Voter email, one vote per address")
    country: str = Field(
        ...,
        min_length=2,
        max_length=3,
        pattern=r"^[A-Za-z]+$",
        description="ISO country code, 2-3 letters",
    )

    @field_validator("email", mode="before")
    @classmethod
    def _strip_email(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class VoteResponse(BaseModel):
    """A persisted vote as returned to the client."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    name: str
    email: str
    country: str
    created_at: datetime


class TotalVotesResponse(BaseModel):
    total: int = Field(..., ge=0, description="Total votes cast")
