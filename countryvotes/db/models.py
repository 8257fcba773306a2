"""
SQLAlchemy 2.0 ORM models for vote persistence.

Tables:
    votes -- one row per ballot, unique by normalized email
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    """Timezone-aware UTC now -- avoids deprecated datetime.utcnow()."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


class Vote(Base):
    """A single ballot: who voted, and for which country.

    ``email`` is stored lower-cased and ``country`` upper-cased; the
    service layer normalizes before insert so the unique constraint
    compares canonical values.
    """

    __tablename__ = "votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    country: Mapped[str] = mapped_column(String(3), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_votes_email"),
        Index("ix_votes_country", "country"),
    )

    def __repr__(self) -> str:
        return (
            f"<Vote(id={self.id}, email={self.email!r}, country={self.country!r})>"
        )


@dataclass(frozen=True)
class CountryVoteCount:
    """Derived per-country tally; never persisted."""

    country: str
    votes: int
