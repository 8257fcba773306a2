"""
Centralized application settings via pydantic-settings.

All configuration is loaded from environment variables with sensible
development defaults. Production deployments override via .env file
or container environment.
"""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from countryvotes.constants import (
    CACHE_MAXSIZE,
    COUNTRY_CACHE_TTL,
    COUNTRY_LOOKUP_TIMEOUT,
    REST_COUNTRIES_API,
)


class Settings(BaseSettings):
    """Application configuration with env-var binding."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Database --
    database_url: str = "sqlite+aiosqlite:///./votes.db"
    db_auto_create: bool = True  # create_all on startup; disable when using alembic

    # -- Redis (rate limiting only) --
    redis_url: str = "redis://localhost:6379/0"

    # -- Runtime --
    environment: Literal["development", "production", "testing"] = "development"

    # -- API --
    cors_origins: list[str] = [
        "http://localhost:4000",
    ]
    rate_limit_requests: int = 100
    rate_limit_window: int = 60  # seconds

    # -- Country metadata lookup --
    rest_countries_api: str = REST_COUNTRIES_API
    country_lookup_timeout: float = COUNTRY_LOOKUP_TIMEOUT
    country_cache_ttl: int = COUNTRY_CACHE_TTL
    cache_maxsize: int = CACHE_MAXSIZE

    # -- Logging --
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return a cached singleton Settings instance."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = Settings()
    return _settings
