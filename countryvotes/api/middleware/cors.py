"""
CORS middleware configuration.

Permissive in development (all origins), strict otherwise (configured
allowlist from ``Settings.cors_origins``).
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from countryvotes.settings import Settings


def configure_cors(app: FastAPI, settings: Settings) -> None:
    """Add CORS middleware to the FastAPI application."""
    if settings.environment == "development":
        origins = ["*"]
    else:
        origins = settings.cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
    )
