"""
Health check DTOs for GET /api/v1/health.

Reports subsystem status for load balancers and uptime monitors. The
health endpoint is public.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SubsystemStatus(BaseModel):
    """Status of a single infrastructure subsystem."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., description="Subsystem identifier")
    healthy: bool = Field(..., description="Whether this subsystem is operational")
    detail: Optional[str] = Field(
        None,
        description="Human-readable status detail (error message, size, etc.)",
    )
    checked_at: datetime = Field(..., description="When this subsystem was checked")


class HealthResponse(BaseModel):
    """Aggregate health status.

    - "healthy": all subsystems healthy
    - "degraded": some unhealthy but the database is up
    - "unhealthy": the database is down
    """

    model_config = ConfigDict(from_attributes=True)

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        ..., description="Aggregate system health status"
    )
    subsystems: list[SubsystemStatus] = Field(
        ..., description="Per-subsystem health status"
    )
    timestamp: datetime = Field(..., description="When this check was performed")
    version: str = Field(..., description="API server version string")
