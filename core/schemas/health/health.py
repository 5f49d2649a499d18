"""Liveness and readiness response schemas."""

from pydantic import Field

from core.enums.health_status import HealthStatus
from core.schemas.base_schema_model import BaseSchemaModel


class DependencyHealth(BaseSchemaModel):
    """Health of one dependency."""

    healthy: bool = Field(..., description="Whether the dependency is usable")
    status: HealthStatus = Field(..., description="Health status of the dependency")
    message: str = Field(..., description="Human-readable health message")
    response_time_ms: float | None = Field(
        None, description="Check duration in milliseconds"
    )


class LivenessResponse(BaseSchemaModel):
    """Liveness probe body."""

    status: str = Field(..., description="Liveness status")


class ReadinessResponse(BaseSchemaModel):
    """Readiness probe body."""

    ready: bool = Field(..., description="Service accepts requests")
    status: str = Field(..., description="'ready' or 'degraded'")
    degraded: bool = Field(..., description="At least one dependency is unhealthy")
    dependencies: dict[str, DependencyHealth] = Field(
        ..., description="Health of each dependency"
    )
