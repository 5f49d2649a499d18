"""Health check schemas."""

from core.schemas.health.health import (
    DependencyHealth,
    LivenessResponse,
    ReadinessResponse,
)

__all__ = ["DependencyHealth", "LivenessResponse", "ReadinessResponse"]
