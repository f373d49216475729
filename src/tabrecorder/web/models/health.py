"""Health check API response models."""

from pydantic import BaseModel, Field


class HealthCheckResponse(BaseModel):
    """Response for basic health check endpoint."""

    status: str = Field(..., description="Health status (healthy/unhealthy)")
    timestamp: str = Field(..., description="ISO timestamp of health check")
    version: str = Field(..., description="Application version")
    service: str = Field(..., description="Service name")


class LivenessProbeResponse(BaseModel):
    """Response for liveness probe."""

    status: str = Field(..., description="Liveness status (alive)")
