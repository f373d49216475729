"""Health check endpoints for monitoring service status."""

from datetime import UTC, datetime
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from tabrecorder.config import TabRecorderConfig
from tabrecorder.system.structlog_configurator import get_package_version
from tabrecorder.web.core.container import Container
from tabrecorder.web.models.health import HealthCheckResponse, LivenessProbeResponse

router = APIRouter(prefix="/health")


@router.get("/", response_model=HealthCheckResponse)
@inject
async def health_check(
    config: Annotated[TabRecorderConfig, Depends(Provide[Container.config])],
) -> HealthCheckResponse:
    """Check basic health status of the service.

    Returns:
        Health status with timestamp and version.
    """
    return HealthCheckResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=get_package_version(),
        service=config.site_name,
    )


@router.get("/live", response_model=LivenessProbeResponse)
async def liveness_probe() -> LivenessProbeResponse:
    """Liveness probe.

    Returns:
        Simple status indicating the service is alive.
    """
    return LivenessProbeResponse(status="alive")
