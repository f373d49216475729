"""Web API contract models using Pydantic for validation."""

from tabrecorder.web.models.health import HealthCheckResponse, LivenessProbeResponse
from tabrecorder.web.models.recordings import (
    DeleteRecordingResponse,
    ProcessResponse,
    RecordingListResponse,
)

__all__ = [
    "DeleteRecordingResponse",
    "HealthCheckResponse",
    "LivenessProbeResponse",
    "ProcessResponse",
    "RecordingListResponse",
]
