"""Recording API request and response models."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tabrecorder.recordings.models import Recording, TrackRole
from tabrecorder.render.pipeline import RenderResult


class ProcessResponse(BaseModel):
    """Download locations of a freshly rendered recording."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Recording id")
    system_audio_url: str | None = Field(None, description="System track download path")
    mic_audio_url: str | None = Field(None, description="Microphone track download path")
    mixed_audio_url: str | None = Field(None, description="Mixed track download path")

    @classmethod
    def from_result(cls, result: RenderResult) -> "ProcessResponse":
        """Build the response from the tracks a render produced."""

        def url(role: TrackRole) -> str | None:
            reference = result.tracks.get(role)
            return reference.download_url if reference else None

        return cls(
            id=result.recording.id,
            system_audio_url=url(TrackRole.SYSTEM),
            mic_audio_url=url(TrackRole.MIC),
            mixed_audio_url=url(TrackRole.MIXED),
        )


class RecordingListResponse(BaseModel):
    """Every live recording, newest first."""

    recordings: list[Recording] = Field(default_factory=list)


class DeleteRecordingResponse(BaseModel):
    """Acknowledgement of a deletion."""

    success: bool = True
