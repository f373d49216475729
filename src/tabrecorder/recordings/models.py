"""Data models for the recording catalog."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OutputFormat(StrEnum):
    """Encoded output formats offered for final artifacts."""

    MP3 = "mp3"
    AAC = "aac"
    OPUS = "opus"

    @property
    def content_type(self) -> str:
        """MIME type served for artifacts of this format."""
        return _CONTENT_TYPES[self]

    @property
    def extension(self) -> str:
        """Canonical file extension for artifacts of this format."""
        return _EXTENSIONS[self]


_CONTENT_TYPES = {
    OutputFormat.MP3: "audio/mpeg",
    OutputFormat.AAC: "audio/mp4",
    OutputFormat.OPUS: "audio/webm",
}

_EXTENSIONS = {
    OutputFormat.MP3: "mp3",
    OutputFormat.AAC: "m4a",
    OutputFormat.OPUS: "webm",
}


class TrackRole(StrEnum):
    """Roles a rendered track can play within a recording."""

    SYSTEM = "system"
    MIC = "mic"
    MIXED = "mixed"

    def filename(self, output_format: OutputFormat) -> str:
        """Filename of this role's artifact inside the recording directory."""
        return f"{self.value}.{output_format.extension}"


class RecordingTracks(BaseModel):
    """Rendered tracks of a recording, keyed by role. Absent roles were not rendered."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    system: str | None = None
    mic: str | None = None
    mixed: str | None = None

    def get(self, role: TrackRole) -> str | None:
        """Return the filename rendered for role, if any."""
        return getattr(self, role.value)

    def roles(self) -> list[TrackRole]:
        """Roles present in this recording, in canonical order."""
        return [role for role in TrackRole if self.get(role) is not None]


class Recording(BaseModel):
    """One produced artifact set. Immutable once created."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    created_at: datetime
    expires_at: datetime
    duration: int = Field(ge=0)
    has_mic: bool
    has_system_audio: bool
    format: OutputFormat
    tracks: RecordingTracks = Field(default_factory=RecordingTracks)

    def is_expired(self, now: datetime) -> bool:
        """Whether the retention window has elapsed; the boundary instant counts as expired."""
        return self.expires_at <= now


class RecordingsIndex(BaseModel):
    """Persisted collection of recording entries."""

    recordings: list[Recording] = Field(default_factory=list)

    def ids(self) -> set[str]:
        """Ids of every indexed recording."""
        return {recording.id for recording in self.recordings}

    def find(self, recording_id: str) -> Recording | None:
        """Return the entry with the given id, if indexed."""
        return next((r for r in self.recordings if r.id == recording_id), None)
