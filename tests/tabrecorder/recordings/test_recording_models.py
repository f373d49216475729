"""Tests for recording catalog models."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from tabrecorder.recordings.exceptions import TranscodeError
from tabrecorder.recordings.models import (
    OutputFormat,
    Recording,
    RecordingsIndex,
    RecordingTracks,
    TrackRole,
)

CREATED = datetime(2026, 2, 1, 9, 0, tzinfo=UTC)


def _recording(**overrides) -> Recording:
    fields = {
        "id": "rec",
        "created_at": CREATED,
        "expires_at": CREATED + timedelta(days=7),
        "duration": 42,
        "has_mic": True,
        "has_system_audio": True,
        "format": OutputFormat.AAC,
        "tracks": RecordingTracks(system="system.m4a", mic="mic.m4a", mixed="mixed.m4a"),
    }
    fields.update(overrides)
    return Recording(**fields)


class TestOutputFormat:
    """Test format metadata."""

    @pytest.mark.parametrize(
        "output_format,content_type,extension",
        [
            (OutputFormat.MP3, "audio/mpeg", "mp3"),
            (OutputFormat.AAC, "audio/mp4", "m4a"),
            (OutputFormat.OPUS, "audio/webm", "webm"),
        ],
    )
    def test_content_type_and_extension(self, output_format, content_type, extension):
        """Should map each format to its MIME type and file extension."""
        assert output_format.content_type == content_type
        assert output_format.extension == extension

    def test_track_filename(self):
        """Should name track files by role and format extension."""
        assert TrackRole.MIXED.filename(OutputFormat.AAC) == "mixed.m4a"
        assert TrackRole.SYSTEM.filename(OutputFormat.OPUS) == "system.webm"


class TestRecording:
    """Test the catalog entry model."""

    def test_camel_case_round_trip(self):
        """Should accept and emit the camelCase wire names."""
        recording = _recording()
        payload = recording.model_dump(mode="json", by_alias=True)

        assert payload["hasMic"] is True
        assert payload["createdAt"].startswith("2026-02-01T09:00:00")
        assert Recording.model_validate(payload) == recording

    def test_is_expired_boundary(self):
        """Should count the exact expiry instant as expired."""
        recording = _recording()

        assert not recording.is_expired(recording.expires_at - timedelta(microseconds=1))
        assert recording.is_expired(recording.expires_at)

    def test_entries_are_immutable(self):
        """Should reject mutation after creation."""
        recording = _recording()

        with pytest.raises(ValidationError):
            recording.duration = 1

    def test_negative_duration_rejected(self):
        """Should refuse a negative duration."""
        with pytest.raises(ValidationError):
            _recording(duration=-1)

    def test_unknown_track_role_rejected(self):
        """Should refuse track roles outside system, mic and mixed."""
        with pytest.raises(ValidationError):
            RecordingTracks.model_validate({"system": "system.mp3", "voice": "voice.mp3"})

    def test_roles_in_canonical_order(self):
        """Should list only present roles, system first."""
        tracks = RecordingTracks(mixed="mixed.mp3", system="system.mp3")

        assert tracks.roles() == [TrackRole.SYSTEM, TrackRole.MIXED]
        assert tracks.get(TrackRole.MIC) is None


class TestRecordingsIndex:
    """Test the persisted collection."""

    def test_find_and_ids(self):
        """Should look entries up by id."""
        index = RecordingsIndex(recordings=[_recording(id="a"), _recording(id="b")])

        assert index.ids() == {"a", "b"}
        assert index.find("b").id == "b"
        assert index.find("c") is None


class TestTranscodeError:
    """Test encoder error details."""

    def test_str_includes_details(self):
        """Should describe codec, exit status and timeout."""
        error = TranscodeError("ffmpeg failed", codec="libopus", returncode=1, stderr="bad")

        assert str(error) == "ffmpeg failed (codec=libopus, exit=1)"
        assert TranscodeError("slow", timed_out=True).timed_out is True
        assert str(TranscodeError("plain")) == "plain"
