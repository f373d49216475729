"""Finalization of captured audio into cataloged artifacts."""

import asyncio
import logging
import uuid
from collections.abc import Awaitable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from tabrecorder.recordings.catalog import CatalogStore
from tabrecorder.recordings.exceptions import MissingInputError, StorageError
from tabrecorder.recordings.models import OutputFormat, Recording, RecordingTracks, TrackRole
from tabrecorder.render.transcoder import Transcoder

logger = logging.getLogger(__name__)

SYSTEM_INPUT_NAME = "system_input.webm"
MIC_INPUT_NAME = "mic_input.webm"


class RenderOptions(BaseModel):
    """Caller choices for a render."""

    model_config = ConfigDict(frozen=True)

    output_format: OutputFormat = OutputFormat.MP3
    duck_system_audio: bool = False


class TrackReference(BaseModel):
    """Retrieval reference for one rendered track."""

    recording_id: str
    role: TrackRole
    filename: str
    content_type: str
    extension: str

    @property
    def download_url(self) -> str:
        """Path of the attachment download route for this track."""
        return f"/api/recordings/{self.recording_id}/{self.role.value}/download"

    @property
    def preview_url(self) -> str:
        """Path of the seekable streaming route for this track."""
        return f"/api/recordings/{self.recording_id}/{self.role.value}/preview"


class RenderResult(BaseModel):
    """A finished render: the catalog entry plus a reference per produced track."""

    recording: Recording
    tracks: dict[TrackRole, TrackReference] = Field(default_factory=dict)


class RenderPipeline:
    """Encodes raw captures into final tracks and registers them in the catalog.

    A render either fully succeeds, leaving only the final artifacts and a
    catalog entry, or fails leaving nothing behind: the whole per-recording
    directory is removed and the error propagates to the caller.
    """

    def __init__(self, catalog: CatalogStore, transcoder: Transcoder) -> None:
        self.catalog = catalog
        self.transcoder = transcoder

    async def render(
        self,
        system_audio: bytes | None,
        mic_audio: bytes | None,
        options: RenderOptions,
        duration: int,
    ) -> RenderResult:
        """Render and register a recording.

        Once encoding has started it runs to completion even if the caller
        stops waiting; an abandoned result stays in the catalog and can be
        deleted afterwards.

        Args:
            system_audio: Encoded system/tab capture (required)
            mic_audio: Encoded microphone capture, if recorded
            options: Output format and ducking choice
            duration: Caller-measured duration in seconds

        Raises:
            MissingInputError: If no system audio was supplied
            TranscodeError: If ffmpeg fails or times out
            StorageError: If inputs or the index cannot be written
        """
        if not system_audio:
            raise MissingInputError("No system audio provided")

        recording_id = str(uuid.uuid4())
        task = asyncio.ensure_future(
            self._render(recording_id, system_audio, mic_audio or None, options, max(duration, 0))
        )
        return await asyncio.shield(task)

    async def _render(
        self,
        recording_id: str,
        system_audio: bytes,
        mic_audio: bytes | None,
        options: RenderOptions,
        duration: int,
    ) -> RenderResult:
        recording_dir = self.catalog.recording_dir(recording_id)
        with self.catalog.reserve(recording_id):
            try:
                recording = await self._produce(
                    recording_id, recording_dir, system_audio, mic_audio, options, duration
                )
            except BaseException as e:
                logger.error("Render of %s failed, rolling back: %s", recording_id, e)
                self.catalog.remove_artifacts(recording_id)
                raise

        logger.info(
            "Rendered recording %s as %s (%s)",
            recording_id,
            options.output_format.value,
            ", ".join(recording.tracks.roles()),
        )
        return RenderResult(
            recording=recording,
            tracks={
                role: self._reference(recording, role) for role in recording.tracks.roles()
            },
        )

    async def _produce(
        self,
        recording_id: str,
        recording_dir: Path,
        system_audio: bytes,
        mic_audio: bytes | None,
        options: RenderOptions,
        duration: int,
    ) -> Recording:
        output_format = options.output_format
        file_manager = self.catalog.file_manager
        system_input = recording_dir / SYSTEM_INPUT_NAME
        mic_input = recording_dir / MIC_INPUT_NAME

        try:
            file_manager.create_directory(recording_dir)
            file_manager.write_bytes(system_input, system_audio)
            if mic_audio is not None:
                file_manager.write_bytes(mic_input, mic_audio)
        except OSError as e:
            raise StorageError(f"Could not store raw inputs: {e}") from e

        renders: dict[TrackRole, Awaitable[Path]] = {
            TrackRole.SYSTEM: self.transcoder.encode(
                system_input,
                self.catalog.track_path(recording_id, TrackRole.SYSTEM, output_format),
                output_format,
            ),
        }
        if mic_audio is not None:
            renders[TrackRole.MIC] = self.transcoder.encode(
                mic_input,
                self.catalog.track_path(recording_id, TrackRole.MIC, output_format),
                output_format,
            )
            renders[TrackRole.MIXED] = self.transcoder.mix(
                system_input,
                mic_input,
                self.catalog.track_path(recording_id, TrackRole.MIXED, output_format),
                output_format,
                duck=options.duck_system_audio,
            )

        # Let every started encode finish before deciding, so rollback never
        # races a process still writing into the directory
        results = await asyncio.gather(*renders.values(), return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result

        try:
            file_manager.delete_file(system_input)
            file_manager.delete_file(mic_input)
        except OSError as e:
            raise StorageError(f"Could not remove raw inputs: {e}") from e

        tracks = RecordingTracks(
            **{role.value: role.filename(output_format) for role in renders}
        )
        return self.catalog.create_recording(
            recording_id=recording_id,
            duration=duration,
            has_mic=mic_audio is not None,
            has_system_audio=True,
            output_format=output_format,
            tracks=tracks,
        )

    @staticmethod
    def _reference(recording: Recording, role: TrackRole) -> TrackReference:
        return TrackReference(
            recording_id=recording.id,
            role=role,
            filename=recording.tracks.get(role) or role.filename(recording.format),
            content_type=recording.format.content_type,
            extension=recording.format.extension,
        )
