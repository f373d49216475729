"""Recording API routes: rendering, listing, deletion and track retrieval."""

import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from fastapi.responses import FileResponse

from tabrecorder.recordings.catalog import CatalogStore
from tabrecorder.recordings.exceptions import InputError, NotFoundError
from tabrecorder.recordings.models import OutputFormat, Recording, TrackRole
from tabrecorder.recordings.retention import RetentionScheduler
from tabrecorder.render.pipeline import RenderOptions, RenderPipeline
from tabrecorder.system.file_manager import FileManager
from tabrecorder.web.core.container import Container
from tabrecorder.web.models.recordings import (
    DeleteRecordingResponse,
    ProcessResponse,
    RecordingListResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()

RANGE_PATTERN = re.compile(r"bytes=(\d+)-(\d*)")
TRACK_CACHE_CONTROL = "private, max-age=3600"


def parse_output_format(value: str | None) -> OutputFormat:
    """Parse the requested output format; blank means mp3."""
    if not value:
        return OutputFormat.MP3
    try:
        return OutputFormat(value.lower())
    except ValueError as e:
        raise InputError(f"Unsupported output format: {value}") from e


def parse_duration(value: str | None) -> int:
    """Parse a caller-reported duration in seconds; anything unparsable counts as 0."""
    try:
        return max(int(value or 0), 0)
    except ValueError:
        return 0


def resolve_track(
    catalog: CatalogStore, file_manager: FileManager, recording_id: str, track: str
) -> tuple[Recording, Path]:
    """Look up a recording's track and return the entry with the track's path.

    Raises:
        InputError: If the track name is not a known role
        NotFoundError: If the recording, the track or its file does not exist
    """
    try:
        role = TrackRole(track)
    except ValueError as e:
        raise InputError("Invalid track name") from e

    recording = catalog.get(recording_id)
    if recording is None:
        raise NotFoundError("Recording not found")

    filename = recording.tracks.get(role)
    if filename is None:
        raise NotFoundError("Track not found")
    path = catalog.recording_dir(recording_id) / filename
    if not file_manager.file_exists(path):
        logger.warning("Indexed track %s of %s missing on disk", role.value, recording_id)
        raise NotFoundError("Track not found")
    return recording, path


@router.post("/process", response_model=ProcessResponse)
@inject
async def process_recording(
    render_pipeline: Annotated[RenderPipeline, Depends(Provide[Container.render_pipeline])],
    system_audio: Annotated[UploadFile | None, File(alias="systemAudio")] = None,
    mic_audio: Annotated[UploadFile | None, File(alias="micAudio")] = None,
    duck_system_audio: Annotated[str, Form(alias="duckSystemAudio")] = "false",
    output_format: Annotated[str, Form(alias="outputFormat")] = "mp3",
    duration: Annotated[str, Form()] = "0",
) -> ProcessResponse:
    """Render uploaded captures into final tracks and register the recording.

    Args:
        render_pipeline: Pipeline that encodes and catalogs the recording
        system_audio: Captured tab/system audio (required)
        mic_audio: Captured microphone audio, if recorded
        duck_system_audio: "true" to duck system audio under the voice in the mix
        output_format: One of mp3, aac, opus
        duration: Caller-measured duration in seconds

    Returns:
        Download paths for each produced track
    """
    options = RenderOptions(
        output_format=parse_output_format(output_format),
        duck_system_audio=duck_system_audio == "true",
    )
    system_bytes = await system_audio.read() if system_audio is not None else None
    mic_bytes = await mic_audio.read() if mic_audio is not None else None

    result = await render_pipeline.render(
        system_bytes, mic_bytes, options, duration=parse_duration(duration)
    )
    return ProcessResponse.from_result(result)


@router.get("/recordings", response_model=RecordingListResponse)
@inject
async def list_recordings(
    catalog: Annotated[CatalogStore, Depends(Provide[Container.catalog_store])],
    scheduler: Annotated[RetentionScheduler, Depends(Provide[Container.retention_scheduler])],
) -> RecordingListResponse:
    """List every live recording, newest first.

    Expired recordings are swept before listing, and never appear even when
    the sweep could not remove them.
    """
    await scheduler.run_once()
    now = datetime.now(UTC)
    live = [r for r in catalog.list() if not r.is_expired(now)]
    recordings = sorted(live, key=lambda r: r.created_at, reverse=True)
    return RecordingListResponse(recordings=recordings)


@router.delete("/recordings/{recording_id}", response_model=DeleteRecordingResponse)
@inject
async def delete_recording(
    recording_id: str,
    catalog: Annotated[CatalogStore, Depends(Provide[Container.catalog_store])],
) -> DeleteRecordingResponse:
    """Delete a recording and all of its tracks."""
    if not catalog.delete(recording_id):
        raise NotFoundError("Recording not found")
    return DeleteRecordingResponse(success=True)


@router.get("/recordings/{recording_id}/{track}/download")
@inject
async def download_track(
    recording_id: str,
    track: str,
    catalog: Annotated[CatalogStore, Depends(Provide[Container.catalog_store])],
    file_manager: Annotated[FileManager, Depends(Provide[Container.file_manager])],
) -> FileResponse:
    """Serve a track as an attachment named ``<track>-<id>.<ext>``."""
    recording, path = resolve_track(catalog, file_manager, recording_id, track)
    return FileResponse(
        path=path,
        media_type=recording.format.content_type,
        filename=f"{track}-{recording_id}.{recording.format.extension}",
    )


@router.get("/recordings/{recording_id}/{track}/preview")
@inject
async def preview_track(
    recording_id: str,
    track: str,
    request: Request,
    catalog: Annotated[CatalogStore, Depends(Provide[Container.catalog_store])],
    file_manager: Annotated[FileManager, Depends(Provide[Container.file_manager])],
) -> Response:
    """Serve a track inline, honouring a single ``Range: bytes=start-[end]`` request.

    Returns:
        206 with the requested slice, 416 when the start lies past the end
        of the file, or 200 with the whole file when no usable range is given
    """
    recording, path = resolve_track(catalog, file_manager, recording_id, track)
    content_type = recording.format.content_type
    file_size = file_manager.file_size(path)

    match = RANGE_PATTERN.match(request.headers.get("range", ""))
    if match:
        start = int(match.group(1))
        end = min(int(match.group(2)), file_size - 1) if match.group(2) else file_size - 1
        if start >= file_size or end < start:
            return Response(status_code=416, headers={"Content-Range": f"bytes */{file_size}"})

        chunk = file_manager.read_bytes(path, start, end - start + 1)
        return Response(
            content=chunk,
            status_code=206,
            media_type=content_type,
            headers={
                "Content-Range": f"bytes {start}-{end}/{file_size}",
                "Accept-Ranges": "bytes",
                "Cache-Control": TRACK_CACHE_CONTROL,
            },
        )

    return Response(
        content=file_manager.read_bytes(path),
        media_type=content_type,
        headers={"Accept-Ranges": "bytes", "Cache-Control": TRACK_CACHE_CONTROL},
    )
