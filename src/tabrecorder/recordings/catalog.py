"""Durable registry of recording entries.

The index is a single JSON document rewritten in full on every mutation. Writes
go through an atomic replace so readers never observe a half-written index,
and every read-modify-write runs under one process-wide lock so concurrent
mutations cannot lose each other's updates. Reads take no lock and may be
slightly stale.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from tabrecorder.recordings.exceptions import StorageError
from tabrecorder.recordings.models import (
    OutputFormat,
    Recording,
    RecordingsIndex,
    RecordingTracks,
    TrackRole,
)
from tabrecorder.system.file_manager import FileManager
from tabrecorder.system.path_resolver import PathResolver

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=7)

# Guards every read-modify-write of the index, across all CatalogStore instances
_MUTATION_LOCK = threading.RLock()


@dataclass(frozen=True)
class LoadResult:
    """Outcome of reading the index from disk."""

    index: RecordingsIndex
    loaded_from_disk: bool


class CatalogStore:
    """Catalog of finished recordings backed by an atomically replaced JSON index."""

    def __init__(
        self,
        path_resolver: PathResolver,
        file_manager: FileManager,
        retention: timedelta = DEFAULT_RETENTION,
    ) -> None:
        """Initialize the catalog.

        Args:
            path_resolver: Resolves the index file and artifact directories
            file_manager: Performs atomic writes and directory removal
            retention: How long after creation an entry expires
        """
        self.path_resolver = path_resolver
        self.file_manager = file_manager
        self.retention = retention
        self.index_path = path_resolver.get_index_path()
        self.recordings_dir = path_resolver.get_recordings_dir()
        self._pending: set[str] = set()
        self._pending_lock = threading.Lock()

    def initialize(self) -> None:
        """Ensure the data directories and an index file exist."""
        try:
            self.file_manager.create_directory(self.recordings_dir)
            with _MUTATION_LOCK:
                if not self.index_path.exists():
                    self._save(RecordingsIndex())
                    logger.info("Created empty recordings index at %s", self.index_path)
        except OSError as e:
            raise StorageError(f"Could not initialize catalog storage: {e}") from e

    def load(self) -> LoadResult:
        """Read the index from disk.

        A missing or unparsable index is reported as an empty index with
        ``loaded_from_disk=False`` rather than raised.
        """
        try:
            raw = self.index_path.read_bytes()
        except FileNotFoundError:
            return LoadResult(RecordingsIndex(), loaded_from_disk=False)
        except OSError as e:
            logger.warning("Could not read recordings index %s: %s", self.index_path, e)
            return LoadResult(RecordingsIndex(), loaded_from_disk=False)

        try:
            index = RecordingsIndex.model_validate_json(raw)
        except ValueError as e:
            # pydantic ValidationError, or bytes that are not UTF-8
            logger.warning(
                "Recordings index %s is corrupt, treating as empty: %s",
                self.index_path,
                e,
            )
            return LoadResult(RecordingsIndex(), loaded_from_disk=False)
        return LoadResult(index, loaded_from_disk=True)

    def create(self, entry: Recording) -> Recording:
        """Append an entry and persist the index.

        Raises:
            StorageError: If the id is already indexed or the index cannot be written
        """
        with _MUTATION_LOCK:
            index = self.load().index
            if index.find(entry.id) is not None:
                raise StorageError(f"Recording {entry.id} already exists")
            index.recordings.append(entry)
            self._save(index)
        logger.info("Registered recording %s (%s)", entry.id, ", ".join(entry.tracks.roles()))
        return entry

    def create_recording(
        self,
        recording_id: str,
        duration: int,
        has_mic: bool,
        has_system_audio: bool,
        output_format: OutputFormat,
        tracks: RecordingTracks,
        now: datetime | None = None,
    ) -> Recording:
        """Build an entry stamped with its creation and expiry time, then create it."""
        created_at = now or datetime.now(UTC)
        entry = Recording(
            id=recording_id,
            created_at=created_at,
            expires_at=created_at + self.retention,
            duration=duration,
            has_mic=has_mic,
            has_system_audio=has_system_audio,
            format=output_format,
            tracks=tracks,
        )
        return self.create(entry)

    def get(self, recording_id: str) -> Recording | None:
        """Return the entry with the given id, or None if it is not indexed."""
        return self.load().index.find(recording_id)

    def list(self) -> list[Recording]:
        """Return every indexed entry in storage order."""
        return list(self.load().index.recordings)

    def delete(self, recording_id: str) -> bool:
        """Remove a recording's artifacts and its index entry.

        Artifact removal is best-effort; the entry is removed even if the
        directory is already gone or cannot be fully deleted.

        Returns:
            True if the entry existed, False otherwise
        """
        with _MUTATION_LOCK:
            index = self.load().index
            entry = index.find(recording_id)
            if entry is None:
                return False

            self.remove_artifacts(recording_id)

            index.recordings = [r for r in index.recordings if r.id != recording_id]
            self._save(index)
        logger.info("Deleted recording %s", recording_id)
        return True

    def remove_artifacts(self, recording_id: str) -> bool:
        """Best-effort removal of a recording's artifact directory."""
        try:
            return self.file_manager.delete_directory(self.recording_dir(recording_id))
        except OSError as e:
            logger.warning("Could not remove artifacts of %s: %s", recording_id, e)
            return False

    def recording_dir(self, recording_id: str) -> Path:
        """Directory holding a recording's artifacts."""
        return self.path_resolver.get_recording_dir(recording_id)

    def track_path(self, recording_id: str, role: TrackRole, output_format: OutputFormat) -> Path:
        """Path of a rendered track artifact."""
        return self.recording_dir(recording_id) / role.filename(output_format)

    @contextmanager
    def reserve(self, recording_id: str) -> Iterator[None]:
        """Mark a recording as being produced so orphan cleanup leaves its directory alone."""
        with self._pending_lock:
            self._pending.add(recording_id)
        try:
            yield
        finally:
            with self._pending_lock:
                self._pending.discard(recording_id)

    def pending_ids(self) -> set[str]:
        """Ids of recordings currently being produced."""
        with self._pending_lock:
            return set(self._pending)

    def _save(self, index: RecordingsIndex) -> None:
        payload = index.model_dump_json(by_alias=True, indent=2)
        try:
            self.file_manager.write_file_atomic(self.index_path, payload)
        except OSError as e:
            raise StorageError(f"Could not write recordings index: {e}") from e
