"""Recording catalog, retention and error taxonomy."""

from tabrecorder.recordings.catalog import CatalogStore, LoadResult
from tabrecorder.recordings.exceptions import (
    InputError,
    MissingInputError,
    NotFoundError,
    RecordingError,
    StorageError,
    TranscodeError,
)
from tabrecorder.recordings.models import (
    OutputFormat,
    Recording,
    RecordingsIndex,
    RecordingTracks,
    TrackRole,
)
from tabrecorder.recordings.retention import CleanupStats, RetentionScheduler

__all__ = [
    "CatalogStore",
    "CleanupStats",
    "InputError",
    "LoadResult",
    "MissingInputError",
    "NotFoundError",
    "OutputFormat",
    "RecordingError",
    "Recording",
    "RecordingTracks",
    "RecordingsIndex",
    "RetentionScheduler",
    "StorageError",
    "TrackRole",
    "TranscodeError",
]
