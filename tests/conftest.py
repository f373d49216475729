import asyncio
import uuid
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest

from tabrecorder.config import ConfigManager
from tabrecorder.config.models import TabRecorderConfig
from tabrecorder.recordings.catalog import CatalogStore
from tabrecorder.recordings.exceptions import TranscodeError
from tabrecorder.recordings.models import OutputFormat, Recording, RecordingTracks, TrackRole
from tabrecorder.system.file_manager import FileManager
from tabrecorder.system.path_resolver import PathResolver


@pytest.fixture
def path_resolver(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> PathResolver:
    """Provide a PathResolver whose data directory is an isolated temp directory.

    The environment is patched as well so code that builds its own
    PathResolver (the CLI, the web app factory) resolves the same paths.
    """
    monkeypatch.setenv("TABRECORDER_DATA", str(tmp_path / "data"))
    monkeypatch.delenv("TABRECORDER_CONFIG", raising=False)
    resolver = PathResolver()
    resolver.get_data_dir().mkdir(parents=True, exist_ok=True)
    return resolver


@pytest.fixture
def test_config(path_resolver: PathResolver) -> TabRecorderConfig:
    """Load default configuration from the temp config path (created on first load)."""
    return ConfigManager(path_resolver).load()


@pytest.fixture
def file_manager(path_resolver: PathResolver) -> FileManager:
    """Provide a FileManager rooted at the temp data directory."""
    return FileManager(path_resolver)


@pytest.fixture
def catalog_store(path_resolver: PathResolver, file_manager: FileManager) -> CatalogStore:
    """Provide an initialized catalog with an empty index."""
    store = CatalogStore(path_resolver, file_manager)
    store.initialize()
    return store


@pytest.fixture
def make_recording(catalog_store: CatalogStore) -> Callable[..., Recording]:
    """Register a recording, optionally writing placeholder track files.

    Track files contain ``b"<role>-audio"`` so retrieval tests can check bodies.
    """

    def _make(
        recording_id: str | None = None,
        created_at: datetime | None = None,
        output_format: OutputFormat = OutputFormat.MP3,
        with_mic: bool = True,
        write_files: bool = True,
    ) -> Recording:
        recording_id = recording_id or str(uuid.uuid4())
        roles = [TrackRole.SYSTEM]
        if with_mic:
            roles += [TrackRole.MIC, TrackRole.MIXED]
        if write_files:
            for role in roles:
                path = catalog_store.track_path(recording_id, role, output_format)
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(f"{role.value}-audio".encode())
        tracks = RecordingTracks(**{role.value: role.filename(output_format) for role in roles})
        return catalog_store.create_recording(
            recording_id=recording_id,
            duration=12,
            has_mic=with_mic,
            has_system_audio=True,
            output_format=output_format,
            tracks=tracks,
            now=created_at,
        )

    return _make


class FakeTranscoder:
    """Writes placeholder outputs instead of running ffmpeg.

    Outputs whose stem is listed in ``fail_stems`` fail with TranscodeError.
    When ``gate`` is set every encode waits for it before producing output.
    """

    def __init__(self, catalog: CatalogStore) -> None:
        self.catalog = catalog
        self.fail_stems: tuple[str, ...] = ()
        self.gate: asyncio.Event | None = None
        self.calls: list[tuple] = []
        self.pending_seen: list[set[str]] = []

    async def _produce(self, output_path: Path) -> Path:
        self.pending_seen.append(self.catalog.pending_ids())
        if self.gate is not None:
            await self.gate.wait()
        if output_path.stem in self.fail_stems:
            raise TranscodeError("ffmpeg failed", codec="libmp3lame", returncode=1)
        output_path.write_bytes(f"encoded {output_path.name}".encode())
        return output_path

    async def encode(self, input_path: Path, output_path: Path, output_format) -> Path:
        self.calls.append(("encode", input_path.name, output_path.name))
        return await self._produce(output_path)

    async def mix(
        self, system_input: Path, mic_input: Path, output_path: Path, output_format, duck
    ) -> Path:
        self.calls.append(("mix", system_input.name, mic_input.name, output_path.name, duck))
        return await self._produce(output_path)


@pytest.fixture
def fake_transcoder(catalog_store: CatalogStore) -> FakeTranscoder:
    """Provide a transcoder stand-in bound to the test catalog."""
    return FakeTranscoder(catalog_store)
