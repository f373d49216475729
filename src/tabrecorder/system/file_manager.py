import logging
import os
import shutil
import tempfile
from pathlib import Path

from tabrecorder.system.path_resolver import PathResolver

logger = logging.getLogger(__name__)


class FileManager:
    """Manages file system operations using PathResolver."""

    def __init__(self, path_resolver: PathResolver) -> None:
        self.path_resolver = path_resolver
        self.base_path = path_resolver.data_dir

    def create_directory(self, path: Path, exist_ok: bool = True) -> None:
        """Create a directory (and parents)."""
        full_path = self._resolve(path)
        full_path.mkdir(parents=True, exist_ok=exist_ok)

    def delete_file(self, path: Path) -> None:
        """Delete a file if it exists."""
        full_path = self._resolve(path)
        if full_path.is_file():
            full_path.unlink()

    def delete_directory(self, path: Path) -> bool:
        """Delete a directory and its contents, tolerating an already-missing directory.

        Returns:
            True if a directory was removed, False if there was nothing to remove
        """
        full_path = self._resolve(path)
        if not full_path.is_dir():
            return False
        shutil.rmtree(full_path)
        return True

    def list_subdirectories(self, path: Path) -> list[str]:
        """List the names of the directories directly inside path."""
        full_path = self._resolve(path)
        if not full_path.is_dir():
            return []
        return [p.name for p in full_path.iterdir() if p.is_dir()]

    def file_exists(self, path: Path) -> bool:
        """Check if a file exists."""
        return self._resolve(path).is_file()

    def file_size(self, path: Path) -> int:
        """Size of a file in bytes."""
        return self._resolve(path).stat().st_size

    def read_bytes(self, path: Path, start: int = 0, length: int | None = None) -> bytes:
        """Read a byte range from a file; the whole remainder when length is None."""
        with open(self._resolve(path), "rb") as f:
            f.seek(start)
            return f.read() if length is None else f.read(length)

    def write_bytes(self, path: Path, content: bytes) -> None:
        """Write binary content to a file, creating parent directories."""
        full_path = self._resolve(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)

    def write_file_atomic(self, path: Path, content: str, encoding: str = "utf-8") -> None:
        """Replace a file's content so readers see either the old or the new file.

        The temporary file lives in the destination directory so the final
        ``os.replace`` never crosses a filesystem boundary.
        """
        full_path = self._resolve(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{full_path.name}-", suffix=".tmp", dir=full_path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding=encoding) as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, full_path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        logger.debug("Atomically wrote %s (%d bytes)", full_path, len(content))

    def _resolve(self, path: Path) -> Path:
        # Absolute paths pass through untouched (joining returns them as-is)
        return self.base_path / path
