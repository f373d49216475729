import os
from pathlib import Path


class PathResolver:
    """Central authority for all file path resolution in tabrecorder.

    Uses environment variables for configuration with sensible defaults.
    """

    def __init__(self) -> None:
        """Initialize PathResolver with environment-based configuration."""
        self.data_dir = Path(os.getenv("TABRECORDER_DATA", Path.cwd() / "data"))

    def get_data_dir(self) -> Path:
        """Get the data directory where all runtime data is stored."""
        return self.data_dir

    def get_config_path(self) -> Path:
        """Get the path to the main configuration file.

        Checks TABRECORDER_CONFIG environment variable first, then falls back to default.
        """
        config_path = os.getenv("TABRECORDER_CONFIG")
        if config_path:
            return Path(config_path)
        return self.data_dir / "config" / "tabrecorder.yaml"

    def get_recordings_dir(self) -> Path:
        """Get the directory holding one artifact directory per recording."""
        return self.data_dir / "recordings"

    def get_index_path(self) -> Path:
        """Get the path to the recordings index."""
        return self.data_dir / "recordings.json"

    def get_recording_dir(self, recording_id: str) -> Path:
        """Get the artifact directory for a recording.

        Args:
            recording_id: Catalog id of the recording

        Raises:
            ValueError: If the id would resolve outside the recordings directory
        """
        if recording_id in ("", ".", "..") or any(sep in recording_id for sep in ("/", "\\")):
            raise ValueError(f"Invalid recording id: {recording_id!r}")
        return self.get_recordings_dir() / recording_id
