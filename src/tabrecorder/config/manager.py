"""Configuration loading."""

import logging
from typing import Any

import yaml
from pydantic import ValidationError

from tabrecorder.config.models import TabRecorderConfig
from tabrecorder.system.path_resolver import PathResolver

logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads and validates configuration from YAML."""

    def __init__(self, path_resolver: PathResolver | None = None):
        """Initialize ConfigManager.

        Args:
            path_resolver: Optional PathResolver instance. If None, creates a new one.
        """
        self.path_resolver = path_resolver or PathResolver()
        self.config_path = self.path_resolver.get_config_path()

    def load(self) -> TabRecorderConfig:
        """Load configuration, creating the file from defaults if it does not exist.

        Returns:
            TabRecorderConfig: Loaded and validated configuration

        Raises:
            ValueError: If the file contents fail validation
        """
        self._ensure_config_exists()
        raw_config = self._read_yaml()

        try:
            return TabRecorderConfig.model_validate(raw_config)
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e}") from e

    def _ensure_config_exists(self) -> None:
        if self.config_path.exists():
            return
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        defaults = TabRecorderConfig().model_dump()
        self.config_path.write_text(
            yaml.dump(defaults, default_flow_style=False, sort_keys=False)
        )
        logger.info("Created default configuration at %s", self.config_path)

    def _read_yaml(self) -> dict[str, Any]:
        return yaml.safe_load(self.config_path.read_text()) or {}
