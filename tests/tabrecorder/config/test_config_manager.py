"""Tests for ConfigManager."""

import pytest
import yaml

from tabrecorder.config import ConfigManager, TabRecorderConfig


class TestConfigManager:
    """Test ConfigManager functionality."""

    def test_load_creates_default_if_missing(self, path_resolver):
        """Should create and return the default config when no file exists."""
        config_path = path_resolver.get_config_path()
        assert not config_path.exists()

        config = ConfigManager(path_resolver).load()

        assert isinstance(config, TabRecorderConfig)
        assert config.retention.retention_days == 7
        assert config.retention.sweep_interval_seconds == 3600
        assert config.render.encode_timeout_seconds == 600.0
        assert config_path.exists()

    def test_load_existing_file(self, path_resolver):
        """Should read values from an existing YAML file and default the rest."""
        config_path = path_resolver.get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(
            yaml.dump(
                {
                    "site_name": "Studio",
                    "retention": {"retention_days": 2},
                    "render": {"ffmpeg_path": "/opt/ffmpeg/bin/ffmpeg"},
                    "preview": {"input_device": -1, "output_device": "Headphones"},
                }
            )
        )

        config = ConfigManager(path_resolver).load()

        assert config.site_name == "Studio"
        assert config.retention.retention_days == 2
        assert config.retention.sweep_on_startup is True
        assert config.render.ffmpeg_path == "/opt/ffmpeg/bin/ffmpeg"
        assert config.preview.input_device is None
        assert config.preview.output_device == "Headphones"

    def test_invalid_values_raise_value_error(self, path_resolver):
        """Should report validation failures as ValueError."""
        config_path = path_resolver.get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(yaml.dump({"retention": {"retention_days": 0}}))

        with pytest.raises(ValueError, match="validation failed"):
            ConfigManager(path_resolver).load()

    def test_empty_file_uses_defaults(self, path_resolver):
        """Should treat an empty file as all defaults."""
        config_path = path_resolver.get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text("")

        assert ConfigManager(path_resolver).load() == TabRecorderConfig()
