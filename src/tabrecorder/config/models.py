"""Configuration models for tabrecorder.

This module contains all configuration-related Pydantic models used throughout the application.
"""

from pydantic import BaseModel, Field, field_validator


class LoggingConfig(BaseModel):
    """Structlog-based logging configuration."""

    level: str = "INFO"
    json_logs: bool | None = None  # None = auto-detect based on environment
    include_caller: bool = False  # Include file:line info (useful for debugging)
    extra_fields: dict[str, str] = Field(default_factory=lambda: {"service": "tabrecorder"})


class RetentionConfig(BaseModel):
    """Recording retention and cleanup settings."""

    retention_days: int = Field(default=7, ge=1)  # Fixed at creation, never recomputed
    sweep_interval_seconds: int = Field(default=3600, ge=1)  # Hourly expiry sweep
    sweep_on_startup: bool = True


class RenderConfig(BaseModel):
    """Finalization (ffmpeg) settings."""

    ffmpeg_path: str = "ffmpeg"
    encode_timeout_seconds: float = Field(default=600.0, gt=0)
    max_concurrent_encodes: int = Field(default=4, ge=1)


class PreviewConfig(BaseModel):
    """Live effects preview settings."""

    sample_rate: int = 48000
    channels: int = Field(default=2, ge=1, le=2)
    blocksize: int = 1024
    input_device: int | str | None = None  # None = system default
    output_device: int | str | None = None

    @field_validator("input_device", "output_device")
    @classmethod
    def normalize_device(cls, v: int | str | None) -> int | str | None:
        """Treat -1 and blank strings as the system default device."""
        if v == -1 or (isinstance(v, str) and not v.strip()):
            return None
        return v


class TabRecorderConfig(BaseModel):
    """Configuration settings for the tabrecorder application."""

    site_name: str = "tabrecorder"

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    preview: PreviewConfig = Field(default_factory=PreviewConfig)
