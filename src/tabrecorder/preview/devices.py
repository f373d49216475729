"""Audio device discovery for preview device selection."""

import logging
from dataclasses import asdict, dataclass

logger = logging.getLogger(__name__)


@dataclass
class AudioDevice:
    """Represents an audio input/output device."""

    name: str
    index: int
    host_api_index: int
    max_input_channels: int
    max_output_channels: int
    default_samplerate: float

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return asdict(self)


class AudioDeviceService:
    """Service for discovering audio devices through PortAudio."""

    def discover_input_devices(self) -> list[AudioDevice]:
        """Discovers available audio input devices and returns them as AudioDevice instances."""
        # PortAudio is loaded on first use so importing this module never needs it
        import sounddevice as sd

        logger.debug("Discovering audio input devices...")
        input_devices = [
            AudioDevice(
                name=device["name"],
                index=device["index"],
                host_api_index=device["hostapi"],
                max_input_channels=device["max_input_channels"],
                max_output_channels=device["max_output_channels"],
                default_samplerate=device["default_samplerate"],
            )
            for device in sd.query_devices()
            if device["max_input_channels"] > 0
        ]
        logger.debug("Found %d input device(s).", len(input_devices))
        return input_devices
