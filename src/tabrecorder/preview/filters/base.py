"""Base audio node class for the preview effects chain."""

import logging
from abc import ABC, abstractmethod
from typing import Any

import numpy as np

logger = logging.getLogger(__name__)


class AudioFilter(ABC):
    """Abstract base class for preview effect nodes.

    Nodes process float32 blocks shaped ``(frames, channels)`` in the range
    [-1.0, 1.0] and keep whatever state they need between consecutive blocks.
    """

    def __init__(self, name: str, enabled: bool = True) -> None:
        """Initialize the node.

        Args:
            name: Human-readable name for the node
            enabled: Whether the node is currently active
        """
        self.name = name
        self.enabled = enabled
        self._sample_rate: int | None = None
        self._channels: int | None = None
        logger.debug("AudioFilter '%s' initialized (enabled=%s)", name, enabled)

    def configure(self, sample_rate: int, channels: int) -> None:
        """Configure the node for the stream's sample rate and channel count.

        Called once when the node joins a configured chain. Subclasses reset
        their inter-block state here.
        """
        self._sample_rate = sample_rate
        self._channels = channels
        logger.debug(
            "AudioFilter '%s' configured: %dHz, %d channels", self.name, sample_rate, channels
        )

    @abstractmethod
    def process(self, audio_data: np.ndarray) -> np.ndarray:
        """Process one block of float32 audio shaped (frames, channels).

        Returns:
            Processed block with the same shape as the input
        """

    def apply(self, audio_data: np.ndarray) -> np.ndarray:
        """Apply the node to a block if enabled.

        Raises:
            RuntimeError: If the node has not been configured
            ValueError: If the block is not float32
        """
        if not self.enabled:
            return audio_data

        if self._sample_rate is None or self._channels is None:
            raise RuntimeError(f"Filter '{self.name}' not configured. Call configure() first.")

        if audio_data.dtype != np.float32:
            raise ValueError(f"Expected float32 audio data, got {audio_data.dtype}")

        try:
            return self.process(audio_data)
        except Exception as e:
            logger.error("Error in filter '%s': %s", self.name, e)
            # Keep audio flowing on the real-time thread
            return audio_data

    def get_parameters(self) -> dict[str, Any]:
        """Get current node parameters for display and debugging."""
        return {
            "name": self.name,
            "enabled": self.enabled,
            "type": self.__class__.__name__,
            "sample_rate": self._sample_rate,
            "channels": self._channels,
        }

    def __str__(self) -> str:
        """Return string representation of the node."""
        status = "enabled" if self.enabled else "disabled"
        return f"{self.__class__.__name__}('{self.name}', {status})"
