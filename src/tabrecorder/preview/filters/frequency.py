"""Frequency-shaping nodes."""

import logging
from typing import Any

import numpy as np
from scipy import signal

from tabrecorder.preview.filters.base import AudioFilter

logger = logging.getLogger(__name__)


class _ButterworthFilter(AudioFilter):
    """Butterworth filter with per-channel state carried between blocks."""

    btype = ""

    def __init__(
        self,
        cutoff_frequency: float,
        name: str,
        enabled: bool = True,
        order: int = 2,
    ) -> None:
        """Initialize the filter.

        Args:
            cutoff_frequency: -3 dB point in Hz
            name: Human-readable name for the node
            enabled: Whether the node is currently active
            order: Filter order; 2 matches a single biquad section
        """
        super().__init__(name, enabled)
        self.cutoff_frequency = cutoff_frequency
        self.order = order
        self._sos: np.ndarray | None = None
        self._zi: np.ndarray | None = None

    def configure(self, sample_rate: int, channels: int) -> None:
        """Design the filter for the stream and reset its state."""
        super().configure(sample_rate, channels)

        nyquist = sample_rate / 2
        normalized_cutoff = self.cutoff_frequency / nyquist
        if normalized_cutoff >= 1.0:
            logger.warning(
                "%s '%s': cutoff %dHz >= Nyquist %dHz, clamping",
                self.__class__.__name__,
                self.name,
                self.cutoff_frequency,
                nyquist,
            )
            normalized_cutoff = 0.99

        self._sos = signal.butter(self.order, normalized_cutoff, btype=self.btype, output="sos")
        self._zi = np.zeros((self._sos.shape[0], 2, channels))
        logger.debug(
            "%s '%s' configured: %dHz cutoff, order %d",
            self.__class__.__name__,
            self.name,
            self.cutoff_frequency,
            self.order,
        )

    def process(self, audio_data: np.ndarray) -> np.ndarray:
        """Filter one block, continuing from the previous block's state."""
        if self._sos is None or self._zi is None:
            raise RuntimeError(f"{self.__class__.__name__} '{self.name}' not configured")

        block = audio_data.reshape(len(audio_data), -1)
        filtered, self._zi = signal.sosfilt(self._sos, block, axis=0, zi=self._zi)
        return filtered.reshape(audio_data.shape).astype(np.float32)

    def get_parameters(self) -> dict[str, Any]:
        """Get current filter parameters."""
        params = super().get_parameters()
        params.update({"cutoff_frequency": self.cutoff_frequency, "order": self.order})
        return params


class HighPassFilter(_ButterworthFilter):
    """Removes low-frequency rumble such as desk thumps and HVAC hum."""

    btype = "high"

    def __init__(
        self, cutoff_frequency: float, name: str = "HighPass", enabled: bool = True, order: int = 2
    ) -> None:
        super().__init__(cutoff_frequency, name, enabled, order)


class LowPassFilter(_ButterworthFilter):
    """Attenuates content above the cutoff."""

    btype = "low"

    def __init__(
        self, cutoff_frequency: float, name: str = "LowPass", enabled: bool = True, order: int = 2
    ) -> None:
        super().__init__(cutoff_frequency, name, enabled, order)
