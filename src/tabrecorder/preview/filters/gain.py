"""Linear gain node."""

from typing import Any

import numpy as np

from tabrecorder.preview.filters.base import AudioFilter


class GainFilter(AudioFilter):
    """Multiplies every sample by a fixed linear gain."""

    def __init__(self, gain: float, name: str = "Gain", enabled: bool = True) -> None:
        super().__init__(name, enabled)
        self.gain = gain

    def process(self, audio_data: np.ndarray) -> np.ndarray:
        """Scale the block."""
        return (audio_data * np.float32(self.gain)).astype(np.float32)

    def get_parameters(self) -> dict[str, Any]:
        """Get current gain."""
        params = super().get_parameters()
        params["gain"] = self.gain
        return params
