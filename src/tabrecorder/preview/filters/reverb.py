"""Multi-tap delay reverb send."""

from typing import Any

import numpy as np

from tabrecorder.preview.filters.base import AudioFilter
from tabrecorder.preview.filters.frequency import LowPassFilter

REVERB_TAP_DELAYS_MS = (29.0, 41.0, 53.0, 67.0, 83.0, 97.0, 113.0, 127.0)
REVERB_TAP_GAINS = (0.8, 0.7, 0.6, 0.5, 0.45, 0.4, 0.35, 0.3)


class MultiTapReverb(AudioFilter):
    """Parallel delay taps summed into a damped bus and blended with the dry signal."""

    def __init__(
        self,
        tap_delays_ms: tuple[float, ...] = REVERB_TAP_DELAYS_MS,
        tap_gains: tuple[float, ...] = REVERB_TAP_GAINS,
        damping_hz: float = 4000.0,
        dry_gain: float = 0.7,
        wet_gain: float = 0.5,
        name: str = "Reverb",
        enabled: bool = True,
    ) -> None:
        """Initialize the reverb.

        Args:
            tap_delays_ms: Delay of each tap in milliseconds
            tap_gains: Gain of each tap, one per delay
            damping_hz: Low-pass cutoff applied to the summed taps
            dry_gain: Level of the unprocessed signal in the output
            wet_gain: Level of the damped tap bus in the output
            name: Human-readable name for the node
            enabled: Whether the node is currently active
        """
        super().__init__(name, enabled)
        if len(tap_delays_ms) != len(tap_gains):
            raise ValueError("Each reverb tap needs exactly one gain")
        self.tap_delays_ms = tuple(tap_delays_ms)
        self.tap_gains = tuple(tap_gains)
        self.damping_hz = damping_hz
        self.dry_gain = dry_gain
        self.wet_gain = wet_gain
        self._damping = LowPassFilter(damping_hz, name=f"{name}Damping")
        self._delays: list[int] = []
        self._history: np.ndarray | None = None

    def configure(self, sample_rate: int, channels: int) -> None:
        """Convert tap delays to frames and clear the delay line."""
        super().configure(sample_rate, channels)
        self._delays = [max(1, round(ms * sample_rate / 1000.0)) for ms in self.tap_delays_ms]
        self._history = np.zeros((max(self._delays), channels), dtype=np.float32)
        self._damping.configure(sample_rate, channels)

    def process(self, audio_data: np.ndarray) -> np.ndarray:
        """Add the damped taps of this and earlier blocks to the dry signal."""
        if self._history is None:
            raise RuntimeError(f"MultiTapReverb '{self.name}' not configured")

        frames = len(audio_data)
        block = audio_data.reshape(frames, -1)
        span = len(self._history)
        line = np.concatenate((self._history, block), axis=0)

        bus = np.zeros_like(block)
        for delay, gain in zip(self._delays, self.tap_gains, strict=True):
            start = span - delay
            bus += np.float32(gain) * line[start : start + frames]
        self._history = line[-span:].copy()

        wet = self._damping.process(bus)
        mixed = np.float32(self.dry_gain) * block + np.float32(self.wet_gain) * wet
        return mixed.reshape(audio_data.shape).astype(np.float32)

    def get_parameters(self) -> dict[str, Any]:
        """Get current reverb parameters."""
        params = super().get_parameters()
        params.update(
            {
                "tap_delays_ms": list(self.tap_delays_ms),
                "tap_gains": list(self.tap_gains),
                "damping_hz": self.damping_hz,
                "dry_gain": self.dry_gain,
                "wet_gain": self.wet_gain,
            }
        )
        return params
