"""Dynamic range nodes: compressor and the compressor-based noise gate."""

import math
from typing import Any

import numpy as np

from tabrecorder.preview.filters.base import AudioFilter

_SILENCE_FLOOR = 1e-10


class DynamicsCompressor(AudioFilter):
    """Feed-forward compressor with a soft knee and attack/release smoothing.

    The detector is linked across channels (peak of all channels per frame) so
    the stereo image does not shift under gain reduction.
    """

    def __init__(
        self,
        threshold_db: float,
        ratio: float,
        knee_db: float,
        attack: float,
        release: float,
        name: str = "Compressor",
        enabled: bool = True,
    ) -> None:
        """Initialize the compressor.

        Args:
            threshold_db: Level above which gain reduction starts, in dBFS
            ratio: Input dB change per 1 dB of output change above threshold
            knee_db: Width of the soft knee centred on the threshold; 0 is a hard knee
            attack: Seconds to move toward more gain reduction
            release: Seconds to recover toward unity gain
            name: Human-readable name for the node
            enabled: Whether the node is currently active
        """
        super().__init__(name, enabled)
        if ratio < 1.0:
            raise ValueError(f"Compressor ratio must be >= 1, got {ratio}")
        self.threshold_db = threshold_db
        self.ratio = ratio
        self.knee_db = knee_db
        self.attack = attack
        self.release = release
        self._attack_coeff = 0.0
        self._release_coeff = 0.0
        self._gain_db = 0.0

    def configure(self, sample_rate: int, channels: int) -> None:
        """Derive smoothing coefficients and reset the envelope."""
        super().configure(sample_rate, channels)
        self._attack_coeff = math.exp(-1.0 / (self.attack * sample_rate))
        self._release_coeff = math.exp(-1.0 / (self.release * sample_rate))
        self._gain_db = 0.0

    def gain_reduction_db(self, level_db: np.ndarray) -> np.ndarray:
        """Static gain change (<= 0 dB) for detector levels in dBFS."""
        slope = 1.0 / self.ratio - 1.0
        over = level_db - self.threshold_db
        reduction = np.where(over > 0.0, over * slope, 0.0)
        if self.knee_db > 0.0:
            half_knee = self.knee_db / 2.0
            in_knee = np.abs(over) <= half_knee
            knee_curve = slope * (over + half_knee) ** 2 / (2.0 * self.knee_db)
            reduction = np.where(in_knee, knee_curve, reduction)
        return reduction

    def process(self, audio_data: np.ndarray) -> np.ndarray:
        """Compress one block, continuing the envelope from the previous block."""
        detector = np.max(np.abs(audio_data), axis=1) if audio_data.ndim > 1 else np.abs(audio_data)
        level_db = 20.0 * np.log10(np.maximum(detector, _SILENCE_FLOOR))
        targets = self.gain_reduction_db(level_db)

        attack, release = self._attack_coeff, self._release_coeff
        gain_db = self._gain_db
        smoothed = np.empty(len(targets), dtype=np.float64)
        for i, target in enumerate(targets.tolist()):
            coeff = attack if target < gain_db else release
            gain_db = coeff * gain_db + (1.0 - coeff) * target
            smoothed[i] = gain_db
        self._gain_db = gain_db

        gain = np.power(10.0, smoothed / 20.0)
        if audio_data.ndim > 1:
            gain = gain[:, np.newaxis]
        return (audio_data * gain).astype(np.float32)

    def get_parameters(self) -> dict[str, Any]:
        """Get current compressor parameters."""
        params = super().get_parameters()
        params.update(
            {
                "threshold_db": self.threshold_db,
                "ratio": self.ratio,
                "knee_db": self.knee_db,
                "attack": self.attack,
                "release": self.release,
            }
        )
        return params
