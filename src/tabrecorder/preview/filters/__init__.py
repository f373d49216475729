"""Preview effect nodes.

Nodes are chained in a FilterChain and process float32 blocks in real time.
"""

from tabrecorder.preview.filters.base import AudioFilter
from tabrecorder.preview.filters.chain import FilterChain
from tabrecorder.preview.filters.dynamics import DynamicsCompressor
from tabrecorder.preview.filters.frequency import HighPassFilter, LowPassFilter
from tabrecorder.preview.filters.gain import GainFilter
from tabrecorder.preview.filters.reverb import (
    REVERB_TAP_DELAYS_MS,
    REVERB_TAP_GAINS,
    MultiTapReverb,
)

__all__ = [
    "REVERB_TAP_DELAYS_MS",
    "REVERB_TAP_GAINS",
    "AudioFilter",
    "DynamicsCompressor",
    "FilterChain",
    "GainFilter",
    "HighPassFilter",
    "LowPassFilter",
    "MultiTapReverb",
]
