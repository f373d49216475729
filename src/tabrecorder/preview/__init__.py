"""Live effects preview for the microphone."""

from tabrecorder.preview.devices import AudioDevice, AudioDeviceService
from tabrecorder.preview.effects import EffectConfig, build_chain
from tabrecorder.preview.graph import EffectsGraph

__all__ = ["AudioDevice", "AudioDeviceService", "EffectConfig", "EffectsGraph", "build_chain"]
