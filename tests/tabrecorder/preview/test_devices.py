"""Tests for audio device discovery."""

import sys
from unittest.mock import MagicMock

from tabrecorder.preview.devices import AudioDeviceService


def _device(index: int, name: str, inputs: int, outputs: int) -> dict:
    return {
        "name": name,
        "index": index,
        "hostapi": 0,
        "max_input_channels": inputs,
        "max_output_channels": outputs,
        "default_samplerate": 48000.0,
    }


def test_discover_input_devices_filters_outputs(monkeypatch):
    """Should return only devices that can capture audio."""
    sounddevice = MagicMock()
    sounddevice.query_devices.return_value = [
        _device(0, "USB Microphone", 1, 0),
        _device(1, "Speakers", 0, 2),
        _device(2, "Headset", 1, 2),
    ]
    monkeypatch.setitem(sys.modules, "sounddevice", sounddevice)

    devices = AudioDeviceService().discover_input_devices()

    assert [d.name for d in devices] == ["USB Microphone", "Headset"]
    assert devices[1].to_dict()["max_output_channels"] == 2
