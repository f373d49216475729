"""Tests for the preview effect nodes."""

import numpy as np
import pytest

from tabrecorder.preview.filters import (
    DynamicsCompressor,
    FilterChain,
    GainFilter,
    HighPassFilter,
    LowPassFilter,
    MultiTapReverb,
)

SAMPLE_RATE = 48000


def _sine(frequency: float, amplitude: float = 0.5, seconds: float = 0.2, channels: int = 2):
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    mono = (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)
    return np.repeat(mono[:, np.newaxis], channels, axis=1)


def _rms(block: np.ndarray) -> float:
    return float(np.sqrt(np.mean(np.square(block, dtype=np.float64))))


def _configured(node, channels: int = 2):
    node.configure(SAMPLE_RATE, channels)
    return node


class TestAudioFilterBase:
    """Test behaviour shared by every node."""

    def test_apply_requires_configuration(self):
        """Should refuse to process before configure()."""
        with pytest.raises(RuntimeError, match="not configured"):
            GainFilter(2.0).apply(_sine(440))

    def test_apply_requires_float32(self):
        """Should reject non-float32 blocks."""
        node = _configured(GainFilter(2.0))

        with pytest.raises(ValueError, match="float32"):
            node.apply(np.zeros((16, 2), dtype=np.int16))

    def test_disabled_node_passes_through(self):
        """Should return the block untouched when disabled."""
        node = _configured(GainFilter(2.0, enabled=False))
        block = _sine(440)

        assert node.apply(block) is block

    def test_parameters_describe_node(self):
        """Should expose its type and settings."""
        params = _configured(HighPassFilter(80.0)).get_parameters()

        assert params["type"] == "HighPassFilter"
        assert params["cutoff_frequency"] == 80.0
        assert params["sample_rate"] == SAMPLE_RATE


class TestFrequencyFilters:
    """Test Butterworth nodes."""

    def test_highpass_removes_rumble(self):
        """Should strongly attenuate content well below the cutoff."""
        node = _configured(HighPassFilter(80.0))

        rumble = node.apply(_sine(15, seconds=0.5))
        voice = _configured(HighPassFilter(80.0)).apply(_sine(1000, seconds=0.5))

        assert _rms(rumble[-4800:]) < 0.05 * _rms(_sine(15))
        assert _rms(voice[-4800:]) == pytest.approx(_rms(_sine(1000)), rel=0.05)

    def test_lowpass_removes_highs(self):
        """Should attenuate content well above the cutoff."""
        node = _configured(LowPassFilter(4000.0))

        output = node.apply(_sine(16000))

        assert _rms(output[-2400:]) < 0.1 * _rms(_sine(16000))

    def test_state_carries_across_blocks(self):
        """Should give the same result whether a signal arrives in one block or many."""
        signal = _sine(200, seconds=0.1)
        whole = _configured(HighPassFilter(80.0)).apply(signal)

        node = _configured(HighPassFilter(80.0))
        pieces = np.concatenate([node.apply(chunk) for chunk in np.array_split(signal, 7)])

        np.testing.assert_allclose(pieces, whole, atol=1e-5)

    def test_mono_vector_block(self):
        """Should filter a one-dimensional mono block and keep its shape."""
        mono = _sine(15, seconds=0.5, channels=1)[:, 0]
        node = _configured(HighPassFilter(80.0), channels=1)

        output = node.apply(mono)

        assert output.shape == mono.shape
        assert _rms(output[-4800:]) < 0.05 * _rms(mono)

    def test_cutoff_above_nyquist_clamped(self):
        """Should still configure when the cutoff is beyond Nyquist."""
        node = _configured(LowPassFilter(30000.0))

        assert node.apply(_sine(440)).dtype == np.float32


class TestGain:
    """Test linear gain."""

    def test_scales_block(self):
        """Should multiply every sample by the gain."""
        block = _sine(440, amplitude=0.2)

        output = _configured(GainFilter(2.5)).apply(block)

        np.testing.assert_allclose(output, block * 2.5, rtol=1e-6)
        assert output.dtype == np.float32


class TestDynamicsCompressor:
    """Test the compressor and the compressor-based noise gate."""

    def test_static_curve(self):
        """Should apply no reduction below the knee and full ratio above it."""
        node = DynamicsCompressor(-24.0, 4.0, 30.0, 0.003, 0.25)

        reduction = node.gain_reduction_db(np.array([-60.0, -24.0, 0.0]))

        np.testing.assert_allclose(reduction, [0.0, -2.8125, -18.0])

    def test_hard_knee(self):
        """Should switch straight from unity to the ratio with no knee."""
        node = DynamicsCompressor(-50.0, 20.0, 0.0, 0.003, 0.1)

        reduction = node.gain_reduction_db(np.array([-60.0, -50.0, -30.0]))

        np.testing.assert_allclose(reduction, [0.0, 0.0, -19.0])

    def test_quiet_signal_untouched(self):
        """Should leave signals below threshold unchanged."""
        block = _sine(440, amplitude=0.001)
        node = _configured(DynamicsCompressor(-24.0, 4.0, 30.0, 0.003, 0.25))

        np.testing.assert_allclose(node.apply(block), block, rtol=1e-5, atol=1e-9)

    def test_loud_signal_compressed(self):
        """Should pull a full-scale signal well down once the envelope settles."""
        node = _configured(DynamicsCompressor(-24.0, 4.0, 30.0, 0.003, 0.25))

        output = node.apply(_sine(440, amplitude=1.0, seconds=0.5))

        assert np.max(np.abs(output[-4800:])) < 0.5

    def test_gate_settings_squash_loud_input(self):
        """Should reduce anything above -50 dBFS by a 20:1 ratio."""
        node = _configured(DynamicsCompressor(-50.0, 20.0, 0.0, 0.003, 0.1, name="NoiseGate"))

        output = node.apply(_sine(440, amplitude=0.1, seconds=0.5))

        assert np.max(np.abs(output[-4800:])) < 0.02

    def test_rejects_expanding_ratio(self):
        """Should refuse ratios below 1."""
        with pytest.raises(ValueError):
            DynamicsCompressor(-24.0, 0.5, 0.0, 0.003, 0.25)


class TestMultiTapReverb:
    """Test the multi-tap reverb send."""

    def test_impulse_echoes_at_first_tap(self):
        """Should pass the dry impulse and add its first echo after 29 ms."""
        node = _configured(MultiTapReverb(), channels=1)
        impulse = np.zeros((4800, 1), dtype=np.float32)
        impulse[0] = 1.0

        output = node.apply(impulse)
        first_tap = round(0.029 * SAMPLE_RATE)

        assert output[0, 0] == pytest.approx(0.7, abs=1e-3)
        assert np.max(np.abs(output[1:first_tap])) < 1e-6
        assert np.sum(np.abs(output[first_tap : first_tap + 200])) > 0.01

    def test_echo_crosses_block_boundary(self):
        """Should deliver echoes of one block inside the next."""
        node = _configured(MultiTapReverb(), channels=1)
        first = np.zeros((1024, 1), dtype=np.float32)
        first[0] = 1.0
        second = np.zeros((1024, 1), dtype=np.float32)

        node.apply(first)
        tail = node.apply(second)

        assert np.sum(np.abs(tail)) > 0.01

    def test_mismatched_taps_rejected(self):
        """Should require one gain per tap."""
        with pytest.raises(ValueError):
            MultiTapReverb(tap_delays_ms=(10.0, 20.0), tap_gains=(0.5,))


class TestFilterChain:
    """Test chaining nodes."""

    def test_empty_chain_is_passthrough(self):
        """Should return the input unchanged with no nodes."""
        chain = FilterChain()
        chain.configure(SAMPLE_RATE, 2)
        block = _sine(440)

        assert chain.process(block) is block

    def test_nodes_run_in_order(self):
        """Should feed each node's output to the next."""
        chain = FilterChain("Test")
        chain.add_filter(GainFilter(2.0, name="Double"))
        chain.add_filter(GainFilter(0.25, name="Quarter"))
        chain.configure(SAMPLE_RATE, 2)
        block = _sine(440)

        np.testing.assert_allclose(chain.process(block), block * 0.5, rtol=1e-6)
        assert chain.get_filter_names() == ["Double", "Quarter"]
        assert len(chain) == 2

    def test_late_nodes_configured(self):
        """Should configure nodes added after the chain was configured."""
        chain = FilterChain()
        chain.configure(SAMPLE_RATE, 2)
        chain.add_filter(GainFilter(2.0))

        assert chain.filters[0].get_parameters()["sample_rate"] == SAMPLE_RATE

    def test_clear_destroys_nodes(self):
        """Should drop every node."""
        chain = FilterChain()
        chain.add_filter(GainFilter(2.0))
        chain.clear()

        assert len(chain) == 0
