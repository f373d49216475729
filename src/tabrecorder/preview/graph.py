"""Live microphone preview: a duplex stream feeding the effect chain."""

import logging
import threading
from collections.abc import Callable
from typing import Any

import numpy as np

from tabrecorder.config.models import PreviewConfig
from tabrecorder.preview.effects import EffectConfig, build_chain
from tabrecorder.preview.filters import FilterChain

logger = logging.getLogger(__name__)

Device = int | str | None
StreamFactory = Callable[..., Any]


def open_duplex_stream(
    *,
    device: tuple[Device, Device],
    samplerate: int,
    channels: int,
    blocksize: int,
    callback: Callable,
) -> Any:
    """Open a float32 sounddevice input/output stream."""
    import sounddevice as sd

    return sd.Stream(
        device=device,
        samplerate=samplerate,
        channels=channels,
        blocksize=blocksize,
        dtype="float32",
        callback=callback,
    )


class EffectsGraph:
    """A preview session routing the microphone through the effect chain to the output.

    Any change to the effects or the device rebuilds the whole chain from the
    current EffectConfig. Rebuilds never overlap: a request arriving while one
    is running is folded into it. Once stopped the session only produces
    silence.
    """

    def __init__(
        self,
        effect_config: EffectConfig | None = None,
        sample_rate: int = 48000,
        channels: int = 2,
        blocksize: int = 1024,
        input_device: Device = None,
        output_device: Device = None,
        stream_factory: StreamFactory = open_duplex_stream,
    ) -> None:
        """Initialize the session without touching any device.

        Args:
            effect_config: Initial effect toggles; everything off when omitted
            sample_rate: Stream sample rate in Hz
            channels: Channels for both input and output
            blocksize: Frames per callback block
            input_device: sounddevice input device; None for the system default
            output_device: sounddevice output device; None for the system default
            stream_factory: Opens the duplex stream; receives keyword arguments
        """
        self.config = effect_config or EffectConfig()
        self.sample_rate = sample_rate
        self.channels = channels
        self.blocksize = blocksize
        self.input_device = input_device
        self.output_device = output_device
        self.stream: Any = None
        self.chain: FilterChain | None = None
        self.rebuild_count = 0
        self._stream_factory = stream_factory
        self._running = False
        self._state_lock = threading.Lock()
        self._rebuild_lock = threading.Lock()
        self._rebuild_requested = False

    @classmethod
    def from_config(
        cls,
        preview: PreviewConfig,
        effect_config: EffectConfig | None = None,
        stream_factory: StreamFactory = open_duplex_stream,
    ) -> "EffectsGraph":
        """Create a session from the preview section of the application config."""
        return cls(
            effect_config=effect_config,
            sample_rate=preview.sample_rate,
            channels=preview.channels,
            blocksize=preview.blocksize,
            input_device=preview.input_device,
            output_device=preview.output_device,
            stream_factory=stream_factory,
        )

    @property
    def running(self) -> bool:
        """Whether the session is started and not yet stopped."""
        return self._running

    def start(self) -> None:
        """Acquire the stream and build the chain; a no-op if already running."""
        with self._state_lock:
            if self._running:
                return
            self._running = True
        self.rebuild()
        try:
            self._open_stream()
        except Exception as e:
            logger.error("Failed to start preview stream: %s", e)
            self.stop()
            raise
        logger.info(
            "Preview started at %dHz, %d channels (input=%s, output=%s)",
            self.sample_rate,
            self.channels,
            self.input_device,
            self.output_device,
        )

    def update_config(self, config: EffectConfig) -> None:
        """Replace the effect toggles and rebuild the chain."""
        self.config = config
        self.rebuild()

    def set_device(self, input_device: Device, output_device: Device = None) -> None:
        """Switch devices, re-acquiring the stream and rebuilding if running."""
        self.input_device = input_device
        self.output_device = output_device
        if not self._running:
            return
        self._close_stream()
        self._open_stream()
        self.rebuild()
        logger.info("Preview switched to input=%s, output=%s", input_device, output_device)

    def rebuild(self) -> bool:
        """Tear down the chain and build a fresh one from the current config.

        Returns:
            True if this call performed the rebuild, False if it was folded
            into one already in progress on another thread
        """
        with self._state_lock:
            self._rebuild_requested = True

        while True:
            if not self._rebuild_lock.acquire(blocking=False):
                return False
            try:
                while self._take_rebuild_request():
                    self._swap_chain()
            finally:
                self._rebuild_lock.release()
            # A request may have landed between the last check and the release
            with self._state_lock:
                if not self._rebuild_requested:
                    return True

    def stop(self) -> None:
        """Release the device and destroy every node. Safe to call repeatedly."""
        with self._state_lock:
            was_running = self._running
            self._running = False
            chain, self.chain = self.chain, None
        self._close_stream()
        if chain is not None:
            chain.clear()
        if was_running:
            logger.info("Preview stopped")

    def process_block(self, block: np.ndarray) -> np.ndarray:
        """Run one block through the current chain, clipped to [-1, 1].

        Produces silence when no chain is active.
        """
        block = np.asarray(block, dtype=np.float32)
        chain = self.chain
        if not self._running or chain is None:
            return np.zeros_like(block)
        return np.clip(chain.process(block), -1.0, 1.0)

    def _callback(
        self, indata: np.ndarray, outdata: np.ndarray, frames: int, time: Any, status: Any
    ) -> None:
        """Process a block of audio from the duplex stream."""
        if status:
            logger.warning("Preview stream status: %s", status)
        outdata[:] = self.process_block(indata)

    def _take_rebuild_request(self) -> bool:
        with self._state_lock:
            requested = self._rebuild_requested
            self._rebuild_requested = False
            return requested

    def _swap_chain(self) -> None:
        if not self._running:
            return
        new_chain = build_chain(self.config, self.sample_rate, self.channels)
        with self._state_lock:
            if not self._running:
                new_chain.clear()
                return
            # The callback may still be running a block through the old chain
            self.chain = new_chain
            self.rebuild_count += 1
        logger.debug("Preview chain rebuilt: %s", new_chain.get_filter_names() or "dry")

    def _open_stream(self) -> None:
        stream = self._stream_factory(
            device=(self.input_device, self.output_device),
            samplerate=self.sample_rate,
            channels=self.channels,
            blocksize=self.blocksize,
            callback=self._callback,
        )
        stream.start()
        self.stream = stream

    def _close_stream(self) -> None:
        stream, self.stream = self.stream, None
        if stream is None:
            return
        try:
            stream.abort()
            stream.close()
        except Exception as e:
            logger.error("Error closing preview stream: %s", e)
