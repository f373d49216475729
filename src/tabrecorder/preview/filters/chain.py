"""Filter chain for applying multiple preview nodes in sequence."""

import logging

import numpy as np

from tabrecorder.preview.filters.base import AudioFilter

logger = logging.getLogger(__name__)


class FilterChain:
    """Ordered container of nodes; each node's output feeds the next.

    An empty chain is a dry passthrough.
    """

    def __init__(self, name: str = "FilterChain") -> None:
        self.name = name
        self.filters: list[AudioFilter] = []
        self._sample_rate: int | None = None
        self._channels: int | None = None

    def add_filter(self, filter_instance: AudioFilter) -> None:
        """Add a node to the end of the chain, configuring it if the chain already is."""
        self.filters.append(filter_instance)
        if self._sample_rate is not None and self._channels is not None:
            filter_instance.configure(self._sample_rate, self._channels)
        logger.debug("Added filter '%s' to chain '%s'", filter_instance.name, self.name)

    def configure(self, sample_rate: int, channels: int) -> None:
        """Configure all nodes in the chain."""
        self._sample_rate = sample_rate
        self._channels = channels
        for filter_instance in self.filters:
            filter_instance.configure(sample_rate, channels)
        logger.debug(
            "FilterChain '%s' configured: %dHz, %d channels", self.name, sample_rate, channels
        )

    def process(self, audio_data: np.ndarray) -> np.ndarray:
        """Run a block through every node in order."""
        result = audio_data
        for filter_instance in self.filters:
            result = filter_instance.apply(result)
        return result

    def clear(self) -> None:
        """Remove and discard every node."""
        filter_count = len(self.filters)
        self.filters.clear()
        logger.debug("Cleared %d filters from chain '%s'", filter_count, self.name)

    def get_filter_names(self) -> list[str]:
        """Names of the nodes in order."""
        return [f.name for f in self.filters]

    def __len__(self) -> int:
        """Return number of nodes in the chain."""
        return len(self.filters)

    def __str__(self) -> str:
        """Return string representation of the chain."""
        return f"FilterChain('{self.name}', {' -> '.join(self.get_filter_names()) or 'dry'})"
