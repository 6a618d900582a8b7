"""
Telemetry
=========

Channels a controller reports its per-step state to. The transport itself
lives outside this package; controllers only see the status()/close()
interface.
"""

from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Deque
import logging

logger = logging.getLogger(__name__)


class TelemetryChannel(ABC):
    """Outbound status channel."""

    @abstractmethod
    def status(self, state: Any):
        """Publish a state snapshot."""

    def close(self):
        """Close the channel."""


class NullTelemetry(TelemetryChannel):
    """Discards everything."""

    def status(self, state: Any):
        pass


class RecordingTelemetry(TelemetryChannel):
    """Keeps published states in memory, for tests and offline runs."""

    def __init__(self, max_records: int = 10000):
        self.max_records = max_records
        self.records: Deque[Any] = deque(maxlen=max_records)
        self.closed = False

    def status(self, state: Any):
        self.records.append(state)

    def close(self):
        self.closed = True
        logger.debug(f"Telemetry closed after {len(self.records)} records")
