"""
Speed Control
=============

Simulation speed multiplier, set asynchronously from a command channel and
read by the scheduler once per step.
"""

import math
import threading
from typing import Any, Mapping
import logging

logger = logging.getLogger(__name__)


def _is_speed(value: Any) -> bool:
    """True for finite, real, non-boolean numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class SpeedControl:
    """
    Thread-safe speed multiplier.

    Commands arrive as mappings; only {'setSpeed': <number>} changes the
    speed. Anything else is ignored and the last valid speed is kept.
    """

    def __init__(self, speed: float = 1.0):
        if not _is_speed(speed):
            raise ValueError(f"Invalid initial speed: {speed!r}")
        self._speed = float(speed)
        self._lock = threading.Lock()

    @property
    def speed(self) -> float:
        with self._lock:
            return self._speed

    def set_speed(self, speed: float) -> bool:
        """
        Set the multiplier.

        Returns:
            True if accepted
        """
        if not _is_speed(speed):
            logger.debug(f"Ignoring invalid speed {speed!r}")
            return False
        with self._lock:
            self._speed = float(speed)
        logger.info(f"Simulation speed set to x{speed}")
        return True

    def handle_command(self, cmd: Any) -> bool:
        """Handle one inbound command message."""
        if not isinstance(cmd, Mapping) or 'setSpeed' not in cmd:
            logger.debug(f"Ignoring speed command {cmd!r}")
            return False
        return self.set_speed(cmd['setSpeed'])
