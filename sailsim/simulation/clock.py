"""
Simulation Clock
================

Simulated time, advanced in fixed steps by the scheduler.
"""

from dataclasses import dataclass


@dataclass
class SimulationClock:
    """Fixed-step simulation clock. Times are in milliseconds."""
    delta: float          # Step size (ms)
    now: float = 0.0      # Absolute simulated time (ms since epoch)

    def __post_init__(self):
        if self.delta <= 0:
            raise ValueError(f"Clock step must be positive, got {self.delta}")

    @property
    def delta_sec(self) -> float:
        """Step size in seconds."""
        return self.delta / 1000

    def advance(self) -> float:
        """Advance by one step and return the new time."""
        self.now += self.delta
        return self.now
