"""
Environment
===========

Wind conditions for the simulation, advanced once per step.

Wind heading is the direction the wind blows toward. Slow direction shifts
are a damped random walk; gusts and lulls scale the base speed for a while.
"""

import random
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional
import logging

from ..exceptions import ConfigurationError
from ..geometry import wrap_degrees
from .clock import SimulationClock

logger = logging.getLogger(__name__)


@dataclass
class EnvironmentConfig:
    """Configuration for the environment."""
    # Base wind
    wind_heading: float = 0.0          # Direction the wind blows toward (degrees)
    wind_speed: float = 10.0           # True wind speed (knots)

    # Gradual shifts
    shift_rate: float = 0.0            # Average shift rate (deg/minute), 0 = steady
    shift_persistence: float = 0.98    # How long shifts persist (0-1)

    # Gusts
    gust_probability: float = 0.0      # Probability per second
    gust_intensity_min: float = 1.2    # Minimum gust multiplier
    gust_intensity_max: float = 1.5    # Maximum gust multiplier
    gust_duration: float = 10.0        # Typical gust duration (seconds)

    seed: Optional[int] = None

    @classmethod
    def from_request(cls, request: Optional[Mapping[str, Any]]) -> 'EnvironmentConfig':
        """
        Build from a contest request or options mapping.

        Accepts either flat keys matching the fields above or a nested
        {"wind": {"heading": .., "speed": ..}} block. Unknown keys are ignored.
        """
        if request is None:
            return cls()
        if isinstance(request, cls):
            return request

        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in request.items() if k in known}

        wind = request.get('wind')
        if isinstance(wind, Mapping):
            if 'heading' in wind:
                values['wind_heading'] = wind['heading']
            if 'speed' in wind:
                values['wind_speed'] = wind['speed']

        try:
            values = {k: v if k == 'seed' else float(v) for k, v in values.items()}
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid environment request: {e}") from e

        return cls(**values)


@dataclass(frozen=True)
class Wind:
    """True wind."""
    heading: float    # Direction the wind blows toward (degrees)
    speed: float      # knots


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Environment as seen by boats and controllers for one step."""
    wind: Wind
    time: float       # Simulated time (ms)


class Environment:
    """
    Time-varying wind.

    Generates:
    - Random walk direction shifts
    - Probabilistic gusts
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None):
        """
        Args:
            options: EnvironmentConfig, or a request mapping (see
                EnvironmentConfig.from_request)
        """
        self.config = EnvironmentConfig.from_request(options)
        self._rng = random.Random(self.config.seed)

        self.heading = wrap_degrees(self.config.wind_heading)
        self.base_speed = self.config.wind_speed
        self.speed = self.base_speed

        self._shift_velocity = 0.0
        self._gust_factor = 1.0
        self._gust_time_remaining = 0.0

        logger.debug(f"Environment: wind {self.heading:.0f}° at {self.speed:.1f} kts")

    def update(self, clock: SimulationClock) -> EnvironmentSnapshot:
        """
        Advance the wind by one clock step.

        Args:
            clock: Simulation clock (its step size is used)

        Returns:
            Snapshot of the conditions for this step
        """
        dt = clock.delta_sec
        self._update_shift(dt)
        self._update_gusts(dt)
        self.speed = max(0.0, self.base_speed * self._gust_factor)

        return EnvironmentSnapshot(
            wind=Wind(heading=self.heading, speed=self.speed),
            time=clock.now,
        )

    def _update_shift(self, dt: float):
        """Update gradual wind shifts using random walk."""
        if self.config.shift_rate <= 0:
            return

        acceleration = self._rng.gauss(0, self.config.shift_rate * dt / 60.0)
        self._shift_velocity += acceleration
        self._shift_velocity *= self.config.shift_persistence

        # Limit maximum shift rate
        max_rate = self.config.shift_rate * 3 / 60.0  # deg/s
        self._shift_velocity = max(-max_rate, min(max_rate, self._shift_velocity))

        self.heading = wrap_degrees(self.heading + self._shift_velocity * dt)

    def _update_gusts(self, dt: float):
        """Start, decay and end gusts."""
        if self._gust_time_remaining > 0:
            self._gust_time_remaining -= dt
            if self._gust_time_remaining <= 0:
                self._gust_factor = 1.0
                self._gust_time_remaining = 0.0
        elif self._rng.random() < self.config.gust_probability * dt:
            self._gust_factor = self._rng.uniform(
                self.config.gust_intensity_min,
                self.config.gust_intensity_max
            )
            self._gust_time_remaining = self._rng.uniform(
                self.config.gust_duration * 0.5,
                self.config.gust_duration * 1.5
            )
            logger.debug(f"Gust x{self._gust_factor:.2f} "
                         f"for {self._gust_time_remaining:.1f}s")
