"""
Boat
====

Kinematic sailboat model: the boat turns at a rate proportional to the
rudder and moves at a fraction of the wind speed, except inside the no-go
zone where it only drifts.

Rudder sign convention: positive rudder turns the boat to port (heading
decreases), so a controller steering with rudder = sin(heading - target)
converges on its target.
"""

import math
from dataclasses import dataclass, field
from typing import Optional
import logging

from ..control.commands import ControlCommand
from ..geometry import Position, wrap_degrees, wrap_degrees_180
from .clock import SimulationClock
from .environment import EnvironmentSnapshot

logger = logging.getLogger(__name__)

KNOTS_TO_MS = 0.514444


@dataclass
class BoatConfig:
    """Configuration for the kinematic boat."""
    max_turn_rate: float = 20.0     # Heading rate at full rudder (deg/s)
    speed_ratio: float = 0.5        # Boat speed / wind speed off the wind
    no_go_angle: float = 30.0       # Half-angle of the no-go zone (degrees)
    drift_speed: float = 0.2        # Speed inside the no-go zone (knots)


@dataclass
class Attitude:
    """Boat attitude (degrees)."""
    heading: float = 0.0
    roll: float = 0.0
    pitch: float = 0.0


@dataclass
class BoatState:
    """Boat state as reported to controllers."""
    gps: Position = field(default_factory=lambda: Position(0.0, 0.0))
    attitude: Attitude = field(default_factory=Attitude)
    speed: float = 0.0              # knots
    rudder: float = 0.0             # Normalised [-1, 1]
    sail: float = 0.0
    distance_sailed: float = 0.0    # metres


class Boat:
    """Kinematic boat advanced by the simulation each step."""

    def __init__(self, start: Optional[Position] = None, heading: float = 0.0,
                 config: Optional[BoatConfig] = None):
        self.config = config or BoatConfig()
        self.state = BoatState()
        self.reset(start or Position(0.0, 0.0), heading)

    def reset(self, start: Position, heading: float = 0.0):
        """Put the boat back at a start position, at rest."""
        self.state = BoatState(gps=start, attitude=Attitude(heading=wrap_degrees(heading)))

    def simulate(self, clock: SimulationClock, env: EnvironmentSnapshot):
        """
        Advance the boat by one clock step.

        Args:
            clock: Simulation clock
            env: Environment snapshot for this step
        """
        dt = clock.delta_sec
        state = self.state

        heading_rate = -state.rudder * self.config.max_turn_rate
        state.attitude.heading = wrap_degrees(state.attitude.heading + heading_rate * dt)

        state.speed = self._boat_speed(state.attitude.heading, env.wind.heading,
                                       env.wind.speed)
        distance = state.speed * KNOTS_TO_MS * dt
        state.gps = state.gps.move(state.attitude.heading, distance)
        state.distance_sailed += distance

    def _boat_speed(self, heading: float, wind_heading: float, wind_speed: float) -> float:
        """Speed through water (knots) for a heading and true wind."""
        upwind = wrap_degrees(wind_heading + 180)
        off_wind = abs(wrap_degrees_180(heading - upwind))
        if off_wind < self.config.no_go_angle:
            return self.config.drift_speed

        # Slowest close-hauled, fastest on a beam reach
        efficiency = 0.6 + 0.4 * math.sin(math.radians(off_wind))
        return wind_speed * self.config.speed_ratio * efficiency

    def apply_command(self, command: ControlCommand):
        """Set the servos from a controller command."""
        self.state.rudder = max(-1.0, min(1.0, command.servo_rudder))
        self.state.sail = command.servo_sail
