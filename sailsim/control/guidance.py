"""
Guidance Controller
===================

Waypoint following by line-of-sight guidance, with a tacking law for
courses that cannot be sailed directly.

The desired heading bends toward the track line (previous -> current
waypoint) as a function of cross-track error:

    thetaR = beta - (2 * gamma / pi) * atan(l / r)

While tacking, the boat instead sails a fixed angle off the wind, switching
sides only once it has drifted more than d = 2r from the track line. The
rudder follows the sine of the heading error.

Reference: J. Melin, "Modeling, control and state-estimation for an
autonomous sailboat", Uppsala University, 2015.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING
import logging

from ..geometry import Position, wrap_degrees, wrap_degrees_180
from ..waypoints import WaypointManager
from .commands import Controller, ControlCommand, ControllerState
from .telemetry import NullTelemetry, TelemetryChannel

if TYPE_CHECKING:
    from ..contest import Contest

logger = logging.getLogger(__name__)


class GuidanceMode(Enum):
    """Steering law selection."""
    NOMINAL = "nominal"   # Line-of-sight toward the track
    TACK = "tack"         # Fixed angle off the wind, alternating sides
    AUTO = "auto"         # Tack only when the track lies in the no-go zone


@dataclass
class GuidanceConfig:
    """Configuration for the guidance controller."""
    mode: GuidanceMode = GuidanceMode.TACK

    # Convergence aggressiveness; larger values turn onto the line faster
    gamma: float = 180.0 / 4

    # Tack half-angle off the wind (degrees)
    theta_t: float = 45.0

    # No-go zone half-angle (degrees), consulted in AUTO mode
    theta_no_go: float = 30.0

    # Maximum normalised rudder
    sigma_r_max: float = 1.0

    # Tack switch distance as a multiple of the waypoint radius
    tack_distance_factor: float = 2.0

    # Tack side before the first switch
    initial_tack_side: int = 1

    @classmethod
    def from_dict(cls, data) -> 'GuidanceConfig':
        """Build from a mapping, accepting the mode as a string."""
        values = dict(data)
        if 'mode' in values and not isinstance(values['mode'], GuidanceMode):
            values['mode'] = GuidanceMode(values['mode'])
        return cls(**values)


@dataclass
class GuidanceState:
    """Per-controller guidance state, carried across decisions."""
    mode: GuidanceMode = GuidanceMode.NOMINAL   # Law used on the last decision
    tack_side: int = 1                          # q: -1 or +1

    # Diagnostics from the last decision
    cross_track_error: float = 0.0   # metres, positive = right of track
    track_heading: float = 0.0       # beta (degrees)
    desired_heading: float = 0.0     # thetaR (degrees)
    heading_error: float = 0.0       # e (degrees, wrapped)
    rudder: float = 0.0


class GuidanceController(Controller):
    """
    Line-of-sight waypoint guidance with tacking.

    Features:
    - Arrival detection and waypoint advance
    - Line-of-sight desired heading from cross-track error
    - Tack side hysteresis (switch only beyond 2x the waypoint radius)
    - Bounded sine-law rudder command
    """

    name = "Jon.Melin"

    def __init__(self, config: Optional[GuidanceConfig] = None,
                 telemetry: Optional[TelemetryChannel] = None):
        """
        Args:
            config: Guidance configuration
            telemetry: Channel receiving each decision's input state
        """
        self.config = config or GuidanceConfig()
        self.telemetry = telemetry or NullTelemetry()
        self.state = GuidanceState(tack_side=self.config.initial_tack_side)
        self.contest: Optional['Contest'] = None
        self.waypoints: Optional[WaypointManager] = None

    def init(self, contest: 'Contest'):
        """
        Prepare for a contest and reset guidance state.

        Re-initialising on the same contest rewinds the existing waypoint
        manager; a different contest gets a new one.
        """
        if contest is self.contest and self.waypoints is not None:
            self.waypoints.restart()
        else:
            self.waypoints = WaypointManager(contest.waypoints)
        self.contest = contest
        self.state = GuidanceState(tack_side=self.config.initial_tack_side)
        logger.debug(f"{self.name} initialised with {len(self.waypoints)} waypoints")

    def ai(self, state: ControllerState) -> ControlCommand:
        """
        Decide the rudder command for this step.

        Args:
            state: Boat and environment state

        Returns:
            ControlCommand with the rudder in [-1, 1] and the sail at 0
        """
        if self.waypoints is None:
            raise RuntimeError(f"{self.name}: init(contest) must be called before ai()")

        self.telemetry.status(state)

        position = state.boat.gps
        status = self.waypoints.get_status(position)

        # Load the next waypoint once the current one is reached
        if status.achieved:
            status = self.waypoints.next(position)

        rudder = self.compute_rudder(
            position,
            state.boat.attitude.heading,
            state.environment.wind.heading,
        )

        return ControlCommand(action="move", servo_rudder=rudder, servo_sail=0.0)

    def compute_rudder(self, position: Position, heading: float,
                       wind_heading: float) -> float:
        """
        Compute the rudder for the current waypoint pair.

        Args:
            position: Boat position
            heading: Boat heading (degrees)
            wind_heading: Direction the true wind blows toward (degrees)

        Returns:
            Rudder command in [-sigma_r_max, sigma_r_max]
        """
        current = self.waypoints.get_current()
        previous = self.waypoints.get_previous()
        r = current.radius

        l = position.cross_track_distance(previous.position, current.position)
        beta = previous.position.heading_to(current.position)
        theta_r = self.line_of_sight_heading(beta, l, r, self.config.gamma)

        mode = self._select_mode(beta, wind_heading)
        if mode == GuidanceMode.TACK:
            d = r * self.config.tack_distance_factor
            if abs(l) >= d:
                q = position.side_of_line(current.position, previous.position)
                if q != self.state.tack_side:
                    logger.debug(f"Tack side {self.state.tack_side:+d} -> {q:+d} "
                                 f"at XTE {l:.1f} m")
                self.state.tack_side = q
            upwind = wrap_degrees(wind_heading + 180)
            theta_r = upwind + self.state.tack_side * self.config.theta_t

        e = wrap_degrees_180(heading - theta_r)
        rudder = math.sin(math.radians(e)) * self.config.sigma_r_max

        self.state.mode = mode
        self.state.cross_track_error = l
        self.state.track_heading = beta
        self.state.desired_heading = wrap_degrees(theta_r)
        self.state.heading_error = e
        self.state.rudder = rudder

        return rudder

    @staticmethod
    def line_of_sight_heading(beta: float, l: float, r: float,
                              gamma: float = 180.0 / 4) -> float:
        """
        Desired heading for a cross-track error l and waypoint radius r.

        Tends to beta as l -> 0 and to beta -/+ gamma as l -> +/- infinity.
        """
        return beta - 2 * gamma / math.pi * math.atan(l / r)

    def _select_mode(self, beta: float, wind_heading: float) -> GuidanceMode:
        """Choose the steering law for this decision."""
        if self.config.mode != GuidanceMode.AUTO:
            return self.config.mode

        upwind = wrap_degrees(wind_heading + 180)
        if abs(wrap_degrees_180(beta - upwind)) < self.config.theta_no_go:
            return GuidanceMode.TACK
        return GuidanceMode.NOMINAL

    def close(self):
        """Close the telemetry channel."""
        self.telemetry.close()

    @classmethod
    def nominal(cls, telemetry: Optional[TelemetryChannel] = None) -> 'GuidanceController':
        """Create a controller that never tacks."""
        return cls(GuidanceConfig(mode=GuidanceMode.NOMINAL), telemetry)

    @classmethod
    def automatic(cls, telemetry: Optional[TelemetryChannel] = None) -> 'GuidanceController':
        """Create a controller that tacks only when the track is in the no-go zone."""
        return cls(GuidanceConfig(mode=GuidanceMode.AUTO), telemetry)
