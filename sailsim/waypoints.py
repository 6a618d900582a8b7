"""
Waypoints
=========

Ordered contest waypoints with arrival detection.

The first waypoint is the start mark: the manager begins with the second
waypoint as its target and the first as the previous one, so there is always
a track line to follow.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Union
import logging

from .exceptions import ConfigurationError
from .geometry import Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Waypoint:
    """A mark to round, with its arrival radius in metres."""
    position: Position
    radius: float

    def __post_init__(self):
        if not isinstance(self.radius, (int, float)) or math.isnan(self.radius) \
                or self.radius <= 0:
            raise ConfigurationError(
                f"Waypoint radius must be positive, got {self.radius!r}"
            )

    @classmethod
    def from_dict(cls, data: Mapping) -> 'Waypoint':
        """Build a waypoint from {'lat', 'lon', 'radius'}."""
        try:
            position = Position.from_dict(data)
            radius = float(data['radius'])
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid waypoint {data!r}: {e}") from e
        return cls(position=position, radius=radius)

    @property
    def lat(self) -> float:
        return self.position.lat

    @property
    def lon(self) -> float:
        return self.position.lon


@dataclass
class WaypointStatus:
    """Status of the current waypoint relative to a position."""
    achieved: bool
    radius: float
    distance: float
    heading: float


class WaypointManager:
    """
    Tracks progress through an ordered list of waypoints.

    Features:
    - Current/previous waypoint cursor (never moves backwards)
    - Arrival detection against each waypoint's radius
    - Restart to the first leg
    """

    def __init__(self, waypoints: Iterable[Union[Waypoint, Mapping]]):
        """
        Args:
            waypoints: Waypoint objects or {'lat', 'lon', 'radius'} mappings
        """
        self.waypoints: List[Waypoint] = [
            wp if isinstance(wp, Waypoint) else Waypoint.from_dict(wp)
            for wp in waypoints
        ]
        if len(self.waypoints) < 2:
            raise ConfigurationError("A contest needs at least two waypoints")

        self._index = 1
        self.finished = False

    @property
    def index(self) -> int:
        """Index of the current target waypoint."""
        return self._index

    def get_current(self) -> Waypoint:
        return self.waypoints[self._index]

    def get_previous(self) -> Waypoint:
        return self.waypoints[self._index - 1]

    def get_status(self, position: Position) -> WaypointStatus:
        """Status of the current waypoint seen from position."""
        current = self.get_current()
        distance, heading = position.distance_heading_to(current.position)
        return WaypointStatus(
            achieved=distance <= current.radius,
            radius=current.radius,
            distance=distance,
            heading=heading,
        )

    def next(self, position: Position) -> WaypointStatus:
        """
        Advance to the next waypoint and return its status.

        On the last waypoint the cursor stays put and the route is marked
        finished.
        """
        if self._index < len(self.waypoints) - 1:
            self._index += 1
            logger.debug(f"Advanced to waypoint {self._index}")
        elif not self.finished:
            self.finished = True
            logger.info("Final waypoint reached")
        return self.get_status(position)

    def restart(self):
        """Return to the first leg."""
        self._index = 1
        self.finished = False

    def __len__(self) -> int:
        return len(self.waypoints)


def waypoints_from_config(items: Optional[Iterable[Mapping]]) -> List[Waypoint]:
    """Parse a list of waypoint mappings, raising ConfigurationError on bad input."""
    if items is None:
        raise ConfigurationError("Contest has no waypoints")
    return [Waypoint.from_dict(item) for item in items]
