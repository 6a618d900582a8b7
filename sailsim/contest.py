"""
Contest
=======

Loads contest definitions (waypoints, start position, environment request)
and filters contest-manager status messages for new contests.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional
import logging

from .exceptions import ConfigurationError
from .geometry import Position
from .waypoints import Waypoint, waypoints_from_config

logger = logging.getLogger(__name__)


@dataclass
class Contest:
    """A contest: the course to sail and the conditions to sail it in."""
    waypoints: List[Waypoint]
    type: str = "waypoints"
    request: Dict[str, Any] = field(default_factory=dict)  # Environment request
    start: Optional[Position] = None     # Boat start (defaults to first waypoint)
    start_heading: float = 0.0           # Boat start heading (degrees)

    def __post_init__(self):
        if len(self.waypoints) < 2:
            raise ConfigurationError("A contest needs at least two waypoints")
        if self.start is None:
            self.start = self.waypoints[0].position

    @classmethod
    def from_dict(cls, data: Mapping) -> 'Contest':
        """
        Build a contest from a decoded JSON document.

        Expected shape:
            {"type": "...", "request": {...},
             "waypoints": [{"lat": .., "lon": .., "radius": ..}, ...],
             "boat": {"lat": .., "lon": .., "heading": ..}}
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Contest must be a mapping, got {type(data).__name__}")

        waypoints = waypoints_from_config(data.get('waypoints'))

        start = None
        start_heading = 0.0
        boat = data.get('boat')
        if boat:
            try:
                start = Position.from_dict(boat)
                start_heading = float(boat.get('heading', 0.0))
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid boat start {boat!r}: {e}") from e

        request = data.get('request') or {}
        if not isinstance(request, Mapping):
            raise ConfigurationError("Contest request must be a mapping")

        return cls(
            waypoints=waypoints,
            type=str(data.get('type', 'waypoints')),
            request=dict(request),
            start=start,
            start_heading=start_heading,
        )


def load_contest(filepath) -> Contest:
    """
    Load a contest from a JSON file.

    Args:
        filepath: Path to the contest JSON file

    Returns:
        Contest object
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Contest file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Contest file {path.name} is not valid JSON: {e}") from e

    contest = Contest.from_dict(data)
    logger.info(f"Loaded contest '{contest.type}' with {len(contest.waypoints)} "
                f"waypoints from {path.name}")
    return contest


def is_new_contest(obj: Any) -> bool:
    """True for contest-manager messages announcing a new contest."""
    if not isinstance(obj, Mapping):
        return False
    return obj.get('type') == 'new-contest'


class ContestObserver:
    """
    Watches contest-manager status messages.

    Only messages announcing a new contest are passed on to the callback;
    everything else is ignored.
    """

    def __init__(self, on_new_contest: Callable[[Mapping], None]):
        self.on_new_contest = on_new_contest
        self.contests_seen = 0

    def handle_status(self, obj: Any) -> bool:
        """
        Handle one status message.

        Returns:
            True if the message announced a new contest
        """
        if not is_new_contest(obj):
            return False

        self.contests_seen += 1
        request = obj.get('request') or {}
        logger.info(f"Refreshed contest: {request.get('location')} {request.get('type')}")
        self.on_new_contest(obj)
        return True
