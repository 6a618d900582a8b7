"""
Track Recorder
==============

Scheduler callback that records each player's track and steering, and
summarises a run. Results are kept in memory only.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Sequence
import logging

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class TrackPoint:
    """A single point in a player's track."""
    time: float            # Simulated time (ms)
    latitude: float
    longitude: float
    heading: float
    speed: float           # knots
    rudder: float          # Normalised [-1, 1]
    wind_heading: float
    wind_speed: float
    waypoint_index: int    # Current target waypoint (-1 if unknown)
    finished: bool = False  # Final waypoint reached


@dataclass
class TrackSummary:
    """Summary statistics for one player."""
    player: str
    samples: int
    duration_sec: float
    distance_m: float
    mean_speed: float
    mean_abs_rudder: float
    max_abs_rudder: float
    rms_rudder: float
    waypoints_reached: int
    faults: int


class TrackRecorder:
    """
    Records per-step samples for every player.

    Pass an instance as the scheduler callback, optionally wrapping another
    callback which is called after recording.
    """

    def __init__(self, sample_every: int = 1, on_step=None):
        """
        Args:
            sample_every: Record every Nth step
            on_step: Further callback invoked with (players, env)
        """
        self.sample_every = max(1, int(sample_every))
        self.on_step = on_step
        self.tracks: Dict[str, List[TrackPoint]] = {}
        self._faults: Dict[str, int] = {}
        self._distance: Dict[str, float] = {}
        self._step_count = 0

    def __call__(self, players: Sequence, env):
        self._step_count += 1
        if (self._step_count - 1) % self.sample_every == 0:
            for player in players:
                self.record(player, env)
        if self.on_step is not None:
            self.on_step(players, env)

    def record(self, player, env):
        """Record one sample for a player."""
        state = player.boat.state
        waypoints = getattr(player.controller, 'waypoints', None)
        point = TrackPoint(
            time=env.time,
            latitude=state.gps.lat,
            longitude=state.gps.lon,
            heading=state.attitude.heading,
            speed=state.speed,
            rudder=state.rudder,
            wind_heading=env.wind.heading,
            wind_speed=env.wind.speed,
            waypoint_index=waypoints.index if waypoints is not None else -1,
            finished=waypoints.finished if waypoints is not None else False,
        )
        self.tracks.setdefault(player.name, []).append(point)
        self._faults[player.name] = getattr(player, 'faults', 0)
        self._distance[player.name] = getattr(state, 'distance_sailed', 0.0)

    def summarize(self, name: str) -> Optional[TrackSummary]:
        """Compute summary statistics for one player's track."""
        points = self.tracks.get(name)
        if not points:
            return None

        rudder = np.array([p.rudder for p in points])
        speed = np.array([p.speed for p in points])
        index = np.array([p.waypoint_index for p in points])

        # The cursor stays on the last mark once it is reached
        reached = int(max(0, index.max() - index.min()))
        if points[-1].finished and not points[0].finished:
            reached += 1

        return TrackSummary(
            player=name,
            samples=len(points),
            duration_sec=(points[-1].time - points[0].time) / 1000,
            distance_m=float(self._distance.get(name, 0.0)),
            mean_speed=float(np.mean(speed)),
            mean_abs_rudder=float(np.mean(np.abs(rudder))),
            max_abs_rudder=float(np.max(np.abs(rudder))),
            rms_rudder=float(np.sqrt(np.mean(rudder ** 2))),
            waypoints_reached=reached,
            faults=self._faults.get(name, 0),
        )

    def compute_summary(self) -> Dict[str, dict]:
        """Summaries for every recorded player, as plain dicts."""
        return {name: asdict(self.summarize(name)) for name in self.tracks}

    def log_summary(self):
        """Log a short report per player."""
        for name, summary in self.compute_summary().items():
            logger.info(
                f"{name}: {summary['samples']} samples over "
                f"{summary['duration_sec']:.1f}s, {summary['distance_m']:.0f} m sailed, "
                f"mean |rudder| {summary['mean_abs_rudder']:.2f}, "
                f"waypoints reached {summary['waypoints_reached']}, "
                f"faults {summary['faults']}"
            )
