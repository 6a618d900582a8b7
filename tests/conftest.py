"""
Shared test fixtures for simulation and guidance tests.
"""

import pytest

from sailsim.contest import Contest
from sailsim.control.commands import ControllerState
from sailsim.geometry import Position
from sailsim.simulation.boat import Attitude, BoatState
from sailsim.simulation.environment import EnvironmentSnapshot, Wind
from sailsim.waypoints import Waypoint


class FakeTimer:
    """threading.Timer stand-in that only fires when told to."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.started = False
        self.cancelled = False
        self.daemon = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


@pytest.fixture
def timers():
    """List collecting every FakeTimer the scheduler creates."""
    return []


@pytest.fixture
def timer_factory(timers):
    """Timer factory recording created timers into `timers`."""
    def factory(interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args, kwargs)
        timers.append(timer)
        return timer
    return factory


@pytest.fixture
def north_waypoints():
    """Three waypoints on the prime meridian, heading north, radius 10 m."""
    return [
        Waypoint(Position(0.0, 0.0), 10.0),
        Waypoint(Position(0.01, 0.0), 10.0),
        Waypoint(Position(0.02, 0.0), 10.0),
    ]


@pytest.fixture
def two_waypoint_contest():
    """Two waypoints 0.01° of latitude apart (~1.1 km), radius 10 m."""
    return Contest(waypoints=[
        Waypoint(Position(0.0, 0.0), 10.0),
        Waypoint(Position(0.01, 0.0), 10.0),
    ])


@pytest.fixture
def north_contest(north_waypoints):
    """Three-waypoint northbound contest with a steady westerly."""
    return Contest(
        waypoints=north_waypoints,
        type="test",
        request={"wind": {"heading": 90.0, "speed": 10.0}},
    )


@pytest.fixture
def make_state():
    """Build a ControllerState for a boat at (lat, lon) with a heading and wind."""
    def _make(lat, lon, heading=0.0, wind_heading=180.0, wind_speed=10.0):
        return ControllerState(
            boat=BoatState(gps=Position(lat, lon), attitude=Attitude(heading=heading)),
            environment=EnvironmentSnapshot(
                wind=Wind(heading=wind_heading, speed=wind_speed), time=0.0
            ),
            delta=100.0,
            is_simulation=True,
        )
    return _make
