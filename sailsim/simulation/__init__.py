"""
Simulation Module
=================

Fixed-step multi-player sailing simulation.
Provides the time-step scheduler, simulation clock, wind environment,
kinematic boat, players and the speed-control channel.
"""

from .clock import SimulationClock
from .environment import Environment, EnvironmentConfig, EnvironmentSnapshot, Wind
from .boat import Boat, BoatConfig, BoatState, Attitude
from .player import Player
from .speed_control import SpeedControl
from .scheduler import TimeStepScheduler, compute_step_delay, DEFAULT_STEP_MS
from .metrics import TrackRecorder, TrackPoint, TrackSummary

__all__ = [
    'SimulationClock',
    'Environment', 'EnvironmentConfig', 'EnvironmentSnapshot', 'Wind',
    'Boat', 'BoatConfig', 'BoatState', 'Attitude',
    'Player',
    'SpeedControl',
    'TimeStepScheduler', 'compute_step_delay', 'DEFAULT_STEP_MS',
    'TrackRecorder', 'TrackPoint', 'TrackSummary',
]
