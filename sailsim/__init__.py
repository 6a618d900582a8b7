"""
SailSim
=======

Multi-agent sailing simulation driven by pluggable navigation controllers.

Components:
- simulation: time-step scheduler, clock, environment, boats and players
- control: controller contract and line-of-sight guidance with tacking
- waypoints: waypoint sequence with arrival detection
- contest: contest loading and new-contest detection
- run_simulation: CLI entry point

Usage:
    uv run python -m sailsim.run_simulation --help
"""

# Lazy imports to keep `import sailsim` light
def __getattr__(name):
    """Lazy import of submodules."""
    if name == 'TimeStepScheduler':
        from .simulation.scheduler import TimeStepScheduler
        return TimeStepScheduler
    elif name == 'Player':
        from .simulation.player import Player
        return Player
    elif name == 'Boat':
        from .simulation.boat import Boat
        return Boat
    elif name == 'GuidanceController':
        from .control.guidance import GuidanceController
        return GuidanceController
    elif name == 'WaypointManager':
        from .waypoints import WaypointManager
        return WaypointManager
    elif name == 'Contest':
        from .contest import Contest
        return Contest
    elif name == 'load_contest':
        from .contest import load_contest
        return load_contest
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'TimeStepScheduler',
    'Player',
    'Boat',
    'GuidanceController',
    'WaypointManager',
    'Contest',
    'load_contest',
]
