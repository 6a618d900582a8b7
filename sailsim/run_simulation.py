"""
Simulation Runner
=================

CLI entry point for sailing a contest with guidance-controlled boats.
"""

import argparse
import logging
import signal
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .contest import load_contest
from .control.guidance import GuidanceController, GuidanceConfig, GuidanceMode
from .exceptions import ConfigurationError
from .simulation.boat import Boat
from .simulation.metrics import TrackRecorder
from .simulation.player import Player
from .simulation.scheduler import TimeStepScheduler, DEFAULT_STEP_MS
from .simulation.speed_control import SpeedControl


@dataclass
class SimulationConfig:
    """Configuration for a simulation run."""
    dt: float = DEFAULT_STEP_MS         # Step size (ms)
    realtime: bool = True               # Pace to wall-clock time
    speed: float = 1.0                  # Initial speed multiplier
    max_steps: Optional[int] = 6000     # Stop after this many steps
    players: int = 1                    # Number of boats
    mode: GuidanceMode = GuidanceMode.TACK
    verbose: bool = False


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    format_str = '%(levelname)s: %(message)s' if not verbose else \
                 '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def build_scheduler(contest, config: SimulationConfig) -> TimeStepScheduler:
    """Create a scheduler with config.players guidance-controlled boats."""
    scheduler = TimeStepScheduler(
        dt=config.dt,
        realtime=config.realtime,
        options=contest.request,
        speed_control=SpeedControl(config.speed),
    )
    for i in range(config.players):
        controller = GuidanceController(GuidanceConfig(mode=config.mode))
        boat = Boat(contest.start, contest.start_heading)
        scheduler.add_player(Player(boat, controller, name=f"{controller.name}-{i + 1}",
                                    contest=contest))
    return scheduler


def main():
    """Main entry point for the simulation runner."""
    parser = argparse.ArgumentParser(
        description='Sail a contest with guidance-controlled boats',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Real-time at 10x speed
  uv run python -m sailsim.run_simulation --contest contests/upwind.json --speed 10

  # Batch replay, 5000 steps, nominal guidance
  uv run python -m sailsim.run_simulation --contest contests/upwind.json \\
    --fast --max-steps 5000 --mode nominal
"""
    )

    parser.add_argument(
        '--contest', '-c',
        type=str,
        required=True,
        help='Path to contest JSON file'
    )

    parser.add_argument(
        '--dt',
        type=float,
        default=DEFAULT_STEP_MS,
        help=f'Simulation time step in milliseconds (default: {DEFAULT_STEP_MS})'
    )

    parser.add_argument(
        '--fast',
        action='store_true',
        help='Run as fast as possible (not realtime)'
    )

    parser.add_argument(
        '--speed', '-s',
        type=float,
        default=1.0,
        help='Real-time speed multiplier (default: 1)'
    )

    parser.add_argument(
        '--max-steps',
        type=int,
        default=6000,
        help='Stop after this many steps (default: 6000)'
    )

    parser.add_argument(
        '--players', '-p',
        type=int,
        default=1,
        help='Number of boats (default: 1)'
    )

    parser.add_argument(
        '--mode', '-m',
        choices=[m.value for m in GuidanceMode],
        default=GuidanceMode.TACK.value,
        help='Guidance mode (default: tack)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    args = parser.parse_args()

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    contest_path = Path(args.contest)
    if not contest_path.exists():
        logger.error(f"Contest file not found: {contest_path}")
        sys.exit(1)

    config = SimulationConfig(
        dt=args.dt,
        realtime=not args.fast,
        speed=args.speed,
        max_steps=args.max_steps,
        players=args.players,
        mode=GuidanceMode(args.mode),
        verbose=args.verbose,
    )

    try:
        contest = load_contest(contest_path)
        scheduler = build_scheduler(contest, config)
    except ConfigurationError as e:
        logger.error(f"Invalid contest: {e}")
        sys.exit(1)

    recorder = TrackRecorder(sample_every=10)

    def shutdown(signum, frame):
        logger.info("Shutting down...")
        scheduler.stop()

    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)

    try:
        scheduler.run(recorder, max_steps=config.max_steps)
        if scheduler.realtime:
            # Wake periodically so signals are handled
            while not scheduler.wait(timeout=0.5):
                pass
    except Exception as e:
        logger.error(f"Simulation failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(2)
    finally:
        scheduler.close()

    recorder.log_summary()


if __name__ == '__main__':
    main()
