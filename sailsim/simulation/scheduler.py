"""
Time-Step Scheduler
===================

Advances the environment and every player in fixed time steps.

Two pacing modes:
- Real-time: after each step the next one is armed on a cancellable timer,
  delayed by dt / speed (1 ms when the speed multiplier is zero or less).
  The speed multiplier can be changed between steps.
- Batch: steps run back to back with no imposed delay, for offline replay.

Simulated time always advances by exactly dt per step; the speed
multiplier only changes wall-clock pacing.
"""

import threading
import time
from typing import Any, Callable, List, Mapping, Optional, Tuple, TYPE_CHECKING
import logging

from ..exceptions import PlayerValidationError
from .clock import SimulationClock
from .environment import Environment, EnvironmentSnapshot
from .player import Player
from .speed_control import SpeedControl

if TYPE_CHECKING:
    from ..contest import Contest

logger = logging.getLogger(__name__)

# Step size used when none (or an invalid one) is given (ms)
DEFAULT_STEP_MS = 100

# Delay between steps when the speed multiplier is zero or negative (ms)
MIN_DELAY_MS = 1

StepCallback = Callable[[Tuple[Player, ...], EnvironmentSnapshot], Any]


def compute_step_delay(dt: float, speed: float) -> float:
    """
    Wall-clock delay before the next real-time step.

    Args:
        dt: Step size (ms)
        speed: Speed multiplier

    Returns:
        Delay in milliseconds
    """
    if speed <= 0:
        return MIN_DELAY_MS
    return dt / speed


def _noop(players, env):
    pass


def _validate_player(player: Any):
    """Raise PlayerValidationError unless player can be stepped."""
    boat = getattr(player, 'boat', None)
    if boat is None:
        raise PlayerValidationError(player, 'boat')
    if not callable(getattr(boat, 'simulate', None)):
        raise PlayerValidationError(player, 'boat.simulate')
    for capability in ('run_ai', 'restart', 'close'):
        if not callable(getattr(player, capability, None)):
            raise PlayerValidationError(player, capability)


class TimeStepScheduler:
    """
    Owns the simulation clock, the environment and the players.

    Usage:
        scheduler = TimeStepScheduler(dt=100, realtime=True, options=request)
        scheduler.add_player(player)
        scheduler.run(on_step)
        ...
        scheduler.stop()
    """

    def __init__(self,
                 dt: Optional[float] = None,
                 realtime: Any = True,
                 options: Optional[Mapping[str, Any]] = None,
                 *,
                 speed_control: Optional[SpeedControl] = None,
                 environment_factory: Callable[..., Environment] = Environment,
                 timer_factory: Callable[..., Any] = threading.Timer,
                 time_source: Callable[[], float] = time.time):
        """
        Args:
            dt: Step size in milliseconds (default 100)
            realtime: Only an explicit False selects batch mode
            options: Environment options
            speed_control: Speed multiplier channel (a new one at x1 if omitted)
            environment_factory: Builds the environment from options
            timer_factory: threading.Timer-compatible factory
            time_source: Wall clock in seconds, sets the initial simulated time
        """
        if isinstance(dt, bool) or not isinstance(dt, (int, float)) or not dt > 0:
            if dt is not None:
                logger.debug(f"Invalid step size {dt!r}, using {DEFAULT_STEP_MS} ms")
            dt = DEFAULT_STEP_MS

        self.dt = dt
        self.realtime = realtime is not False
        self.speed_control = speed_control or SpeedControl()

        self.clock = SimulationClock(delta=dt, now=time_source() * 1000)
        self._environment_factory = environment_factory
        self.environment = environment_factory(options)
        self._players: List[Player] = []

        self._timer_factory = timer_factory
        self._timer = None
        self._lock = threading.RLock()
        self._running = False
        self._stopped = threading.Event()
        self._stopped.set()
        self._last_step = None

        self.steps = 0

    def add_player(self, player: Player):
        """
        Add a player; it is stepped after those already added.

        Raises:
            PlayerValidationError: if the player cannot be stepped
        """
        _validate_player(player)
        with self._lock:
            self._players.append(player)
        logger.info(f"Added player {getattr(player, 'name', player)!r}")

    def get_players(self) -> Tuple[Player, ...]:
        """Read-only view of the players, in step order."""
        return tuple(self._players)

    @property
    def is_running(self) -> bool:
        return self._running

    def step(self, callback: Optional[StepCallback] = None) -> EnvironmentSnapshot:
        """
        Run one simulation step.

        Updates the environment, simulates and steers every player, advances
        the clock and reports to callback. While the scheduler is running in
        real-time mode, the next step is then armed on a timer.

        Args:
            callback: Called with (players, environment snapshot)

        Returns:
            The environment snapshot used for this step
        """
        callback = callback if callable(callback) else _noop

        with self._lock:
            env = self.environment.update(self.clock)
            for player in self._players:
                self._advance_player(player, env)
            self.clock.advance()
            self.steps += 1

        callback(self.get_players(), env)

        if self._last_step is not None and self.steps >= self._last_step:
            logger.info(f"Step limit reached after {self.steps} steps")
            self.stop()

        if self.realtime:
            self._call_next_step(callback)

        return env

    def _advance_player(self, player: Player, env: EnvironmentSnapshot):
        """Simulate and steer one player, isolating its faults."""
        try:
            player.boat.simulate(self.clock, env)
            player.run_ai(self.clock.delta, env, True)
        except Exception:
            player.faults = getattr(player, 'faults', 0) + 1
            logger.exception(f"{player!r} failed at t={self.clock.now:.0f} ms; "
                             f"skipping its command for this step")

    def _call_next_step(self, callback: StepCallback):
        """Arm the timer for the next real-time step."""
        with self._lock:
            if not self._running:
                return
            if self._timer is not None:
                self._timer.cancel()
            delay = compute_step_delay(self.dt, self.speed_control.speed)
            self._timer = self._timer_factory(delay / 1000, self._scheduled_step,
                                              args=(callback,))
            self._timer.daemon = True
            self._timer.start()

    def _scheduled_step(self, callback: StepCallback):
        """Timer target."""
        if not self._running:
            return
        try:
            self.step(callback)
        except Exception:
            logger.exception("Simulation step failed; stopping")
            self.stop()
            raise

    def run(self, callback: Optional[StepCallback] = None,
            max_steps: Optional[int] = None):
        """
        Start stepping.

        In real-time mode the first step runs immediately and the rest follow
        on timers, so this returns straight away; use wait() to block. In
        batch mode this blocks until stop() is called or max_steps is reached.

        Args:
            callback: Called after every step with (players, environment)
            max_steps: Stop after this many further steps
        """
        callback = callback if callable(callback) else _noop

        with self._lock:
            if self._running:
                raise RuntimeError("Simulation is already running")
            if max_steps is not None and max_steps <= 0:
                logger.info(f"Nothing to run for max_steps={max_steps}")
                return
            self._running = True
            self._stopped.clear()
            self._last_step = self.steps + max_steps if max_steps is not None else None

        mode = "real-time" if self.realtime else "batch"
        logger.info(f"Simulation started ({mode}, dt={self.dt} ms, "
                    f"{len(self._players)} players)")

        try:
            if self.realtime:
                self.step(callback)
            else:
                while self._running:
                    self.step(callback)
        except BaseException:
            self.stop()
            raise

    start = run

    def stop(self):
        """Stop stepping and cancel any pending timer."""
        with self._lock:
            was_running = self._running
            self._running = False
            self._last_step = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self._stopped.set()
        if was_running:
            logger.info(f"Simulation stopped after {self.steps} steps")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the scheduler stops.

        Returns:
            True if stopped, False on timeout
        """
        return self._stopped.wait(timeout)

    def reset(self, contest: 'Contest', request: Optional[Mapping[str, Any]] = None):
        """
        Start a new contest.

        The environment is rebuilt from request and every player is
        restarted on the same contest.
        """
        if request is None:
            request = contest.request

        with self._lock:
            self.environment = self._environment_factory(request)
            for player in self._players:
                player.restart(contest, request)
        logger.info(f"Reset {len(self._players)} players on contest '{contest.type}'")

    def close(self):
        """Stop and close every player's controller."""
        self.stop()
        for player in self._players:
            player.close()
