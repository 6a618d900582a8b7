"""
Player
======

A boat paired with the controller that steers it.
"""

from typing import Any, Mapping, Optional, TYPE_CHECKING
import logging

from ..control.commands import Controller, ControlCommand, ControllerState
from .boat import Boat
from .environment import EnvironmentSnapshot

if TYPE_CHECKING:
    from ..contest import Contest

logger = logging.getLogger(__name__)


class Player:
    """
    One competitor in the simulation.

    The scheduler calls boat.simulate() and then run_ai() every step;
    run_ai() hands the boat and environment state to the controller and
    applies the returned command to the boat.
    """

    def __init__(self, boat: Boat, controller: Controller,
                 name: Optional[str] = None,
                 contest: Optional['Contest'] = None):
        """
        Args:
            boat: Boat to steer
            controller: Navigation controller
            name: Display name (defaults to the controller name)
            contest: If given, the player is started on this contest
        """
        self.boat = boat
        self.controller = controller
        self.name = name or getattr(controller, 'name', 'player')
        self.contest: Optional['Contest'] = None
        self.request: Mapping[str, Any] = {}

        self.last_command: Optional[ControlCommand] = None
        self.faults = 0

        if contest is not None:
            self.restart(contest)

    def run_ai(self, delta: float, env: EnvironmentSnapshot,
               is_simulation: bool = True) -> ControlCommand:
        """
        Ask the controller for a command and apply it to the boat.

        Args:
            delta: Step size (ms)
            env: Environment snapshot for this step
            is_simulation: True when driven by the simulator

        Returns:
            The applied command
        """
        state = ControllerState(
            boat=self.boat.state,
            environment=env,
            delta=delta,
            is_simulation=is_simulation,
        )
        command = self.controller.ai(state)
        self.boat.apply_command(command)
        self.last_command = command
        return command

    def restart(self, contest: 'Contest', request: Optional[Mapping[str, Any]] = None):
        """Move the boat to the contest start and re-initialise the controller."""
        self.contest = contest
        self.request = request or contest.request
        self.boat.reset(contest.start, contest.start_heading)
        self.controller.init(contest)
        self.faults = 0
        logger.debug(f"{self.name} restarted on contest '{contest.type}'")

    def close(self):
        self.controller.close()

    def __repr__(self) -> str:
        return f"Player({self.name!r})"
