"""
Controller Contract
===================

Commands returned by navigation controllers, the state handed to them
each step, and the base class controllers implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..contest import Contest
    from ..simulation.boat import BoatState
    from ..simulation.environment import EnvironmentSnapshot


@dataclass
class ControlCommand:
    """Servo command for one step."""
    action: str = "move"
    servo_rudder: float = 0.0    # Normalised rudder deflection [-1, 1]
    servo_sail: float = 0.0      # Reserved


@dataclass
class ControllerState:
    """Everything a controller sees when deciding a command."""
    boat: 'BoatState'
    environment: 'EnvironmentSnapshot'
    delta: float = 0.0           # Step size (ms)
    is_simulation: bool = True


class Controller(ABC):
    """
    Base class for navigation controllers.

    Lifecycle: init(contest) once before the first ai() call, ai(state)
    every step, close() when the player is torn down. Calling init() again
    restarts the controller for a new contest.
    """

    name = "controller"

    def init(self, contest: 'Contest'):
        """Prepare for a contest."""
        self.contest = contest

    @abstractmethod
    def ai(self, state: ControllerState) -> ControlCommand:
        """Decide the command for this step."""

    def close(self):
        """Release any held resources."""
