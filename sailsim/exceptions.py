"""
Exceptions
==========

Errors raised by the simulation core.
"""


class ConfigurationError(ValueError):
    """Contest, waypoint or simulation configuration is invalid."""


class PlayerValidationError(TypeError):
    """A player added to the scheduler lacks a required capability."""

    def __init__(self, player, capability: str):
        self.player = player
        self.capability = capability
        super().__init__(
            f"Player {player!r} is missing required capability '{capability}'"
        )
