"""
Exception hierarchy for the tycoon engine and agents.

Rule violations raised inside the engine are converted into rejected
command results at the command boundary (see `tycoon.game.rules`).
"""


class TycoonError(Exception):
    """Base exception for all game-related errors."""


class InvalidActionError(TycoonError):
    """Action is not legal in the current state."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NotYourTurnError(InvalidActionError):
    """Command issued by a participant who is not allowed to act now."""


class InsufficientFundsError(InvalidActionError):
    """Participant cannot cover the amount the command requires."""


class ResourceExhaustedError(InvalidActionError):
    """The bank has no houses or hotels left to hand out."""


class SnapshotError(TycoonError):
    """A saved game could not be turned back into an engine instance."""
