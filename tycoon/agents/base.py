"""Base class for all seat agents."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from tycoon.game.rules import Command
    from tycoon.schemas import PublicGameState


class Agent(ABC):
    """
    Abstract base class for agents.

    An agent only ever sees the broadcast `PublicGameState` and only ever
    acts by returning a `Command`; it has no access to engine internals.

    Attributes:
        player_id: The seat's player id.
        name: The player's display name.
    """

    def __init__(self, player_id: int, name: str):
        """
        Initialize the agent.

        Args:
            player_id: The seat's player id.
            name: The player's display name.
        """
        self.player_id = player_id
        self.name = name

    @abstractmethod
    def decide(self, state: "PublicGameState") -> Optional["Command"]:
        """
        Choose the next command for this seat.

        Args:
            state: The latest state notification.

        Returns:
            The command to submit, or None when the seat has nothing to do.
        """
        pass

    def commit(self, command: "Command", state: "PublicGameState") -> None:
        """
        Called once the engine has accepted a command returned by `decide`.

        Args:
            command: The accepted command.
            state: The state the command was decided on.
        """

    def reject(self, command: "Command", reason: str) -> None:
        """Called when the engine rejected a command returned by `decide`."""
