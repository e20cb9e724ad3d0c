"""
Player state and management.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Debt:
    """Money a player still owes another player after a short payment."""

    amount: int
    creditor_id: int


class PlayerState:
    """Represents the complete state of a player in the game."""

    def __init__(self, player_id: int, name: str, starting_cash: int):
        self.player_id = player_id
        self.name = name
        self.cash = starting_cash
        self.position = 0
        self.in_jail = False
        self.jail_turns = 0
        self.jail_cards = 0
        self.is_bankrupt = False
        self.debt: Optional[Debt] = None

    @property
    def debt_amount(self) -> int:
        return self.debt.amount if self.debt else 0

    @property
    def shortfall(self) -> int:
        """Money the player must still raise: negative cash plus open debt."""
        return max(0, -self.cash) + self.debt_amount

    def __repr__(self) -> str:
        return (
            f"PlayerState(id={self.player_id}, name='{self.name}', "
            f"cash={self.cash}, position={self.position}, bankrupt={self.is_bankrupt})"
        )


class Player:
    """
    Lobby-supplied identity of a seat.
    """

    def __init__(self, player_id: int, name: str):
        self.player_id = player_id
        self.name = name

    def __repr__(self) -> str:
        return f"Player(id={self.player_id}, name='{self.name}')"
