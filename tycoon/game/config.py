"""
Game configuration settings.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class GameConfig:
    """Rule constants for a single game."""

    starting_cash: int = 1500
    go_salary: int = 200
    jail_fine: int = 50
    mortgage_interest_rate: float = 0.10

    house_limit: int = 32
    hotel_limit: int = 12

    max_jail_turns: int = 3
    max_doubles: int = 3

    auction_minimum_bid: int = 10
    auctions_enabled: bool = True

    # Taxes, fines and card payments feed a pool collected on Free Parking
    free_parking_jackpot: bool = True

    log_limit: int = 100
    log_tail: int = 20

    shuffle_turn_order: bool = True
    seed: Optional[int] = None

    def unmortgage_cost(self, mortgage_value: int) -> int:
        """Cost to lift a mortgage, floor-rounded."""
        percent = 100 + round(self.mortgage_interest_rate * 100)
        return mortgage_value * percent // 100
