"""
Auction system for properties.
"""

from typing import List, Optional, Set

from tycoon.exceptions import InsufficientFundsError, InvalidActionError, NotYourTurnError
from tycoon.game.money import EventLog, EventType


class Auction:
    """
    Manages an auction for a property.

    Any participant who has not passed may bid at any time. The auction ends
    when nobody but the highest bidder is still in (sold), or when everyone
    has passed without a single bid (unsold).
    """

    def __init__(
        self,
        auction_id: int,
        property_position: int,
        property_name: str,
        participant_ids: List[int],
        event_log: EventLog,
        minimum_bid: int = 10,
        passed_ids: Optional[Set[int]] = None,
    ):
        self.auction_id = auction_id
        self.property_position = property_position
        self.property_name = property_name
        self.participants = list(participant_ids)
        self.passed: Set[int] = set(passed_ids or ()) & set(self.participants)
        self.minimum_bid = minimum_bid
        self.current_bid = 0
        self.highest_bidder: Optional[int] = None
        self.event_log = event_log

    @property
    def remaining_bidders(self) -> List[int]:
        return [pid for pid in self.participants if pid not in self.passed]

    @property
    def minimum_next_bid(self) -> int:
        return max(self.minimum_bid, self.current_bid + 1)

    @property
    def is_complete(self) -> bool:
        remaining = self.remaining_bidders
        if self.highest_bidder is not None:
            return not remaining or remaining == [self.highest_bidder]
        return not remaining

    def is_active_bidder(self, player_id: int) -> bool:
        return player_id in self.participants and player_id not in self.passed

    def place_bid(self, player_id: int, amount: int, available_cash: int) -> None:
        """
        Record a bid. Raises InvalidActionError if the bid is not legal.
        """
        if self.is_complete:
            raise InvalidActionError("Auction is already over")
        if player_id not in self.participants:
            raise NotYourTurnError("You are not taking part in this auction")
        if player_id in self.passed:
            raise InvalidActionError("You have already passed on this auction")
        if amount < self.minimum_next_bid:
            raise InvalidActionError(f"Minimum bid is £{self.minimum_next_bid}")
        if amount > available_cash:
            raise InsufficientFundsError("Not enough money for that bid")

        self.current_bid = amount
        self.highest_bidder = player_id

    def pass_bid(self, player_id: int) -> None:
        if player_id not in self.participants:
            raise NotYourTurnError("You are not taking part in this auction")
        if player_id in self.passed:
            raise InvalidActionError("You have already passed on this auction")
        self.passed.add(player_id)

    def get_winner(self) -> Optional[int]:
        """Winning player ID, or None while running or when nobody bid."""
        if not self.is_complete:
            return None
        return self.highest_bidder

    def get_winning_bid(self) -> int:
        return self.current_bid

    def log_start(self) -> None:
        self.event_log.log(
            EventType.AUCTION_START,
            f"Auction started for {self.property_name} (minimum bid: £{self.minimum_bid})",
            position=self.property_position,
            participants=list(self.participants),
            auction_id=self.auction_id,
        )
