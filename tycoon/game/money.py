"""
Money management and event logging.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional


class EventType(Enum):
    """Types of game events."""

    GAME_START = "game_start"
    TURN_START = "turn_start"
    TURN_SKIPPED = "turn_skipped"
    DICE_ROLL = "dice_roll"
    MOVE = "move"
    PASS_GO = "pass_go"
    LAND = "land"

    PURCHASE = "purchase"
    PURCHASE_DECLINED = "purchase_declined"
    AUCTION_START = "auction_start"
    AUCTION_BID = "auction_bid"
    AUCTION_PASS = "auction_pass"
    AUCTION_END = "auction_end"

    RENT_PAYMENT = "rent_payment"
    TAX_PAYMENT = "tax_payment"
    FREE_PARKING = "free_parking"

    CARD_DRAW = "card_draw"
    CARD_EFFECT = "card_effect"

    BUILD_HOUSE = "build_house"
    BUILD_HOTEL = "build_hotel"
    SELL_BUILDING = "sell_building"

    MORTGAGE = "mortgage"
    UNMORTGAGE = "unmortgage"

    GO_TO_JAIL = "go_to_jail"
    JAIL_ATTEMPT = "jail_attempt"
    JAIL_RELEASE = "jail_release"

    DEBT_CREATED = "debt_created"
    DEBT_PAYMENT = "debt_payment"
    FUNDS_REQUIRED = "funds_required"

    BANKRUPTCY = "bankruptcy"
    GAME_END = "game_end"

    TRADE_PROPOSED = "trade_proposed"
    TRADE_ACCEPTED = "trade_accepted"
    TRADE_DECLINED = "trade_declined"


@dataclass
class GameEvent:
    """A logged event in the game."""

    event_type: EventType
    message: str
    player_id: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        player_str = f"P{self.player_id}" if self.player_id is not None else "System"
        return f"[{player_str}] {self.event_type.value}: {self.message}"


class EventLog:
    """Bounded game log; the oldest entries are evicted past the cap."""

    def __init__(self, limit: int = 100):
        self.limit = limit
        self.events: Deque[GameEvent] = deque(maxlen=limit)

    def log(self, event_type: EventType, message: str, player_id: Optional[int] = None, **details: Any) -> GameEvent:
        """Log a game event."""
        event = GameEvent(event_type, message, player_id, details)
        self.events.append(event)
        return event

    def get_events(self) -> List[GameEvent]:
        """Get all retained events."""
        return list(self.events)

    def get_recent_events(self, count: int = 10) -> List[GameEvent]:
        """Get the most recent N events."""
        if count <= 0:
            return []
        return list(self.events)[-count:]

    def messages(self, count: int) -> List[str]:
        return [event.message for event in self.get_recent_events(count)]

    def __len__(self) -> int:
        return len(self.events)


class Bank:
    """
    Building supply plus a ledger of money entering and leaving play.

    The bank has unlimited money but limited houses and hotels. `paid_out`
    counts money the bank created (salaries, sales, mortgages, card
    payouts); `collected` counts money it destroyed (purchases, buildings,
    fines).
    """

    def __init__(self, house_limit: int = 32, hotel_limit: int = 12):
        self.houses_available = house_limit
        self.hotels_available = hotel_limit
        self.paid_out = 0
        self.collected = 0

    def can_buy_houses(self, count: int) -> bool:
        """Check if enough houses are available."""
        return self.houses_available >= count

    def can_buy_hotel(self) -> bool:
        """Check if a hotel is available."""
        return self.hotels_available > 0

    def buy_house(self) -> None:
        self.houses_available -= 1

    def buy_hotel(self, return_houses: int = 4) -> None:
        """Swap four houses on a site for a hotel."""
        self.hotels_available -= 1
        self.houses_available += return_houses

    def sell_house(self) -> None:
        self.houses_available += 1

    def sell_hotel(self, take_houses: int = 4) -> None:
        """Break a hotel back down into four houses."""
        self.hotels_available += 1
        self.houses_available -= take_houses

    def release_buildings(self, houses: int) -> None:
        """Return whatever stands on a site to the supply (bankruptcy)."""
        if houses == 5:
            self.hotels_available += 1
        else:
            self.houses_available += houses

    def record_payout(self, amount: int) -> None:
        self.paid_out += amount

    def record_collection(self, amount: int) -> None:
        self.collected += amount
