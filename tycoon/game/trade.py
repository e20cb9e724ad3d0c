from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional


@dataclass(frozen=True)
class TradeOffer:
    """
    One side of a trade bundle.
    """
    cash: int = 0
    properties: FrozenSet[int] = field(default_factory=frozenset)  # Board indices
    jail_cards: int = 0  # Number of Get Out of Jail Free cards

    @classmethod
    def of(cls, cash: int = 0, properties: Iterable[int] = (), jail_cards: int = 0) -> "TradeOffer":
        return cls(cash, frozenset(properties), jail_cards)

    def is_empty(self) -> bool:
        """Check if offer contains anything."""
        return self.cash == 0 and len(self.properties) == 0 and self.jail_cards == 0

    def __repr__(self) -> str:
        items = []
        if self.cash > 0:
            items.append(f"£{self.cash}")
        if self.properties:
            items.append(f"{len(self.properties)} properties")
        if self.jail_cards > 0:
            items.append(f"{self.jail_cards} GOOJF cards")
        return " + ".join(items) if items else "nothing"


class TradeStatus(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


@dataclass
class Trade:
    """
    A trade proposed by one player to another.

    `offer` is what the proposer gives, `request` what the proposer wants
    back. Both sides move together when the recipient accepts.
    """

    trade_id: int
    proposer_id: int
    recipient_id: int
    offer: TradeOffer
    request: TradeOffer
    status: TradeStatus = TradeStatus.PENDING
    created_turn: int = 0

    @property
    def is_pending(self) -> bool:
        return self.status == TradeStatus.PENDING

    def involves(self, player_id: int) -> bool:
        return player_id in (self.proposer_id, self.recipient_id)


class TradeManager:
    """
    Keeps pending trades and a short history of resolved ones.
    """

    def __init__(self, history_limit: int = 20):
        self.trades: Dict[int, Trade] = {}  # trade_id -> pending Trade
        self.history: List[Trade] = []
        self.history_limit = history_limit
        self.next_trade_id = 1

    def create_trade(
            self,
            proposer_id: int,
            recipient_id: int,
            offer: TradeOffer,
            request: TradeOffer,
            turn_number: int = 0,
    ) -> Trade:
        """Create a new trade proposal."""
        trade = Trade(self.next_trade_id, proposer_id, recipient_id, offer, request, created_turn=turn_number)
        self.trades[trade.trade_id] = trade
        self.next_trade_id += 1
        return trade

    def get_trade(self, trade_id: int) -> Optional[Trade]:
        """Get a pending trade by ID."""
        return self.trades.get(trade_id)

    def pending(self) -> List[Trade]:
        return list(self.trades.values())

    def pending_for(self, player_id: int) -> List[Trade]:
        """Pending trades addressed to a player."""
        return [t for t in self.trades.values() if t.recipient_id == player_id]

    def resolve(self, trade_id: int, status: TradeStatus) -> Trade:
        """Mark a trade accepted or declined and move it to history."""
        trade = self.trades.pop(trade_id)
        trade.status = status
        self.history.append(trade)
        if len(self.history) > self.history_limit:
            del self.history[: len(self.history) - self.history_limit]
        return trade
