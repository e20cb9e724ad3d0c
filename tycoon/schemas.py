"""
Wire models for state notifications and saved games.

`PublicGameState` is what every seat, human or bot, is shown after each
accepted command. It deliberately carries no deck order or random state.
`SavedGame` is the full persistence snapshot used to rebuild an engine.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _View(BaseModel):
    model_config = ConfigDict(frozen=True)


class DebtView(_View):
    amount: int
    creditor_id: int


class PlayerView(_View):
    player_id: int
    name: str
    cash: int
    position: int
    in_jail: bool = False
    jail_turns: int = 0
    jail_cards: int = 0
    is_bankrupt: bool = False
    debt: Optional[DebtView] = None
    properties: List[int] = Field(default_factory=list)


class SpaceView(_View):
    position: int
    name: str
    kind: str
    color_group: Optional[str] = None
    price: Optional[int] = None
    rents: List[int] = Field(default_factory=list)
    house_cost: Optional[int] = None
    mortgage_value: Optional[int] = None
    tax_amount: Optional[int] = None
    owner_id: Optional[int] = None
    houses: int = 0
    is_mortgaged: bool = False

    @property
    def is_ownable(self) -> bool:
        return self.price is not None


class PendingActionView(_View):
    action_type: str
    player_id: int
    position: Optional[int] = None
    amount: Optional[int] = None


class AuctionView(_View):
    auction_id: int
    property_position: int
    property_name: str
    current_bid: int
    highest_bidder: Optional[int] = None
    minimum_bid: int
    minimum_next_bid: int
    participants: List[int]
    passed: List[int] = Field(default_factory=list)

    @property
    def remaining_bidders(self) -> List[int]:
        return [pid for pid in self.participants if pid not in self.passed]


class TradeOfferView(_View):
    cash: int = 0
    properties: List[int] = Field(default_factory=list)
    jail_cards: int = 0


class TradeView(_View):
    trade_id: int
    proposer_id: int
    recipient_id: int
    offer: TradeOfferView
    request: TradeOfferView
    status: str
    created_turn: int = 0


class RulesView(_View):
    starting_cash: int
    go_salary: int
    jail_fine: int
    mortgage_interest_rate: float
    auctions_enabled: bool
    max_jail_turns: int


class PublicGameState(_View):
    """State notification broadcast to all participants."""

    version: int
    turn_number: int
    current_player_id: int
    turn_order: List[int]
    players: List[PlayerView]
    board: List[SpaceView]
    dice_rolled: bool = False
    can_roll_again: bool = False
    last_dice_roll: Optional[List[int]] = None
    pending_action: Optional[PendingActionView] = None
    auction: Optional[AuctionView] = None
    pending_trades: List[TradeView] = Field(default_factory=list)
    recent_trades: List[TradeView] = Field(default_factory=list)
    log: List[str] = Field(default_factory=list)
    houses_available: int
    hotels_available: int
    free_parking: int = 0
    game_over: bool = False
    winner_id: Optional[int] = None
    rules: RulesView

    def player(self, player_id: int) -> Optional[PlayerView]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def space(self, position: int) -> SpaceView:
        return self.board[position]


class SavedPlayer(BaseModel):
    player_id: int
    name: str
    cash: int
    position: int
    in_jail: bool
    jail_turns: int
    jail_cards: int
    is_bankrupt: bool
    debt: Optional[DebtView] = None


class SavedProperty(BaseModel):
    position: int
    owner_id: Optional[int] = None
    houses: int = 0
    is_mortgaged: bool = False


class SavedDeck(BaseModel):
    order: List[str]
    index: int


class SavedAuction(BaseModel):
    auction_id: int
    property_position: int
    participants: List[int]
    passed: List[int]
    minimum_bid: int
    current_bid: int
    highest_bidder: Optional[int] = None


class SavedEvent(BaseModel):
    event_type: str
    message: str
    player_id: Optional[int] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class SavedGame(BaseModel):
    """Everything needed to rebuild an equivalent engine at a quiescent point."""

    format_version: int = 1
    config: Dict[str, Any]
    players: List[SavedPlayer]
    turn_order: List[int]
    current_index: int
    turn_number: int
    properties: List[SavedProperty]
    chance: SavedDeck
    community_chest: SavedDeck
    rng_state: List[Any]
    auction: Optional[SavedAuction] = None
    next_auction_id: int = 1
    pending_action: Optional[PendingActionView] = None
    pending_trades: List[TradeView] = Field(default_factory=list)
    trade_history: List[TradeView] = Field(default_factory=list)
    next_trade_id: int = 1
    log: List[SavedEvent] = Field(default_factory=list)
    houses_available: int
    hotels_available: int
    bank_paid_out: int = 0
    bank_collected: int = 0
    free_parking: int = 0
    dice_rolled: bool = False
    can_roll_again: bool = False
    doubles_count: int = 0
    last_dice_roll: Optional[List[int]] = None
    game_over: bool = False
    winner_id: Optional[int] = None
    state_version: int = 0
