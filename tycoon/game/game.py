"""
Main game engine and state management.

Every public command method validates first and mutates second: a rule
violation raises `InvalidActionError` (or a subclass) before any state has
changed, so a rejected command never leaves a partial update behind.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from tycoon.exceptions import (
    InsufficientFundsError,
    InvalidActionError,
    NotYourTurnError,
    ResourceExhaustedError,
)
from tycoon.game.auction import Auction
from tycoon.game.board import BOARD_SIZE, HOTEL, JAIL_POSITION, Board
from tycoon.game.cards import Card, CardType, Deck, create_chance_deck, create_community_chest_deck
from tycoon.game.config import GameConfig
from tycoon.game.money import Bank, EventLog, EventType
from tycoon.game.player import Debt, Player, PlayerState
from tycoon.game.spaces import (
    PropertySpace,
    RailroadSpace,
    SpaceType,
    TaxSpace,
    UtilitySpace,
)
from tycoon.game.trade import Trade, TradeManager, TradeOffer, TradeStatus

logger = logging.getLogger(__name__)


class PendingActionType(Enum):
    """Structured decisions that block the turn until resolved."""

    BUY_OR_AUCTION = "buy_or_auction"
    MUST_RAISE_FUNDS = "must_raise_funds"
    MUST_PAY_OR_BANKRUPT = "must_pay_or_bankrupt"


FUNDS_ACTIONS = (PendingActionType.MUST_RAISE_FUNDS, PendingActionType.MUST_PAY_OR_BANKRUPT)


@dataclass
class PendingAction:
    action_type: PendingActionType
    player_id: int
    position: Optional[int] = None
    amount: Optional[int] = None


class GameState:
    """
    Represents the complete state of a game.
    This is the main interface for the game engine.
    """

    def __init__(self, config: GameConfig, players: List[Player], rng: Optional[random.Random] = None):
        self.config = config
        self.board = Board()
        self.bank = Bank(config.house_limit, config.hotel_limit)
        self.event_log = EventLog(config.log_limit)

        self.rng = rng if rng is not None else random.Random(config.seed)

        self.players: Dict[int, PlayerState] = {}
        for player in players:
            if player.player_id in self.players:
                raise ValueError(f"Duplicate player id {player.player_id}")
            self.players[player.player_id] = PlayerState(player.player_id, player.name, config.starting_cash)

        self.turn_order: List[int] = [p.player_id for p in players]
        if config.shuffle_turn_order:
            self.rng.shuffle(self.turn_order)
        self.current_index = 0

        self.chance_deck: Deck = create_chance_deck(self.rng)
        self.community_chest_deck: Deck = create_community_chest_deck(self.rng)

        self.trade_manager = TradeManager()

        self.turn_number = 1
        self.active_auction: Optional[Auction] = None
        self.next_auction_id = 1
        self.pending_action: Optional[PendingAction] = None
        self.free_parking = 0
        self.game_over = False
        self.winner_id: Optional[int] = None
        self.state_version = 0

        self.dice_rolled = False
        self.can_roll_again = False
        self.doubles_count = 0
        self.last_dice_roll: Optional[Tuple[int, int]] = None

        names = ", ".join(self.players[pid].name for pid in self.turn_order)
        self.event_log.log(EventType.GAME_START, f"Game started! Turn order: {names}")
        self.event_log.log(
            EventType.TURN_START, f"{self.get_current_player().name}'s turn", self.current_player_id
        )

    # === LOOKUPS ===

    @property
    def current_player_id(self) -> int:
        return self.turn_order[self.current_index]

    def get_current_player(self) -> PlayerState:
        """Get the player whose turn it is."""
        return self.players[self.current_player_id]

    def get_active_players(self) -> List[PlayerState]:
        """Non-bankrupt players in turn order."""
        return [self.players[pid] for pid in self.turn_order if not self.players[pid].is_bankrupt]

    def owned_properties(self, player_id: int) -> List[int]:
        return self.board.owned_by(player_id)

    def _name(self, player_id: int) -> str:
        return self.players[player_id].name

    def _get_player(self, player_id: int) -> PlayerState:
        player = self.players.get(player_id)
        if player is None:
            raise InvalidActionError(f"Unknown player {player_id}")
        return player

    def _require_active(self, player_id: int) -> PlayerState:
        if self.game_over:
            raise InvalidActionError("The game is over")
        player = self._get_player(player_id)
        if player.is_bankrupt:
            raise InvalidActionError(f"{player.name} is bankrupt")
        return player

    def _require_turn(self, player_id: int) -> PlayerState:
        player = self._require_active(player_id)
        if player_id != self.current_player_id:
            raise NotYourTurnError("It is not your turn")
        return player

    def _require_no_auction(self) -> None:
        if self.active_auction is not None:
            raise InvalidActionError("Finish the auction first")

    def _require_no_pending(self) -> None:
        if self.pending_action is not None:
            raise InvalidActionError("Resolve the pending action first")

    def _require_can_liquidate(self, player_id: int) -> PlayerState:
        """
        Selling and mortgaging are turn actions, except that a player who
        owes money may raise it at any time.
        """
        player = self._require_active(player_id)
        if player_id != self.current_player_id and player.shortfall == 0:
            raise NotYourTurnError("You can only raise funds out of turn while you owe money")
        return player

    # === MONEY ===

    def _credit(self, player_id: int, amount: int) -> None:
        """Every positive balance change goes through here so open debt is paid first."""
        if amount <= 0:
            return
        self.players[player_id].cash += amount
        self._settle_debt(player_id)

    def _settle_debt(self, player_id: int) -> None:
        player = self.players[player_id]
        debt = player.debt
        if debt is None or player.cash <= 0:
            return
        payment = min(player.cash, debt.amount)
        player.cash -= payment
        debt.amount -= payment
        creditor_id = debt.creditor_id
        if debt.amount == 0:
            player.debt = None
        self.event_log.log(
            EventType.DEBT_PAYMENT,
            f"{player.name} paid £{payment} of debt to {self._name(creditor_id)}"
            + ("" if player.debt else " (debt cleared)"),
            player_id,
            creditor=creditor_id,
            amount=payment,
        )
        self._credit(creditor_id, payment)

    def settle_debts(self) -> None:
        """Catch-all: make sure no debtor is sitting on positive cash."""
        for player_id in self.turn_order:
            self._settle_debt(player_id)

    def _bank_pays(self, player_id: int, amount: int) -> None:
        self.bank.record_payout(amount)
        self._credit(player_id, amount)

    def _pay_bank(self, player_id: int, amount: int) -> None:
        self.players[player_id].cash -= amount
        self.bank.record_collection(amount)

    def _pay_to_pool(self, player_id: int, amount: int) -> None:
        """Taxes, card payments and repairs; the balance may go negative."""
        if amount <= 0:
            return
        self.players[player_id].cash -= amount
        if self.config.free_parking_jackpot:
            self.free_parking += amount
        else:
            self.bank.record_collection(amount)

    def _pay_player(self, payer_id: int, payee_id: int, amount: int) -> None:
        """
        Pay another player. A payer who cannot cover the amount hands over
        what they have and owes the rest as debt. A payer already in debt to
        someone else pays in full and goes negative instead.
        """
        if amount <= 0:
            return
        payer = self.players[payer_id]
        if payer.cash >= amount or (payer.debt is not None and payer.debt.creditor_id != payee_id):
            payer.cash -= amount
            self._credit(payee_id, amount)
            return

        paid = max(payer.cash, 0)
        owed = amount - paid
        payer.cash -= paid
        if payer.debt is None:
            payer.debt = Debt(owed, payee_id)
        else:
            payer.debt.amount += owed
        self.event_log.log(
            EventType.DEBT_CREATED,
            f"{payer.name} could only pay £{paid} and owes £{owed} to {self._name(payee_id)}",
            payer_id,
            creditor=payee_id,
            amount=owed,
        )
        self._credit(payee_id, paid)

    # === SOLVENCY ===

    def liquidation_value(self, player_id: int) -> int:
        """Cash a player could still raise: unmortgaged mortgage values plus half the building cost."""
        total = 0
        for pos in self.board.owned_by(player_id):
            state = self.board.states[pos]
            space = self.board.get_ownable_space(pos)
            if not state.is_mortgaged:
                total += space.mortgage_value
            if state.houses and isinstance(space, PropertySpace):
                total += state.houses * space.house_cost // 2
        return total

    def check_bankruptcy(self, player_id: int) -> Optional[PendingActionType]:
        """
        Compare a player's shortfall with what they could raise and set the
        matching funds pending action. Only the player whose turn it is can
        hold a pending action; everyone else is checked when their turn comes.
        """
        player = self.players[player_id]
        shortfall = player.shortfall
        pending = self.pending_action
        holds_funds_action = (
            pending is not None and pending.player_id == player_id and pending.action_type in FUNDS_ACTIONS
        )

        if shortfall == 0 or player.is_bankrupt:
            if holds_funds_action:
                self.pending_action = None
                self.event_log.log(EventType.FUNDS_REQUIRED, f"{player.name} is solvent again", player_id)
            return None

        if player_id != self.current_player_id or self.game_over:
            return None
        if pending is not None and not holds_funds_action:
            return None

        if self.liquidation_value(player_id) < shortfall:
            action_type = PendingActionType.MUST_PAY_OR_BANKRUPT
        else:
            action_type = PendingActionType.MUST_RAISE_FUNDS
        changed = not holds_funds_action or pending.action_type != action_type or pending.amount != shortfall
        self.pending_action = PendingAction(action_type, player_id, amount=shortfall)
        if changed:
            self.event_log.log(
                EventType.FUNDS_REQUIRED,
                f"{player.name} must raise £{shortfall}"
                + (" or declare bankruptcy" if action_type == PendingActionType.MUST_PAY_OR_BANKRUPT else ""),
                player_id,
                amount=shortfall,
            )
        return action_type

    def after_command(self) -> None:
        """Runs after every accepted command."""
        self.settle_debts()
        if not self.game_over:
            self.check_bankruptcy(self.current_player_id)
        self.state_version += 1

    # === DICE AND MOVEMENT ===

    def check_roll(self, player_id: int) -> PlayerState:
        player = self._require_turn(player_id)
        self._require_no_pending()
        self._require_no_auction()
        if self.dice_rolled and not self.can_roll_again:
            raise InvalidActionError("You have already rolled this turn")
        return player

    def roll_dice(self, player_id: int) -> Tuple[int, int]:
        """
        Roll two dice for the current player and resolve the move.

        Three doubles in a row send the player straight to jail. In jail,
        doubles release and move the player; the third failed attempt
        charges the fine and moves them anyway.
        """
        player = self.check_roll(player_id)

        die1 = self.rng.randint(1, 6)
        die2 = self.rng.randint(1, 6)
        total = die1 + die2
        is_doubles = die1 == die2
        self.last_dice_roll = (die1, die2)
        self.dice_rolled = True
        self.event_log.log(
            EventType.DICE_ROLL,
            f"{player.name} rolled {die1} + {die2} = {total}" + (" (doubles!)" if is_doubles else ""),
            player_id,
            die1=die1,
            die2=die2,
        )

        if player.in_jail:
            self.can_roll_again = False
            if is_doubles:
                self._release_from_jail(player_id)
                self.event_log.log(
                    EventType.JAIL_RELEASE, f"{player.name} rolled doubles and is released from jail", player_id
                )
                self._move_by(player_id, total)
                return die1, die2

            player.jail_turns += 1
            if player.jail_turns >= self.config.max_jail_turns:
                self._pay_bank(player_id, self.config.jail_fine)
                self._release_from_jail(player_id)
                self.event_log.log(
                    EventType.JAIL_RELEASE,
                    f"{player.name} paid £{self.config.jail_fine} after {self.config.max_jail_turns} "
                    "failed attempts and is released from jail",
                    player_id,
                )
                self._move_by(player_id, total)
            else:
                self.event_log.log(
                    EventType.JAIL_ATTEMPT,
                    f"{player.name} failed to roll doubles "
                    f"(attempt {player.jail_turns}/{self.config.max_jail_turns})",
                    player_id,
                )
            return die1, die2

        if is_doubles:
            self.doubles_count += 1
            if self.doubles_count >= self.config.max_doubles:
                self.event_log.log(
                    EventType.GO_TO_JAIL, f"{player.name} rolled {self.doubles_count} doubles in a row", player_id
                )
                self.send_to_jail(player_id)
                return die1, die2
            self.can_roll_again = True
        else:
            self.can_roll_again = False

        self._move_by(player_id, total)
        return die1, die2

    def _collect_go(self, player_id: int) -> None:
        self.event_log.log(
            EventType.PASS_GO, f"{self._name(player_id)} passed GO and collected £{self.config.go_salary}", player_id
        )
        self._bank_pays(player_id, self.config.go_salary)

    def _move_by(self, player_id: int, spaces: int) -> None:
        player = self.players[player_id]
        old_position = player.position
        player.position = (old_position + spaces) % BOARD_SIZE
        if spaces > 0 and player.position < old_position:
            self._collect_go(player_id)
        self.handle_landing(player_id)

    def _move_to(self, player_id: int, position: int, collect_go: bool = True) -> None:
        player = self.players[player_id]
        if collect_go and position < player.position and position != JAIL_POSITION:
            self._collect_go(player_id)
        player.position = position

    def send_to_jail(self, player_id: int) -> None:
        """Send a player to jail. Does not pass GO."""
        player = self.players[player_id]
        player.position = JAIL_POSITION
        player.in_jail = True
        player.jail_turns = 0
        if player_id == self.current_player_id:
            self.can_roll_again = False
            self.doubles_count = 0
        self.event_log.log(EventType.GO_TO_JAIL, f"{player.name} was sent to jail", player_id)

    def _release_from_jail(self, player_id: int) -> None:
        player = self.players[player_id]
        player.in_jail = False
        player.jail_turns = 0

    # === LANDING ===

    def handle_landing(
        self,
        player_id: int,
        rent_multiplier: int = 1,
        utility_dice_multiplier: Optional[int] = None,
    ) -> None:
        """Resolve the space the player is standing on."""
        player = self.players[player_id]
        space = self.board.get_space(player.position)
        self.event_log.log(EventType.LAND, f"{player.name} landed on {space.name}", player_id, position=space.position)

        if space.is_ownable:
            state = self.board.states[space.position]
            if not state.is_owned():
                self.pending_action = PendingAction(
                    PendingActionType.BUY_OR_AUCTION, player_id, position=space.position, amount=space.price
                )
            elif state.owner_id != player_id and not state.is_mortgaged:
                if utility_dice_multiplier is not None and isinstance(space, UtilitySpace):
                    rent = self._dice_total() * utility_dice_multiplier
                else:
                    rent = self.calculate_rent(space.position) * rent_multiplier
                self.event_log.log(
                    EventType.RENT_PAYMENT,
                    f"{player.name} paid £{rent} rent to {self._name(state.owner_id)}",
                    player_id,
                    owner=state.owner_id,
                    amount=rent,
                )
                self._pay_player(player_id, state.owner_id, rent)

        elif isinstance(space, TaxSpace):
            self.event_log.log(
                EventType.TAX_PAYMENT, f"{player.name} paid £{space.amount} in {space.name}", player_id
            )
            self._pay_to_pool(player_id, space.amount)

        elif space.space_type == SpaceType.CHANCE:
            self._draw_card(player_id, self.chance_deck, "Chance")

        elif space.space_type == SpaceType.COMMUNITY_CHEST:
            self._draw_card(player_id, self.community_chest_deck, "Community Chest")

        elif space.space_type == SpaceType.GO_TO_JAIL:
            self.send_to_jail(player_id)

        elif space.space_type == SpaceType.FREE_PARKING:
            if self.config.free_parking_jackpot and self.free_parking > 0:
                pool = self.free_parking
                self.free_parking = 0
                self.event_log.log(
                    EventType.FREE_PARKING, f"{player.name} collected £{pool} from Free Parking", player_id
                )
                self._credit(player_id, pool)

    def _dice_total(self) -> int:
        return sum(self.last_dice_roll) if self.last_dice_roll else 0

    def calculate_rent(self, position: int, dice_total: Optional[int] = None) -> int:
        """
        Rent owed for landing on an ownable space.

        Args:
            position: Board index of the space
            dice_total: Dice total for utilities (defaults to the last roll)
        """
        state = self.board.states[position]
        if not state.is_owned() or state.is_mortgaged:
            return 0

        space = self.board.get_space(position)
        owner_id = state.owner_id

        if isinstance(space, PropertySpace):
            return space.get_rent(state.houses, self.board.owns_group(owner_id, space.group))
        if isinstance(space, RailroadSpace):
            return space.get_rent(self.board.count_owned(owner_id, SpaceType.RAILROAD))
        if isinstance(space, UtilitySpace):
            if dice_total is None:
                dice_total = self._dice_total()
            return space.get_rent(dice_total, self.board.count_owned(owner_id, SpaceType.UTILITY))
        return 0

    # === CARDS ===

    def _draw_card(self, player_id: int, deck: Deck, label: str) -> Card:
        card = deck.draw()
        self.event_log.log(
            EventType.CARD_DRAW, f'{self._name(player_id)} drew {label}: "{card.description}"', player_id
        )
        self.execute_card(player_id, card)
        return card

    def execute_card(self, player_id: int, card: Card) -> None:
        """Execute the effect of a drawn card."""
        player = self.players[player_id]

        if card.card_type == CardType.MOVE_TO:
            self._move_to(player_id, card.target_position)
            self.handle_landing(player_id)

        elif card.card_type == CardType.MOVE_BACK:
            player.position = (player.position - card.value) % BOARD_SIZE
            self.event_log.log(EventType.MOVE, f"{player.name} moved back {card.value} spaces", player_id)
            self.handle_landing(player_id)

        elif card.card_type == CardType.MONEY:
            if card.value > 0:
                self.event_log.log(EventType.CARD_EFFECT, f"{player.name} received £{card.value}", player_id)
                self._bank_pays(player_id, card.value)
            else:
                self.event_log.log(EventType.CARD_EFFECT, f"{player.name} paid £{-card.value}", player_id)
                self._pay_to_pool(player_id, -card.value)

        elif card.card_type == CardType.MONEY_FROM_PLAYERS:
            if card.value > 0:
                message = f"{player.name} collected £{card.value} from each player"
            else:
                message = f"{player.name} paid £{-card.value} to each player"
            self.event_log.log(EventType.CARD_EFFECT, message, player_id)
            others = [p.player_id for p in self.get_active_players() if p.player_id != player_id]
            for other_id in others:
                if card.value > 0:
                    self._pay_player(other_id, player_id, card.value)
                else:
                    self._pay_player(player_id, other_id, -card.value)

        elif card.card_type == CardType.GO_TO_JAIL:
            self.send_to_jail(player_id)

        elif card.card_type == CardType.GET_OUT_OF_JAIL:
            player.jail_cards += 1
            self.event_log.log(
                EventType.CARD_EFFECT, f"{player.name} received a Get Out of Jail Free card", player_id
            )

        elif card.card_type == CardType.REPAIRS:
            cost = 0
            for pos in self.board.owned_by(player_id):
                houses = self.board.states[pos].houses
                cost += card.hotel_cost if houses == HOTEL else houses * card.house_cost
            self.event_log.log(EventType.CARD_EFFECT, f"{player.name} paid £{cost} for repairs", player_id)
            self._pay_to_pool(player_id, cost)

        elif card.card_type == CardType.NEAREST_RAILROAD:
            target = self.board.find_nearest(player.position, SpaceType.RAILROAD)
            self._move_to(player_id, target)
            self.handle_landing(player_id, rent_multiplier=2)

        elif card.card_type == CardType.NEAREST_UTILITY:
            target = self.board.find_nearest(player.position, SpaceType.UTILITY)
            self._move_to(player_id, target)
            self.handle_landing(player_id, utility_dice_multiplier=10)

    # === BUYING AND AUCTIONS ===

    def check_decline(self, player_id: int) -> PendingAction:
        self._require_turn(player_id)
        pending = self.pending_action
        if pending is None or pending.action_type != PendingActionType.BUY_OR_AUCTION or pending.player_id != player_id:
            raise InvalidActionError("No property to buy")
        return pending

    def check_buy(self, player_id: int) -> PendingAction:
        pending = self.check_decline(player_id)
        if self.players[player_id].cash < pending.amount:
            raise InsufficientFundsError("Not enough money")
        return pending

    def buy_property(self, player_id: int) -> int:
        """Buy the property the current player has just landed on. Returns its index."""
        pending = self.check_buy(player_id)
        space = self.board.get_ownable_space(pending.position)
        self._pay_bank(player_id, space.price)
        self.board.states[space.position].owner_id = player_id
        self.pending_action = None
        self.event_log.log(
            EventType.PURCHASE,
            f"{self._name(player_id)} bought {space.name} for £{space.price}",
            player_id,
            position=space.position,
            price=space.price,
        )
        return space.position

    def decline_property(self, player_id: int) -> Optional[Auction]:
        """Turn down the purchase; the property goes to auction when auctions are enabled."""
        pending = self.check_decline(player_id)
        space = self.board.get_ownable_space(pending.position)
        self.pending_action = None
        self.event_log.log(
            EventType.PURCHASE_DECLINED, f"{self._name(player_id)} declined to buy {space.name}", player_id
        )
        if not self.config.auctions_enabled:
            return None
        return self.start_auction(space.position, decliner_id=player_id)

    def start_auction(self, position: int, decliner_id: Optional[int] = None) -> Optional[Auction]:
        """
        Open an auction. Only active players who can cover the minimum bid
        take part; whoever declined the purchase has already passed.
        """
        space = self.board.get_ownable_space(position)
        minimum = self.config.auction_minimum_bid
        participants = [p.player_id for p in self.get_active_players() if p.cash >= minimum]
        passed = {decliner_id} if decliner_id is not None else set()

        if not [pid for pid in participants if pid not in passed]:
            self.event_log.log(EventType.AUCTION_END, f"No one bought {space.name}", position=position)
            return None

        auction = Auction(
            self.next_auction_id, position, space.name, participants, self.event_log, minimum, passed
        )
        self.next_auction_id += 1
        self.active_auction = auction
        auction.log_start()
        return auction

    def _require_auction(self) -> Auction:
        if self.game_over:
            raise InvalidActionError("The game is over")
        if self.active_auction is None:
            raise InvalidActionError("There is no auction running")
        return self.active_auction

    def place_bid(self, player_id: int, amount: int) -> None:
        auction = self._require_auction()
        player = self._require_active(player_id)
        auction.place_bid(player_id, amount, player.cash)
        self.event_log.log(
            EventType.AUCTION_BID, f"{player.name} bid £{amount}", player_id, auction_id=auction.auction_id
        )
        self._finish_auction_if_complete()

    def pass_bid(self, player_id: int) -> None:
        auction = self._require_auction()
        player = self._require_active(player_id)
        auction.pass_bid(player_id)
        self.event_log.log(EventType.AUCTION_PASS, f"{player.name} passed on the auction", player_id)
        self._finish_auction_if_complete()

    def _finish_auction_if_complete(self) -> None:
        auction = self.active_auction
        if auction is None or not auction.is_complete:
            return
        self.active_auction = None
        winner_id = auction.get_winner()
        if winner_id is None:
            self.event_log.log(
                EventType.AUCTION_END, f"No one bought {auction.property_name}", position=auction.property_position
            )
            return

        price = auction.get_winning_bid()
        self._pay_bank(winner_id, price)
        self.board.states[auction.property_position].owner_id = winner_id
        self.event_log.log(
            EventType.AUCTION_END,
            f"{self._name(winner_id)} won the auction for {auction.property_name} at £{price}",
            winner_id,
            position=auction.property_position,
            price=price,
        )

    def settle_auction(self, reason: str = "timed out") -> None:
        """Close an unresponsive auction: everyone still in is treated as having passed."""
        auction = self.active_auction
        if auction is None:
            return
        for pid in auction.remaining_bidders:
            if pid != auction.highest_bidder:
                auction.passed.add(pid)
        if auction.highest_bidder is not None:
            auction.passed.discard(auction.highest_bidder)
        self.event_log.log(EventType.AUCTION_END, f"Auction for {auction.property_name} {reason}")
        logger.info(f"Settling auction {auction.auction_id} for {auction.property_name}: {reason}")
        self._finish_auction_if_complete()
        self.state_version += 1

    # === BUILDINGS ===

    def _require_group_owner(self, player_id: int, position: int) -> PropertySpace:
        space = self.board.get_property_space(position)
        if space is None:
            raise InvalidActionError("Cannot build on this property type")
        if self.board.states[position].owner_id != player_id:
            raise InvalidActionError("You don't own this property")
        return space

    def check_build(self, player_id: int, position: int) -> PropertySpace:
        """
        Raise unless the player may build on the property right now.

        Requirements: own turn with nothing pending, full group ownership,
        no mortgaged site in the group, even building, building supply, cash.
        """
        player = self._require_turn(player_id)
        self._require_no_pending()
        self._require_no_auction()
        space = self._require_group_owner(player_id, position)
        if not self.board.owns_group(player_id, space.group):
            raise InvalidActionError("Must own all properties in color group")
        group = self.board.get_color_group(space.group)
        if any(self.board.states[pos].is_mortgaged for pos in group):
            raise InvalidActionError("Cannot build while a property in the group is mortgaged")
        houses = self.board.states[position].houses
        if houses >= HOTEL:
            raise InvalidActionError("Maximum buildings reached")
        if houses > min(self.board.states[pos].houses for pos in group):
            raise InvalidActionError("Must build evenly")
        if houses == 4 and not self.bank.can_buy_hotel():
            raise ResourceExhaustedError("No hotels available")
        if houses < 4 and not self.bank.can_buy_houses(1):
            raise ResourceExhaustedError("No houses available")
        if player.cash < space.house_cost:
            raise InsufficientFundsError("Not enough money")
        return space

    def build_house(self, player_id: int, position: int) -> int:
        """Build one house (the fifth is a hotel). Returns the new building count."""
        space = self.check_build(player_id, position)
        state = self.board.states[position]
        self._pay_bank(player_id, space.house_cost)
        if state.houses == 4:
            self.bank.buy_hotel()
            event_type, label = EventType.BUILD_HOTEL, "a hotel"
        else:
            self.bank.buy_house()
            event_type, label = EventType.BUILD_HOUSE, "a house"
        state.houses += 1
        self.event_log.log(
            event_type, f"{self._name(player_id)} built {label} on {space.name}", player_id, position=position
        )
        return state.houses

    def check_sell(self, player_id: int, position: int) -> PropertySpace:
        self._require_can_liquidate(player_id)
        space = self._require_group_owner(player_id, position)
        houses = self.board.states[position].houses
        if houses < 1:
            raise InvalidActionError("No buildings to sell")
        group = self.board.get_color_group(space.group)
        if houses < max(self.board.states[pos].houses for pos in group):
            raise InvalidActionError("Must sell evenly")
        if houses == HOTEL and not self.bank.can_buy_houses(4):
            raise ResourceExhaustedError("Not enough houses to downgrade hotel")
        return space

    def sell_house(self, player_id: int, position: int) -> int:
        """Sell one building back to the bank for half its cost. Returns the new building count."""
        space = self.check_sell(player_id, position)
        state = self.board.states[position]
        if state.houses == HOTEL:
            self.bank.sell_hotel()
            label = "a hotel"
        else:
            self.bank.sell_house()
            label = "a house"
        state.houses -= 1
        sale_price = space.house_cost // 2
        self.event_log.log(
            EventType.SELL_BUILDING,
            f"{self._name(player_id)} sold {label} on {space.name} for £{sale_price}",
            player_id,
            position=position,
        )
        self._bank_pays(player_id, sale_price)
        return state.houses

    # === MORTGAGES ===

    def check_mortgage(self, player_id: int, position: int):
        self._require_can_liquidate(player_id)
        space = self.board.get_ownable_space(position)
        if space is None or self.board.states[position].owner_id != player_id:
            raise InvalidActionError("You don't own this property")
        if self.board.states[position].is_mortgaged:
            raise InvalidActionError("Already mortgaged")
        if self.board.group_has_buildings(space.color_group):
            raise InvalidActionError("Must sell all buildings in the group first")
        return space

    def mortgage_property(self, player_id: int, position: int) -> int:
        """Mortgage a property for its mortgage value. Returns the amount raised."""
        space = self.check_mortgage(player_id, position)
        self.board.states[position].is_mortgaged = True
        self.event_log.log(
            EventType.MORTGAGE,
            f"{self._name(player_id)} mortgaged {space.name} for £{space.mortgage_value}",
            player_id,
            position=position,
        )
        self._bank_pays(player_id, space.mortgage_value)
        return space.mortgage_value

    def check_unmortgage(self, player_id: int, position: int):
        player = self._require_turn(player_id)
        self._require_no_pending()
        self._require_no_auction()
        space = self.board.get_ownable_space(position)
        if space is None or self.board.states[position].owner_id != player_id:
            raise InvalidActionError("You don't own this property")
        if not self.board.states[position].is_mortgaged:
            raise InvalidActionError("Not mortgaged")
        if player.cash < self.config.unmortgage_cost(space.mortgage_value):
            raise InsufficientFundsError("Not enough money")
        return space

    def unmortgage_property(self, player_id: int, position: int) -> int:
        """Lift a mortgage for the mortgage value plus interest. Returns the cost."""
        space = self.check_unmortgage(player_id, position)
        cost = self.config.unmortgage_cost(space.mortgage_value)
        self._pay_bank(player_id, cost)
        self.board.states[position].is_mortgaged = False
        self.event_log.log(
            EventType.UNMORTGAGE,
            f"{self._name(player_id)} unmortgaged {space.name} for £{cost}",
            player_id,
            position=position,
        )
        return cost

    # === JAIL ===

    def _require_jail_exit(self, player_id: int) -> PlayerState:
        player = self._require_turn(player_id)
        self._require_no_pending()
        self._require_no_auction()
        if not player.in_jail:
            raise InvalidActionError("Not in jail")
        if self.dice_rolled:
            raise InvalidActionError("You have already rolled this turn")
        return player

    def check_pay_jail_fine(self, player_id: int) -> PlayerState:
        player = self._require_jail_exit(player_id)
        if player.cash < self.config.jail_fine:
            raise InsufficientFundsError("Not enough money")
        return player

    def pay_jail_fine(self, player_id: int) -> None:
        player = self.check_pay_jail_fine(player_id)
        self._pay_bank(player_id, self.config.jail_fine)
        self._release_from_jail(player_id)
        self.event_log.log(
            EventType.JAIL_RELEASE, f"{player.name} paid £{self.config.jail_fine} to get out of jail", player_id
        )

    def check_use_jail_card(self, player_id: int) -> PlayerState:
        player = self._require_jail_exit(player_id)
        if player.jail_cards < 1:
            raise InvalidActionError("No Get Out of Jail Free cards")
        return player

    def use_jail_card(self, player_id: int) -> None:
        player = self.check_use_jail_card(player_id)
        player.jail_cards -= 1
        self._release_from_jail(player_id)
        self.event_log.log(
            EventType.JAIL_RELEASE, f"{player.name} used a Get Out of Jail Free card", player_id
        )

    # === TRADING ===

    def _check_side(self, player_id: int, side: TradeOffer, check_cash: bool = True) -> None:
        """Raise unless a player can hand over one side of a trade."""
        player = self.players[player_id]
        if side.cash < 0 or side.jail_cards < 0:
            raise InvalidActionError("Trade amounts cannot be negative")
        if check_cash and player.cash < side.cash:
            raise InsufficientFundsError(f"{player.name} doesn't have enough money")
        if player.jail_cards < side.jail_cards:
            raise InvalidActionError(f"{player.name} doesn't have enough Get Out of Jail Free cards")
        for pos in side.properties:
            space = self.board.get_ownable_space(pos)
            if space is None or self.board.states[pos].owner_id != player_id:
                raise InvalidActionError(f"{player.name} doesn't own property {pos}")
            if self.board.group_has_buildings(space.color_group):
                raise InvalidActionError(f"Sell the buildings on the {space.color_group} group before trading")

    def check_propose_trade(self, player_id: int, recipient_id: int, offer: TradeOffer, request: TradeOffer) -> None:
        self._require_active(player_id)
        if recipient_id == player_id:
            raise InvalidActionError("Cannot trade with yourself")
        recipient = self._get_player(recipient_id)
        if recipient.is_bankrupt:
            raise InvalidActionError(f"{recipient.name} is bankrupt")
        if offer.is_empty() and request.is_empty():
            raise InvalidActionError("Trade is empty")
        self._check_side(player_id, offer)
        self._check_side(recipient_id, request, check_cash=False)

    def propose_trade(self, player_id: int, recipient_id: int, offer: TradeOffer, request: TradeOffer) -> Trade:
        self.check_propose_trade(player_id, recipient_id, offer, request)
        trade = self.trade_manager.create_trade(player_id, recipient_id, offer, request, self.turn_number)
        self.event_log.log(
            EventType.TRADE_PROPOSED,
            f"{self._name(player_id)} proposed a trade to {self._name(recipient_id)}: "
            f"{offer!r} for {request!r}",
            player_id,
            trade_id=trade.trade_id,
        )
        return trade

    def _require_pending_trade(self, trade_id: int) -> Trade:
        trade = self.trade_manager.get_trade(trade_id)
        if trade is None:
            raise InvalidActionError("Invalid trade")
        return trade

    def check_accept_trade(self, player_id: int, trade_id: int) -> Trade:
        self._require_active(player_id)
        self._require_no_auction()
        trade = self._require_pending_trade(trade_id)
        if trade.recipient_id != player_id:
            raise NotYourTurnError("This trade is not addressed to you")
        if self.players[trade.proposer_id].is_bankrupt:
            raise InvalidActionError("The proposer is no longer in the game")
        self._check_side(trade.proposer_id, trade.offer)
        self._check_side(trade.recipient_id, trade.request)
        return trade

    def accept_trade(self, player_id: int, trade_id: int) -> Trade:
        """Apply both sides of a trade in one step."""
        trade = self.check_accept_trade(player_id, trade_id)
        proposer = self.players[trade.proposer_id]
        recipient = self.players[trade.recipient_id]

        proposer.cash -= trade.offer.cash
        recipient.cash -= trade.request.cash
        proposer.jail_cards += trade.request.jail_cards - trade.offer.jail_cards
        recipient.jail_cards += trade.offer.jail_cards - trade.request.jail_cards
        for pos in trade.offer.properties:
            self.board.states[pos].owner_id = recipient.player_id
        for pos in trade.request.properties:
            self.board.states[pos].owner_id = proposer.player_id
        self.trade_manager.resolve(trade.trade_id, TradeStatus.ACCEPTED)

        self._credit(recipient.player_id, trade.offer.cash)
        self._credit(proposer.player_id, trade.request.cash)
        self.event_log.log(
            EventType.TRADE_ACCEPTED,
            f"{recipient.name} accepted trade from {proposer.name}",
            player_id,
            trade_id=trade.trade_id,
        )
        return trade

    def check_decline_trade(self, player_id: int, trade_id: int) -> Trade:
        self._get_player(player_id)
        trade = self._require_pending_trade(trade_id)
        if not trade.involves(player_id):
            raise NotYourTurnError("This trade is not yours to decline")
        return trade

    def decline_trade(self, player_id: int, trade_id: int) -> Trade:
        """Recipient declines, or proposer withdraws, a pending trade."""
        trade = self.check_decline_trade(player_id, trade_id)
        self.trade_manager.resolve(trade_id, TradeStatus.DECLINED)
        self.event_log.log(
            EventType.TRADE_DECLINED,
            f"{self._name(player_id)} declined trade with "
            f"{self._name(trade.proposer_id if player_id == trade.recipient_id else trade.recipient_id)}",
            player_id,
            trade_id=trade_id,
        )
        return trade

    # === BANKRUPTCY AND GAME END ===

    def declare_bankruptcy(self, player_id: int) -> None:
        """
        Leave the game. Properties return to the bank unbuilt and
        unmortgaged, and trades involving the player are declined.
        """
        player = self._require_active(player_id)
        was_current = player_id == self.current_player_id
        creditor_id = player.debt.creditor_id if player.debt else None

        for pos in self.board.owned_by(player_id):
            state = self.board.states[pos]
            self.bank.release_buildings(state.houses)
            state.reset()

        if player.cash > 0:
            if creditor_id is not None and not self.players[creditor_id].is_bankrupt:
                remaining = player.cash
                player.cash = 0
                self._credit(creditor_id, remaining)
            else:
                self._pay_bank(player_id, player.cash)
        elif player.cash < 0:
            # The bank absorbs what the player could not pay
            self.bank.record_payout(-player.cash)
            player.cash = 0

        player.is_bankrupt = True
        player.debt = None
        player.jail_cards = 0
        player.in_jail = False
        for other in self.players.values():
            if other.debt is not None and other.debt.creditor_id == player_id:
                other.debt = None

        for trade in self.trade_manager.pending():
            if trade.involves(player_id):
                self.trade_manager.resolve(trade.trade_id, TradeStatus.DECLINED)

        if self.pending_action is not None and self.pending_action.player_id == player_id:
            self.pending_action = None

        self.event_log.log(EventType.BANKRUPTCY, f"{player.name} declared bankruptcy", player_id)
        logger.info(f"Player {player_id} ({player.name}) declared bankruptcy")

        auction = self.active_auction
        if auction is not None and player_id in auction.participants:
            auction.participants.remove(player_id)
            auction.passed.discard(player_id)
            if auction.highest_bidder == player_id:
                auction.highest_bidder = None
            self._finish_auction_if_complete()

        active = self.get_active_players()
        if len(active) <= 1:
            self._end_game(active[0].player_id if active else None)
        elif was_current:
            self._advance_turn()

    def _end_game(self, winner_id: Optional[int]) -> None:
        self.game_over = True
        self.winner_id = winner_id
        self.active_auction = None
        self.pending_action = None
        if winner_id is not None:
            self.event_log.log(EventType.GAME_END, f"{self._name(winner_id)} wins the game!", winner_id)
        logger.info(f"Game over after {self.turn_number} turns, winner: {winner_id}")

    # === TURN FLOW ===

    def check_end_turn(self, player_id: int) -> None:
        self._require_turn(player_id)
        self._require_no_pending()
        self._require_no_auction()
        if not self.dice_rolled:
            raise InvalidActionError("You must roll before ending your turn")
        if self.can_roll_again:
            raise InvalidActionError("You rolled doubles and must roll again")

    def end_turn(self, player_id: int) -> None:
        self.check_end_turn(player_id)
        self._advance_turn()

    def _advance_turn(self) -> None:
        """Reset the per-turn flags and move to the next non-bankrupt player."""
        self.dice_rolled = False
        self.can_roll_again = False
        self.doubles_count = 0
        self.pending_action = None

        for _ in range(len(self.turn_order)):
            self.current_index = (self.current_index + 1) % len(self.turn_order)
            if not self.get_current_player().is_bankrupt:
                break
        self.turn_number += 1

        player = self.get_current_player()
        self.event_log.log(EventType.TURN_START, f"{player.name}'s turn", player.player_id)
        self.check_bankruptcy(player.player_id)

    def force_end_turn(self, reason: str = "timed out") -> None:
        """
        Skip the current player's turn regardless of what is pending.
        Used by the supervisor to keep an unresponsive seat from stalling the game.
        """
        if self.game_over:
            return
        player = self.get_current_player()
        if self.active_auction is not None:
            self.settle_auction(reason)
        self.event_log.log(EventType.TURN_SKIPPED, f"{player.name} {reason} - skipping turn", player.player_id)
        logger.info(f"Force-ending turn {self.turn_number} of player {player.player_id}: {reason}")
        self._advance_turn()
        self.settle_debts()
        self.state_version += 1


def create_game(config: GameConfig, players: List[Player], rng: Optional[random.Random] = None) -> GameState:
    """
    Create a new game with the specified configuration and players.

    Args:
        config: Game configuration
        players: Seats in lobby order (at least two)
        rng: Optional random source; defaults to one seeded from config.seed

    Returns:
        Initialized GameState
    """
    if len(players) < 2:
        raise ValueError("Game requires at least 2 players")
    return GameState(config, players, rng)
