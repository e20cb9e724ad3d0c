"""
Snapshot serialization of GameState.

`build_public_state` produces the notification every seat sees.
`save_game` / `restore_game` produce and consume the full persistence
snapshot, including deck order, random state and open debts.
"""

from __future__ import annotations

import random
from dataclasses import asdict
from typing import List

from pydantic import ValidationError

from tycoon.exceptions import SnapshotError
from tycoon.game.auction import Auction
from tycoon.game.cards import Deck
from tycoon.game.config import GameConfig
from tycoon.game.game import GameState, PendingAction, PendingActionType
from tycoon.game.money import EventType, GameEvent
from tycoon.game.player import Debt, Player
from tycoon.game.spaces import OwnableSpace, PropertySpace, TaxSpace
from tycoon.game.trade import Trade, TradeOffer, TradeStatus
from tycoon.schemas import (
    AuctionView,
    DebtView,
    PendingActionView,
    PlayerView,
    PublicGameState,
    RulesView,
    SavedAuction,
    SavedDeck,
    SavedEvent,
    SavedGame,
    SavedPlayer,
    SavedProperty,
    SpaceView,
    TradeOfferView,
    TradeView,
)


def _debt_view(debt: Debt | None) -> DebtView | None:
    return DebtView(amount=debt.amount, creditor_id=debt.creditor_id) if debt else None


def _offer_view(offer: TradeOffer) -> TradeOfferView:
    return TradeOfferView(cash=offer.cash, properties=sorted(offer.properties), jail_cards=offer.jail_cards)


def _trade_view(trade: Trade) -> TradeView:
    return TradeView(
        trade_id=trade.trade_id,
        proposer_id=trade.proposer_id,
        recipient_id=trade.recipient_id,
        offer=_offer_view(trade.offer),
        request=_offer_view(trade.request),
        status=trade.status.value,
        created_turn=trade.created_turn,
    )


def _pending_view(pending: PendingAction | None) -> PendingActionView | None:
    if pending is None:
        return None
    return PendingActionView(
        action_type=pending.action_type.value,
        player_id=pending.player_id,
        position=pending.position,
        amount=pending.amount,
    )


def _space_views(game: GameState) -> List[SpaceView]:
    views = []
    for space in game.board.spaces:
        entry = {"position": space.position, "name": space.name, "kind": space.space_type.value}
        if isinstance(space, OwnableSpace):
            state = game.board.states[space.position]
            entry.update(
                price=space.price,
                mortgage_value=space.mortgage_value,
                owner_id=state.owner_id,
                houses=state.houses,
                is_mortgaged=state.is_mortgaged,
            )
        if isinstance(space, PropertySpace):
            entry.update(color_group=space.group, rents=list(space.rents), house_cost=space.house_cost)
        if isinstance(space, TaxSpace):
            entry["tax_amount"] = space.amount
        views.append(SpaceView(**entry))
    return views


def build_public_state(game: GameState) -> PublicGameState:
    """Serialize a GameState into the notification broadcast to every seat."""
    players = [
        PlayerView(
            player_id=pid,
            name=p.name,
            cash=p.cash,
            position=p.position,
            in_jail=p.in_jail,
            jail_turns=p.jail_turns,
            jail_cards=p.jail_cards,
            is_bankrupt=p.is_bankrupt,
            debt=_debt_view(p.debt),
            properties=game.board.owned_by(pid),
        )
        for pid, p in ((pid, game.players[pid]) for pid in game.turn_order)
    ]

    auction = None
    if game.active_auction is not None:
        a = game.active_auction
        auction = AuctionView(
            auction_id=a.auction_id,
            property_position=a.property_position,
            property_name=a.property_name,
            current_bid=a.current_bid,
            highest_bidder=a.highest_bidder,
            minimum_bid=a.minimum_bid,
            minimum_next_bid=a.minimum_next_bid,
            participants=list(a.participants),
            passed=sorted(a.passed),
        )

    config = game.config
    return PublicGameState(
        version=game.state_version,
        turn_number=game.turn_number,
        current_player_id=game.current_player_id,
        turn_order=list(game.turn_order),
        players=players,
        board=_space_views(game),
        dice_rolled=game.dice_rolled,
        can_roll_again=game.can_roll_again,
        last_dice_roll=list(game.last_dice_roll) if game.last_dice_roll else None,
        pending_action=_pending_view(game.pending_action),
        auction=auction,
        pending_trades=[_trade_view(t) for t in game.trade_manager.pending()],
        recent_trades=[_trade_view(t) for t in game.trade_manager.history],
        log=game.event_log.messages(config.log_tail),
        houses_available=game.bank.houses_available,
        hotels_available=game.bank.hotels_available,
        free_parking=game.free_parking,
        game_over=game.game_over,
        winner_id=game.winner_id,
        rules=RulesView(
            starting_cash=config.starting_cash,
            go_salary=config.go_salary,
            jail_fine=config.jail_fine,
            mortgage_interest_rate=config.mortgage_interest_rate,
            auctions_enabled=config.auctions_enabled,
            max_jail_turns=config.max_jail_turns,
        ),
    )


def _rng_state(rng: random.Random) -> list:
    version, internal, gauss_next = rng.getstate()
    return [version, list(internal), gauss_next]


def save_game(game: GameState) -> SavedGame:
    """Full snapshot of a game, suitable for JSON persistence."""
    return SavedGame(
        config=asdict(game.config),
        players=[
            SavedPlayer(
                player_id=p.player_id,
                name=p.name,
                cash=p.cash,
                position=p.position,
                in_jail=p.in_jail,
                jail_turns=p.jail_turns,
                jail_cards=p.jail_cards,
                is_bankrupt=p.is_bankrupt,
                debt=_debt_view(p.debt),
            )
            for p in (game.players[pid] for pid in game.turn_order)
        ],
        turn_order=list(game.turn_order),
        current_index=game.current_index,
        turn_number=game.turn_number,
        properties=[
            SavedProperty(position=pos, owner_id=s.owner_id, houses=s.houses, is_mortgaged=s.is_mortgaged)
            for pos, s in sorted(game.board.states.items())
        ],
        chance=SavedDeck(order=[c.description for c in game.chance_deck.cards], index=game.chance_deck.index),
        community_chest=SavedDeck(
            order=[c.description for c in game.community_chest_deck.cards], index=game.community_chest_deck.index
        ),
        rng_state=_rng_state(game.rng),
        auction=(
            SavedAuction(
                auction_id=game.active_auction.auction_id,
                property_position=game.active_auction.property_position,
                participants=list(game.active_auction.participants),
                passed=sorted(game.active_auction.passed),
                minimum_bid=game.active_auction.minimum_bid,
                current_bid=game.active_auction.current_bid,
                highest_bidder=game.active_auction.highest_bidder,
            )
            if game.active_auction is not None
            else None
        ),
        next_auction_id=game.next_auction_id,
        pending_action=_pending_view(game.pending_action),
        pending_trades=[_trade_view(t) for t in game.trade_manager.pending()],
        trade_history=[_trade_view(t) for t in game.trade_manager.history],
        next_trade_id=game.trade_manager.next_trade_id,
        log=[
            SavedEvent(event_type=e.event_type.value, message=e.message, player_id=e.player_id, details=e.details)
            for e in game.event_log.get_events()
        ],
        houses_available=game.bank.houses_available,
        hotels_available=game.bank.hotels_available,
        bank_paid_out=game.bank.paid_out,
        bank_collected=game.bank.collected,
        free_parking=game.free_parking,
        dice_rolled=game.dice_rolled,
        can_roll_again=game.can_roll_again,
        doubles_count=game.doubles_count,
        last_dice_roll=list(game.last_dice_roll) if game.last_dice_roll else None,
        game_over=game.game_over,
        winner_id=game.winner_id,
        state_version=game.state_version,
    )


def _restore_deck(deck: Deck, saved: SavedDeck) -> None:
    by_text = {card.description: card for card in deck.cards}
    try:
        deck.cards = [by_text[text] for text in saved.order]
    except KeyError as exc:
        raise SnapshotError(f"Unknown card in saved {deck.name} deck: {exc}") from exc
    if len(deck.cards) != len(by_text):
        raise SnapshotError(f"Saved {deck.name} deck has {len(deck.cards)} cards, expected {len(by_text)}")
    deck.index = saved.index


def _trade_from_view(view: TradeView) -> Trade:
    return Trade(
        view.trade_id,
        view.proposer_id,
        view.recipient_id,
        TradeOffer.of(view.offer.cash, view.offer.properties, view.offer.jail_cards),
        TradeOffer.of(view.request.cash, view.request.properties, view.request.jail_cards),
        TradeStatus(view.status),
        view.created_turn,
    )


def restore_game(saved: SavedGame | dict) -> GameState:
    """
    Rebuild an engine from a saved snapshot. Fed the same commands, the
    restored game evolves exactly like the one it was saved from.
    """
    try:
        if not isinstance(saved, SavedGame):
            saved = SavedGame.model_validate(saved)
        config = GameConfig(**saved.config)
    except (ValidationError, TypeError) as exc:
        raise SnapshotError(f"Unreadable saved game: {exc}") from exc

    by_id = {p.player_id: p for p in saved.players}
    game = GameState(config, [Player(pid, by_id[pid].name) for pid in saved.turn_order])

    rng = random.Random()
    version, internal, gauss_next = saved.rng_state
    rng.setstate((version, tuple(internal), gauss_next))
    game.rng = rng
    game.chance_deck.rng = rng
    game.community_chest_deck.rng = rng
    _restore_deck(game.chance_deck, saved.chance)
    _restore_deck(game.community_chest_deck, saved.community_chest)

    game.turn_order = list(saved.turn_order)
    game.current_index = saved.current_index
    game.turn_number = saved.turn_number

    for sp in saved.players:
        player = game.players[sp.player_id]
        player.cash = sp.cash
        player.position = sp.position
        player.in_jail = sp.in_jail
        player.jail_turns = sp.jail_turns
        player.jail_cards = sp.jail_cards
        player.is_bankrupt = sp.is_bankrupt
        player.debt = Debt(sp.debt.amount, sp.debt.creditor_id) if sp.debt else None

    for prop in saved.properties:
        state = game.board.states.get(prop.position)
        if state is None:
            raise SnapshotError(f"Space {prop.position} cannot be owned")
        state.owner_id = prop.owner_id
        state.houses = prop.houses
        state.is_mortgaged = prop.is_mortgaged

    game.active_auction = None
    if saved.auction is not None:
        a = saved.auction
        auction = Auction(
            a.auction_id,
            a.property_position,
            game.board.get_space(a.property_position).name,
            a.participants,
            game.event_log,
            a.minimum_bid,
            set(a.passed),
        )
        auction.current_bid = a.current_bid
        auction.highest_bidder = a.highest_bidder
        game.active_auction = auction
    game.next_auction_id = saved.next_auction_id

    game.pending_action = None
    if saved.pending_action is not None:
        p = saved.pending_action
        game.pending_action = PendingAction(PendingActionType(p.action_type), p.player_id, p.position, p.amount)

    manager = game.trade_manager
    manager.trades = {t.trade_id: _trade_from_view(t) for t in saved.pending_trades}
    manager.history = [_trade_from_view(t) for t in saved.trade_history]
    manager.next_trade_id = saved.next_trade_id

    game.event_log.events.clear()
    for e in saved.log:
        game.event_log.events.append(GameEvent(EventType(e.event_type), e.message, e.player_id, dict(e.details)))

    game.bank.houses_available = saved.houses_available
    game.bank.hotels_available = saved.hotels_available
    game.bank.paid_out = saved.bank_paid_out
    game.bank.collected = saved.bank_collected
    game.free_parking = saved.free_parking
    game.dice_rolled = saved.dice_rolled
    game.can_roll_again = saved.can_roll_again
    game.doubles_count = saved.doubles_count
    game.last_dice_roll = tuple(saved.last_dice_roll) if saved.last_dice_roll else None
    game.game_over = saved.game_over
    game.winner_id = saved.winner_id
    game.state_version = saved.state_version
    return game
