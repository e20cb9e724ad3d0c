"""
Command surface of the engine.

Humans and bots drive a game exclusively through `apply_command`. A command
is either applied atomically or rejected with a readable reason; rejected
commands leave the state untouched.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from tycoon.exceptions import InvalidActionError
from tycoon.game.game import GameState
from tycoon.game.trade import TradeOffer

logger = logging.getLogger(__name__)


class CommandType(Enum):
    """Commands a seat can send to the engine."""

    ROLL = "roll"
    BUY_PROPERTY = "buy_property"
    DECLINE_PROPERTY = "decline_property"
    PLACE_BID = "place_bid"
    PASS_BID = "pass_bid"
    PROPOSE_TRADE = "propose_trade"
    ACCEPT_TRADE = "accept_trade"
    DECLINE_TRADE = "decline_trade"
    BUILD_HOUSE = "build_house"
    SELL_HOUSE = "sell_house"
    MORTGAGE_PROPERTY = "mortgage_property"
    UNMORTGAGE_PROPERTY = "unmortgage_property"
    PAY_JAIL_FINE = "pay_jail_fine"
    USE_JAIL_CARD = "use_jail_card"
    DECLARE_BANKRUPTCY = "declare_bankruptcy"
    END_TURN = "end_turn"


@dataclass(frozen=True)
class Command:
    """
    A command from one seat. Only the fields relevant to the command type
    are read: `position` for building and mortgage commands, `amount` for
    bids, `trade_id` for trade responses, and `recipient_id`, `offer` and
    `request` for proposals.
    """

    command_type: CommandType
    player_id: int
    position: Optional[int] = None
    amount: Optional[int] = None
    trade_id: Optional[int] = None
    recipient_id: Optional[int] = None
    offer: Optional[TradeOffer] = None
    request: Optional[TradeOffer] = None

    def __repr__(self) -> str:
        params = {
            key: value
            for key, value in (
                ("position", self.position),
                ("amount", self.amount),
                ("trade_id", self.trade_id),
                ("recipient_id", self.recipient_id),
                ("offer", self.offer),
                ("request", self.request),
            )
            if value is not None
        }
        return f"Command({self.command_type.value}, P{self.player_id}, {params})"


@dataclass(frozen=True)
class CommandResult:
    accepted: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.accepted


def _require(value, name: str):
    if value is None:
        raise InvalidActionError(f"Missing {name}")
    return value


def _dispatch(game: GameState, command: Command) -> None:
    pid = command.player_id
    ctype = command.command_type

    if ctype == CommandType.ROLL:
        game.roll_dice(pid)
    elif ctype == CommandType.BUY_PROPERTY:
        game.buy_property(pid)
    elif ctype == CommandType.DECLINE_PROPERTY:
        game.decline_property(pid)
    elif ctype == CommandType.PLACE_BID:
        game.place_bid(pid, _require(command.amount, "bid amount"))
    elif ctype == CommandType.PASS_BID:
        game.pass_bid(pid)
    elif ctype == CommandType.PROPOSE_TRADE:
        game.propose_trade(
            pid,
            _require(command.recipient_id, "trade recipient"),
            command.offer or TradeOffer(),
            command.request or TradeOffer(),
        )
    elif ctype == CommandType.ACCEPT_TRADE:
        game.accept_trade(pid, _require(command.trade_id, "trade id"))
    elif ctype == CommandType.DECLINE_TRADE:
        game.decline_trade(pid, _require(command.trade_id, "trade id"))
    elif ctype == CommandType.BUILD_HOUSE:
        game.build_house(pid, _require(command.position, "property"))
    elif ctype == CommandType.SELL_HOUSE:
        game.sell_house(pid, _require(command.position, "property"))
    elif ctype == CommandType.MORTGAGE_PROPERTY:
        game.mortgage_property(pid, _require(command.position, "property"))
    elif ctype == CommandType.UNMORTGAGE_PROPERTY:
        game.unmortgage_property(pid, _require(command.position, "property"))
    elif ctype == CommandType.PAY_JAIL_FINE:
        game.pay_jail_fine(pid)
    elif ctype == CommandType.USE_JAIL_CARD:
        game.use_jail_card(pid)
    elif ctype == CommandType.DECLARE_BANKRUPTCY:
        game.declare_bankruptcy(pid)
    elif ctype == CommandType.END_TURN:
        game.end_turn(pid)
    else:
        raise InvalidActionError(f"Unknown command {ctype}")


def apply_command(game: GameState, command: Command) -> CommandResult:
    """
    Validate and apply a command.

    Returns:
        CommandResult(accepted=True) when the command took effect, or
        CommandResult(accepted=False, reason=...) when it was rejected.
    """
    try:
        _dispatch(game, command)
    except InvalidActionError as exc:
        logger.debug(f"Rejected {command!r}: {exc.reason}")
        return CommandResult(False, exc.reason)

    game.after_command()
    logger.debug(f"Applied {command!r} (version {game.state_version})")
    return CommandResult(True)


def _is_legal(check: Callable[[], object]) -> bool:
    try:
        check()
    except InvalidActionError:
        return False
    return True


def get_legal_commands(game: GameState, player_id: int) -> List[CommandType]:
    """
    Command types a player could issue right now.

    Commands that need a target (a property, a bid amount, a trade) are listed
    when at least one target would be accepted.
    """
    if game.game_over or player_id not in game.players or game.players[player_id].is_bankrupt:
        return []

    owned = game.owned_properties(player_id)
    incoming = [t.trade_id for t in game.trade_manager.pending() if t.recipient_id == player_id]
    own_trades = [t.trade_id for t in game.trade_manager.pending() if t.involves(player_id)]
    auction = game.active_auction

    checks: Dict[CommandType, Callable[[], bool]] = {
        CommandType.ROLL: lambda: _is_legal(lambda: game.check_roll(player_id)),
        CommandType.BUY_PROPERTY: lambda: _is_legal(lambda: game.check_buy(player_id)),
        CommandType.DECLINE_PROPERTY: lambda: _is_legal(lambda: game.check_decline(player_id)),
        CommandType.PLACE_BID: lambda: auction is not None
        and auction.is_active_bidder(player_id)
        and game.players[player_id].cash >= auction.minimum_next_bid,
        CommandType.PASS_BID: lambda: auction is not None and auction.is_active_bidder(player_id),
        CommandType.ACCEPT_TRADE: lambda: any(
            _is_legal(lambda tid=tid: game.check_accept_trade(player_id, tid)) for tid in incoming
        ),
        CommandType.DECLINE_TRADE: lambda: bool(own_trades),
        CommandType.BUILD_HOUSE: lambda: any(
            _is_legal(lambda pos=pos: game.check_build(player_id, pos)) for pos in owned
        ),
        CommandType.SELL_HOUSE: lambda: any(
            _is_legal(lambda pos=pos: game.check_sell(player_id, pos)) for pos in owned
        ),
        CommandType.MORTGAGE_PROPERTY: lambda: any(
            _is_legal(lambda pos=pos: game.check_mortgage(player_id, pos)) for pos in owned
        ),
        CommandType.UNMORTGAGE_PROPERTY: lambda: any(
            _is_legal(lambda pos=pos: game.check_unmortgage(player_id, pos)) for pos in owned
        ),
        CommandType.PAY_JAIL_FINE: lambda: _is_legal(lambda: game.check_pay_jail_fine(player_id)),
        CommandType.USE_JAIL_CARD: lambda: _is_legal(lambda: game.check_use_jail_card(player_id)),
        CommandType.DECLARE_BANKRUPTCY: lambda: True,
        CommandType.END_TURN: lambda: _is_legal(lambda: game.check_end_turn(player_id)),
        CommandType.PROPOSE_TRADE: lambda: len(game.get_active_players()) > 1,
    }
    return [ctype for ctype in CommandType if checks[ctype]()]
