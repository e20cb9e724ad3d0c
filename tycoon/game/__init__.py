from tycoon.game.game import GameState, PendingAction, PendingActionType, create_game
from tycoon.game.player import Debt, Player, PlayerState
from tycoon.game.board import Board, PropertyState
from tycoon.game.config import GameConfig
from tycoon.game.trade import Trade, TradeOffer, TradeStatus
from tycoon.game.rules import Command, CommandResult, CommandType, apply_command, get_legal_commands

__all__ = [
    "GameState",
    "PendingAction",
    "PendingActionType",
    "create_game",
    "Debt",
    "Player",
    "PlayerState",
    "Board",
    "PropertyState",
    "GameConfig",
    "Trade",
    "TradeOffer",
    "TradeStatus",
    "Command",
    "CommandResult",
    "CommandType",
    "apply_command",
    "get_legal_commands",
]
