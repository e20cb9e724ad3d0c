"""
Tycoon: rules engine and decision agent for a property-trading board game.

Exposes game engine primitives, state snapshots and the built-in agent.
"""

from tycoon.game import Command, CommandType, GameConfig, GameState, Player, apply_command, create_game
from tycoon.agents import Agent, DecisionAgent, Difficulty
from tycoon.snapshot import build_public_state, restore_game, save_game

__all__ = [
    "Command",
    "CommandType",
    "GameConfig",
    "GameState",
    "Player",
    "apply_command",
    "create_game",
    "Agent",
    "DecisionAgent",
    "Difficulty",
    "build_public_state",
    "restore_game",
    "save_game",
]
