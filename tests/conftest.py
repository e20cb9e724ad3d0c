"""Shared test fixtures for tycoon tests."""

import random

import pytest

from tycoon.agents.view import BoardView
from tycoon.game import GameConfig, Player, create_game
from tycoon.snapshot import build_public_state


class LoadedDice(random.Random):
    """
    Random source whose dice can be fixed in advance.

    Queued values are returned by `randint` in order; once the queue is
    empty it behaves like a seeded `random.Random`. Deck shuffles do not
    use `randint`, so queued dice are never consumed by them.
    """

    def __init__(self, seed=42):
        super().__init__(seed)
        self.queued = []

    def load(self, *values):
        self.queued.extend(values)
        return self

    def randint(self, a, b):
        if self.queued:
            return self.queued.pop(0)
        return super().randint(a, b)


def own(game, player_id, *positions, houses=0, mortgaged=False):
    """Hand properties straight to a player, bypassing purchase."""
    for pos in positions:
        state = game.board.states[pos]
        state.owner_id = player_id
        state.houses = houses
        state.is_mortgaged = mortgaged


def view_of(game, player_id):
    """Analysis helpers over the current notification, as seen by one seat."""
    return BoardView(build_public_state(game), player_id)


def assert_money_conserved(game):
    total = sum(p.cash for p in game.players.values()) + game.free_parking
    expected = len(game.players) * game.config.starting_cash + game.bank.paid_out - game.bank.collected
    assert total == expected


def assert_even_building(game):
    for color, group in game.board.color_groups.items():
        counts = [game.board.states[pos].houses for pos in group]
        assert max(counts) - min(counts) <= 1, f"{color} built unevenly: {counts}"


@pytest.fixture
def game_config():
    """Default game configuration with fixed seed and lobby turn order."""
    return GameConfig(seed=42, shuffle_turn_order=False)


@pytest.fixture
def dice():
    return LoadedDice(42)


@pytest.fixture
def two_players():
    """Two test players."""
    return [Player(0, "Alice"), Player(1, "Bob")]


@pytest.fixture
def three_players():
    return [Player(0, "Alice"), Player(1, "Bob"), Player(2, "Charlie")]


@pytest.fixture
def four_players():
    """Four test players."""
    return [
        Player(0, "Alice"),
        Player(1, "Bob"),
        Player(2, "Charlie"),
        Player(3, "Diana"),
    ]


@pytest.fixture
def basic_game(game_config, two_players, dice):
    """Two-player game with loadable dice."""
    return create_game(game_config, two_players, rng=dice)


@pytest.fixture
def three_player_game(game_config, three_players, dice):
    return create_game(game_config, three_players, rng=dice)


@pytest.fixture
def four_player_game(game_config, four_players, dice):
    """Four-player game with loadable dice."""
    return create_game(game_config, four_players, rng=dice)
