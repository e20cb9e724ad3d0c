"""
Tests for building houses and hotels.

Rules tested:
- Full colour group required
- Even building and even selling
- Hotel swaps four houses back into the supply
- Building supply limits
- Selling back at half price, including out of turn while in debt
"""

import pytest

from tycoon.exceptions import (
    InsufficientFundsError,
    InvalidActionError,
    NotYourTurnError,
    ResourceExhaustedError,
)
from tycoon.game import GameConfig, create_game

from tests.conftest import assert_money_conserved, own


@pytest.fixture
def pink_game(basic_game):
    own(basic_game, 0, 11, 13, 14)
    return basic_game


class TestBuildHouse:
    def test_build_first_house(self, pink_game):
        """Rule: Owner of a full group can build, paying the house cost."""
        assert pink_game.build_house(0, 11) == 1
        assert pink_game.players[0].cash == 1400
        assert pink_game.bank.houses_available == 31
        assert_money_conserved(pink_game)

    def test_requires_full_group(self, basic_game):
        own(basic_game, 0, 11, 13)
        with pytest.raises(InvalidActionError, match="color group"):
            basic_game.build_house(0, 11)

    def test_cannot_build_on_station(self, basic_game):
        own(basic_game, 0, 5, 15, 25, 35)
        with pytest.raises(InvalidActionError):
            basic_game.build_house(0, 5)

    def test_must_build_evenly(self, pink_game):
        """Rule: No site may get two buildings ahead of its siblings."""
        pink_game.build_house(0, 11)
        with pytest.raises(InvalidActionError, match="evenly"):
            pink_game.build_house(0, 11)
        pink_game.build_house(0, 13)
        pink_game.build_house(0, 14)
        assert pink_game.build_house(0, 11) == 2

    def test_not_while_group_mortgaged(self, pink_game):
        pink_game.board.states[13].is_mortgaged = True
        with pytest.raises(InvalidActionError, match="mortgaged"):
            pink_game.build_house(0, 11)

    def test_only_on_own_turn(self, basic_game):
        own(basic_game, 1, 11, 13, 14)
        with pytest.raises(NotYourTurnError):
            basic_game.build_house(1, 11)

    def test_not_enough_cash(self, pink_game):
        pink_game.players[0].cash = 50
        with pytest.raises(InsufficientFundsError):
            pink_game.build_house(0, 11)
        assert pink_game.board.states[11].houses == 0

    def test_hotel_returns_four_houses(self, pink_game):
        """Rule: The fifth building is a hotel and frees four houses."""
        for pos in (11, 13, 14):
            pink_game.board.states[pos].houses = 4
        pink_game.bank.houses_available = 32 - 12

        assert pink_game.build_house(0, 11) == 5
        assert pink_game.bank.hotels_available == 11
        assert pink_game.bank.houses_available == 24

    def test_cannot_build_beyond_hotel(self, pink_game):
        for pos in (11, 13, 14):
            pink_game.board.states[pos].houses = 5
        with pytest.raises(InvalidActionError, match="Maximum"):
            pink_game.build_house(0, 11)

    def test_house_supply_exhausted(self, pink_game):
        pink_game.bank.houses_available = 0
        with pytest.raises(ResourceExhaustedError):
            pink_game.build_house(0, 11)

    def test_hotel_supply_exhausted(self, pink_game):
        for pos in (11, 13, 14):
            pink_game.board.states[pos].houses = 4
        pink_game.bank.hotels_available = 0
        with pytest.raises(ResourceExhaustedError):
            pink_game.build_house(0, 11)

    def test_configured_house_limit(self, two_players):
        game = create_game(GameConfig(seed=1, shuffle_turn_order=False, house_limit=2), two_players)
        own(game, 0, 1, 3)
        game.build_house(0, 1)
        game.build_house(0, 3)
        with pytest.raises(ResourceExhaustedError):
            game.build_house(0, 1)


class TestSellHouse:
    def test_sell_pays_half_cost(self, pink_game):
        """Rule: Buildings sell back for half their cost."""
        pink_game.build_house(0, 11)
        assert pink_game.sell_house(0, 11) == 0
        assert pink_game.players[0].cash == 1400 + 50
        assert pink_game.bank.houses_available == 32
        assert_money_conserved(pink_game)

    def test_must_sell_evenly(self, pink_game):
        for pos in (11, 13):
            pink_game.board.states[pos].houses = 2
        pink_game.board.states[14].houses = 1
        with pytest.raises(InvalidActionError, match="evenly"):
            pink_game.sell_house(0, 14)
        assert pink_game.sell_house(0, 11) == 1

    def test_nothing_to_sell(self, pink_game):
        with pytest.raises(InvalidActionError):
            pink_game.sell_house(0, 11)

    def test_hotel_downgrade_needs_four_houses(self, pink_game):
        for pos in (11, 13, 14):
            pink_game.board.states[pos].houses = 5
        pink_game.bank.houses_available = 3
        with pytest.raises(ResourceExhaustedError):
            pink_game.sell_house(0, 11)

    def test_hotel_downgrade(self, pink_game):
        for pos in (11, 13, 14):
            pink_game.board.states[pos].houses = 5
        pink_game.bank.hotels_available = 9
        pink_game.bank.houses_available = 20

        assert pink_game.sell_house(0, 11) == 4
        assert pink_game.bank.hotels_available == 10
        assert pink_game.bank.houses_available == 16

    def test_out_of_turn_only_while_owing(self, basic_game):
        """Rule: A player who owes money may sell outside their turn."""
        own(basic_game, 1, 11, 13, 14, houses=1)
        with pytest.raises(NotYourTurnError):
            basic_game.sell_house(1, 11)

        basic_game.players[1].cash = -20
        assert basic_game.sell_house(1, 11) == 0
        assert basic_game.players[1].cash == 30
