"""
Tests for rent calculation.

Rules tested:
- Base rent on an undeveloped site
- Double rent for a full colour group at 0 houses
- Rent by building count
- Station rent by stations owned
- Utility rent as a multiple of the dice
- No rent on mortgaged spaces
"""

import pytest

from tests.conftest import own


class TestPropertyRent:
    def test_base_rent(self, basic_game):
        """Rule: Single undeveloped site charges its base rent."""
        own(basic_game, 0, 1)
        assert basic_game.calculate_rent(1) == 2

    def test_monopoly_doubles_base_rent(self, basic_game):
        """Rule: Owning the whole group doubles rent on unimproved sites."""
        own(basic_game, 0, 1, 3)
        assert basic_game.calculate_rent(1) == 4
        assert basic_game.calculate_rent(3) == 8

    def test_mortgaged_group_member_still_counts_for_monopoly(self, basic_game):
        """Rule: A mortgaged sibling does not break the group for rent."""
        own(basic_game, 0, 1, 3)
        basic_game.board.states[3].is_mortgaged = True
        assert basic_game.calculate_rent(1) == 4

    def test_mortgaged_property_charges_nothing(self, basic_game):
        """Rule: No rent on a mortgaged site."""
        own(basic_game, 0, 1, 3)
        basic_game.board.states[1].is_mortgaged = True
        assert basic_game.calculate_rent(1) == 0

    @pytest.mark.parametrize("houses,expected", [(1, 60), (2, 180), (3, 500), (4, 700), (5, 900)])
    def test_rent_with_buildings(self, basic_game, houses, expected):
        """Rule: Rent follows the rent table by building count."""
        own(basic_game, 1, 11, 13, 14, houses=houses)
        assert basic_game.calculate_rent(14) == expected

    def test_unowned_space_has_no_rent(self, basic_game):
        assert basic_game.calculate_rent(39) == 0


class TestRailroadRent:
    @pytest.mark.parametrize(
        "stations,expected",
        [((5,), 25), ((5, 15), 50), ((5, 15, 25), 100), ((5, 15, 25, 35), 200)],
    )
    def test_rent_by_stations_owned(self, basic_game, stations, expected):
        """Rule: 25, 50, 100, 200 for 1-4 stations."""
        own(basic_game, 1, *stations)
        assert basic_game.calculate_rent(5) == expected

    def test_mortgaged_station_still_counts(self, basic_game):
        own(basic_game, 1, 5, 15)
        basic_game.board.states[15].is_mortgaged = True
        assert basic_game.calculate_rent(5) == 50


class TestUtilityRent:
    def test_one_utility_is_four_times_dice(self, basic_game):
        own(basic_game, 1, 12)
        assert basic_game.calculate_rent(12, dice_total=7) == 28

    def test_both_utilities_is_ten_times_dice(self, basic_game):
        own(basic_game, 1, 12, 28)
        assert basic_game.calculate_rent(12, dice_total=7) == 70

    def test_defaults_to_last_roll(self, basic_game):
        own(basic_game, 1, 12)
        basic_game.last_dice_roll = (3, 5)
        assert basic_game.calculate_rent(12) == 32


class TestRentPayment:
    def test_landing_pays_owner(self, basic_game, dice):
        """Rule: Landing on an owned site transfers rent to its owner."""
        own(basic_game, 1, 6, 8, 9)
        dice.load(2, 4)
        basic_game.roll_dice(0)

        assert basic_game.players[0].position == 6
        assert basic_game.players[0].cash == 1500 - 12
        assert basic_game.players[1].cash == 1500 + 12

    def test_no_rent_on_own_property(self, basic_game, dice):
        own(basic_game, 0, 6)
        dice.load(2, 4)
        basic_game.roll_dice(0)
        assert basic_game.players[0].cash == 1500

    def test_no_rent_when_mortgaged(self, basic_game, dice):
        own(basic_game, 1, 6, mortgaged=True)
        dice.load(2, 4)
        basic_game.roll_dice(0)
        assert basic_game.players[0].cash == 1500
        assert basic_game.players[1].cash == 1500
