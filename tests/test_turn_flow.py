"""
Tests for turn flow: rolling, doubles, passing GO, taxes and ending a turn.
"""

import pytest

from tycoon.exceptions import InvalidActionError, NotYourTurnError
from tycoon.game import GameConfig, Player, create_game
from tycoon.game.money import EventType

from tests.conftest import LoadedDice, assert_money_conserved


class TestRolling:
    def test_roll_moves_player(self, basic_game, dice):
        dice.load(3, 5)
        assert basic_game.roll_dice(0) == (3, 5)
        assert basic_game.players[0].position == 8
        assert basic_game.dice_rolled
        assert not basic_game.can_roll_again

    def test_only_current_player_rolls(self, basic_game):
        with pytest.raises(NotYourTurnError):
            basic_game.roll_dice(1)

    def test_cannot_roll_twice_without_doubles(self, basic_game, dice):
        dice.load(1, 3)
        basic_game.roll_dice(0)
        with pytest.raises(InvalidActionError, match="already rolled"):
            basic_game.roll_dice(0)

    def test_doubles_grant_another_roll(self, basic_game, dice):
        """Rule: Doubles let the player roll again."""
        dice.load(3, 3, 1, 2)
        basic_game.roll_dice(0)
        assert basic_game.can_roll_again
        basic_game.pending_action = None
        with pytest.raises(InvalidActionError, match="roll again"):
            basic_game.end_turn(0)

        basic_game.roll_dice(0)
        assert basic_game.players[0].position == 9
        assert not basic_game.can_roll_again

    def test_third_double_goes_to_jail(self, basic_game, dice):
        """Rule: Three doubles in a row send the player to jail without moving."""
        dice.load(2, 2, 3, 3, 1, 1)
        for _ in range(3):
            basic_game.roll_dice(0)

        alice = basic_game.players[0]
        assert alice.in_jail
        assert alice.position == 10
        assert not basic_game.can_roll_again

    def test_passing_go_pays_salary(self, basic_game, dice):
        basic_game.players[0].position = 36
        dice.load(3, 4)
        basic_game.roll_dice(0)
        assert basic_game.players[0].position == 3
        assert basic_game.players[0].cash == 1700

    def test_income_tax_feeds_free_parking(self, basic_game, dice):
        dice.load(1, 3)
        basic_game.roll_dice(0)
        assert basic_game.players[0].cash == 1300
        assert basic_game.free_parking == 200
        assert_money_conserved(basic_game)

    def test_tax_goes_to_bank_without_jackpot(self, two_players, dice):
        config = GameConfig(seed=42, shuffle_turn_order=False, free_parking_jackpot=False)
        game = create_game(config, two_players, dice)
        dice.load(1, 3)
        game.roll_dice(0)
        assert game.free_parking == 0
        assert game.bank.collected == 200

    def test_go_to_jail_space(self, basic_game, dice):
        basic_game.players[0].position = 24
        dice.load(2, 4)
        basic_game.roll_dice(0)
        assert basic_game.players[0].in_jail
        assert basic_game.players[0].position == 10
        assert basic_game.players[0].cash == 1500


class TestEndTurn:
    def test_must_roll_before_ending(self, basic_game):
        with pytest.raises(InvalidActionError, match="roll"):
            basic_game.end_turn(0)

    def test_pending_purchase_blocks_end_turn(self, basic_game, dice):
        dice.load(2, 4)
        basic_game.roll_dice(0)
        with pytest.raises(InvalidActionError, match="pending"):
            basic_game.end_turn(0)

    def test_end_turn_advances(self, basic_game, dice):
        dice.load(1, 3)
        basic_game.roll_dice(0)
        basic_game.end_turn(0)
        assert basic_game.current_player_id == 1
        assert basic_game.turn_number == 2
        assert not basic_game.dice_rolled

    def test_force_end_turn_skips_pending(self, basic_game, dice):
        dice.load(2, 4)
        basic_game.roll_dice(0)
        version = basic_game.state_version
        basic_game.force_end_turn("timed out")
        assert basic_game.current_player_id == 1
        assert basic_game.pending_action is None
        assert basic_game.state_version == version + 1


class TestSetup:
    def test_needs_two_players(self):
        with pytest.raises(ValueError):
            create_game(GameConfig(), [Player(0, "Solo")])

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            create_game(GameConfig(), [Player(0, "A"), Player(0, "B")])

    def test_starting_state(self, four_player_game):
        assert all(p.cash == 1500 and p.position == 0 for p in four_player_game.players.values())
        assert four_player_game.turn_order == [0, 1, 2, 3]
        assert four_player_game.bank.houses_available == 32
        assert four_player_game.bank.hotels_available == 12

    def test_same_seed_same_turn_order(self, four_players):
        orders = [create_game(GameConfig(seed=7), four_players).turn_order for _ in range(2)]
        assert orders[0] == orders[1]
        assert sorted(orders[0]) == [0, 1, 2, 3]

    def test_seeded_games_roll_alike(self, two_players):
        games = [create_game(GameConfig(seed=3, shuffle_turn_order=False), two_players) for _ in range(2)]
        rolls = [g.roll_dice(0) for g in games]
        assert rolls[0] == rolls[1]

    def test_log_is_bounded(self, two_players):
        game = create_game(GameConfig(seed=1, shuffle_turn_order=False, log_limit=5), two_players, LoadedDice(1))
        for _ in range(10):
            game.event_log.log(EventType.MOVE, "noise")
        assert len(game.event_log) == 5
