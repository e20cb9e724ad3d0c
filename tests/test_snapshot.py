"""
Tests for state notifications and saved games.
"""

import json
import random

import pytest

from tycoon.agents import DecisionAgent
from tycoon.exceptions import SnapshotError
from tycoon.game import GameConfig, Player, TradeOffer, create_game
from tycoon.runner import play_headless
from tycoon.schemas import PublicGameState
from tycoon.snapshot import build_public_state, restore_game, save_game

from tests.conftest import own


def _agents(game):
    return {pid: DecisionAgent(pid, game.players[pid].name, rng=random.Random(pid)) for pid in game.turn_order}


@pytest.fixture
def seeded_game():
    players = [Player(0, "Alice"), Player(1, "Bob"), Player(2, "Charlie")]
    return create_game(GameConfig(seed=11), players)


class TestPublicState:
    def test_contents(self, basic_game):
        own(basic_game, 1, 39)
        basic_game.players[0].jail_cards = 1
        state = build_public_state(basic_game)

        assert state.current_player_id == 0
        assert state.turn_order == [0, 1]
        assert len(state.board) == 40
        assert state.space(39).owner_id == 1
        assert state.space(39).rents == [50, 200, 600, 1400, 1700, 2000]
        assert state.space(4).tax_amount == 200
        assert state.player(1).properties == [39]
        assert state.player(0).jail_cards == 1
        assert state.houses_available == 32
        assert state.rules.starting_cash == 1500
        assert state.log[-1] == "Alice's turn"

    def test_hides_deck_and_random_state(self):
        fields = set(PublicGameState.model_fields)
        assert not fields & {"rng_state", "chance", "community_chest"}

    def test_shows_debt_auction_and_trades(self, three_player_game, dice):
        game = three_player_game
        game.players[2].cash = 0
        game._pay_player(2, 0, 30)
        own(game, 1, 39)
        game.propose_trade(0, 1, TradeOffer.of(cash=300), TradeOffer.of(properties=[39]))
        dice.load(2, 4)
        game.roll_dice(0)
        game.decline_property(0)

        state = build_public_state(game)

        assert state.player(2).debt.amount == 30
        assert state.auction.property_position == 6
        assert state.auction.minimum_next_bid == 10
        assert state.auction.remaining_bidders == [1]
        assert state.pending_trades[0].request.properties == [39]

    def test_notification_is_frozen(self, basic_game):
        state = build_public_state(basic_game)
        with pytest.raises(Exception):
            state.turn_number = 5


class TestSaveRestore:
    def test_round_trip_through_json(self, seeded_game):
        play_headless(seeded_game, _agents(seeded_game), max_commands=120)
        saved = save_game(seeded_game)

        restored = restore_game(json.loads(json.dumps(saved.model_dump(mode="json"))))

        assert save_game(restored).model_dump() == saved.model_dump()
        assert build_public_state(restored) == build_public_state(seeded_game)

    def test_restored_game_continues_identically(self, seeded_game):
        """Rule: Same snapshot plus same commands gives the same game."""
        play_headless(seeded_game, _agents(seeded_game), max_commands=80)
        restored = restore_game(save_game(seeded_game).model_dump(mode="json"))

        play_headless(seeded_game, _agents(seeded_game), max_commands=150)
        play_headless(restored, _agents(restored), max_commands=150)

        assert save_game(restored).model_dump() == save_game(seeded_game).model_dump()

    def test_debts_and_trades_survive(self, basic_game):
        own(basic_game, 1, 39)
        basic_game.players[0].cash = 0
        basic_game._pay_player(0, 1, 120)
        basic_game.propose_trade(1, 0, TradeOffer.of(properties=[39]), TradeOffer())

        restored = restore_game(save_game(basic_game))

        assert restored.players[0].debt.amount == 120
        assert restored.players[0].debt.creditor_id == 1
        trade = restored.trade_manager.pending()[0]
        assert trade.offer.properties == frozenset({39})
        assert restored.trade_manager.next_trade_id == 2

    def test_garbage_is_rejected(self):
        with pytest.raises(SnapshotError):
            restore_game({"players": "nobody"})

    def test_unknown_card_is_rejected(self, basic_game):
        data = save_game(basic_game).model_dump(mode="json")
        data["chance"]["order"][0] = "Win the lottery."
        with pytest.raises(SnapshotError, match="Unknown card"):
            restore_game(data)
