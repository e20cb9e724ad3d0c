"""
Tests for auctions.

Rules tested:
- Declining a purchase starts an auction the decliner has already left
- Bids must meet the minimum and beat the current bid
- Winner pays the bank and takes the title
- Unresponsive auctions are settled
"""

import pytest

from tycoon.exceptions import InsufficientFundsError, InvalidActionError, NotYourTurnError
from tycoon.game import Command, CommandType, GameConfig, PendingActionType, apply_command, create_game

from tests.conftest import assert_money_conserved


@pytest.fixture
def auction_game(four_player_game, dice):
    """Alice lands on The Angel Islington and declines it."""
    dice.load(2, 4)
    four_player_game.roll_dice(0)
    four_player_game.decline_property(0)
    return four_player_game


class TestAuctionStart:
    def test_landing_offers_purchase(self, four_player_game, dice):
        dice.load(2, 4)
        four_player_game.roll_dice(0)
        pending = four_player_game.pending_action
        assert pending.action_type == PendingActionType.BUY_OR_AUCTION
        assert pending.position == 6
        assert pending.amount == 100

    def test_decline_starts_auction(self, auction_game):
        auction = auction_game.active_auction
        assert auction is not None
        assert auction.property_position == 6
        assert auction.minimum_bid == 10
        assert auction.remaining_bidders == [1, 2, 3]
        assert auction_game.pending_action is None

    def test_players_below_minimum_are_left_out(self, four_player_game, dice):
        four_player_game.players[2].cash = 5
        dice.load(2, 4)
        four_player_game.roll_dice(0)
        four_player_game.decline_property(0)
        assert 2 not in four_player_game.active_auction.participants

    def test_no_eligible_bidder_leaves_property_unsold(self, basic_game, dice):
        basic_game.players[1].cash = 0
        dice.load(2, 4)
        basic_game.roll_dice(0)
        assert basic_game.decline_property(0) is None
        assert basic_game.active_auction is None
        assert basic_game.board.states[6].owner_id is None

    def test_auctions_can_be_disabled(self, two_players, dice):
        game = create_game(GameConfig(seed=42, shuffle_turn_order=False, auctions_enabled=False), two_players, dice)
        dice.load(2, 4)
        game.roll_dice(0)
        assert game.decline_property(0) is None
        assert game.active_auction is None


class TestBidding:
    def test_bid_below_minimum_rejected(self, auction_game):
        with pytest.raises(InvalidActionError, match="Minimum bid"):
            auction_game.place_bid(1, 5)

    def test_minimum_bid_is_inclusive(self, auction_game):
        auction_game.place_bid(1, 10)
        assert auction_game.active_auction.current_bid == 10

    def test_must_beat_current_bid(self, auction_game):
        auction_game.place_bid(1, 50)
        with pytest.raises(InvalidActionError):
            auction_game.place_bid(2, 50)
        auction_game.place_bid(2, 51)
        assert auction_game.active_auction.highest_bidder == 2

    def test_cannot_bid_more_than_cash(self, auction_game):
        with pytest.raises(InsufficientFundsError):
            auction_game.place_bid(1, 1501)

    def test_decliner_cannot_bid(self, auction_game):
        with pytest.raises(InvalidActionError):
            auction_game.place_bid(0, 50)

    def test_non_participant_cannot_bid(self, four_player_game, dice):
        four_player_game.players[2].cash = 5
        dice.load(2, 4)
        four_player_game.roll_dice(0)
        four_player_game.decline_property(0)
        with pytest.raises(NotYourTurnError):
            four_player_game.place_bid(2, 10)

    def test_passed_bidder_cannot_return(self, auction_game):
        auction_game.pass_bid(1)
        with pytest.raises(InvalidActionError):
            auction_game.place_bid(1, 20)

    def test_bidding_requires_running_auction(self, basic_game):
        with pytest.raises(InvalidActionError):
            basic_game.place_bid(1, 20)


class TestAuctionEnd:
    def test_last_bidder_standing_wins(self, auction_game):
        """Rule: When everyone else has passed the highest bidder pays and takes the title."""
        auction_game.place_bid(1, 60)
        auction_game.pass_bid(2)
        assert auction_game.active_auction is not None
        auction_game.pass_bid(3)

        assert auction_game.active_auction is None
        assert auction_game.board.states[6].owner_id == 1
        assert auction_game.players[1].cash == 1440
        assert_money_conserved(auction_game)

    def test_everyone_passing_leaves_property_unsold(self, auction_game):
        for pid in (1, 2, 3):
            auction_game.pass_bid(pid)
        assert auction_game.active_auction is None
        assert auction_game.board.states[6].owner_id is None

    def test_auction_blocks_turn_actions(self, auction_game):
        result = apply_command(auction_game, Command(CommandType.END_TURN, 0))
        assert not result.accepted
        assert "auction" in result.reason

    def test_settle_sells_to_highest_bidder(self, auction_game):
        auction_game.place_bid(2, 30)
        version = auction_game.state_version
        auction_game.settle_auction("timed out")
        assert auction_game.active_auction is None
        assert auction_game.board.states[6].owner_id == 2
        assert auction_game.state_version == version + 1

    def test_settle_without_bids_leaves_property_unsold(self, auction_game):
        auction_game.settle_auction()
        assert auction_game.active_auction is None
        assert auction_game.board.states[6].owner_id is None

    def test_bankrupt_leader_is_dropped(self, auction_game):
        auction_game.place_bid(3, 40)
        auction_game.declare_bankruptcy(3)
        auction = auction_game.active_auction
        assert auction is not None
        assert auction.highest_bidder is None
        assert 3 not in auction.participants
