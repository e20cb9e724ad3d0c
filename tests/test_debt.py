"""
Tests for player-to-player debt.

A payer who cannot cover rent hands over what they have and owes the
rest. Any money the debtor later receives goes to the creditor first.
"""

from tycoon.game import Command, CommandType, PendingActionType, TradeOffer, apply_command
from tycoon.game.money import EventType

from tests.conftest import own


def test_rent_shortfall_becomes_debt_and_is_paid_from_later_income(three_player_game, dice):
    """Rule: Debt is settled from mortgage proceeds and trade cash as they arrive."""
    game = three_player_game
    alice, bob, carol = game.players[0], game.players[1], game.players[2]
    own(game, 1, 11, 13, 14, houses=3)
    own(game, 0, 39)
    alice.position = 8
    alice.cash = 100

    dice.load(2, 4)
    assert apply_command(game, Command(CommandType.ROLL, 0)).accepted

    assert alice.position == 14
    assert alice.cash == 0
    assert alice.debt.amount == 400
    assert alice.debt.creditor_id == 1
    assert bob.cash == 1600
    assert game.pending_action.action_type == PendingActionType.MUST_PAY_OR_BANKRUPT
    assert game.pending_action.amount == 400

    assert apply_command(game, Command(CommandType.MORTGAGE_PROPERTY, 0, position=39)).accepted
    assert alice.cash == 0
    assert alice.debt.amount == 200
    assert bob.cash == 1800

    propose = Command(CommandType.PROPOSE_TRADE, 2, recipient_id=0, offer=TradeOffer.of(cash=300))
    assert apply_command(game, propose).accepted
    trade_id = game.trade_manager.pending()[0].trade_id
    assert apply_command(game, Command(CommandType.ACCEPT_TRADE, 0, trade_id=trade_id)).accepted

    assert alice.cash == 100
    assert alice.debt is None
    assert bob.cash == 2000
    assert carol.cash == 1200
    assert game.pending_action is None


def test_free_parking_pays_creditor_first(basic_game, dice):
    game = basic_game
    alice = game.players[0]
    alice.position = 10
    alice.cash = 0
    game._pay_player(0, 1, 300)
    alice.cash = 100
    game.free_parking = 500

    dice.load(4, 6)
    game.roll_dice(0)

    assert alice.position == 20
    assert alice.cash == 300
    assert alice.debt is None
    assert game.players[1].cash == 1800
    assert game.free_parking == 0


def test_shortfall_is_logged(basic_game):
    basic_game.players[0].cash = 40
    basic_game._pay_player(0, 1, 100)
    last = basic_game.event_log.get_recent_events(1)[0]
    assert last.event_type == EventType.DEBT_CREATED
    assert last.details == {"creditor": 1, "amount": 60}


def test_debt_to_same_creditor_accumulates(basic_game):
    alice = basic_game.players[0]
    alice.cash = 0
    basic_game._pay_player(0, 1, 100)
    basic_game._pay_player(0, 1, 50)
    assert alice.debt.amount == 150
    assert alice.cash == 0


def test_payer_in_debt_to_someone_else_goes_negative(three_player_game):
    """Rule: Only one creditor at a time; other payments are made in full."""
    game = three_player_game
    alice = game.players[0]
    alice.cash = 0
    game._pay_player(0, 1, 100)
    alice.cash = 50

    game._pay_player(0, 2, 80)

    assert alice.cash == -30
    assert alice.debt.creditor_id == 1
    assert alice.debt.amount == 100
    assert game.players[2].cash == 1580


def test_partial_repayment_keeps_debt_open(basic_game):
    alice = basic_game.players[0]
    alice.cash = 0
    basic_game._pay_player(0, 1, 300)
    basic_game._bank_pays(0, 120)
    assert alice.cash == 0
    assert alice.debt.amount == 180
    assert basic_game.players[1].cash == 1620


def test_creditor_in_debt_passes_payment_along(three_player_game):
    """Rule: Money received by a creditor who is also a debtor flows onward."""
    game = three_player_game
    game.players[1].cash = 0
    game._pay_player(1, 2, 50)
    game.players[0].cash = 0
    game._pay_player(0, 1, 100)

    game._bank_pays(0, 100)

    assert game.players[0].debt is None
    assert game.players[1].debt is None
    assert game.players[1].cash == 50
    assert game.players[2].cash == 1550


def test_out_of_turn_debtor_can_mortgage(three_player_game):
    game = three_player_game
    own(game, 2, 39)
    game.players[2].cash = 0
    game._pay_player(2, 1, 100)

    result = apply_command(game, Command(CommandType.MORTGAGE_PROPERTY, 2, position=39))

    assert result.accepted
    assert game.players[2].cash == 100
    assert game.players[2].debt is None
