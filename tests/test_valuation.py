"""
Tests for property valuation, purchase decisions and trade evaluation.
"""

import math

import pytest

from tycoon.agents import get_profile
from tycoon.agents.valuation import (
    Perspective,
    base_value,
    calculate_property_value,
    cash_reserve,
    evaluate_trade,
    score_purchase,
    should_buy,
)
from tycoon.schemas import TradeOfferView

from tests.conftest import own, view_of

MEDIUM = get_profile("medium")
HARD = get_profile("hard")
EASY = get_profile("easy")

# Twenty ownables outside the green group
LATE_BOARD = (1, 3, 5, 6, 8, 9, 11, 12, 13, 14, 15, 16, 18, 19, 21, 23, 24, 25, 26, 27)


def offer(cash=0, properties=(), jail_cards=0):
    return TradeOfferView(cash=cash, properties=list(properties), jail_cards=jail_cards)


class TestPropertyValue:
    def test_base_value_scales_with_colour_rank(self, basic_game):
        view = view_of(basic_game, 0)
        assert base_value(view, 6) == 114
        assert base_value(view, 39) == 432
        assert base_value(view, 5) == 200

    def test_buildings_add_to_value(self, basic_game):
        own(basic_game, 1, 11, 13, 14, houses=2)
        assert base_value(view_of(basic_game, 0), 14) == int((160 + 200) * 1.12)

    def test_monopoly_completion_is_worth_more(self, basic_game):
        own(basic_game, 0, 37)
        view = view_of(basic_game, 0)
        assert calculate_property_value(view, 39, Perspective.RECEIVING, MEDIUM) == 777
        assert calculate_property_value(view, 39, Perspective.RECEIVING, EASY) == 432
        assert calculate_property_value(view, 39, Perspective.GIVING, MEDIUM) == 432

    def test_giving_away_a_blocker_costs_more(self, basic_game):
        own(basic_game, 1, 11, 13)
        own(basic_game, 0, 14)
        view = view_of(basic_game, 0)
        assert calculate_property_value(view, 14, Perspective.GIVING, HARD) == 268
        assert calculate_property_value(view, 14, Perspective.GIVING, MEDIUM) == 179

    def test_mortgaged_property_is_worth_its_release_cost(self, basic_game):
        own(basic_game, 0, 37, mortgaged=True)
        own(basic_game, 1, 39, mortgaged=True)
        view = view_of(basic_game, 0)
        assert calculate_property_value(view, 39, Perspective.RECEIVING, MEDIUM) == 220

    def test_stations_grow_with_holdings(self, basic_game):
        own(basic_game, 0, 5, 15)
        view = view_of(basic_game, 0)
        assert calculate_property_value(view, 25, Perspective.RECEIVING, MEDIUM) == 260


class TestPurchase:
    def test_reserve_by_phase(self, basic_game):
        assert cash_reserve(view_of(basic_game, 0), MEDIUM) == 50
        assert cash_reserve(view_of(basic_game, 0), HARD) == 60
        own(basic_game, 1, *LATE_BOARD)
        assert cash_reserve(view_of(basic_game, 0), MEDIUM) == 151

    def test_cheap_early_property_is_bought(self, basic_game):
        view = view_of(basic_game, 0)
        assert score_purchase(view, 6, MEDIUM) == pytest.approx(0.28 + 0.2 + 0.15 + 0.14 + 0.1)
        assert should_buy(view, 6, MEDIUM)

    def test_cannot_buy_without_cash(self, basic_game):
        basic_game.players[0].cash = 90
        assert not should_buy(view_of(basic_game, 0), 6, MEDIUM)

    def test_reserve_is_protected(self, basic_game):
        basic_game.players[0].cash = 120
        assert not should_buy(view_of(basic_game, 0), 6, MEDIUM)

    def test_completing_a_group_ignores_the_reserve(self, basic_game):
        own(basic_game, 0, 37)
        basic_game.players[0].cash = 410
        assert should_buy(view_of(basic_game, 0), 39, EASY)

    def test_late_expensive_property_is_passed(self, basic_game):
        own(basic_game, 1, *LATE_BOARD)
        basic_game.players[0].cash = 500
        view = view_of(basic_game, 0)
        assert score_purchase(view, 34, MEDIUM) == pytest.approx(0.3 * 180 / 500 - 0.1 + 0.1)
        assert not should_buy(view, 34, MEDIUM)

    def test_blocking_awareness_raises_score(self, basic_game):
        own(basic_game, 1, 11, 13)
        view = view_of(basic_game, 0)
        assert score_purchase(view, 14, HARD) == pytest.approx(score_purchase(view, 14, MEDIUM) + 0.5)


class TestEvaluateTrade:
    def test_overwhelming_cash_is_taken(self, basic_game):
        own(basic_game, 0, 6)
        evaluation = evaluate_trade(view_of(basic_game, 0), offer(cash=500), offer(properties=[6]), 1, MEDIUM)
        assert evaluation.accept
        assert evaluation.fast_path
        assert evaluation.cash_only

    def test_low_cash_offer_is_declined(self, basic_game):
        own(basic_game, 0, 6)
        evaluation = evaluate_trade(view_of(basic_game, 0), offer(cash=150), offer(properties=[6]), 1, MEDIUM)
        assert not evaluation.accept
        assert evaluation.cash_only
        assert evaluation.required_ratio == MEDIUM.cash_ratio
        assert evaluation.ratio == pytest.approx(150 / 114)

    def test_fair_cash_offer_is_accepted(self, basic_game):
        own(basic_game, 0, 6)
        evaluation = evaluate_trade(view_of(basic_game, 0), offer(cash=180), offer(properties=[6]), 1, MEDIUM)
        assert evaluation.accept

    def test_handing_over_a_monopoly_needs_a_steep_price(self, basic_game):
        own(basic_game, 0, 6)
        own(basic_game, 1, 8, 9)
        view = view_of(basic_game, 0)

        evaluation = evaluate_trade(view, offer(cash=300), offer(properties=[6]), 1, MEDIUM)
        assert evaluation.gives_monopoly
        assert evaluation.required_ratio == MEDIUM.cash_monopoly_ratio
        assert not evaluation.accept

        unaware = evaluate_trade(view, offer(cash=300), offer(properties=[6]), 1, EASY)
        assert unaware.required_ratio == EASY.cash_ratio
        assert unaware.accept

    def test_surrendering_a_blocker(self, basic_game):
        own(basic_game, 1, 11, 13)
        own(basic_game, 0, 14)
        view = view_of(basic_game, 0)
        evaluation = evaluate_trade(view, offer(cash=400), offer(properties=[14]), 1, HARD)
        assert evaluation.surrenders_blocker
        assert evaluation.gives_monopoly
        assert evaluation.required_ratio == HARD.cash_monopoly_ratio

    def test_property_swap_compares_values(self, basic_game):
        own(basic_game, 0, 6)
        own(basic_game, 1, 39)
        view = view_of(basic_game, 0)

        good = evaluate_trade(view, offer(properties=[39]), offer(properties=[6]), 1, MEDIUM)
        assert good.accept
        assert good.ratio == pytest.approx(432 / 114)

        bad = evaluate_trade(view, offer(properties=[6]), offer(properties=[39]), 1, MEDIUM)
        assert not bad.accept

    def test_receiving_a_monopoly_adds_a_bonus(self, basic_game):
        own(basic_game, 0, 37)
        own(basic_game, 1, 39)
        view = view_of(basic_game, 0)
        evaluation = evaluate_trade(view, offer(properties=[39]), offer(cash=900), 1, MEDIUM)
        assert evaluation.received_value == 777 + 200
        assert evaluation.accept

    def test_jail_cards_have_value(self, basic_game):
        basic_game.players[0].jail_cards = 1
        evaluation = evaluate_trade(view_of(basic_game, 0), offer(cash=60), offer(jail_cards=1), 1, MEDIUM)
        assert evaluation.given_value == 50
        assert evaluation.accept

    def test_cannot_pay_requested_cash(self, basic_game):
        own(basic_game, 1, 39)
        evaluation = evaluate_trade(view_of(basic_game, 0), offer(properties=[39]), offer(cash=2000), 1, MEDIUM)
        assert not evaluation.accept
        assert math.isinf(evaluation.required_ratio)

    def test_gift_is_accepted(self, basic_game):
        evaluation = evaluate_trade(view_of(basic_game, 0), offer(cash=10), offer(), 1, MEDIUM)
        assert evaluation.accept
        assert math.isinf(evaluation.ratio)
