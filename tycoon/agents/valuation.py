"""
Property valuation, purchase scoring and trade evaluation.

All functions are pure: they read a `BoardView` and a `DifficultyProfile`
and return numbers. Randomness, where used at all, comes from the rng the
caller passes in.
"""

import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from tycoon.agents.profiles import DifficultyProfile
from tycoon.agents.view import COLOR_RANKING, RAILROAD, UTILITY, BoardView, GamePhase
from tycoon.schemas import TradeOfferView

JAIL_CARD_VALUE = 50
FAST_PATH_MULTIPLIER = 4.0
MONOPOLY_MULTIPLIER = 1.8
BLOCKING_MULTIPLIER = 1.5

# Share of the reserve kept per phase
PHASE_RESERVE_SCALE = {GamePhase.EARLY: 0.5, GamePhase.MID: 1.0, GamePhase.LATE: 1.5}


class Perspective(Enum):
    RECEIVING = "receiving"
    GIVING = "giving"


def unmortgage_cost(view: BoardView, position: int) -> int:
    space = view.space(position)
    rate = round(view.state.rules.mortgage_interest_rate * 100)
    return (space.mortgage_value or 0) * (100 + rate) // 100


def cash_reserve(view: BoardView, profile: DifficultyProfile) -> int:
    """Cash the agent tries not to spend, growing as the board fills up."""
    base = view.state.rules.starting_cash * profile.reserve_fraction
    return int(round(base * PHASE_RESERVE_SCALE[view.phase()]))


def base_value(view: BoardView, position: int) -> int:
    """Price plus buildings, scaled by colour tier. No strategic adjustments."""
    space = view.space(position)
    value = (space.price or 0) + space.houses * (space.house_cost or 0)
    if space.color_group:
        value *= 1 + COLOR_RANKING.get(space.color_group, 0) * 0.02
    return int(value)


def calculate_property_value(
    view: BoardView,
    position: int,
    perspective: Perspective,
    profile: Optional[DifficultyProfile] = None,
) -> int:
    """
    What a property is worth to the deciding seat.

    Receiving a property that completes our colour group is worth more;
    giving away a property that keeps an opponent from completing theirs
    costs more. Railroads grow with the number we already hold. A mortgaged
    property is worth what it would cost to lift the mortgage.

    Args:
        view: Analysis helpers bound to the deciding seat
        position: Board index of the property
        perspective: Whether the seat would receive or give the property
        profile: Awareness switches; all strategy applies when omitted
    """
    space = view.space(position)
    if space.is_mortgaged:
        return unmortgage_cost(view, position)

    monopoly_aware = profile.monopoly_awareness if profile else True
    blocking_aware = profile.blocking_awareness if profile else True

    value = float(base_value(view, position))
    if perspective == Perspective.RECEIVING and monopoly_aware and view.completes_monopoly(position):
        value *= MONOPOLY_MULTIPLIER
    if perspective == Perspective.GIVING and blocking_aware and view.blocks_opponent(position):
        value *= BLOCKING_MULTIPLIER
    if space.kind == RAILROAD:
        value *= 1 + 0.15 * view.count_kind(view.player_id, RAILROAD)
    return math.floor(value)


def score_purchase(view: BoardView, position: int, profile: DifficultyProfile) -> float:
    """Weighted desirability of buying a property at list price."""
    space = view.space(position)
    price = space.price or 0
    cash = view.me.cash
    score = 0.0

    if cash > 0:
        score += 0.3 * max(0.0, (cash - price) / cash)

    phase = view.phase()
    if phase == GamePhase.EARLY:
        score += 0.2
        if price <= 200:
            score += 0.15
    elif phase == GamePhase.LATE:
        score -= 0.1

    if space.color_group:
        if profile.monopoly_awareness and view.completes_monopoly(position):
            score += 0.7
        else:
            score += view.group_progress(view.player_id, space.color_group) * 0.3
        if profile.blocking_awareness and view.blocks_opponent(position):
            score += 0.5
        score += COLOR_RANKING.get(space.color_group, 0) * 0.02
    elif space.kind == RAILROAD:
        score += 0.25 + 0.15 * view.count_kind(view.player_id, RAILROAD)
    elif space.kind == UTILITY:
        score += 0.15 + 0.1 * view.count_kind(view.player_id, UTILITY)

    if cash > price * 4:
        score += 0.1
    return score


def should_buy(
    view: BoardView, position: int, profile: DifficultyProfile, rng: Optional[random.Random] = None
) -> bool:
    """
    Buy when the score clears the profile threshold and the reserve survives.
    A property that completes our own group is always bought if we can pay.
    """
    price = view.space(position).price or 0
    cash = view.me.cash
    if cash < price:
        return False
    if view.completes_monopoly(position):
        return True
    if cash - price < cash_reserve(view, profile):
        return False

    score = score_purchase(view, position, profile)
    if rng is not None and profile.random_variance:
        score *= 1 + rng.uniform(-profile.random_variance, profile.random_variance)
    return score >= profile.buy_threshold


@dataclass(frozen=True)
class TradeEvaluation:
    accept: bool
    ratio: float
    required_ratio: float
    received_value: int
    given_value: int
    gives_monopoly: bool = False
    surrenders_blocker: bool = False
    cash_only: bool = False
    fast_path: bool = False
    reason: str = ""


def _sum_values(view: BoardView, positions: Iterable[int], perspective: Perspective, profile) -> int:
    return sum(calculate_property_value(view, pos, perspective, profile) for pos in positions)


def evaluate_trade(
    view: BoardView,
    receive: TradeOfferView,
    give: TradeOfferView,
    counterparty_id: int,
    profile: DifficultyProfile,
) -> TradeEvaluation:
    """
    Decide whether the deciding seat should take `receive` in exchange for `give`.

    Cash offers worth four times the requested properties are taken on the
    spot. Otherwise the received/given ratio must clear a threshold that
    rises when the deal hands the counterparty a monopoly or gives up a
    blocking property. Offers of cash alone for property are judged on the
    cash-to-value ratio against their own, steeper multipliers.
    """
    given_set = frozenset(give.properties)
    received_props = _sum_values(view, receive.properties, Perspective.RECEIVING, profile)
    given_props = _sum_values(view, give.properties, Perspective.GIVING, profile)

    gives_monopoly = any(
        view.completes_monopoly(pos, counterparty_id, also=given_set) for pos in give.properties
    )
    surrenders_blocker = any(view.blocks_opponent(pos) for pos in give.properties)

    received_value = receive.cash + receive.jail_cards * JAIL_CARD_VALUE + received_props
    if profile.monopoly_awareness:
        received_set = frozenset(receive.properties)
        for pos in receive.properties:
            if view.completes_monopoly(pos, also=received_set):
                received_value += int((view.space(pos).price or 0) * 0.5)
                break

    plain_given = give.cash + give.jail_cards * JAIL_CARD_VALUE + given_props
    given_value = plain_given
    if profile.monopoly_awareness and gives_monopoly:
        given_value += sum(2 * (view.space(pos).price or 0) for pos in give.properties)

    common = dict(
        received_value=received_value,
        given_value=given_value,
        gives_monopoly=gives_monopoly,
        surrenders_blocker=surrenders_blocker,
    )

    if give.cash > view.me.cash:
        return TradeEvaluation(False, 0.0, math.inf, reason="cannot afford the requested cash", **common)

    cash_only = bool(give.properties) and not receive.properties and receive.jail_cards == 0
    if cash_only and give.cash == 0 and receive.cash >= FAST_PATH_MULTIPLIER * given_props:
        return TradeEvaluation(
            True, receive.cash / max(plain_given, 1), FAST_PATH_MULTIPLIER,
            cash_only=True, fast_path=True, reason="overwhelming cash offer", **common
        )

    monopoly_risk = profile.monopoly_awareness and gives_monopoly
    blocking_risk = profile.blocking_awareness and surrenders_blocker

    if cash_only:
        if monopoly_risk:
            required = profile.cash_monopoly_ratio
        elif blocking_risk:
            required = profile.cash_blocking_ratio
        else:
            required = profile.cash_ratio
        ratio = receive.cash / max(plain_given, 1)
        return TradeEvaluation(ratio >= required, ratio, required, cash_only=True, reason="cash for property", **common)

    if monopoly_risk:
        required = profile.monopoly_gift_ratio
    elif blocking_risk:
        required = profile.blocking_ratio
    else:
        required = profile.accept_ratio
    ratio = received_value / given_value if given_value > 0 else math.inf
    return TradeEvaluation(ratio >= required, ratio, required, reason="value comparison", **common)
