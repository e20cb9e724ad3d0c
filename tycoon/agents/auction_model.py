"""
Auction bidding: how far to go, how keen to be, and when to walk away.
"""

import random
from dataclasses import dataclass
from typing import Optional

from tycoon.agents.profiles import DifficultyProfile
from tycoon.agents.valuation import base_value, cash_reserve
from tycoon.agents.view import RAILROAD, BoardView
from tycoon.schemas import AuctionView

MONOPOLY_BONUS = 0.8
BLOCKING_BONUS = 0.3
RAILROAD_SYNERGY = 1.2


def calculate_auction_limit(
    view: BoardView,
    position: int,
    profile: DifficultyProfile,
    rng: Optional[random.Random] = None,
) -> int:
    """
    Highest bid the seat is willing to make.

    Starts from the price scaled by the profile's aggressiveness, adds a
    capped bonus for being richer than the table, and adds large bonuses
    for completing our group or blocking an opponent's. Never exceeds cash
    minus the reserve.
    """
    space = view.space(position)
    price = space.price or 0
    ratio = view.wealth_ratio()

    limit = price * profile.auction_aggressiveness
    limit += price * min(profile.wealth_bonus_cap, max(0.0, ratio - 1.0) * 0.25)

    wealth_weight = min(1.5, max(0.5, ratio))
    if profile.monopoly_awareness and view.completes_monopoly(position):
        limit += price * MONOPOLY_BONUS * wealth_weight
    elif profile.blocking_awareness and view.blocks_opponent(position):
        limit += price * BLOCKING_BONUS * wealth_weight

    if space.kind == RAILROAD and view.count_kind(view.player_id, RAILROAD) >= 2:
        limit *= RAILROAD_SYNERGY

    if rng is not None and profile.random_variance:
        limit *= 1 + rng.uniform(-profile.random_variance, profile.random_variance)

    available = view.me.cash - cash_reserve(view, profile)
    return max(0, int(min(limit, available)))


def calculate_bid_reluctance(view: BoardView, position: int) -> float:
    """
    Unwillingness to chase this property, between 0 (eager) and 1.

    Zero for a property that completes our group or blocks an opponent's.
    Otherwise it rises as the board fills up and when we are poorer than
    the table, and falls with our own holdings in the group and with an
    opponent's concentration there.
    """
    if view.completes_monopoly(position) or view.blocks_opponent(position):
        return 0.0

    reluctance = 0.2 + 0.5 * view.owned_ratio()

    group = view.group_of(position)
    if group:
        mine = sum(1 for pos in group if pos != position and view.space(pos).owner_id == view.player_id)
        reluctance -= 0.25 * mine / len(group)
    reluctance -= 0.15 * view.opponent_concentration(position)
    reluctance += 0.2 * (1.0 - min(view.wealth_ratio(), 2.0))

    return min(1.0, max(0.0, reluctance))


@dataclass(frozen=True)
class BidDecision:
    amount: Optional[int]
    reason: str

    @property
    def is_pass(self) -> bool:
        return self.amount is None


def decide_bid(
    view: BoardView,
    auction: AuctionView,
    profile: DifficultyProfile,
    rng: random.Random,
) -> BidDecision:
    """Bid or pass on the running auction."""
    position = auction.property_position
    minimum = auction.minimum_next_bid
    limit = calculate_auction_limit(view, position, profile, rng)

    if minimum > limit or minimum > view.me.cash:
        return BidDecision(None, f"£{minimum} is over the limit of £{limit}")

    reluctance = calculate_bid_reluctance(view, position)
    if rng.random() < profile.early_pass_weight * reluctance:
        return BidDecision(None, f"not keen (reluctance {reluctance:.2f})")

    if not view.completes_monopoly(position):
        fair = max(base_value(view, position), 1)
        overpay = minimum / fair
        if overpay > 0.9:
            chance = min(0.9, profile.bluff_call_weight * (overpay - 0.9) / 0.3)
            if rng.random() < chance:
                return BidDecision(None, f"price £{minimum} is past fair value £{fair}")

    headroom = limit - minimum
    step = int(headroom * (1.0 - reluctance) * rng.uniform(0.05, 0.25))
    amount = min(limit, minimum + step)
    return BidDecision(amount, f"limit £{limit}, reluctance {reluctance:.2f}")
