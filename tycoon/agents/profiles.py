"""
Difficulty tiers for the decision agent.

Every threshold the agent uses comes from a `DifficultyProfile`. The
numbers are tuning, not rules: changing them changes how well a bot
plays, never whether it plays legally.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Tuple


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class DifficultyProfile:
    difficulty: Difficulty

    # Purchases
    buy_threshold: float
    # Fraction of starting cash held back, scaled by game phase
    reserve_fraction: float

    # Awareness switches
    monopoly_awareness: bool
    blocking_awareness: bool

    # Auctions
    auction_aggressiveness: float
    wealth_bonus_cap: float
    early_pass_weight: float
    bluff_call_weight: float

    # Trades
    accept_ratio: float
    monopoly_gift_ratio: float
    blocking_ratio: float
    cash_ratio: float
    cash_blocking_ratio: float
    cash_monopoly_ratio: float
    counter_offers: bool
    counter_floor: float
    proactive_trading: bool
    premium_cap: float
    proposal_cooldown_turns: int = 4
    proposal_cooldown_cap: int = 32
    give_up_after: int = 5

    # Multiplicative noise on limits and scores; 0 plays deterministically
    random_variance: float = 0.0

    # Jail
    jail_fine_threshold: int = 200
    stay_in_jail_late: bool = True

    # Building
    max_builds_per_turn: int = 10
    build_budget_fraction: float = 0.6

    # Seconds of simulated deliberation before each command
    think_time: Tuple[float, float] = (1.0, 2.5)

    def with_overrides(self, **changes) -> "DifficultyProfile":
        return replace(self, **changes)


EASY = DifficultyProfile(
    difficulty=Difficulty.EASY,
    buy_threshold=0.35,
    reserve_fraction=0.04,
    monopoly_awareness=False,
    blocking_awareness=False,
    auction_aggressiveness=0.7,
    wealth_bonus_cap=0.1,
    early_pass_weight=0.5,
    bluff_call_weight=0.15,
    accept_ratio=0.95,
    monopoly_gift_ratio=1.2,
    blocking_ratio=1.1,
    cash_ratio=1.2,
    cash_blocking_ratio=1.5,
    cash_monopoly_ratio=2.0,
    counter_offers=False,
    counter_floor=0.8,
    proactive_trading=False,
    premium_cap=1.4,
    random_variance=0.25,
    jail_fine_threshold=300,
    stay_in_jail_late=False,
    max_builds_per_turn=3,
    build_budget_fraction=0.4,
    think_time=(1.5, 3.5),
)

MEDIUM = DifficultyProfile(
    difficulty=Difficulty.MEDIUM,
    buy_threshold=0.25,
    reserve_fraction=0.067,
    monopoly_awareness=True,
    blocking_awareness=False,
    auction_aggressiveness=0.85,
    wealth_bonus_cap=0.2,
    early_pass_weight=0.35,
    bluff_call_weight=0.3,
    accept_ratio=1.0,
    monopoly_gift_ratio=1.8,
    blocking_ratio=1.5,
    cash_ratio=1.5,
    cash_blocking_ratio=2.5,
    cash_monopoly_ratio=3.0,
    counter_offers=True,
    counter_floor=0.75,
    proactive_trading=True,
    premium_cap=1.8,
    random_variance=0.1,
    think_time=(1.0, 2.5),
)

HARD = DifficultyProfile(
    difficulty=Difficulty.HARD,
    buy_threshold=0.2,
    reserve_fraction=0.08,
    monopoly_awareness=True,
    blocking_awareness=True,
    auction_aggressiveness=0.95,
    wealth_bonus_cap=0.3,
    early_pass_weight=0.2,
    bluff_call_weight=0.5,
    accept_ratio=1.1,
    monopoly_gift_ratio=2.2,
    blocking_ratio=1.7,
    cash_ratio=1.7,
    cash_blocking_ratio=2.8,
    cash_monopoly_ratio=3.5,
    counter_offers=True,
    counter_floor=0.7,
    proactive_trading=True,
    premium_cap=2.0,
    give_up_after=4,
    think_time=(0.6, 1.8),
)

PROFILES: Dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: EASY,
    Difficulty.MEDIUM: MEDIUM,
    Difficulty.HARD: HARD,
}


def get_profile(difficulty) -> DifficultyProfile:
    """Profile for a tier, accepting the enum or its string value."""
    return PROFILES[Difficulty(difficulty)]
