"""
Trade negotiation: memory of past proposals, counter-offers and
proactive proposals for completing colour groups.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Optional, Set, Tuple

from tycoon.agents.profiles import DifficultyProfile
from tycoon.agents.valuation import (
    TradeEvaluation,
    base_value,
    cash_reserve,
)
from tycoon.agents.view import COLOR_RANKING, BoardView
from tycoon.game.trade import TradeOffer
from tycoon.schemas import TradeView

logger = logging.getLogger(__name__)

ProposalKey = Tuple[int, Tuple[int, ...]]

SWAP_MINIMUM_SHARE = 0.9
PREMIUM_START = 1.2
PREMIUM_STEP = 0.1


def trade_hash(trade: TradeView) -> str:
    """Identity of an incoming offer, ignoring cash: who offered which properties for which."""
    offered = ",".join(str(p) for p in sorted(trade.offer.properties))
    requested = ",".join(str(p) for p in sorted(trade.request.properties))
    return f"{trade.proposer_id}|{offered}|{requested}"


def proposal_key(recipient_id: int, requested) -> ProposalKey:
    return recipient_id, tuple(sorted(requested))


def _round_up(amount: float, step: int = 10) -> int:
    return int(math.ceil(amount / step) * step)


@dataclass
class TradeProposal:
    recipient_id: int
    offer: TradeOffer
    request: TradeOffer

    @property
    def key(self) -> ProposalKey:
        return proposal_key(self.recipient_id, self.request.properties)


def _cooldown(count: int, profile: DifficultyProfile) -> int:
    if count <= 0:
        return 0
    return min(profile.proposal_cooldown_turns * 2 ** (count - 1), profile.proposal_cooldown_cap)


@dataclass
class NegotiationMemory:
    """
    Negotiation history of a single agent, measured in turn numbers.

    Attributes:
        proposal_declines: Declines per (recipient, requested properties)
        last_proposed: Turn of the latest proposal per key
        incoming_declines: Declines per incoming-offer hash, with the turn of the latest
        resolved_seen: Ids of own proposals whose outcome has been recorded
    """

    proposal_declines: Dict[ProposalKey, int] = field(default_factory=dict)
    last_proposed: Dict[ProposalKey, int] = field(default_factory=dict)
    incoming_declines: Dict[str, Tuple[int, int]] = field(default_factory=dict)
    resolved_seen: Set[int] = field(default_factory=set)

    def record_proposal(self, key: ProposalKey, turn: int) -> None:
        self.last_proposed[key] = turn

    def record_decline(self, key: ProposalKey) -> int:
        count = self.proposal_declines.get(key, 0) + 1
        self.proposal_declines[key] = count
        return count

    def record_acceptance(self, key: ProposalKey) -> None:
        self.proposal_declines.pop(key, None)

    def declines(self, key: ProposalKey) -> int:
        return self.proposal_declines.get(key, 0)

    def has_given_up(self, key: ProposalKey, profile: DifficultyProfile) -> bool:
        return self.declines(key) >= profile.give_up_after

    def can_propose(self, key: ProposalKey, turn: int, profile: DifficultyProfile) -> bool:
        if self.has_given_up(key, profile):
            return False
        last = self.last_proposed.get(key)
        if last is None:
            return True
        wait = max(_cooldown(self.declines(key), profile), 1)
        return turn - last >= wait

    def record_incoming_decline(self, offer_hash: str, turn: int) -> None:
        count, _ = self.incoming_declines.get(offer_hash, (0, turn))
        self.incoming_declines[offer_hash] = (count + 1, turn)

    def should_auto_decline(self, offer_hash: str, turn: int, profile: DifficultyProfile) -> bool:
        """An offer we already turned down twice is declined unread until its cooldown runs out."""
        count, last = self.incoming_declines.get(offer_hash, (0, 0))
        if count < 2:
            return False
        return turn - last < _cooldown(count, profile)

    def forget(self, visible_trade_ids: Set[int], turn: int, profile: DifficultyProfile) -> None:
        """
        Drop outcomes of trades that have left the trade history, and
        incoming declines older than the longest cooldown.
        """
        self.resolved_seen &= visible_trade_ids
        expired = [
            offer_hash
            for offer_hash, (_, last) in self.incoming_declines.items()
            if turn - last >= profile.proposal_cooldown_cap
        ]
        for offer_hash in expired:
            del self.incoming_declines[offer_hash]


def generate_counter_offer(
    view: BoardView,
    trade: TradeView,
    evaluation: TradeEvaluation,
    profile: DifficultyProfile,
) -> Optional[TradeProposal]:
    """
    Answer a near-miss offer with the same swap plus the cash that would
    make it acceptable.

    No counter is made when the offer is hopeless, already acceptable, or
    would hand the proposer a monopoly, nor when the extra cash is more
    than the proposer holds.
    """
    if not profile.counter_offers or evaluation.accept or evaluation.gives_monopoly:
        return None
    if not math.isfinite(evaluation.required_ratio):
        return None
    if evaluation.ratio < evaluation.required_ratio * profile.counter_floor:
        return None

    if evaluation.cash_only:
        needed = evaluation.required_ratio * evaluation.given_value - trade.offer.cash
    else:
        needed = evaluation.required_ratio * evaluation.given_value - evaluation.received_value
    extra = _round_up(needed)
    if extra <= 0:
        return None

    asked_cash = trade.offer.cash + extra
    if asked_cash > view.cash_of(trade.proposer_id):
        logger.debug(f"P{view.player_id}: counter to trade {trade.trade_id} would need £{asked_cash}, too much")
        return None

    return TradeProposal(
        recipient_id=trade.proposer_id,
        offer=TradeOffer.of(trade.request.cash, trade.request.properties, trade.request.jail_cards),
        request=TradeOffer.of(asked_cash, trade.offer.properties, trade.offer.jail_cards),
    )


def _swap_candidate(view: BoardView, owner_id: int, target_color: str) -> Optional[int]:
    """
    A property of ours that moves `owner_id` toward one of their own groups,
    preferring one that completes it.
    """
    best = None
    best_rank = None
    their_one_away = view.one_away_groups(owner_id)
    for pos in view.owned_by(view.player_id):
        space = view.space(pos)
        color = space.color_group
        if not color or color == target_color or space.is_mortgaged or view.group_has_buildings(color):
            continue
        if view.owns_group(view.player_id, color):
            continue
        if view.group_progress(owner_id, color) == 0:
            continue
        rank = (their_one_away.get(color) == pos, view.group_progress(owner_id, color), -base_value(view, pos))
        if best_rank is None or rank > best_rank:
            best, best_rank = pos, rank
    return best


def find_trade_proposal(
    view: BoardView,
    memory: NegotiationMemory,
    profile: DifficultyProfile,
) -> Optional[TradeProposal]:
    """
    Try to buy the last property of a colour group we are one short of.

    Offers a property swap that helps the owner toward their own group when
    one exists, topped up with cash if needed; otherwise a cash price at a
    premium that grows with every decline of the same request.
    """
    if not profile.proactive_trading:
        return None

    turn = view.state.turn_number
    me = view.me
    reserve = cash_reserve(view, profile)
    targets = sorted(
        view.one_away_groups(view.player_id).items(),
        key=lambda item: COLOR_RANKING.get(item[0], 0),
        reverse=True,
    )

    for color, missing in targets:
        space = view.space(missing)
        owner_id = space.owner_id
        if owner_id is None or owner_id == view.player_id:
            continue
        owner = view.player(owner_id)
        if owner is None or owner.is_bankrupt or view.group_has_buildings(color):
            continue
        key = proposal_key(owner_id, [missing])
        if not memory.can_propose(key, turn, profile):
            continue

        wanted = base_value(view, missing)
        request = TradeOffer.of(properties=[missing])

        swap = _swap_candidate(view, owner_id, color)
        if swap is not None:
            swap_value = base_value(view, swap)
            top_up = _round_up(max(0, wanted - swap_value))
            if me.cash - top_up < reserve:
                top_up = 0
            if swap_value + top_up >= wanted * SWAP_MINIMUM_SHARE:
                logger.info(
                    f"P{view.player_id}: offering {view.space(swap).name} + £{top_up} "
                    f"to P{owner_id} for {space.name}"
                )
                return TradeProposal(owner_id, TradeOffer.of(top_up, [swap]), request)

        premium = min(PREMIUM_START + PREMIUM_STEP * memory.declines(key), profile.premium_cap)
        cash = _round_up(wanted * premium)
        if me.cash - cash < reserve:
            continue
        logger.info(f"P{view.player_id}: offering £{cash} to P{owner_id} for {space.name} (premium {premium:.1f})")
        return TradeProposal(owner_id, TradeOffer.of(cash), request)

    return None
