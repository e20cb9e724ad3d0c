"""Decision agent that plays a seat from broadcast state only."""

import logging
import random
from typing import List, Optional, Set

from tycoon.agents.auction_model import decide_bid
from tycoon.agents.base import Agent
from tycoon.agents.negotiation import (
    NegotiationMemory,
    TradeProposal,
    find_trade_proposal,
    generate_counter_offer,
    proposal_key,
    trade_hash,
)
from tycoon.agents.profiles import Difficulty, DifficultyProfile, get_profile
from tycoon.agents.valuation import (
    cash_reserve,
    evaluate_trade,
    score_purchase,
    should_buy,
    unmortgage_cost,
)
from tycoon.agents.view import COLOR_RANKING, RAILROAD, BoardView, GamePhase
from tycoon.game.rules import Command, CommandType
from tycoon.schemas import PublicGameState, TradeView

logger = logging.getLogger(__name__)

BUY_OR_AUCTION = "buy_or_auction"
FUNDS_ACTIONS = ("must_raise_funds", "must_pay_or_bankrupt")


class DecisionAgent(Agent):
    """
    Rule-based bot tuned by a difficulty profile.

    The agent reads nothing but the state notification and answers with at
    most one command per call. Besides its own turn it answers auctions,
    incoming trades and debts, which can all need it out of turn.
    """

    def __init__(
        self,
        player_id: int,
        name: str,
        profile: Optional[DifficultyProfile] = None,
        difficulty: Difficulty = Difficulty.MEDIUM,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the decision agent.

        Args:
            player_id: The seat's player id.
            name: The player's display name.
            profile: Explicit tuning; defaults to the profile of `difficulty`.
            difficulty: Tier used when no profile is given.
            rng: Random source for bidding and purchase noise.
        """
        super().__init__(player_id, name)
        self.profile = profile if profile is not None else get_profile(difficulty)
        self.rng = rng if rng is not None else random.Random(player_id)
        self.memory = NegotiationMemory()

        self.queued_proposal: Optional[TradeProposal] = None
        self._turn_marker: Optional[int] = None
        self._turn_start_cash = 0
        self._builds_this_turn = 0
        self._build_spent = 0
        self._proposal_turn: Optional[int] = None
        # Incoming trades the engine refused to carry out
        self._refused_trades: Set[int] = set()

    # === OBSERVATION ===

    def observe(self, state: PublicGameState) -> None:
        """Update per-turn counters and learn the outcome of our own proposals."""
        if state.current_player_id == self.player_id and state.turn_number != self._turn_marker:
            me = state.player(self.player_id)
            self._turn_marker = state.turn_number
            self._turn_start_cash = me.cash if me else 0
            self._builds_this_turn = 0
            self._build_spent = 0

        for trade in state.recent_trades:
            if trade.proposer_id != self.player_id or trade.trade_id in self.memory.resolved_seen:
                continue
            self.memory.resolved_seen.add(trade.trade_id)
            key = proposal_key(trade.recipient_id, trade.request.properties)
            if trade.status == "declined":
                count = self.memory.record_decline(key)
                logger.info(f"{self.name}: trade {trade.trade_id} declined ({count} so far)")
            elif trade.status == "accepted":
                self.memory.record_acceptance(key)

        self.memory.forget({t.trade_id for t in state.recent_trades}, state.turn_number, self.profile)
        self._refused_trades &= {t.trade_id for t in state.pending_trades}

    # === DECISION ===

    def decide(self, state: PublicGameState) -> Optional[Command]:
        """
        Choose the next command.

        Priority order:
        1. Bid or pass in a running auction
        2. Answer trades addressed to us
        3. Raise money while in debt (also out of turn)
        4. Send a queued counter-offer
        5. On our own turn: pending purchase, jail, one trade proposal
           before rolling, roll, unmortgage, build, end turn
        """
        if state.game_over:
            return None
        me = state.player(self.player_id)
        if me is None or me.is_bankrupt:
            return None

        self.observe(state)
        view = BoardView(state, self.player_id)

        for step in (self._auction_command, self._trade_response, self._liquidation_command, self._counter_command):
            command = step(view)
            if command is not None:
                return command

        if state.current_player_id != self.player_id or state.auction is not None:
            return None

        pending = state.pending_action
        if pending is not None and pending.player_id == self.player_id:
            if pending.action_type == BUY_OR_AUCTION:
                return self._purchase_command(view, pending.position)
            return None

        if me.in_jail and not state.dice_rolled:
            return self._jail_command(view)

        if not state.dice_rolled:
            command = self._proposal_command(view)
            if command is not None:
                return command

        if not state.dice_rolled or state.can_roll_again:
            return self._command(CommandType.ROLL)

        for step in (self._unmortgage_command, self._build_command):
            command = step(view)
            if command is not None:
                return command

        return self._command(CommandType.END_TURN)

    def _command(self, command_type: CommandType, **params) -> Command:
        return Command(command_type, self.player_id, **params)

    # --- auctions ---

    def _auction_command(self, view: BoardView) -> Optional[Command]:
        auction = view.state.auction
        if auction is None or self.player_id not in auction.remaining_bidders:
            return None
        if auction.highest_bidder == self.player_id:
            return None

        decision = decide_bid(view, auction, self.profile, self.rng)
        if decision.is_pass:
            logger.debug(f"{self.name}: passing on {auction.property_name}: {decision.reason}")
            return self._command(CommandType.PASS_BID)
        logger.debug(f"{self.name}: bidding £{decision.amount} on {auction.property_name} ({decision.reason})")
        return self._command(CommandType.PLACE_BID, amount=decision.amount)

    # --- trades ---

    def _incoming_trades(self, state: PublicGameState) -> List[TradeView]:
        return [t for t in state.pending_trades if t.recipient_id == self.player_id]

    def _trade_response(self, view: BoardView) -> Optional[Command]:
        state = view.state
        for trade in self._incoming_trades(state):
            if self.memory.should_auto_decline(trade_hash(trade), state.turn_number, self.profile):
                logger.debug(f"{self.name}: declining repeated offer {trade.trade_id}")
                return self._command(CommandType.DECLINE_TRADE, trade_id=trade.trade_id)

            if trade.trade_id in self._refused_trades or not self._trade_executable(view, trade):
                logger.info(f"{self.name}: declining trade {trade.trade_id}, it can no longer be carried out")
                return self._command(CommandType.DECLINE_TRADE, trade_id=trade.trade_id)

            evaluation = evaluate_trade(view, trade.offer, trade.request, trade.proposer_id, self.profile)
            if evaluation.accept:
                if state.auction is not None:
                    continue
                logger.info(
                    f"{self.name}: accepting trade {trade.trade_id} "
                    f"(ratio {evaluation.ratio:.2f} >= {evaluation.required_ratio:.2f}, {evaluation.reason})"
                )
                return self._command(CommandType.ACCEPT_TRADE, trade_id=trade.trade_id)

            logger.info(
                f"{self.name}: declining trade {trade.trade_id} "
                f"(ratio {evaluation.ratio:.2f} < {evaluation.required_ratio:.2f}, {evaluation.reason})"
            )
            return self._command(CommandType.DECLINE_TRADE, trade_id=trade.trade_id)

        # Withdraw our own proposals nobody has answered
        for trade in state.pending_trades:
            if trade.proposer_id == self.player_id and (
                state.turn_number - trade.created_turn >= self.profile.proposal_cooldown_turns * 2
            ):
                return self._command(CommandType.DECLINE_TRADE, trade_id=trade.trade_id)
        return None

    def _trade_executable(self, view: BoardView, trade: TradeView) -> bool:
        """Both sides still hold what they would hand over, with no buildings in the way."""
        for player_id, side in ((trade.proposer_id, trade.offer), (trade.recipient_id, trade.request)):
            player = view.player(player_id)
            if player is None or player.is_bankrupt:
                return False
            if player.cash < side.cash or player.jail_cards < side.jail_cards:
                return False
            for pos in side.properties:
                space = view.space(pos)
                if space.owner_id != player_id or view.group_has_buildings(space.color_group):
                    return False
        return True

    def _counter_command(self, view: BoardView) -> Optional[Command]:
        proposal = self.queued_proposal
        if proposal is None or view.state.auction is not None:
            return None
        if not self._proposal_still_valid(view, proposal):
            self.queued_proposal = None
            return None
        return self._proposal_to_command(proposal)

    def _proposal_still_valid(self, view: BoardView, proposal: TradeProposal) -> bool:
        recipient = view.player(proposal.recipient_id)
        if recipient is None or recipient.is_bankrupt:
            return False
        if view.me.cash < proposal.offer.cash:
            return False
        if any(view.space(pos).owner_id != self.player_id for pos in proposal.offer.properties):
            return False
        return all(view.space(pos).owner_id == proposal.recipient_id for pos in proposal.request.properties)

    def _proposal_command(self, view: BoardView) -> Optional[Command]:
        state = view.state
        if self._proposal_turn == state.turn_number:
            return None
        if any(t.proposer_id == self.player_id for t in state.pending_trades):
            return None
        proposal = find_trade_proposal(view, self.memory, self.profile)
        if proposal is None:
            return None
        return self._proposal_to_command(proposal)

    def _proposal_to_command(self, proposal: TradeProposal) -> Command:
        return self._command(
            CommandType.PROPOSE_TRADE,
            recipient_id=proposal.recipient_id,
            offer=proposal.offer,
            request=proposal.request,
        )

    # --- money trouble ---

    def _liquidation_command(self, view: BoardView) -> Optional[Command]:
        """
        Raise money while cash is negative or a debt is open.

        Sells buildings from the weakest colour group first, then mortgages
        the least strategic property. Bankruptcy is declared only on our own
        turn, once nothing is left to sell or mortgage.
        """
        state = view.state
        me = view.me
        shortfall = max(0, -me.cash) + (me.debt.amount if me.debt else 0)
        if shortfall == 0:
            return None

        position = self._building_to_sell(view)
        if position is not None:
            logger.info(f"{self.name}: selling a building on {view.space(position).name} to cover £{shortfall}")
            return self._command(CommandType.SELL_HOUSE, position=position)

        position = self._property_to_mortgage(view)
        if position is not None:
            logger.info(f"{self.name}: mortgaging {view.space(position).name} to cover £{shortfall}")
            return self._command(CommandType.MORTGAGE_PROPERTY, position=position)

        pending = state.pending_action
        if (
            state.current_player_id == self.player_id
            and pending is not None
            and pending.player_id == self.player_id
            and pending.action_type in FUNDS_ACTIONS
        ):
            logger.info(f"{self.name}: nothing left to raise £{shortfall}, declaring bankruptcy")
            return self._command(CommandType.DECLARE_BANKRUPTCY)
        return None

    def _building_to_sell(self, view: BoardView) -> Optional[int]:
        colors = sorted(view.monopolies(self.player_id), key=lambda c: COLOR_RANKING.get(c, 0))
        for color in colors:
            group = view.groups[color]
            tallest = max(view.space(pos).houses for pos in group)
            if tallest == 0:
                continue
            if tallest == 5 and view.state.houses_available < 4:
                continue
            return next(pos for pos in group if view.space(pos).houses == tallest)
        return None

    def _mortgage_priority(self, view: BoardView, position: int) -> float:
        """Low scores are mortgaged first."""
        space = view.space(position)
        score = (space.price or 0) / 400
        if view.blocks_opponent(position):
            score += 0.5
        if space.color_group:
            score += view.group_progress(self.player_id, space.color_group) * 0.5
            score += COLOR_RANKING.get(space.color_group, 0) * 0.02
        elif space.kind == RAILROAD:
            score += 0.1 * view.count_kind(self.player_id, RAILROAD)
        return score

    def _property_to_mortgage(self, view: BoardView) -> Optional[int]:
        candidates = [
            pos
            for pos in view.owned_by(self.player_id)
            if not view.space(pos).is_mortgaged and not view.group_has_buildings(view.space(pos).color_group)
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda pos: (self._mortgage_priority(view, pos), pos))

    # --- own turn ---

    def _purchase_command(self, view: BoardView, position: int) -> Command:
        space = view.space(position)
        if should_buy(view, position, self.profile, self.rng):
            logger.info(f"{self.name}: buying {space.name} for £{space.price}")
            return self._command(CommandType.BUY_PROPERTY)
        logger.info(
            f"{self.name}: declining {space.name} "
            f"(score {score_purchase(view, position, self.profile):.2f}, cash £{view.me.cash})"
        )
        return self._command(CommandType.DECLINE_PROPERTY)

    def _jail_command(self, view: BoardView) -> Command:
        """Card first; in the late game stay inside; pay when rich early on; otherwise try for doubles."""
        me = view.me
        rules = view.state.rules
        if me.jail_cards > 0:
            return self._command(CommandType.USE_JAIL_CARD)
        if (
            self.profile.stay_in_jail_late
            and view.phase() == GamePhase.LATE
            and me.jail_turns < rules.max_jail_turns - 1
        ):
            return self._command(CommandType.ROLL)
        if me.cash > self.profile.jail_fine_threshold and me.jail_turns < 2 and me.cash >= rules.jail_fine:
            return self._command(CommandType.PAY_JAIL_FINE)
        return self._command(CommandType.ROLL)

    def _unmortgage_command(self, view: BoardView) -> Optional[Command]:
        reserve = cash_reserve(view, self.profile)
        mortgaged = [pos for pos in view.owned_by(self.player_id) if view.space(pos).is_mortgaged]

        def priority(pos):
            color = view.space(pos).color_group
            in_monopoly = bool(color) and view.owns_group(self.player_id, color)
            return (in_monopoly, COLOR_RANKING.get(color, 0) if color else 0, pos)

        for pos in sorted(mortgaged, key=priority, reverse=True):
            cost = unmortgage_cost(view, pos)
            if view.me.cash - cost >= reserve * 1.5:
                logger.debug(f"{self.name}: unmortgaging {view.space(pos).name} for £{cost}")
                return self._command(CommandType.UNMORTGAGE_PROPERTY, position=pos)
        return None

    def _build_command(self, view: BoardView) -> Optional[Command]:
        """Build on the best monopoly first, always on a lowest property of the group."""
        if self._builds_this_turn >= self.profile.max_builds_per_turn:
            return None
        budget = self._turn_start_cash * self.profile.build_budget_fraction - self._build_spent
        reserve = cash_reserve(view, self.profile)
        state = view.state

        colors = sorted(view.monopolies(self.player_id), key=lambda c: COLOR_RANKING.get(c, 0), reverse=True)
        for color in colors:
            group = view.groups[color]
            if any(view.space(pos).is_mortgaged for pos in group):
                continue
            lowest = min(view.space(pos).houses for pos in group)
            if lowest >= 5:
                continue
            if lowest == 4 and state.hotels_available < 1:
                continue
            if lowest < 4 and state.houses_available < 1:
                continue
            position = max(
                (pos for pos in group if view.space(pos).houses == lowest),
                key=lambda pos: (view.space(pos).price or 0, pos),
            )
            cost = view.space(position).house_cost or 0
            if cost > budget or view.me.cash - cost < reserve:
                continue
            return self._command(CommandType.BUILD_HOUSE, position=position)
        return None

    # === FEEDBACK ===

    def commit(self, command: Command, state: PublicGameState) -> None:
        ctype = command.command_type
        turn = state.turn_number

        if ctype == CommandType.BUILD_HOUSE:
            self._builds_this_turn += 1
            self._build_spent += state.space(command.position).house_cost or 0

        elif ctype == CommandType.PROPOSE_TRADE:
            self.memory.record_proposal(proposal_key(command.recipient_id, command.request.properties), turn)
            if state.current_player_id == self.player_id:
                self._proposal_turn = turn
            self.queued_proposal = None

        elif ctype == CommandType.DECLINE_TRADE:
            trade = next((t for t in state.pending_trades if t.trade_id == command.trade_id), None)
            if trade is None or trade.recipient_id != self.player_id:
                return
            offer_hash = trade_hash(trade)
            repeated = self.memory.should_auto_decline(offer_hash, turn, self.profile)
            self.memory.record_incoming_decline(offer_hash, turn)
            if repeated:
                return
            view = BoardView(state, self.player_id)
            evaluation = evaluate_trade(view, trade.offer, trade.request, trade.proposer_id, self.profile)
            counter = generate_counter_offer(view, trade, evaluation, self.profile)
            if counter is not None and not self.memory.can_propose(counter.key, turn, self.profile):
                counter = None
            if counter is not None:
                logger.info(f"{self.name}: countering trade {trade.trade_id} asking £{counter.request.cash}")
            self.queued_proposal = counter

    def reject(self, command: Command, reason: str) -> None:
        logger.debug(f"{self.name}: {command!r} rejected: {reason}")
        if command.command_type == CommandType.PROPOSE_TRADE:
            self.queued_proposal = None
            self._proposal_turn = self._turn_marker
        elif command.command_type == CommandType.ACCEPT_TRADE:
            self._refused_trades.add(command.trade_id)
