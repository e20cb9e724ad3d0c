"""
Bot seat: connects a DecisionAgent to a notification stream and a command sink.

The seat consumes notifications in order, always keeps the latest one,
and submits each command after a human-like pause. Each command is decided
once, when its state arrives, and is dropped if a newer state changes what
it depends on before the pause ends.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Hashable, Optional

from tycoon.agents.base import Agent
from tycoon.agents.bot import DecisionAgent
from tycoon.agents.profiles import get_profile
from tycoon.agents.scheduler import ActionScheduler
from tycoon.game.rules import Command, CommandResult
from tycoon.schemas import PublicGameState
from tycoon.settings import BotSettings, get_bot_settings

logger = logging.getLogger(__name__)

Submit = Callable[[Command], Awaitable[CommandResult]]


def context_key(state: PublicGameState, player_id: int) -> Hashable:
    """
    The parts of a state a scheduled command depends on. A change in any of
    them makes a waiting command stale.
    """
    auction = state.auction
    pending = state.pending_action
    me = state.player(player_id)
    return (
        state.turn_number,
        state.current_player_id,
        state.dice_rolled,
        state.can_roll_again,
        (auction.auction_id, auction.current_bid, auction.highest_bidder, tuple(auction.passed)) if auction else None,
        (pending.action_type, pending.player_id, pending.position, pending.amount) if pending else None,
        tuple(t.trade_id for t in state.pending_trades),
        (me.cash, me.debt.amount if me.debt else 0, me.in_jail) if me else None,
    )


class BotSeat:
    """
    One bot at the table.

    Args:
        agent: The agent making decisions for this seat.
        submit: Coroutine that hands a command to the engine.
        delay_scale: Multiplier on the profile's think time; 0 acts immediately.
        rng: Random source for think times.
        max_retries: Rejected commands retried on the same state before giving up.
    """

    def __init__(
        self,
        agent: Agent,
        submit: Submit,
        delay_scale: Optional[float] = None,
        rng: Optional[random.Random] = None,
        max_retries: int = 3,
    ):
        self.agent = agent
        self.submit = submit
        self.delay_scale = get_bot_settings().delay_scale if delay_scale is None else delay_scale
        self.rng = rng if rng is not None else random.Random(agent.player_id)
        self.max_retries = max_retries
        self.latest: Optional[PublicGameState] = None
        self.scheduler = ActionScheduler(self._latest_context)
        self._rejections = 0

    @classmethod
    def from_settings(
        cls, player_id: int, name: str, submit: Submit, settings: Optional[BotSettings] = None
    ) -> "BotSeat":
        """Build a seat whose difficulty, pacing and seed come from BOT_* settings."""
        settings = settings or get_bot_settings()
        seed = None if settings.seed is None else settings.seed + player_id
        agent = DecisionAgent(player_id, name, profile=get_profile(settings.difficulty), rng=random.Random(seed))
        return cls(agent, submit, delay_scale=settings.delay_scale, rng=random.Random(seed))

    @property
    def player_id(self) -> int:
        return self.agent.player_id

    def _latest_context(self) -> Hashable:
        if self.latest is None:
            return None
        return context_key(self.latest, self.player_id)

    def _think_time(self) -> float:
        profile = getattr(self.agent, "profile", None)
        low, high = profile.think_time if profile is not None else (0.0, 0.0)
        return self.rng.uniform(low, high) * self.delay_scale

    async def run(self, notifications: asyncio.Queue) -> None:
        """Consume notifications until the game ends or a None sentinel arrives."""
        try:
            while True:
                state = await notifications.get()
                if state is None:
                    break
                self.on_state(state)
                if state.game_over:
                    break
        finally:
            self.scheduler.cancel()

    def on_state(self, state: PublicGameState) -> None:
        self.latest = state
        if state.game_over:
            self.scheduler.cancel()
            return

        if self.scheduler.pending_context == context_key(state, self.player_id):
            return
        self._rejections = 0
        self._schedule(state)

    def _schedule(self, state: PublicGameState) -> None:
        command = self.agent.decide(state)
        if command is None:
            self.scheduler.cancel()
            return
        self.scheduler.schedule(
            self._think_time(), context_key(state, self.player_id), lambda: self._act(state, command)
        )

    async def _act(self, state: PublicGameState, command: Command) -> None:
        result = await self.submit(command)
        if result.accepted:
            self.agent.commit(command, state)
            return

        self.agent.reject(command, result.reason)
        self._rejections += 1
        if self._rejections >= self.max_retries:
            logger.warning(f"{self.agent.name}: giving up after {self._rejections} rejected commands")
            return
        if self.latest is state:
            self._schedule(state)
