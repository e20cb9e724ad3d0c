from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Callable, Dict, List, Optional, Set

from tycoon.agents.base import Agent
from tycoon.agents.seat import BotSeat
from tycoon.game.game import GameState
from tycoon.game.rules import Command, CommandResult, apply_command
from tycoon.schemas import PublicGameState
from tycoon.settings import SupervisorSettings, get_supervisor_settings
from tycoon.snapshot import build_public_state

logger = logging.getLogger(__name__)


class GameSupervisor:
    """Owns a single GameState and serializes everything that touches it.

    Responsibilities:
    - Apply commands one at a time under a lock
    - Broadcast one state notification per accepted command
    - Host bot seats
    - Skip unresponsive turns and settle stalled auctions
    """

    def __init__(self, game: GameState, settings: Optional[SupervisorSettings] = None):
        self.game = game
        self.settings = settings or get_supervisor_settings()
        self._lock = asyncio.Lock()
        self._clients: Set[asyncio.Queue] = set()  # one queue of notifications per subscriber
        self._seats: List[BotSeat] = []
        self._tasks: List[asyncio.Task] = []
        self._watchdog: Optional[asyncio.Task] = None
        self._finished = asyncio.Event()
        self._last_progress = time.monotonic()

    def public_state(self) -> PublicGameState:
        return build_public_state(self.game)

    # Subscription management
    def subscribe(self) -> asyncio.Queue:
        """Queue of notifications, primed with the current state."""
        q: asyncio.Queue = asyncio.Queue()
        q.put_nowait(self.public_state())
        self._clients.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        self._clients.discard(q)

    def _broadcast(self) -> None:
        state = self.public_state()
        for q in list(self._clients):
            q.put_nowait(state)
        if self.game.game_over:
            self._finished.set()

    def _touch(self) -> None:
        self._last_progress = time.monotonic()

    async def submit(self, command: Command) -> CommandResult:
        """Apply a command from any seat. Rejections change nothing and broadcast nothing."""
        async with self._lock:
            result = apply_command(self.game, command)
            if result.accepted:
                self._touch()
                self._broadcast()
            else:
                logger.debug(f"Rejected {command!r}: {result.reason}")
            return result

    # Bots
    def add_bot(
        self,
        agent: Agent,
        delay_scale: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ) -> BotSeat:
        """Seat a bot. Must be called from within the running event loop."""
        seat = BotSeat(agent, self.submit, delay_scale=delay_scale, rng=rng)
        queue = self.subscribe()
        self._seats.append(seat)
        self._tasks.append(asyncio.create_task(seat.run(queue)))
        return seat

    # Lifecycle
    async def start(self) -> None:
        self._touch()
        self._watchdog = asyncio.create_task(self._watch())

    async def stop(self) -> None:
        tasks = list(self._tasks)
        if self._watchdog is not None:
            tasks.append(self._watchdog)
        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception) and not isinstance(result, asyncio.CancelledError):
                logger.error(f"Supervisor task failed: {result!r}")
        for q in list(self._clients):
            q.put_nowait(None)
        self._tasks.clear()
        self._watchdog = None

    async def wait_until_over(self, timeout: Optional[float] = None) -> bool:
        """Wait for the game to end; returns False if `timeout` ran out first."""
        if self.game.game_over:
            return True
        try:
            await asyncio.wait_for(self._finished.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    # Liveness
    async def _watch(self) -> None:
        while not self.game.game_over:
            await asyncio.sleep(self.settings.watchdog_interval_seconds)
            await self.check_timeouts()

    async def check_timeouts(self, now: Optional[float] = None) -> bool:
        """
        Settle an auction or skip a turn that has been idle too long.
        Returns True when something was forced.
        """
        async with self._lock:
            if self.game.game_over:
                return False
            idle = (now if now is not None else time.monotonic()) - self._last_progress
            if self.game.active_auction is not None:
                if idle < self.settings.auction_timeout_seconds:
                    return False
                self.game.settle_auction("timed out")
            elif idle >= self.settings.turn_timeout_seconds:
                self.game.force_end_turn("timed out")
            else:
                return False
            self._touch()
            self._broadcast()
            return True


def _actors(game: GameState) -> List[int]:
    """Seats that may need to act, in the order the protocol asks them."""
    order: List[int] = []
    if game.active_auction is not None:
        order.extend(game.active_auction.remaining_bidders)
    for trade in game.trade_manager.pending():
        order.append(trade.recipient_id)
        order.append(trade.proposer_id)
    order.extend(p.player_id for p in game.get_active_players() if p.shortfall > 0)
    order.append(game.current_player_id)

    seen = set()
    actors = []
    for pid in order:
        if pid in seen or game.players[pid].is_bankrupt:
            continue
        seen.add(pid)
        actors.append(pid)
    return actors


def play_headless(
    game: GameState,
    agents: Dict[int, Agent],
    max_commands: int = 5000,
    on_step: Optional[Callable[[GameState], None]] = None,
) -> int:
    """
    Drive a game synchronously with no delays.

    Each round asks the seats that may act, in protocol order, until one
    command is accepted. When nobody moves, the auction is settled or the
    turn is skipped, exactly as the supervisor's timeouts would.

    Args:
        game: Game to drive
        agents: Agent per player id; seats without one never act
        max_commands: Upper bound on accepted commands plus forced skips
        on_step: Called after every state change

    Returns:
        Number of accepted commands
    """
    applied = 0
    forced = 0
    while not game.game_over and applied + forced < max_commands:
        state = build_public_state(game)
        progressed = False
        for pid in _actors(game):
            agent = agents.get(pid)
            if agent is None:
                continue
            command = agent.decide(state)
            if command is None:
                continue
            result = apply_command(game, command)
            if result.accepted:
                agent.commit(command, state)
                applied += 1
                progressed = True
                break
            agent.reject(command, result.reason)

        if not progressed:
            forced += 1
            if game.active_auction is not None:
                game.settle_auction("stalled")
            else:
                game.force_end_turn("stalled")
        if on_step is not None:
            on_step(game)

    logger.info(f"Headless game stopped after {applied} commands ({forced} forced), winner: {game.winner_id}")
    return applied
