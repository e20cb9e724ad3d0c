"""Cancellable delayed actions for bot seats."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Hashable, Optional

logger = logging.getLogger(__name__)


class ActionScheduler:
    """
    Runs at most one delayed action at a time.

    Every `schedule` or `cancel` bumps a monotonically increasing token. A
    timer only runs its action if its token is still the latest one and the
    context it was scheduled for (an auction round, a pending decision) is
    still the current context; otherwise it does nothing.
    """

    def __init__(self, current_context: Callable[[], Hashable]):
        """
        Args:
            current_context: Returns the context key of the latest known state.
        """
        self._current_context = current_context
        self._token = 0
        self._task: Optional[asyncio.Task] = None
        self._context: Optional[Hashable] = None
        self.fired = 0
        self.stale = 0

    @property
    def token(self) -> int:
        return self._token

    @property
    def pending_context(self) -> Optional[Hashable]:
        """Context of the timer still waiting to fire, if any."""
        if self._task is None or self._task.done():
            return None
        return self._context

    def schedule(self, delay: float, context: Hashable, action: Callable[[], Any]) -> int:
        """Replace any waiting timer with one that runs `action` after `delay` seconds."""
        self._token += 1
        token = self._token
        self._stop_waiting()
        self._context = context
        self._task = asyncio.get_running_loop().create_task(self._fire(token, delay, context, action))
        return token

    def cancel(self) -> None:
        self._token += 1
        self._context = None
        self._stop_waiting()
        self._task = None

    def _stop_waiting(self) -> None:
        # An action may reschedule from inside its own timer task
        if self._task is not None and not self._task.done() and self._task is not asyncio.current_task():
            self._task.cancel()

    def is_current(self, token: int, context: Hashable) -> bool:
        return token == self._token and context == self._current_context()

    async def _fire(self, token: int, delay: float, context: Hashable, action: Callable[[], Any]) -> bool:
        await asyncio.sleep(delay)
        if not self.is_current(token, context):
            self.stale += 1
            logger.debug(f"Dropping stale action (token {token}, latest {self._token})")
            return False
        self.fired += 1
        self._context = None
        result = action()
        if inspect.isawaitable(result):
            await result
        return True
