"""
Midnight scheduler for highscore housekeeping.

Owns a single timer on the running asyncio loop that fires at each local
midnight. After the callback finishes the scheduler rearms itself for the
following midnight.

States:
- IDLE: no timer pending
- ARMED: a timer is pending (or a firing is in progress and will rearm)
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional

from highscores.utils.time_windows import HighscoreWindowCalculator

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    ARMED = "armed"


class MidnightScheduler:
    """Self-rearming local-midnight timer with an explicit arm/cancel contract."""

    def __init__(self, callback: Callable[[], Awaitable[None]], calculator: HighscoreWindowCalculator):
        self._callback = callback
        self._calculator = calculator
        self._handle: Optional[asyncio.TimerHandle] = None
        # Bumped on every arm/cancel so stale firings can tell they were superseded
        self._generation = 0
        self._background_tasks: set = set()
        self.state = SchedulerState.IDLE
        self.next_run: Optional[int] = None

    @property
    def is_armed(self) -> bool:
        return self.state == SchedulerState.ARMED

    def arm(self, after: Optional[int] = None) -> int:
        """
        Schedule the next firing at the first local midnight after now.

        Any pending timer is cancelled first, so at most one timer exists.
        Must be called from within the running event loop.

        Args:
            after: Epoch seconds the next firing must come after. Used when
                rearming so a clock that has not quite reached midnight yet
                cannot schedule the same midnight twice.

        Returns:
            Epoch seconds of the scheduled firing
        """
        loop = asyncio.get_running_loop()
        self._cancel_timer()

        now = self._calculator.now()
        if after is not None and now.timestamp() < after:
            now = datetime.fromtimestamp(after, timezone.utc)
        target = self._calculator.next_midnight(now)
        delay = max(0.0, target - self._calculator.now().timestamp())

        self._generation += 1
        self._handle = loop.call_later(delay, self._fire, self._generation, target)
        self.next_run = target
        self.state = SchedulerState.ARMED
        logger.info(f"Midnight scheduler armed for {datetime.fromtimestamp(target, timezone.utc).isoformat()} ({delay:.0f}s)")
        return target

    def cancel(self):
        """Move to IDLE. Safe with no pending timer and during a firing."""
        self._generation += 1
        self._cancel_timer()
        self.next_run = None
        if self.state != SchedulerState.IDLE:
            logger.debug("Midnight scheduler cancelled")
        self.state = SchedulerState.IDLE

    def _cancel_timer(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, generation: int, target: int):
        if generation != self._generation:
            return
        self._handle = None
        self.next_run = None
        task = asyncio.get_running_loop().create_task(self._run(generation, target))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _run(self, generation: int, target: int):
        logger.info("Midnight scheduler fired, running housekeeping")
        try:
            await self._callback()
        except Exception as e:
            logger.error(f"Error in midnight housekeeping: {e}", exc_info=True)

        # Cancelled or re-armed while the callback ran
        if generation != self._generation:
            return
        self.arm(after=target)

    async def wait_idle(self):
        """Wait for any in-flight firing to finish."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)
