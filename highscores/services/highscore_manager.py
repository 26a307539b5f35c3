"""
Highscore manager: entry cache, board queries and midnight housekeeping.

Keeps every recorded highscore entry in memory, keyed by item id, and builds
ranked boards from it on request. Storage is only touched on load and append.

Consistency notes:
- All cache access goes through one asyncio.Lock.
- load() holds the lock for the whole rebuild, so queries and appends wait
  for the fresh cache instead of seeing a partial one. The midnight timer is
  armed before the lock is released, and dispose() cancels it under the lock.
- append() updates the cache under the lock and persists after releasing it.
  A failed write is reported but the cached entry stays, so the cache can be
  ahead of storage until the next reload.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Union

from highscores.data_models.highscore import ClearType, LeaderboardRow, ScoreEntry, ScoreType
from highscores.services.midnight_scheduler import MidnightScheduler
from highscores.utils.highscore_exceptions import HighscoreException, StorageReadError, StorageWriteError
from highscores.utils.scoring_strategies import ScoringStrategyFactory
from highscores.utils.time_windows import HighscoreWindowCalculator

logger = logging.getLogger(__name__)

ErrorSink = Callable[[str, HighscoreException], None]
MidnightListener = Callable[[List[int]], Awaitable[None]]


def log_error_sink(operation: str, error: HighscoreException):
    """Default error sink: log storage failures with their cause."""
    logger.error(f"Highscore {operation} failed: {error}", exc_info=error.__cause__ or error)


class HighscoreManager:
    """Owns the highscore cache and answers board queries."""

    def __init__(
        self,
        storage,
        name_resolver,
        calculator: Optional[HighscoreWindowCalculator] = None,
        error_sink: Optional[ErrorSink] = None
    ):
        """
        Args:
            storage: Object with async fetch_all_entries() and insert_entry(entry)
            name_resolver: Object with async resolve(player_id) -> str
            calculator: Window calculator (system local zone, Monday weeks by default)
            error_sink: Receives storage failures; logs them by default
        """
        self.storage = storage
        self.name_resolver = name_resolver
        self.calculator = calculator or HighscoreWindowCalculator()
        self.error_sink = error_sink or log_error_sink
        self._data: Dict[int, List[ScoreEntry]] = {}
        self._lock = asyncio.Lock()
        self._midnight_listeners: List[MidnightListener] = []
        self.scheduler = MidnightScheduler(self._on_midnight, self.calculator)

    async def load(self):
        """Rebuild the cache from storage and (re)arm the midnight timer."""
        started = time.time()

        async with self._lock:
            self._data = {}
            try:
                entries = await self.storage.fetch_all_entries()
            except Exception as e:
                error = StorageReadError(str(e))
                error.__cause__ = e
                self.error_sink("load", error)
                entries = []

            for entry in entries:
                self._data.setdefault(entry.object_id, []).append(entry)
            item_count = len(self._data)

            # Armed under the lock so a dispose() waiting on it always cancels last
            self.scheduler.arm()

        elapsed_ms = int((time.time() - started) * 1000)
        logger.info(f"Highscore Manager -> Loaded! ({elapsed_ms} MS, {item_count} items)")

    async def dispose(self):
        """
        Stop the midnight timer and drop the cache.

        Waits for an in-progress load() so the timer it arms is cancelled too.
        """
        self.scheduler.cancel()
        async with self._lock:
            self.scheduler.cancel()
            self._data = {}
        logger.info("Highscore Manager -> Disposed")

    async def append(self, entry: ScoreEntry) -> bool:
        """
        Record a new entry in the cache, then persist it.

        Returns:
            True if the entry was persisted, False if only the cache holds it
        """
        async with self._lock:
            self._data.setdefault(entry.object_id, []).append(entry)

        try:
            await self.storage.insert_entry(entry)
        except Exception as e:
            error = StorageWriteError(entry.object_id, str(e))
            error.__cause__ = e
            self.error_sink("append", error)
            return False
        return True

    async def get_entries(self, object_id: int) -> Optional[List[ScoreEntry]]:
        """Get a copy of the entries for an item, or None if the item is unknown."""
        async with self._lock:
            entries = self._data.get(object_id)
            return list(entries) if entries is not None else None

    async def object_ids(self) -> List[int]:
        async with self._lock:
            return list(self._data.keys())

    def add_midnight_listener(self, listener: MidnightListener):
        """Register an async callable run with the known item ids at each midnight."""
        self._midnight_listeners.append(listener)

    def remove_midnight_listener(self, listener: MidnightListener):
        if listener in self._midnight_listeners:
            self._midnight_listeners.remove(listener)

    async def query(
        self,
        object_id: int,
        clear_type: Union[ClearType, str],
        score_type: Union[ScoreType, str]
    ) -> Optional[List[LeaderboardRow]]:
        """
        Build the ranked board for an item.

        Args:
            object_id: Item the entries were recorded against
            clear_type: Time window (daily, weekly, monthly, alltime)
            score_type: Strategy (classic, perteam, mostwin)

        Returns:
            Ranked rows, best first. None if the item has never recorded an
            entry; an empty list if it has, but none qualify.
        """
        if not isinstance(clear_type, ClearType):
            clear_type = ClearType.parse(clear_type)
        strategy = ScoringStrategyFactory.create_strategy(score_type)

        entries = await self.get_entries(object_id)
        if entries is None:
            return None

        window = self.calculator.window_for(clear_type)
        qualifying = [
            entry for entry in entries
            if window.contains(entry.timestamp) and strategy.accepts(entry)
        ]

        names: Dict[int, str] = {}
        candidates = []
        for entry in qualifying:
            display_names = await self._resolve_names(entry.participant_ids, names)
            candidates.append((entry, LeaderboardRow(display_names=display_names, value=entry.score)))

        rows = strategy.reduce(candidates)
        logger.debug(
            f"Board for item {object_id} ({clear_type.value}/{strategy.get_strategy_name()}): "
            f"{len(qualifying)} of {len(entries)} entries -> {len(rows)} rows"
        )
        return rows

    async def _resolve_names(self, participant_ids: Sequence[int], names: Dict[int, str]):
        resolved = []
        for player_id in participant_ids:
            if player_id not in names:
                names[player_id] = await self.name_resolver.resolve(player_id)
            resolved.append(names[player_id])
        return tuple(resolved)

    async def _on_midnight(self):
        object_ids = await self.object_ids()
        logger.info(f"Midnight housekeeping for {len(object_ids)} highscore items")

        for listener in list(self._midnight_listeners):
            try:
                await listener(object_ids)
            except Exception as e:
                logger.error(f"Midnight listener {getattr(listener, '__name__', listener)} failed: {e}", exc_info=True)
