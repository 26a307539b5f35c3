"""
Player name directory for highscore display rows.

Resolves participant ids to usernames from the players table, keeping
resolved names in memory.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from highscores.database.models import Player

logger = logging.getLogger(__name__)


def fallback_name(player_id: int) -> str:
    return f"#{player_id}"


class PlayerDirectory:
    """Participant id -> display name lookups with an in-memory cache."""

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._names: Dict[int, str] = {}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        # Registrations commit on exit; lookups have nothing to flush
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def load(self):
        """Load every known username into memory."""
        async with self._session() as session:
            result = await session.execute(select(Player.id, Player.username))
            names = {player_id: username for player_id, username in result.all()}

        async with self._lock:
            self._names = names
        logger.info(f"Loaded {len(names)} player names")

    async def resolve(self, player_id: int) -> str:
        """
        Get the display name for a participant id.

        Unknown ids resolve to "#<id>" so a board can always be rendered.
        """
        async with self._lock:
            name = self._names.get(player_id)
        if name is not None:
            return name

        async with self._session() as session:
            player = await session.get(Player, player_id)

        if player is None:
            logger.debug(f"No player record for id {player_id}, using fallback name")
            return fallback_name(player_id)

        async with self._lock:
            self._names[player_id] = player.username
        return player.username

    async def resolve_many(self, player_ids: Iterable[int]) -> List[str]:
        """Resolve several ids, keeping their order."""
        return [await self.resolve(player_id) for player_id in player_ids]

    async def register(self, player_id: int, username: str) -> None:
        """Create or rename a player and update the cached name."""
        async with self._session() as session:
            player = await session.get(Player, player_id)
            if player:
                player.username = username
            else:
                session.add(Player(id=player_id, username=username))

        async with self._lock:
            self._names[player_id] = username
        logger.debug(f"Registered player {player_id} as '{username}'")
