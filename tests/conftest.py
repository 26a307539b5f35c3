import asyncio
from datetime import datetime, timezone
from typing import Optional

import pytest
import pytest_asyncio
import pytz

from highscores.database.database import Database
from highscores.services.highscore_manager import HighscoreManager
from highscores.utils.time_windows import HighscoreWindowCalculator

# Wednesday afternoon, UTC
FIXED_NOW = datetime(2026, 10, 14, 15, 30, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeStorage:
    """In-memory stand-in for the highscore table."""

    def __init__(self, entries=None):
        self.entries = list(entries or [])
        self.inserted = []
        self.fail_read = False
        self.fail_write = False
        # When set, reads block until the event is set
        self.gate: Optional[asyncio.Event] = None

    async def fetch_all_entries(self):
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_read:
            raise ConnectionError("database unreachable")
        return list(self.entries)

    async def insert_entry(self, entry):
        if self.fail_write:
            raise ConnectionError("disk full")
        self.inserted.append(entry)
        self.entries.append(entry)


class FakeResolver:
    def __init__(self, names=None):
        self.names = names or {}
        self.calls = []

    async def resolve(self, player_id):
        self.calls.append(player_id)
        return self.names.get(player_id, f"user{player_id}")


class RecordingSink:
    def __init__(self):
        self.errors = []

    def __call__(self, operation, error):
        self.errors.append((operation, error))


def epoch(*args) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def calculator(clock):
    return HighscoreWindowCalculator(zone=pytz.utc, week_start=0, clock=clock)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def resolver():
    return FakeResolver({1: "alice", 2: "bob", 3: "carol"})


@pytest.fixture
def error_sink():
    return RecordingSink()


@pytest_asyncio.fixture
async def manager(storage, resolver, calculator, error_sink):
    manager = HighscoreManager(storage, resolver, calculator=calculator, error_sink=error_sink)
    try:
        yield manager
    finally:
        await manager.dispose()


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'highscores_test.db'}")
    await db.initialize()
    try:
        yield db
    finally:
        await db.close()
