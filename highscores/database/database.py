import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import select
from contextlib import asynccontextmanager

from highscores.config import Config
from highscores.data_models.highscore import ScoreEntry
from highscores.database.models import Base, HighscoreData

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.database_url = database_url or Config.DATABASE_URL
        self.engine = None
        self.async_session = None

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        # Convert sqlite URL to async if needed
        database_url = self.database_url
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')

        self.engine = create_async_engine(
            database_url,
            echo=Config.DEBUG,
            future=True
        )

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

    @property
    def session_factory(self):
        return self.async_session

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        All operations within the context are committed together on success,
        or rolled back together on failure.
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")

    # Highscore operations
    async def fetch_all_entries(self) -> List[ScoreEntry]:
        """Read every recorded highscore entry in insertion order"""
        async with self.get_session() as session:
            result = await session.execute(select(HighscoreData).order_by(HighscoreData.id))
            return [record.to_entry() for record in result.scalars().all()]

    async def insert_entry(self, entry: ScoreEntry) -> None:
        """Persist exactly one highscore entry"""
        async with self.transaction() as session:
            session.add(HighscoreData.from_entry(entry))
