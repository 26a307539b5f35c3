from sqlalchemy import Column, Integer, String, Text, DateTime, CheckConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from highscores.data_models.highscore import (
    ScoreEntry, parse_participant_ids, format_participant_ids
)

Base = declarative_base()

class Player(Base):
    __tablename__ = 'players'

    id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False)

    created_at = Column(DateTime, default=func.now())

    def __repr__(self):
        return f"<Player(id={self.id}, username='{self.username}')>"

class HighscoreData(Base):
    """
    One recorded highscore entry for a wired highscore item.

    user_ids holds the ordered participant ids as a comma-separated list.
    """
    __tablename__ = 'items_highscore_data'

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, nullable=False, index=True)
    user_ids = Column(Text, nullable=False)
    score = Column(Integer, nullable=False)
    is_win = Column(Integer, nullable=False, default=0)
    timestamp = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint('is_win IN (0, 1)', name='check_is_win_flag'),
    )

    def to_entry(self) -> ScoreEntry:
        return ScoreEntry(
            object_id=self.item_id,
            participant_ids=parse_participant_ids(self.user_ids),
            score=self.score,
            is_win=bool(self.is_win),
            timestamp=self.timestamp
        )

    @classmethod
    def from_entry(cls, entry: ScoreEntry) -> "HighscoreData":
        return cls(
            item_id=entry.object_id,
            user_ids=format_participant_ids(entry.participant_ids),
            score=entry.score,
            is_win=1 if entry.is_win else 0,
            timestamp=entry.timestamp
        )

    def __repr__(self):
        return f"<HighscoreData(item_id={self.item_id}, user_ids='{self.user_ids}', score={self.score})>"
