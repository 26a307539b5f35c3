"""
Highscore data models.

Provides immutable data transfer objects for recorded score entries and the
ranked rows derived from them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from highscores.utils.highscore_exceptions import InvalidQueryError


class ClearType(Enum):
    """Recurrence granularity bounding which entries count for a board."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALLTIME = "alltime"

    @classmethod
    def parse(cls, value: str) -> "ClearType":
        try:
            return cls[value.strip().upper()]
        except (KeyError, AttributeError):
            raise InvalidQueryError("clear type", str(value), [c.value for c in cls])


class ScoreType(Enum):
    """How qualifying entries are reduced into ranked rows."""
    CLASSIC = "classic"
    PERTEAM = "perteam"
    MOSTWIN = "mostwin"

    @classmethod
    def parse(cls, value: str) -> "ScoreType":
        try:
            return cls[value.strip().upper()]
        except (KeyError, AttributeError):
            raise InvalidQueryError("score type", str(value), [s.value for s in cls])


def parse_participant_ids(raw: str) -> Tuple[int, ...]:
    """Parse a comma-separated storage value ("1,2,3") into participant ids, order preserved."""
    return tuple(int(part) for part in raw.split(',') if part.strip())


def format_participant_ids(participant_ids: Iterable[int]) -> str:
    return ','.join(str(pid) for pid in participant_ids)


@dataclass(frozen=True)
class ScoreEntry:
    """A single recorded score for a game object.

    The ordered participant tuple is the team identity: (1, 2) and (2, 1)
    are different teams.
    """
    object_id: int
    participant_ids: Tuple[int, ...]
    score: int
    is_win: bool
    timestamp: int  # epoch seconds

    def __post_init__(self):
        ids = tuple(self.participant_ids)
        if not ids:
            raise ValueError("ScoreEntry requires at least one participant id")
        object.__setattr__(self, 'participant_ids', ids)

    @property
    def team_key(self) -> Tuple[int, ...]:
        return self.participant_ids


@dataclass(frozen=True)
class LeaderboardRow:
    """Single ranked highscore row."""
    display_names: Tuple[str, ...]
    value: int


@dataclass(frozen=True)
class HighscoreWindow:
    """Half-open epoch-second window [start, end); None bounds are unbounded."""
    start: Optional[int] = None
    end: Optional[int] = None

    def contains(self, timestamp: int) -> bool:
        if self.start is not None and timestamp < self.start:
            return False
        if self.end is not None and timestamp >= self.end:
            return False
        return True

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None
