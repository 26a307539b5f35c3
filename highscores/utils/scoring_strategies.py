"""
Scoring Strategy Pattern for Highscore Boards

Each strategy reduces the rows that passed the time-window filter into the
ranked rows shown on a board:
- CLASSIC: every qualifying entry, best first
- PERTEAM: the best entry of each team
- MOSTWIN: the number of wins of each team

Ranking is by descending value. Ties keep filter-pass order (Python's sort is
stable), and grouped strategies keep teams in order of first appearance, so
tied teams are ranked by whichever recorded first.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Tuple
import logging

from highscores.data_models.highscore import LeaderboardRow, ScoreEntry, ScoreType

logger = logging.getLogger(__name__)

# A qualifying entry together with its resolved display row
RankedCandidate = Tuple[ScoreEntry, LeaderboardRow]


def rank_rows(rows: Sequence[LeaderboardRow]) -> List[LeaderboardRow]:
    """Sort rows by descending value, stable for ties."""
    return sorted(rows, key=lambda row: row.value, reverse=True)


def group_by_team(candidates: Sequence[RankedCandidate]) -> Dict[Tuple[int, ...], List[LeaderboardRow]]:
    """
    Group rows by the exact ordered participant sequence of their entry.

    Dicts keep insertion order, so groups come out in order of first appearance.
    """
    groups: Dict[Tuple[int, ...], List[LeaderboardRow]] = {}
    for entry, row in candidates:
        groups.setdefault(entry.team_key, []).append(row)
    return groups


class ScoringStrategy(ABC):
    """
    Abstract base class for highscore scoring strategies.

    Strategies decide which entries qualify beyond the time window and how
    qualifying rows collapse into the final ranking.
    """

    def accepts(self, entry: ScoreEntry) -> bool:
        """Whether an in-window entry qualifies for this strategy"""
        return True

    @abstractmethod
    def reduce(self, candidates: Sequence[RankedCandidate]) -> List[LeaderboardRow]:
        """
        Reduce qualifying rows into the ranked board.

        Args:
            candidates: Qualifying entries paired with their rows, in filter-pass order

        Returns:
            Ranked rows, best first
        """
        pass

    @abstractmethod
    def get_strategy_name(self) -> str:
        """Get human-readable name of this strategy"""
        pass


class ClassicStrategy(ScoringStrategy):
    """Every qualifying entry is its own row."""

    def reduce(self, candidates: Sequence[RankedCandidate]) -> List[LeaderboardRow]:
        return rank_rows([row for _, row in candidates])

    def get_strategy_name(self) -> str:
        return "Classic"


class PerTeamStrategy(ScoringStrategy):
    """Only the best entry of each team is kept."""

    def reduce(self, candidates: Sequence[RankedCandidate]) -> List[LeaderboardRow]:
        best_rows = [rank_rows(rows)[0] for rows in group_by_team(candidates).values()]
        return rank_rows(best_rows)

    def get_strategy_name(self) -> str:
        return "Per Team"


class MostWinStrategy(ScoringStrategy):
    """
    Teams are ranked by how many wins they recorded in the window.

    Losses never qualify, so a team with no wins does not appear at all.
    """

    def accepts(self, entry: ScoreEntry) -> bool:
        return entry.is_win

    def reduce(self, candidates: Sequence[RankedCandidate]) -> List[LeaderboardRow]:
        win_rows = [
            LeaderboardRow(display_names=rows[0].display_names, value=len(rows))
            for rows in group_by_team(candidates).values()
        ]
        logger.debug(f"MostWin reduction: {len(candidates)} wins across {len(win_rows)} teams")
        return rank_rows(win_rows)

    def get_strategy_name(self) -> str:
        return "Most Wins"


class ScoringStrategyFactory:
    """Factory for creating scoring strategies based on score type"""

    _strategies = {
        ScoreType.CLASSIC: ClassicStrategy,
        ScoreType.PERTEAM: PerTeamStrategy,
        ScoreType.MOSTWIN: MostWinStrategy,
    }

    @staticmethod
    def create_strategy(score_type) -> ScoringStrategy:
        """
        Create the strategy for a score type.

        Args:
            score_type: ScoreType member or its name ("classic", "perteam", "mostwin")

        Returns:
            Configured ScoringStrategy instance
        """
        if not isinstance(score_type, ScoreType):
            score_type = ScoreType.parse(score_type)
        return ScoringStrategyFactory._strategies[score_type]()

    @staticmethod
    def get_available_strategies() -> List[str]:
        """Get list of available strategy types"""
        return [score_type.value for score_type in ScoreType]
