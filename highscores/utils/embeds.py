"""
Shared embed utilities for highscore boards.
"""

import discord
from typing import List, Optional, Sequence

from highscores.data_models.highscore import ClearType, LeaderboardRow, ScoreType
from highscores.utils.highscore_exceptions import HighscoreException

CLEAR_TYPE_LABELS = {
    ClearType.DAILY: "Today",
    ClearType.WEEKLY: "This Week",
    ClearType.MONTHLY: "This Month",
    ClearType.ALLTIME: "All Time",
}


def format_rows(rows: Sequence[LeaderboardRow], limit: Optional[int] = None) -> List[str]:
    """
    Format ranked rows as display lines, e.g. "1. alice, bob - 20".

    Args:
        rows: Ranked rows, best first
        limit: Maximum number of rows to include
    """
    shown = rows if limit is None else rows[:limit]
    return [
        f"{rank}. {', '.join(row.display_names)} - {row.value:,}"
        for rank, row in enumerate(shown, start=1)
    ]


def build_highscore_embed(
    item_id: int,
    clear_type: ClearType,
    score_type: ScoreType,
    rows: Sequence[LeaderboardRow],
    limit: int = 10
) -> discord.Embed:
    """Build the board embed for one item, window and strategy."""
    value_label = "Wins" if score_type == ScoreType.MOSTWIN else "Score"
    embed = discord.Embed(
        title=f"🏆 Highscores - Item {item_id}",
        description=f"**{CLEAR_TYPE_LABELS[clear_type]}** · {score_type.value.title()} · ranked by {value_label.lower()}",
        color=discord.Color.gold()
    )

    lines = format_rows(rows, limit)
    if lines:
        embed.add_field(name="Ranking", value="```\n" + "\n".join(lines) + "\n```", inline=False)
    else:
        embed.add_field(name="Ranking", value="No scores recorded in this period yet.", inline=False)

    if len(rows) > limit:
        embed.set_footer(text=f"Showing top {limit} of {len(rows)}")
    return embed


def build_error_embed(error: HighscoreException) -> discord.Embed:
    return discord.Embed(
        title="Highscores Unavailable",
        description=error.user_message,
        color=discord.Color.red()
    )
