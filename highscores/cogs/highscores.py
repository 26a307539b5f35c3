import logging

import discord
from discord import app_commands
from discord.ext import commands
from collections import OrderedDict
from typing import List, Tuple

from highscores.config import Config
from highscores.data_models.highscore import ClearType, ScoreType
from highscores.utils.embeds import build_error_embed, build_highscore_embed
from highscores.utils.highscore_exceptions import HighscoreException, UnknownObjectError

logger = logging.getLogger(__name__)

# Posted boards refreshed at midnight, oldest dropped first
MAX_TRACKED_BOARDS = 50

CLEAR_TYPE_CHOICES = [app_commands.Choice(name=c.value.title(), value=c.value) for c in ClearType]
SCORE_TYPE_CHOICES = [app_commands.Choice(name=s.value.title(), value=s.value) for s in ScoreType]

BoardKey = Tuple[int, ClearType, ScoreType]


class HighscoresCog(commands.Cog):
    """Highscore board commands and midnight board refresh"""

    def __init__(self, bot):
        self.bot = bot
        self.manager = bot.highscore_manager
        self.logger = logger
        # message -> board shown in it
        self._posted_boards: "OrderedDict[discord.Message, BoardKey]" = OrderedDict()
        self.manager.add_midnight_listener(self.refresh_posted_boards)

    def cog_unload(self):
        """Stop refreshing boards when the cog is unloaded"""
        self.manager.remove_midnight_listener(self.refresh_posted_boards)

    async def build_board_embed(self, item_id: int, clear_type: ClearType, score_type: ScoreType) -> discord.Embed:
        rows = await self.manager.query(item_id, clear_type, score_type)
        if rows is None:
            raise UnknownObjectError(item_id)
        return build_highscore_embed(item_id, clear_type, score_type, rows, Config.HIGHSCORE_PAGE_SIZE)

    @app_commands.command(name="highscores", description="View the highscore board of an item")
    @app_commands.describe(
        item_id="Item the scores were recorded on",
        clear_type="Time period of the board",
        score_type="How scores are ranked"
    )
    @app_commands.choices(clear_type=CLEAR_TYPE_CHOICES, score_type=SCORE_TYPE_CHOICES)
    async def highscores(
        self,
        interaction: discord.Interaction,
        item_id: int,
        clear_type: str = ClearType.ALLTIME.value,
        score_type: str = ScoreType.CLASSIC.value
    ):
        """Display the highscore board of an item."""
        await interaction.response.defer()

        try:
            board = (item_id, ClearType.parse(clear_type), ScoreType.parse(score_type))
            embed = await self.build_board_embed(*board)
            message = await interaction.followup.send(embed=embed, wait=True)
            self._track_board(message, board)
        except HighscoreException as e:
            await interaction.followup.send(embed=build_error_embed(e), ephemeral=True)
        except Exception as e:
            self.logger.error(f"Error in highscores command: {e}", exc_info=True)
            await interaction.followup.send(
                embed=build_error_embed(HighscoreException(str(e), "❌ An error occurred while fetching highscores.")),
                ephemeral=True
            )

    @commands.command(name="reload_highscores")
    @commands.is_owner()
    async def reload_highscores(self, ctx):
        """Reload all highscore entries from the database (owner only)"""
        await self.manager.load()
        item_count = len(await self.manager.object_ids())
        await ctx.send(f"✅ Reloaded highscores for {item_count} items.")

    def _track_board(self, message: discord.Message, board: BoardKey):
        self._posted_boards[message] = board
        self._posted_boards.move_to_end(message)
        while len(self._posted_boards) > MAX_TRACKED_BOARDS:
            self._posted_boards.popitem(last=False)

    async def refresh_posted_boards(self, item_ids: List[int]):
        """Re-render posted boards once the daily/weekly/monthly windows roll over."""
        refreshed = 0
        for message, board in list(self._posted_boards.items()):
            if board[1] == ClearType.ALLTIME:
                continue
            try:
                await message.edit(embed=await self.build_board_embed(*board))
                refreshed += 1
            except discord.NotFound:
                self._posted_boards.pop(message, None)
            except (discord.HTTPException, HighscoreException) as e:
                self.logger.warning(f"Could not refresh highscore board for item {board[0]}: {e}")
        self.logger.info(f"Refreshed {refreshed} posted highscore boards ({len(item_ids)} items known)")


async def setup(bot):
    await bot.add_cog(HighscoresCog(bot))
