import asyncio
import logging
import traceback
from typing import Optional

import discord
from discord.ext import commands

from highscores.config import Config
from highscores.database.database import Database
from highscores.services.highscore_manager import HighscoreManager
from highscores.services.player_directory import PlayerDirectory
from highscores.utils.time_windows import HighscoreWindowCalculator
from highscores.utils.logger import setup_logging

class HighscoreBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True

        super().__init__(
            command_prefix=Config.COMMAND_PREFIX,
            intents=intents,
            owner_id=Config.OWNER_DISCORD_ID or None,
            help_command=None
        )

        self.db: Optional[Database] = None
        self.player_directory: Optional[PlayerDirectory] = None
        self.highscore_manager: Optional[HighscoreManager] = None
        self.logger = logging.getLogger(__name__)

    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.logger.info("Setting up Highscore Bot...")

        self.db = Database()
        await self.db.initialize()

        self.player_directory = PlayerDirectory(self.db.session_factory)
        await self.player_directory.load()

        self.highscore_manager = HighscoreManager(
            storage=self.db,
            name_resolver=self.player_directory,
            calculator=HighscoreWindowCalculator.from_config(Config)
        )
        await self.highscore_manager.load()

        try:
            await self.load_extension('highscores.cogs.highscores')
            self.logger.info("Loaded cog: highscores.cogs.highscores")
        except Exception as e:
            self.logger.error(f"Failed to load highscores cog: {e}", exc_info=True)

        await self._sync_commands()

        self.logger.info("Highscore Bot setup complete!")

    async def _sync_commands(self):
        """Sync slash commands to the configured guild"""
        if not self.tree.get_commands():
            self.logger.warning("No application commands found to sync. Check for cog loading errors.")
            return

        try:
            guild = discord.Object(id=Config.DISCORD_GUILD_ID)
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            self.logger.info(f"Successfully synced {len(synced)} command(s) to guild {Config.DISCORD_GUILD_ID}")
        except discord.errors.Forbidden:
            self.logger.error(f"Permission error syncing to guild {Config.DISCORD_GUILD_ID}. Ensure the bot has the 'application.commands' scope.", exc_info=True)
        except discord.errors.HTTPException as e:
            self.logger.error(f"HTTP error syncing to guild {Config.DISCORD_GUILD_ID}. Status: {e.status}, Response: {e.text}", exc_info=True)

    async def on_ready(self):
        """Called when the bot is ready"""
        self.logger.info(f'{self.user} has connected to Discord!')
        await self.change_presence(activity=discord.Game(name="Highscores | /highscores"))

    async def on_command_error(self, ctx: commands.Context, error: Exception):
        """Global error handler for prefix commands"""
        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, (commands.CheckFailure, commands.NotOwner)):
            self.logger.info(f"Permission denied for command '{ctx.command.name if ctx.command else 'Unknown'}' by user {ctx.author}")
            await ctx.send("❌ You don't have permission to use this command.")
            return

        self.logger.error(f"Unexpected error in command {ctx.command}: {error}")
        self.logger.error(''.join(traceback.format_exception(type(error), error, error.__traceback__)))
        await ctx.send("❌ An unexpected error occurred while processing your command.")

    async def close(self):
        """Cleanup when bot is shutting down"""
        self.logger.info("Shutting down Highscore Bot...")

        if self.highscore_manager:
            await self.highscore_manager.dispose()

        if self.db:
            await self.db.close()

        await super().close()

async def main():
    """Main entry point"""
    Config.validate()
    logger = setup_logging()

    bot = HighscoreBot()

    try:
        await bot.start(Config.DISCORD_TOKEN)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
    finally:
        await bot.close()

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
