import os
from dotenv import load_dotenv

from highscores.utils.time_windows import locale_week_start

load_dotenv()

WEEKDAY_NAMES = ['MONDAY', 'TUESDAY', 'WEDNESDAY', 'THURSDAY', 'FRIDAY', 'SATURDAY', 'SUNDAY']

class Config:
    """Highscore bot configuration settings"""

    # Discord settings
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = int(os.getenv('DISCORD_GUILD_ID', 0))
    OWNER_DISCORD_ID = int(os.getenv('OWNER_DISCORD_ID', 0))
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///highscores.db')

    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'

    # Highscore window settings
    HIGHSCORE_TIMEZONE = os.getenv('HIGHSCORE_TIMEZONE', '')  # Empty = system local zone
    HIGHSCORE_WEEK_START = os.getenv('HIGHSCORE_WEEK_START', '')  # Empty = first day of the locale's week
    HIGHSCORE_LOCALE = os.getenv('HIGHSCORE_LOCALE', '')  # Empty = process locale
    HIGHSCORE_PAGE_SIZE = int(os.getenv('HIGHSCORE_PAGE_SIZE', 10))

    @classmethod
    def get_week_start(cls) -> int:
        """Get the first day of the week (Monday=0 ... Sunday=6), explicit or from the locale"""
        name = (cls.HIGHSCORE_WEEK_START or '').strip().upper()
        if not name:
            return locale_week_start(cls.HIGHSCORE_LOCALE or None)
        if name not in WEEKDAY_NAMES:
            raise ValueError(f"HIGHSCORE_WEEK_START must be one of {', '.join(WEEKDAY_NAMES)}, got '{cls.HIGHSCORE_WEEK_START}'")
        return WEEKDAY_NAMES.index(name)

    @classmethod
    def get_timezone_name(cls):
        """Get the configured IANA zone name, or None for the system local zone"""
        name = (cls.HIGHSCORE_TIMEZONE or '').strip()
        return name or None

    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if not cls.DISCORD_GUILD_ID:
            raise ValueError("DISCORD_GUILD_ID is required")
        if not cls.OWNER_DISCORD_ID:
            raise ValueError("OWNER_DISCORD_ID is required")
        if cls.HIGHSCORE_PAGE_SIZE < 1:
            raise ValueError("HIGHSCORE_PAGE_SIZE must be a positive integer")
        cls.get_week_start()
