"""
Services package for the highscore bot.
"""

from .highscore_manager import HighscoreManager
from .midnight_scheduler import MidnightScheduler, SchedulerState
from .player_directory import PlayerDirectory

__all__ = ['HighscoreManager', 'MidnightScheduler', 'SchedulerState', 'PlayerDirectory']
