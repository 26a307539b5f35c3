"""
Logging setup for the highscore bot.

Handlers are attached once to the ``highscores`` package logger, so every
module logging through ``logging.getLogger(__name__)`` shares them.
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Union

from highscores.config import Config

PACKAGE_LOGGER = 'highscores'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def log_file_path(log_dir: Union[str, Path], day: Optional[date] = None) -> Path:
    """Daily log file, e.g. logs/highscores_20261014.log"""
    day = day or date.today()
    return Path(log_dir) / f'highscores_{day.strftime("%Y%m%d")}.log'


def setup_logging(debug: Optional[bool] = None, log_dir: Union[str, Path, None] = 'logs') -> logging.Logger:
    """
    Configure the package logger with a console and a daily file handler.

    Calling it again replaces the handlers instead of stacking new ones.

    Args:
        debug: Log DEBUG records to the console; defaults to Config.DEBUG
        log_dir: Directory for the daily log file, or None for console only

    Returns:
        The configured ``highscores`` logger
    """
    if debug is None:
        debug = Config.DEBUG

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    package_logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_dir is not None:
        path = log_file_path(log_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return package_logger
