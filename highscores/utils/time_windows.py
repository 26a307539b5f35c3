"""
Time window utilities for highscore boards.

Converts "now" plus a clear type into an epoch-second window, and finds the
next local midnight for the midnight scheduler. All boundaries of one window
are derived from a single captured instant.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Optional, Tuple

import pytz
from babel import Locale, UnknownLocaleError

from highscores.data_models.highscore import ClearType, HighscoreWindow


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_zone(name: Optional[str]) -> Optional[tzinfo]:
    """Resolve an IANA zone name with pytz; None keeps the system local zone."""
    if not name:
        return None
    return pytz.timezone(name)


def to_local_wall_clock(instant: datetime, zone: Optional[tzinfo] = None) -> datetime:
    """
    Convert an instant to a naive wall-clock datetime in the given zone.

    Naive inputs are taken as already being local wall-clock time.
    """
    if instant.tzinfo is None:
        return instant
    if zone is None:
        return instant.astimezone().replace(tzinfo=None)
    return instant.astimezone(zone).replace(tzinfo=None)


def midnight_epoch(day: date, zone: Optional[tzinfo] = None) -> int:
    """Epoch seconds of local midnight at the start of ``day``."""
    midnight = datetime.combine(day, time.min)
    if zone is None:
        # Naive datetimes are interpreted in the system local zone
        return int(midnight.timestamp())
    if hasattr(zone, 'localize'):
        return int(zone.localize(midnight).timestamp())
    return int(midnight.replace(tzinfo=zone).timestamp())


def locale_week_start(locale_name: Optional[str] = None) -> int:
    """
    First day of the week (Monday=0 ... Sunday=6) from CLDR locale data.

    Args:
        locale_name: Locale identifier such as "en_US" or "nl-NL"; None uses
            the process locale from LANGUAGE, LC_ALL, LC_CTYPE or LANG

    Falls back to Monday when no usable locale is configured.
    """
    try:
        if locale_name:
            locale = Locale.parse(locale_name.strip().replace('-', '_'))
        else:
            locale = Locale.default()
    except (UnknownLocaleError, ValueError, TypeError):
        return 0
    return locale.first_week_day


def day_bounds(today: date) -> Tuple[date, date]:
    return today, today + timedelta(days=1)


def week_bounds(today: date, week_start: int = 0) -> Tuple[date, date]:
    """
    Get the first day of the current week and the first day of the next one.

    Args:
        today: Current local date
        week_start: First day of the week (Monday=0 ... Sunday=6)
    """
    if not 0 <= week_start <= 6:
        raise ValueError(f"week_start must be between 0 and 6, got {week_start}")
    start = today - timedelta(days=(today.weekday() - week_start) % 7)
    return start, start + timedelta(days=7)


def month_bounds(today: date) -> Tuple[date, date]:
    start = today.replace(day=1)
    if start.month == 12:
        return start, start.replace(year=start.year + 1, month=1)
    return start, start.replace(month=start.month + 1)


def compute_window(
    clear_type: ClearType,
    now: datetime,
    zone: Optional[tzinfo] = None,
    week_start: int = 0
) -> HighscoreWindow:
    """
    Compute the window for a clear type relative to one captured instant.

    The window is half-open: an entry recorded exactly at the end boundary
    belongs to the next window.
    """
    if clear_type == ClearType.ALLTIME:
        return HighscoreWindow()

    today = to_local_wall_clock(now, zone).date()

    if clear_type == ClearType.DAILY:
        first, last = day_bounds(today)
    elif clear_type == ClearType.WEEKLY:
        first, last = week_bounds(today, week_start)
    elif clear_type == ClearType.MONTHLY:
        first, last = month_bounds(today)
    else:
        raise ValueError(f"Unsupported clear type: {clear_type}")

    return HighscoreWindow(start=midnight_epoch(first, zone), end=midnight_epoch(last, zone))


def next_midnight(now: datetime, zone: Optional[tzinfo] = None) -> int:
    """Epoch seconds of the first local midnight strictly after ``now``."""
    today = to_local_wall_clock(now, zone).date()
    return midnight_epoch(today + timedelta(days=1), zone)


class HighscoreWindowCalculator:
    """Window calculator bound to a zone, a week convention and a clock."""

    def __init__(
        self,
        zone: Optional[tzinfo] = None,
        week_start: int = 0,
        clock: Callable[[], datetime] = utc_now
    ):
        if not 0 <= week_start <= 6:
            raise ValueError(f"week_start must be between 0 and 6, got {week_start}")
        self.zone = zone
        self.week_start = week_start
        self.clock = clock

    @classmethod
    def from_config(cls, config, clock: Callable[[], datetime] = utc_now) -> "HighscoreWindowCalculator":
        return cls(
            zone=get_zone(config.get_timezone_name()),
            week_start=config.get_week_start(),
            clock=clock
        )

    def now(self) -> datetime:
        return self.clock()

    def window_for(self, clear_type: ClearType, now: Optional[datetime] = None) -> HighscoreWindow:
        return compute_window(clear_type, now or self.clock(), self.zone, self.week_start)

    def next_midnight(self, now: Optional[datetime] = None) -> int:
        return next_midnight(now or self.clock(), self.zone)
