import logging

import pytest

from highscores.config import Config
from highscores.data_models.highscore import (
    ClearType, HighscoreWindow, LeaderboardRow, ScoreEntry, ScoreType,
    format_participant_ids, parse_participant_ids
)
from highscores.utils.embeds import build_highscore_embed, format_rows
from highscores.utils.highscore_exceptions import InvalidQueryError, UnknownObjectError
from highscores.utils.logger import log_file_path, setup_logging


def test_score_entry_requires_participants():
    with pytest.raises(ValueError):
        ScoreEntry(object_id=1, participant_ids=(), score=1, is_win=True, timestamp=0)


def test_score_entry_normalizes_participants_to_tuple():
    entry = ScoreEntry(object_id=1, participant_ids=[2, 1], score=1, is_win=True, timestamp=0)

    assert entry.participant_ids == (2, 1)
    assert entry.team_key == (2, 1)
    hash(entry)


def test_participant_ids_storage_format():
    assert format_participant_ids((4, 1, 9)) == "4,1,9"
    assert parse_participant_ids("4,1,9") == (4, 1, 9)
    assert parse_participant_ids("12") == (12,)


@pytest.mark.parametrize("raw, expected", [
    ("daily", ClearType.DAILY),
    (" WEEKLY ", ClearType.WEEKLY),
    ("AllTime", ClearType.ALLTIME),
])
def test_clear_type_parse(raw, expected):
    assert ClearType.parse(raw) == expected


def test_invalid_types_raise_value_errors():
    with pytest.raises(InvalidQueryError) as excinfo:
        ScoreType.parse("fastest")

    assert isinstance(excinfo.value, ValueError)
    assert "classic" in excinfo.value.user_message
    with pytest.raises(ValueError):
        ClearType.parse("yearly")


def test_half_open_window_bounds():
    window = HighscoreWindow(start=100, end=200)

    assert window.contains(100)
    assert window.contains(199)
    assert not window.contains(200)
    assert not window.contains(99)


def test_unknown_object_error_message():
    error = UnknownObjectError(42)

    assert error.item_id == 42
    assert "42" in error.user_message


def test_week_start_parsing(monkeypatch):
    monkeypatch.setattr(Config, "HIGHSCORE_WEEK_START", "sunday")
    assert Config.get_week_start() == 6

    monkeypatch.setattr(Config, "HIGHSCORE_WEEK_START", "someday")
    with pytest.raises(ValueError):
        Config.get_week_start()


@pytest.mark.parametrize("locale_name, expected", [("en_US", 6), ("nl_NL", 0)])
def test_unset_week_start_follows_locale(monkeypatch, locale_name, expected):
    monkeypatch.setattr(Config, "HIGHSCORE_WEEK_START", "")
    monkeypatch.setattr(Config, "HIGHSCORE_LOCALE", locale_name)

    assert Config.get_week_start() == expected


def test_explicit_week_start_overrides_locale(monkeypatch):
    monkeypatch.setattr(Config, "HIGHSCORE_WEEK_START", "wednesday")
    monkeypatch.setattr(Config, "HIGHSCORE_LOCALE", "en_US")

    assert Config.get_week_start() == 2


def test_package_logging_reaches_daily_file(tmp_path):
    package_logger = setup_logging(debug=False, log_dir=tmp_path)
    try:
        logging.getLogger("highscores.services.highscore_manager").info("Highscore Manager -> Loaded!")
        logging.getLogger("highscores.services.highscore_manager").debug("board detail")
        for handler in package_logger.handlers:
            handler.flush()

        assert len(package_logger.handlers) == 2
        assert len(setup_logging(debug=False, log_dir=tmp_path).handlers) == 2
        contents = log_file_path(tmp_path).read_text(encoding="utf-8")
        assert "Highscore Manager -> Loaded!" in contents
        assert "board detail" in contents
    finally:
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()


def test_timezone_name(monkeypatch):
    monkeypatch.setattr(Config, "HIGHSCORE_TIMEZONE", "")
    assert Config.get_timezone_name() is None

    monkeypatch.setattr(Config, "HIGHSCORE_TIMEZONE", "Europe/Amsterdam")
    assert Config.get_timezone_name() == "Europe/Amsterdam"


def test_validate_requires_token(monkeypatch):
    monkeypatch.setattr(Config, "DISCORD_TOKEN", None)

    with pytest.raises(ValueError):
        Config.validate()


def test_format_rows():
    rows = [
        LeaderboardRow(display_names=("alice", "bob"), value=1200),
        LeaderboardRow(display_names=("carol",), value=15),
    ]

    assert format_rows(rows) == ["1. alice, bob - 1,200", "2. carol - 15"]
    assert format_rows(rows, limit=1) == ["1. alice, bob - 1,200"]


def test_highscore_embed():
    rows = [LeaderboardRow(display_names=(f"p{i}",), value=20 - i) for i in range(12)]

    embed = build_highscore_embed(42, ClearType.WEEKLY, ScoreType.MOSTWIN, rows, limit=10)

    assert "42" in embed.title
    assert "This Week" in embed.description
    assert embed.fields[0].value.count("\n") == 11
    assert embed.footer.text == "Showing top 10 of 12"


def test_empty_highscore_embed():
    embed = build_highscore_embed(42, ClearType.DAILY, ScoreType.CLASSIC, [])

    assert embed.fields[0].value == "No scores recorded in this period yet."
