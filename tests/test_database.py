import pytest
from sqlalchemy import select

from highscores.data_models.highscore import ClearType, ScoreEntry, ScoreType
from highscores.database.models import HighscoreData
from highscores.services.highscore_manager import HighscoreManager
from highscores.services.player_directory import PlayerDirectory


@pytest.mark.asyncio
async def test_entries_are_read_back_in_insertion_order(database):
    entries = [
        ScoreEntry(object_id=1, participant_ids=(3, 1, 2), score=40, is_win=True, timestamp=1700000000),
        ScoreEntry(object_id=2, participant_ids=(5,), score=-3, is_win=False, timestamp=1700000100),
        ScoreEntry(object_id=1, participant_ids=(1,), score=12, is_win=False, timestamp=1700000200),
    ]
    for entry in entries:
        await database.insert_entry(entry)

    assert await database.fetch_all_entries() == entries


@pytest.mark.asyncio
async def test_stored_row_layout(database):
    await database.insert_entry(
        ScoreEntry(object_id=7, participant_ids=(10, 20), score=99, is_win=True, timestamp=1700000000)
    )

    async with database.get_session() as session:
        record = (await session.execute(select(HighscoreData))).scalar_one()

    assert record.item_id == 7
    assert record.user_ids == "10,20"
    assert record.is_win == 1
    assert record.timestamp == 1700000000


@pytest.mark.asyncio
async def test_player_directory_resolves_registered_names(database):
    directory = PlayerDirectory(database.session_factory)
    await directory.register(1, "alice")
    await directory.register(1, "alice_renamed")

    fresh = PlayerDirectory(database.session_factory)
    await fresh.load()

    assert await fresh.resolve(1) == "alice_renamed"
    assert await fresh.resolve(404) == "#404"
    assert await fresh.resolve_many([404, 1]) == ["#404", "alice_renamed"]


@pytest.mark.asyncio
async def test_player_directory_looks_up_names_added_after_load(database):
    directory = PlayerDirectory(database.session_factory)
    await directory.load()
    await PlayerDirectory(database.session_factory).register(8, "henk")

    assert await directory.resolve(8) == "henk"


@pytest.mark.asyncio
async def test_manager_over_database(database, calculator):
    directory = PlayerDirectory(database.session_factory)
    await directory.register(1, "alice")
    await directory.register(2, "bob")
    manager = HighscoreManager(database, directory, calculator=calculator)
    await manager.load()

    try:
        now = int(calculator.now().timestamp())
        await manager.append(ScoreEntry(object_id=3, participant_ids=(1, 2), score=5, is_win=True, timestamp=now))
        await manager.append(ScoreEntry(object_id=3, participant_ids=(1, 2), score=8, is_win=True, timestamp=now))

        await manager.load()
        rows = await manager.query(3, ClearType.DAILY, ScoreType.PERTEAM)

        assert [(row.display_names, row.value) for row in rows] == [(("alice", "bob"), 8)]
    finally:
        await manager.dispose()
