# tests/test_solve_store.py

"""Tests for the durable announced-solve set."""

import pytest
from announcer.data_models.ctfd import AnnouncedSolve
from announcer.database.database import Database
from announcer.database.models import AnnouncedSolveRecord
from announcer.services.solve_store import SolveStore
from announcer.utils.exceptions import StorageError
from sqlalchemy import func, select, text


async def count_rows(database: Database) -> int:
    async with database.session_factory() as session:
        result = await session.execute(select(func.count(AnnouncedSolveRecord.id)))
        return result.scalar()


async def test_load_empty_store(database):
    store = SolveStore(database.session_factory)
    assert await store.load() == set()


async def test_record_is_visible_to_load(database):
    store = SolveStore(database.session_factory)

    assert await store.record(1, 11) is True
    assert await store.record(2, 11) is True

    assert await store.load() == {AnnouncedSolve(1, 11), AnnouncedSolve(2, 11)}


async def test_duplicate_record_is_a_noop(database):
    store = SolveStore(database.session_factory)

    assert await store.record(1, 11) is True
    assert await store.record(1, 11) is False

    assert await store.load() == {AnnouncedSolve(1, 11)}
    assert await count_rows(database) == 1


async def test_records_survive_reopening_the_database(database_url):
    first = Database(database_url)
    await first.initialize()
    await SolveStore(first.session_factory).record(3, 42)
    await first.close()

    second = Database(database_url)
    await second.initialize()
    try:
        assert await SolveStore(second.session_factory).load() == {AnnouncedSolve(3, 42)}
    finally:
        await second.close()


async def test_broken_table_raises_storage_error(database):
    async with database.session_factory() as session:
        await session.execute(text("DROP TABLE announced_solves"))
        await session.commit()

    store = SolveStore(database.session_factory)
    with pytest.raises(StorageError):
        await store.load()
    with pytest.raises(StorageError):
        await store.record(1, 11)
