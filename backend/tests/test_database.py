"""
NoteGraph Backend — Database Helper Tests
===========================================

What:  Tests for create_tables and session_scope on a fresh SQLite engine.
"""

import pytest
from sqlalchemy import inspect, text

from notegraph.database import build_engine, build_session_factory, create_tables, session_scope


@pytest.mark.asyncio
async def test_create_tables_registers_models_itself(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}")
    try:
        await create_tables(engine)
        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    finally:
        await engine.dispose()

    assert "notes" in tables


@pytest.mark.asyncio
async def test_session_scope_rolls_back_on_error(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'rollback.db'}")
    factory = build_session_factory(engine)
    try:
        await create_tables(engine)
        with pytest.raises(RuntimeError):
            async with session_scope(factory) as db:
                await db.execute(text("INSERT INTO notes (id, title, content, created_at, updated_at) "
                                      "VALUES ('00000000000000000000000000000001', 't', '', "
                                      "'2024-01-15 12:00:00', '2024-01-15 12:00:00')"))
                raise RuntimeError("abort")

        async with session_scope(factory) as db:
            count = (await db.execute(text("SELECT COUNT(*) FROM notes"))).scalar_one()
    finally:
        await engine.dispose()

    assert count == 0
