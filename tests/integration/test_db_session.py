"""Integration tests for the database engine setup."""
from __future__ import annotations

from sqlalchemy import text

from src.medlink.core.config import Settings
from src.medlink.db.session import DatabaseManager, engine_options

SQLITE_URL = "sqlite+aiosqlite:///:memory:"


def test_postgres_engine_is_pooled():
    options = engine_options(
        Settings(DATABASE_URL="postgresql+asyncpg://medlink:secret@db:5432/medlink", DATABASE_POOL_SIZE=7)
    )

    assert options["pool_size"] == 7
    assert options["pool_pre_ping"] is True
    assert "connect_args" not in options


def test_sqlite_engine_skips_pool_sizing():
    options = engine_options(Settings(DATABASE_URL=SQLITE_URL))

    assert "pool_size" not in options
    assert options["connect_args"] == {"check_same_thread": False}


async def test_sqlite_connections_enforce_foreign_keys():
    manager = DatabaseManager(Settings(DATABASE_URL=SQLITE_URL))
    try:
        async with manager.session() as session:
            result = await session.execute(text("PRAGMA foreign_keys"))
            assert result.scalar_one() == 1

        health = await manager.health_check()
        assert health["status"] == "healthy"
        assert health["dialect"] == "sqlite"
    finally:
        await manager.close()
