"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from ventafacil.infrastructure.storage.sqlite import ConnectionPool
from ventafacil.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture
async def server_pool(tmp_path: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Migrated backend database with two users and two products."""
    db_path = tmp_path / "server.db"
    await initialize_database("server", db_path=db_path, create_backup_before=False)
    pool = ConnectionPool(db_path, pool_size=2)
    async with pool.transaction() as conn:
        await conn.execute(
            "INSERT INTO users (id, name, email) VALUES (1, 'Tienda Uno', 'uno@example.com')"
        )
        await conn.execute(
            "INSERT INTO users (id, name, email) VALUES (2, 'Tienda Dos', 'dos@example.com')"
        )
        await conn.execute(
            "INSERT INTO products (id, user_id, name, price, stock) VALUES (1, 1, 'A', 10.0, 5)"
        )
        await conn.execute(
            "INSERT INTO products (id, user_id, name, price, stock) VALUES (2, 1, 'B', 15.0, 3)"
        )
    yield pool
    await pool.close()
