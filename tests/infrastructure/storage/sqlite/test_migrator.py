"""Tests for the schema migrator."""

from pathlib import Path

import aiosqlite
import pytest

from ventafacil.infrastructure.storage.sqlite.migrations.migrator import (
    LOCAL_MIGRATIONS_DIR,
    SERVER_MIGRATIONS_DIR,
    MigrationInfo,
    discover_migrations,
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)


async def _tables(db_path: Path) -> set[str]:
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        return {row[0] for row in await cursor.fetchall()}


class TestMigrationInfo:
    def test_from_file(self, tmp_path: Path):
        path = tmp_path / "v007_add_things.sql"
        path.write_text("SELECT 1;")

        info = MigrationInfo.from_file(path)

        assert info.version == "007"
        assert info.name == "add_things"
        assert len(info.checksum) == 16

    def test_invalid_name(self, tmp_path: Path):
        path = tmp_path / "nope.sql"
        path.write_text("")
        with pytest.raises(ValueError):
            MigrationInfo.from_file(path)

    def test_discover_is_sorted(self, tmp_path: Path):
        for name in ("v002_b.sql", "v001_a.sql", "readme.sql"):
            (tmp_path / name).write_text("SELECT 1;")
        versions = [m.version for m in discover_migrations(tmp_path)]
        assert versions == ["001", "002"]

    def test_shipped_migrations_exist(self):
        assert discover_migrations(LOCAL_MIGRATIONS_DIR)
        assert discover_migrations(SERVER_MIGRATIONS_DIR)


class TestInitializeDatabase:
    async def test_local_schema(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"

        results = await initialize_database("local", db_path=db_path)

        assert results and all(r.success for r in results)
        assert {"products", "sales", "sale_items", "schema_migrations"} <= await _tables(
            db_path
        )

    async def test_server_schema(self, tmp_path: Path):
        db_path = tmp_path / "server.db"

        await initialize_database("server", db_path=db_path)

        assert {"users", "products", "sales", "sale_items"} <= await _tables(db_path)

    async def test_idempotent(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"
        await initialize_database("local", db_path=db_path)

        second = await initialize_database("local", db_path=db_path)

        assert second == []

    async def test_backup_cleaned_up(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"
        await initialize_database("local", db_path=db_path)
        await initialize_database("local", db_path=db_path, create_backup_before=True)

        assert list(tmp_path.glob("*.backup_*")) == []

    async def test_status(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"

        before = await get_migration_status("local", db_path=db_path)
        await initialize_database("local", db_path=db_path)
        after = await get_migration_status("local", db_path=db_path)

        assert before["exists"] is False
        assert before["pending_migrations"] == ["001"]
        assert after["exists"] is True
        assert after["current_version"] == "001"
        assert after["pending_migrations"] == []

    async def test_integrity(self, tmp_path: Path):
        db_path = tmp_path / "server.db"
        await initialize_database("server", db_path=db_path)

        checks = await verify_schema_integrity("server", db_path=db_path)

        assert all(c["status"] == "PASS" for c in checks)
