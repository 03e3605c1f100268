"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest

from ventafacil.config import Settings, get_settings, reset_settings
from ventafacil.core.entities import Product
from ventafacil.infrastructure.storage.sqlite import ConnectionPool
from ventafacil.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture(autouse=True)
def isolated_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Settings, None, None]:
    """Point every database at the test's temp dir and drop cached settings."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("STORAGE_DATA_DIR", str(data_dir))
    monkeypatch.setenv("SERVER_STORAGE_DATA_DIR", str(data_dir))
    monkeypatch.delenv("REMOTE_API_TOKEN", raising=False)
    monkeypatch.delenv("API_TOKENS", raising=False)
    reset_settings()
    yield get_settings()
    reset_settings()


@pytest.fixture
def local_db_path(tmp_path: Path) -> Path:
    return tmp_path / "ledger.db"


@pytest.fixture
async def local_pool(local_db_path: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Migrated local ledger with an open pool."""
    await initialize_database("local", db_path=local_db_path, create_backup_before=False)
    pool = ConnectionPool(local_db_path, pool_size=2)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def make_product():
    """Factory for unsaved products."""

    def _make(name: str = "Coca-Cola 600ml", price: float = 10.0, **kwargs) -> Product:
        return Product(name=name, price=price, **kwargs)

    return _make
