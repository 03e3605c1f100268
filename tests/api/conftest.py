"""Fixtures for backend API tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from ventafacil.api.main import create_app
from ventafacil.config import Settings
from ventafacil.config.settings import APISettings, ServerStorageSettings

TOKEN_UNO = "tok-uno"
TOKEN_DOS = "tok-dos"


@pytest.fixture
def api_settings(tmp_path: Path) -> Settings:
    return Settings(
        server_storage=ServerStorageSettings(data_dir=tmp_path, db_name="server.db"),
        api=APISettings(tokens={TOKEN_UNO: 1, TOKEN_DOS: 2}),
    )


@pytest.fixture
async def app(api_settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """App with its lifespan running and a seeded backend catalog."""
    app = create_app(api_settings)
    async with app.router.lifespan_context(app):
        async with app.state.pool.transaction() as conn:
            await conn.execute("INSERT INTO users (id, name) VALUES (1, 'Tienda Uno')")
            await conn.execute("INSERT INTO users (id, name) VALUES (2, 'Tienda Dos')")
            await conn.execute(
                "INSERT INTO products (id, user_id, name, price, stock) VALUES (1, 1, 'A', 10.0, 5)"
            )
            await conn.execute(
                "INSERT INTO products (id, user_id, name, price, stock) VALUES (2, 1, 'B', 15.0, 3)"
            )
        yield app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {TOKEN_UNO}"},
    ) as ac:
        yield ac
