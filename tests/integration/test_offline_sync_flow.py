"""End-to-end: checkout offline, then sync into the backend app."""

from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI
from pydantic import SecretStr

from ventafacil.api.main import create_app
from ventafacil.application.point_of_sale import PointOfSale, create_point_of_sale
from ventafacil.config import Settings
from ventafacil.config.settings import (
    APISettings,
    RemoteSettings,
    ServerStorageSettings,
    StorageSettings,
    SyncSettings,
)
from ventafacil.core.entities import Product, SyncStatus
from ventafacil.core.interfaces import IConnectivityProbe
from ventafacil.infrastructure.remote import HttpConnectivityProbe, HttpRemoteSaleService

TOKEN = "terminal-1"


class SwitchableProbe(IConnectivityProbe):
    """Reports offline until switched on, then asks the real backend."""

    def __init__(self, inner: IConnectivityProbe):
        self.inner = inner
        self.online = False

    async def is_reachable(self) -> bool:
        return self.online and await self.inner.is_reachable()


@pytest.fixture
async def backend(tmp_path: Path) -> AsyncGenerator[FastAPI, None]:
    settings = Settings(
        server_storage=ServerStorageSettings(data_dir=tmp_path, db_name="server.db"),
        api=APISettings(tokens={TOKEN: 1}),
    )
    app = create_app(settings)
    async with app.router.lifespan_context(app):
        async with app.state.pool.transaction() as conn:
            await conn.execute("INSERT INTO users (id, name) VALUES (1, 'Tienda')")
            await conn.execute(
                "INSERT INTO products (id, user_id, name, price, stock) VALUES (1, 1, 'A', 10.0, 50)"
            )
            await conn.execute(
                "INSERT INTO products (id, user_id, name, price, stock) VALUES (2, 1, 'B', 15.0, 50)"
            )
        yield app


@pytest.fixture
async def http_client(backend: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=backend)) as client:
        yield client


def _terminal_settings(tmp_path: Path, sync_after_commit: bool) -> Settings:
    return Settings(
        storage=StorageSettings(data_dir=tmp_path, db_name="ledger.db"),
        remote=RemoteSettings(base_url="http://backend/api", api_token=SecretStr(TOKEN)),
        sync=SyncSettings(sync_after_commit=sync_after_commit),
    )


async def _make_pos(
    tmp_path: Path, client: httpx.AsyncClient, sync_after_commit: bool = False
) -> tuple[PointOfSale, SwitchableProbe]:
    settings = _terminal_settings(tmp_path, sync_after_commit)
    remote = HttpRemoteSaleService.from_settings(settings.remote, client=client)
    probe = SwitchableProbe(HttpConnectivityProbe.from_settings(settings.remote, client=client))
    pos = await create_point_of_sale(settings, remote=remote, probe=probe)

    for name, price in (("A", 10.0), ("B", 15.0), ("C", 5.0)):
        await pos.products.create_product(Product(name=name, price=price, stock=10))
    return pos, probe


async def _backend_rows(app: FastAPI, sql: str) -> list:
    async with app.state.pool.acquire() as conn:
        cursor = await conn.execute(sql)
        return list(await cursor.fetchall())


class TestOfflineThenSync:
    async def test_sales_survive_offline_and_sync_later(self, tmp_path, backend, http_client):
        pos, probe = await _make_pos(tmp_path, http_client)
        try:
            a = await pos.products.get_product(1)
            b = await pos.products.get_product(2)

            pos.add_product(a, 2)
            pos.add_product(b, 1)
            first = await pos.checkout()
            pos.add_product(b, 3)
            second = await pos.checkout()

            assert first.total == 35.0
            assert (await pos.products.get_product(1)).stock == 8
            assert (await pos.products.get_product(2)).stock == 6

            offline = await pos.sync_now()
            assert offline.skipped_reason == "offline"
            assert (await pos.sync_counts())[SyncStatus.PENDING] == 2

            probe.online = True
            report = await pos.sync_now()

            assert report.synced == [first.id, second.id]
            counts = await pos.sync_counts()
            assert counts == {SyncStatus.PENDING: 0, SyncStatus.SYNCED: 2}

            remote_sales = await _backend_rows(backend, "SELECT id, total FROM sales ORDER BY id")
            assert [row["total"] for row in remote_sales] == [35.0, 45.0]
            synced_first = await pos.sale_details(first.id)
            assert synced_first.server_id == remote_sales[0]["id"]

            stock = await _backend_rows(backend, "SELECT id, stock FROM products ORDER BY id")
            assert [row["stock"] for row in stock] == [48, 46]

            again = await pos.sync_now()
            assert again.attempted == 0
        finally:
            await pos.aclose()

    async def test_rejected_sale_stays_pending(self, tmp_path, backend, http_client):
        """Product C is unknown to the backend; its sale fails, the next still syncs."""
        pos, probe = await _make_pos(tmp_path, http_client)
        probe.online = True
        try:
            c = await pos.products.get_product(3)
            a = await pos.products.get_product(1)

            pos.add_product(c, 1)
            rejected = await pos.checkout()
            pos.add_product(a, 1)
            accepted = await pos.checkout()

            report = await pos.sync_now()

            assert report.failed == [rejected.id]
            assert report.synced == [accepted.id]
            assert (await pos.sale_details(rejected.id)).sync_status == SyncStatus.PENDING
            assert len(await _backend_rows(backend, "SELECT id FROM sales")) == 1
        finally:
            await pos.aclose()

    async def test_commit_triggers_background_sync(self, tmp_path, backend, http_client):
        pos, probe = await _make_pos(tmp_path, http_client, sync_after_commit=True)
        probe.online = True
        try:
            pos.add_product(await pos.products.get_product(1), 1)
            sale = await pos.checkout()

            await pos.sync_engine.wait_idle()

            assert (await pos.sale_details(sale.id)).is_synced
        finally:
            await pos.aclose()

    async def test_barcode_scan_and_history(self, tmp_path, backend, http_client):
        pos, _ = await _make_pos(tmp_path, http_client)
        try:
            await pos.products.create_product(Product(name="D", price=2.5, barcode="7501"))

            assert await pos.add_by_barcode("0000") is None
            assert pos.composer.draft.is_empty
            assert (await pos.add_by_barcode("7501", 4)).name == "D"
            await pos.checkout()

            history = await pos.sales_history()
            assert [s.total for s in history] == [10.0]
            assert history[0].items[0].product_name == "D"
        finally:
            await pos.aclose()
