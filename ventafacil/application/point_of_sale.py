"""
Point-of-sale application object.

Wires the composer, the commit and sync engines, and the local stores
around one connection pool. Nothing here is module-global: every terminal
builds its own PointOfSale.
"""

from datetime import datetime

from ventafacil.config import get_logger, get_settings
from ventafacil.config.settings import Settings
from ventafacil.core.entities.product import Product
from ventafacil.core.entities.sale import Sale
from ventafacil.core.entities.sync_status import SyncStatus
from ventafacil.core.exceptions import SaleNotFoundError
from ventafacil.core.interfaces.remote import IConnectivityProbe, IRemoteSaleService
from ventafacil.core.services.sale_commit import SaleCommitEngine
from ventafacil.core.services.sale_composer import SaleComposer
from ventafacil.core.services.sync_engine import SyncEngine, SyncReport
from ventafacil.infrastructure.remote import HttpConnectivityProbe, HttpRemoteSaleService
from ventafacil.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteProductStore,
    SQLiteSalesStore,
)
from ventafacil.infrastructure.storage.sqlite.migrations import initialize_database

logger = get_logger(__name__)


class PointOfSale:
    """One checkout terminal backed by the local ledger."""

    def __init__(
        self,
        pool: ConnectionPool,
        remote: IRemoteSaleService,
        probe: IConnectivityProbe,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.pool = pool

        self.products = SQLiteProductStore(pool)
        self.sales = SQLiteSalesStore(pool)

        self.composer = SaleComposer(self.settings.pos.default_payment_method)
        self.sync_engine = SyncEngine(self.sales, remote, probe)

        sync_trigger = None
        if self.settings.sync.enabled and self.settings.sync.sync_after_commit:
            sync_trigger = self.sync_engine.request_sync
        self.commit_engine = SaleCommitEngine(self.composer, self.sales, sync_trigger)

    # Checkout

    def add_product(self, product: Product, quantity: int = 1) -> None:
        self.composer.add_item(product, quantity)

    async def add_by_barcode(self, barcode: str, quantity: int = 1) -> Product | None:
        """Scan helper. Returns None (draft unchanged) for unknown barcodes."""
        product = await self.products.get_by_barcode(barcode)
        if product is None:
            logger.info("barcode_not_found", barcode=barcode)
            return None
        self.composer.add_item(product, quantity)
        return product

    async def checkout(self) -> Sale:
        """Commit the current sale. Sync, if enabled, runs in the background."""
        return await self.commit_engine.commit()

    # Sync

    async def sync_now(self) -> SyncReport:
        return await self.sync_engine.sync_pending()

    def start_background_sync(self) -> None:
        if self.settings.sync.enabled:
            self.sync_engine.start(self.settings.sync.interval_seconds)

    # History

    async def sales_history(self, limit: int = 100, offset: int = 0) -> list[Sale]:
        return await self.sales.list_sales(limit=limit, offset=offset)

    async def sales_between(self, start: datetime, end: datetime) -> list[Sale]:
        return await self.sales.list_by_date_range(start, end)

    async def sale_details(self, sale_id: int) -> Sale:
        sale = await self.sales.get_sale(sale_id)
        if sale is None:
            raise SaleNotFoundError(sale_id)
        return sale

    async def sync_counts(self) -> dict[SyncStatus, int]:
        return await self.sales.count_by_status()

    async def aclose(self) -> None:
        await self.sync_engine.stop()
        await self.pool.close()
        logger.info("point_of_sale_closed")


async def create_point_of_sale(
    settings: Settings | None = None,
    remote: IRemoteSaleService | None = None,
    probe: IConnectivityProbe | None = None,
    pool: ConnectionPool | None = None,
) -> PointOfSale:
    """
    Build a ready PointOfSale.

    Applies pending local migrations, then opens the pool. Remote adapters
    default to the HTTP implementations configured in `settings.remote`.
    """
    settings = settings or get_settings()

    if pool is None:
        pool = ConnectionPool.from_settings(settings.storage)
    await initialize_database("local", db_path=pool.db_path)
    await pool.initialize()

    remote = remote or HttpRemoteSaleService.from_settings(settings.remote)
    probe = probe or HttpConnectivityProbe.from_settings(settings.remote)

    pos = PointOfSale(pool, remote, probe, settings=settings)
    logger.info("point_of_sale_ready", db_path=str(pool.db_path))
    return pos
