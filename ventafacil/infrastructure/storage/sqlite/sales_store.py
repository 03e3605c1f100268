"""SQLite implementation of local sales storage."""

from datetime import UTC, datetime

import aiosqlite

from ventafacil.config import get_logger
from ventafacil.core.entities.sale import Sale, SaleItem
from ventafacil.core.entities.sync_status import SyncStatus
from ventafacil.core.exceptions import DatabaseError, ProductNotFoundError
from ventafacil.core.interfaces.sales_store import ISalesStore
from ventafacil.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    wrap_db_errors,
)

logger = get_logger(__name__)


def to_db_timestamp(value: datetime) -> str:
    """Store timestamps as UTC ISO strings so they sort lexically."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def from_db_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class SQLiteSalesStore(ISalesStore):
    """SQLite implementation of the device sale ledger."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def commit_sale(self, sale: Sale) -> Sale:
        """
        Write the sale header, its items and the stock decrements in one
        transaction.

        Any failure rolls everything back; the passed sale is left untouched
        and a StorageError is raised.
        """
        try:
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO sales (date, total, payment_method, notes, sync_status)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        to_db_timestamp(sale.date),
                        sale.total,
                        sale.payment_method,
                        sale.notes,
                        int(SyncStatus.PENDING),
                    ),
                )
                sale_id = cursor.lastrowid

                items: list[SaleItem] = []
                for item in sale.items:
                    item_cursor = await conn.execute(
                        """
                        INSERT INTO sale_items (
                            sale_id, product_id, product_name, quantity, price
                        ) VALUES (?, ?, ?, ?, ?)
                        """,
                        (
                            sale_id,
                            item.product_id,
                            item.product_name,
                            item.quantity,
                            item.price,
                        ),
                    )
                    items.append(
                        item.model_copy(
                            update={"id": item_cursor.lastrowid, "sale_id": sale_id}
                        )
                    )

                # Stock is allowed to go negative; the sale already happened.
                for item in sale.items:
                    stock_cursor = await conn.execute(
                        """
                        UPDATE products SET stock = stock - ?, sync_status = ?
                        WHERE id = ?
                        """,
                        (item.quantity, int(SyncStatus.PENDING), item.product_id),
                    )
                    if stock_cursor.rowcount == 0:
                        raise ProductNotFoundError(item.product_id)
        except aiosqlite.Error as e:
            logger.error("sale_write_failed", error=str(e))
            raise DatabaseError("commit_sale", str(e)) from e

        logger.info(
            "sale_written",
            sale_id=sale_id,
            items=len(items),
            total=sale.total,
        )
        return sale.model_copy(
            update={
                "id": sale_id,
                "sync_status": SyncStatus.PENDING,
                "server_id": None,
                "items": items,
            }
        )

    @wrap_db_errors
    async def get_sale(self, sale_id: int) -> Sale | None:
        """Get sale by ID with items."""
        async with self._pool.acquire() as conn:
            cursor = await conn.execute("SELECT * FROM sales WHERE id = ?", (sale_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            items = await self._load_items(conn, sale_id)
            return self._row_to_sale(row, items)

    @wrap_db_errors
    async def get_items(self, sale_id: int) -> list[SaleItem]:
        async with self._pool.acquire() as conn:
            return await self._load_items(conn, sale_id)

    @wrap_db_errors
    async def list_sales(self, limit: int = 100, offset: int = 0) -> list[Sale]:
        """List sales with items, newest first."""
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM sales
                ORDER BY date DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
            rows = await cursor.fetchall()

            sales = []
            for row in rows:
                items = await self._load_items(conn, row["id"])
                sales.append(self._row_to_sale(row, items))
            return sales

    @wrap_db_errors
    async def list_by_date_range(self, start: datetime, end: datetime) -> list[Sale]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM sales
                WHERE date BETWEEN ? AND ?
                ORDER BY date DESC, id DESC
                """,
                (to_db_timestamp(start), to_db_timestamp(end)),
            )
            rows = await cursor.fetchall()

            sales = []
            for row in rows:
                items = await self._load_items(conn, row["id"])
                sales.append(self._row_to_sale(row, items))
            return sales

    @wrap_db_errors
    async def list_pending(self) -> list[Sale]:
        """PENDING sales in local id order, items not loaded."""
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM sales WHERE sync_status = ? ORDER BY id ASC",
                (int(SyncStatus.PENDING),),
            )
            rows = await cursor.fetchall()
            return [self._row_to_sale(r, []) for r in rows]

    @wrap_db_errors
    async def mark_synced(self, sale_id: int, server_id: int | None) -> None:
        async with self._pool.transaction() as conn:
            await conn.execute(
                "UPDATE sales SET sync_status = ?, server_id = ? WHERE id = ?",
                (int(SyncStatus.SYNCED), server_id, sale_id),
            )

        logger.debug("sale_marked_synced", sale_id=sale_id, server_id=server_id)

    @wrap_db_errors
    async def count_by_status(self) -> dict[SyncStatus, int]:
        counts = {status: 0 for status in SyncStatus}
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT sync_status, COUNT(*) AS n FROM sales GROUP BY sync_status"
            )
            for row in await cursor.fetchall():
                counts[SyncStatus(row["sync_status"])] = row["n"]
        return counts

    async def _load_items(
        self, conn: aiosqlite.Connection, sale_id: int
    ) -> list[SaleItem]:
        cursor = await conn.execute(
            "SELECT * FROM sale_items WHERE sale_id = ? ORDER BY id",
            (sale_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_item(r) for r in rows]

    def _row_to_sale(self, row: aiosqlite.Row, items: list[SaleItem]) -> Sale:
        return Sale(
            id=row["id"],
            server_id=row["server_id"],
            date=from_db_timestamp(row["date"]),
            total=row["total"],
            payment_method=row["payment_method"],
            notes=row["notes"],
            sync_status=SyncStatus(row["sync_status"]),
            items=items,
        )

    def _row_to_item(self, row: aiosqlite.Row) -> SaleItem:
        return SaleItem(
            id=row["id"],
            sale_id=row["sale_id"],
            product_id=row["product_id"],
            product_name=row["product_name"],
            quantity=row["quantity"],
            price=row["price"],
        )
