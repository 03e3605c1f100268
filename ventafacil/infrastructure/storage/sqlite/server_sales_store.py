"""SQLite implementation of the backend's sale storage."""

from datetime import datetime

import aiosqlite

from ventafacil.config import get_logger
from ventafacil.core.entities.sale import Sale, SaleItem
from ventafacil.core.entities.sync_status import SyncStatus
from ventafacil.core.exceptions import DatabaseError, SaleIntegrityError
from ventafacil.core.interfaces.sales_store import IServerSalesStore
from ventafacil.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    wrap_db_errors,
)
from ventafacil.infrastructure.storage.sqlite.sales_store import (
    from_db_timestamp,
    to_db_timestamp,
)

logger = get_logger(__name__)

ITEMS_QUERY = """
    SELECT si.*, COALESCE(p.name, '') AS product_name
    FROM sale_items si
    LEFT JOIN products p ON si.product_id = p.id
    WHERE si.sale_id = ?
    ORDER BY si.id
"""


class SQLiteServerSalesStore(IServerSalesStore):
    """Sales of record, scoped per user."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def create_sale(self, user_id: int, sale: Sale) -> Sale:
        """
        Insert the sale, its items and the backend stock decrements in one
        transaction.

        Items must reference products known to the backend; otherwise the
        whole sale is rolled back with SaleIntegrityError.
        """
        try:
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO sales (
                        user_id, date, total, payment_method, notes, sync_status
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user_id,
                        to_db_timestamp(sale.date),
                        sale.total,
                        sale.payment_method,
                        sale.notes,
                        int(SyncStatus.PENDING),
                    ),
                )
                sale_id = cursor.lastrowid

                for item in sale.items:
                    await conn.execute(
                        """
                        INSERT INTO sale_items (sale_id, product_id, quantity, price)
                        VALUES (?, ?, ?, ?)
                        """,
                        (sale_id, item.product_id, item.quantity, item.price),
                    )
                    await conn.execute(
                        "UPDATE products SET stock = stock - ?, "
                        "updated_at = datetime('now') WHERE id = ?",
                        (item.quantity, item.product_id),
                    )
        except aiosqlite.IntegrityError as e:
            logger.warning("remote_sale_rejected", user_id=user_id, error=str(e))
            raise SaleIntegrityError(str(e)) from e
        except aiosqlite.Error as e:
            raise DatabaseError("create_sale", str(e)) from e

        logger.info(
            "remote_sale_created",
            sale_id=sale_id,
            user_id=user_id,
            items=len(sale.items),
            total=sale.total,
        )
        created = await self.get_sale(user_id, sale_id)
        assert created is not None
        return created

    @wrap_db_errors
    async def get_sale(self, user_id: int, sale_id: int) -> Sale | None:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM sales WHERE id = ? AND user_id = ?",
                (sale_id, user_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            items = await self._load_items(conn, sale_id)
            return self._row_to_sale(row, items)

    @wrap_db_errors
    async def list_sales(
        self, user_id: int, limit: int = 50, offset: int = 0
    ) -> list[Sale]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM sales WHERE user_id = ?
                ORDER BY date DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (user_id, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_sale(r, []) for r in rows]

    @wrap_db_errors
    async def list_unsynced(self, user_id: int) -> list[Sale]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM sales WHERE user_id = ? AND sync_status = ?
                ORDER BY date ASC, id ASC
                """,
                (user_id, int(SyncStatus.PENDING)),
            )
            rows = await cursor.fetchall()

            sales = []
            for row in rows:
                items = await self._load_items(conn, row["id"])
                sales.append(self._row_to_sale(row, items))
            return sales

    @wrap_db_errors
    async def list_by_date_range(
        self, user_id: int, start: datetime, end: datetime
    ) -> list[Sale]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM sales
                WHERE user_id = ? AND date BETWEEN ? AND ?
                ORDER BY date DESC, id DESC
                """,
                (user_id, to_db_timestamp(start), to_db_timestamp(end)),
            )
            rows = await cursor.fetchall()
            return [self._row_to_sale(r, []) for r in rows]

    @wrap_db_errors
    async def update_sync_status(
        self, user_id: int, sale_id: int, sync_status: SyncStatus
    ) -> int:
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                "UPDATE sales SET sync_status = ? WHERE id = ? AND user_id = ?",
                (int(sync_status), sale_id, user_id),
            )
            affected = cursor.rowcount

        logger.info(
            "remote_sale_sync_status_updated",
            sale_id=sale_id,
            sync_status=int(sync_status),
            affected=affected,
        )
        return affected

    async def _load_items(
        self, conn: aiosqlite.Connection, sale_id: int
    ) -> list[SaleItem]:
        cursor = await conn.execute(ITEMS_QUERY, (sale_id,))
        rows = await cursor.fetchall()
        return [
            SaleItem(
                id=r["id"],
                sale_id=r["sale_id"],
                product_id=r["product_id"],
                product_name=r["product_name"],
                quantity=r["quantity"],
                price=r["price"],
            )
            for r in rows
        ]

    def _row_to_sale(self, row: aiosqlite.Row, items: list[SaleItem]) -> Sale:
        return Sale(
            id=row["id"],
            date=from_db_timestamp(row["date"]),
            total=row["total"],
            payment_method=row["payment_method"],
            notes=row["notes"],
            sync_status=SyncStatus(row["sync_status"]),
            items=items,
        )
