"""SQLite implementation of local product storage."""

import aiosqlite

from ventafacil.config import get_logger
from ventafacil.core.entities.product import Product
from ventafacil.core.entities.sync_status import SyncStatus
from ventafacil.core.exceptions import (
    DatabaseError,
    DuplicateBarcodeError,
    ProductNotFoundError,
    ValidationError,
)
from ventafacil.core.interfaces.product_store import IProductStore
from ventafacil.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    wrap_db_errors,
)

logger = get_logger(__name__)

PRODUCT_COLUMNS = (
    "name, description, price, cost, stock, barcode, category, image_url, sync_status"
)


def _normalize_barcode(barcode: str | None) -> str | None:
    if barcode is None:
        return None
    barcode = barcode.strip()
    return barcode or None


def _validate(product: Product) -> None:
    if not product.name or not product.name.strip():
        raise ValidationError("name", "Product name is required", product.name)
    if product.price <= 0:
        raise ValidationError("price", "Price must be greater than zero", product.price)


class SQLiteProductStore(IProductStore):
    """SQLite implementation of product storage."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    @wrap_db_errors
    async def create_product(self, product: Product) -> Product:
        """Create a new product. The stored row always starts as PENDING."""
        _validate(product)
        async with self._pool.transaction() as conn:
            created = await self._insert(conn, product)

        logger.info("product_created", product_id=created.id, name=created.name)
        return created

    @wrap_db_errors
    async def get_product(self, product_id: int) -> Product | None:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products WHERE id = ?", (product_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_product(row) if row else None

    @wrap_db_errors
    async def get_by_barcode(self, barcode: str) -> Product | None:
        barcode = _normalize_barcode(barcode)
        if barcode is None:
            return None
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products WHERE barcode = ?", (barcode,)
            )
            row = await cursor.fetchone()
            return self._row_to_product(row) if row else None

    @wrap_db_errors
    async def search(self, term: str, limit: int = 100) -> list[Product]:
        """Case-insensitive name substring match, or exact barcode match."""
        term = term.strip()
        if not term:
            return await self.list_products(limit=limit)

        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM products
                WHERE name LIKE ? COLLATE NOCASE OR barcode = ?
                ORDER BY name
                LIMIT ?
                """,
                (f"%{term}%", term, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_product(r) for r in rows]

    @wrap_db_errors
    async def list_products(self, limit: int = 100, offset: int = 0) -> list[Product]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products ORDER BY name LIMIT ? OFFSET ?",
                (limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_product(r) for r in rows]

    @wrap_db_errors
    async def list_categories(self) -> list[str]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT DISTINCT category FROM products
                WHERE category IS NOT NULL AND category <> ''
                ORDER BY category
                """
            )
            rows = await cursor.fetchall()
            return [row["category"] for row in rows]

    async def update_product(self, product: Product) -> Product:
        """Overwrite product fields. Any edit marks the row PENDING again."""
        if product.id is None:
            raise ValidationError("id", "Product id is required for update")
        _validate(product)

        barcode = _normalize_barcode(product.barcode)
        try:
            async with self._pool.transaction() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE products SET
                        name = ?, description = ?, price = ?, cost = ?, stock = ?,
                        barcode = ?, category = ?, image_url = ?, sync_status = ?
                    WHERE id = ?
                    """,
                    (
                        product.name,
                        product.description,
                        product.price,
                        product.cost,
                        product.stock,
                        barcode,
                        product.category,
                        product.image_url,
                        int(SyncStatus.PENDING),
                        product.id,
                    ),
                )
                if cursor.rowcount == 0:
                    raise ProductNotFoundError(product.id)
        except aiosqlite.IntegrityError as e:
            raise DuplicateBarcodeError(barcode or "") from e
        except aiosqlite.Error as e:
            raise DatabaseError("update_product", str(e)) from e

        logger.info("product_updated", product_id=product.id)
        return product.model_copy(
            update={"barcode": barcode, "sync_status": SyncStatus.PENDING}
        )

    @wrap_db_errors
    async def delete_product(self, product_id: int) -> bool:
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM products WHERE id = ?", (product_id,)
            )
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("product_deleted", product_id=product_id)
        return deleted

    @wrap_db_errors
    async def adjust_stock(self, product_id: int, delta: int) -> Product:
        """Apply a relative stock change. The result may be negative."""
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                "UPDATE products SET stock = stock + ?, sync_status = ? WHERE id = ?",
                (delta, int(SyncStatus.PENDING), product_id),
            )
            if cursor.rowcount == 0:
                raise ProductNotFoundError(product_id)
            cursor = await conn.execute(
                "SELECT * FROM products WHERE id = ?", (product_id,)
            )
            row = await cursor.fetchone()

        product = self._row_to_product(row)
        logger.info(
            "product_stock_adjusted",
            product_id=product_id,
            delta=delta,
            stock=product.stock,
        )
        return product

    @wrap_db_errors
    async def import_products(self, products: list[Product]) -> list[Product]:
        """Insert many products in one transaction."""
        for product in products:
            _validate(product)

        async with self._pool.transaction() as conn:
            created = [await self._insert(conn, p) for p in products]

        logger.info("products_imported", count=len(created))
        return created

    async def _insert(self, conn: aiosqlite.Connection, product: Product) -> Product:
        barcode = _normalize_barcode(product.barcode)
        try:
            cursor = await conn.execute(
                f"""
                INSERT INTO products ({PRODUCT_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    product.name.strip(),
                    product.description,
                    product.price,
                    product.cost,
                    product.stock,
                    barcode,
                    product.category,
                    product.image_url,
                    int(SyncStatus.PENDING),
                ),
            )
        except aiosqlite.IntegrityError as e:
            raise DuplicateBarcodeError(barcode or "") from e

        return product.model_copy(
            update={
                "id": cursor.lastrowid,
                "name": product.name.strip(),
                "barcode": barcode,
                "sync_status": SyncStatus.PENDING,
            }
        )

    def _row_to_product(self, row: aiosqlite.Row) -> Product:
        return Product(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            price=row["price"],
            cost=row["cost"],
            stock=row["stock"],
            barcode=row["barcode"],
            category=row["category"],
            image_url=row["image_url"],
            sync_status=SyncStatus(row["sync_status"]),
        )
