"""SQLite storage implementations."""

from ventafacil.infrastructure.storage.sqlite.connection import ConnectionPool
from ventafacil.infrastructure.storage.sqlite.product_store import SQLiteProductStore
from ventafacil.infrastructure.storage.sqlite.sales_store import SQLiteSalesStore
from ventafacil.infrastructure.storage.sqlite.server_sales_store import (
    SQLiteServerSalesStore,
)

# Type aliases for convenience
ProductStore = SQLiteProductStore
SalesStore = SQLiteSalesStore
ServerSalesStore = SQLiteServerSalesStore

__all__ = [
    "ConnectionPool",
    "SQLiteProductStore",
    "SQLiteSalesStore",
    "SQLiteServerSalesStore",
    "ProductStore",
    "SalesStore",
    "ServerSalesStore",
]
