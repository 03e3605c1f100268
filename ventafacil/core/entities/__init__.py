"""Core domain entities."""

from ventafacil.core.entities.draft import DEFAULT_PAYMENT_METHOD, DraftLine, SaleDraft
from ventafacil.core.entities.product import Product
from ventafacil.core.entities.sale import Sale, SaleItem
from ventafacil.core.entities.sync_status import SyncStatus

__all__ = [
    # Product entities
    "Product",
    # Sale entities
    "Sale",
    "SaleItem",
    "SyncStatus",
    # Draft entities
    "SaleDraft",
    "DraftLine",
    "DEFAULT_PAYMENT_METHOD",
]
