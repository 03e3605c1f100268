"""Persisted sale domain entities."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from ventafacil.core.entities.sync_status import SyncStatus


class SaleItem(BaseModel):
    """A line of a committed sale.

    `product_name` and `price` are snapshots taken when the product was added
    to the draft; later product edits never reach them.
    """

    id: int | None = None
    sale_id: int | None = None
    product_id: int
    product_name: str
    quantity: int
    price: float

    @property
    def line_total(self) -> float:
        return self.quantity * self.price


class Sale(BaseModel):
    """A committed sale with its items."""

    id: int | None = None
    server_id: int | None = None  # assigned by the backend after sync
    date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    total: float
    payment_method: str | None = None
    notes: str | None = None
    sync_status: SyncStatus = SyncStatus.PENDING
    items: list[SaleItem] = Field(default_factory=list)

    @property
    def items_total(self) -> float:
        """Sum of quantity * price over the items."""
        return sum(item.quantity * item.price for item in self.items)

    @property
    def is_synced(self) -> bool:
        return self.sync_status == SyncStatus.SYNCED

    def to_remote_payload(self) -> dict[str, Any]:
        """Body for `POST /sales` on the backend."""
        return {
            "date": self.date.isoformat(),
            "total": self.total,
            "payment_method": self.payment_method,
            "notes": self.notes,
            "items": [
                {
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price": item.price,
                }
                for item in self.items
            ],
        }
