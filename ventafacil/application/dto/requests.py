"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
Business rules (non-empty items, positive total) are checked by the use
case so that they answer 400 rather than 422.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ventafacil.core.entities.sync_status import SyncStatus


class CreateSaleItemRequest(BaseModel):
    """One line of a sale submitted by a client."""

    product_id: int = Field(..., description="Backend product ID")
    quantity: int = Field(..., description="Units sold")
    price: float = Field(..., description="Unit price at time of sale")


class CreateSaleRequest(BaseModel):
    """Request to record a sale in the backend."""

    date: datetime | None = Field(
        default=None,
        description="Sale timestamp in ISO format (defaults to now)",
    )
    total: float = Field(..., description="Sale total")
    payment_method: str | None = Field(
        default=None,
        description="Payment method",
        examples=["efectivo", "tarjeta"],
    )
    notes: str | None = Field(default=None, description="Free-form notes")
    items: list[CreateSaleItemRequest] = Field(
        default_factory=list, description="Sold lines"
    )


class UpdateSyncStatusRequest(BaseModel):
    """Request to change a sale's sync flag."""

    sync_status: SyncStatus = Field(..., description="0 = pending, 1 = synced")
