"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ventafacil.core.entities.sale import Sale, SaleItem


class SaleItemResponse(BaseModel):
    """Line of a stored sale."""

    id: int | None = None
    product_id: int
    product_name: str = Field(default="", description="Current backend product name")
    quantity: int
    price: float

    @classmethod
    def from_entity(cls, item: SaleItem) -> "SaleItemResponse":
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            price=item.price,
        )


class SaleResponse(BaseModel):
    """Stored sale with its items."""

    id: int = Field(..., description="Backend sale ID")
    date: datetime
    total: float
    payment_method: str | None = None
    notes: str | None = None
    sync_status: int
    items: list[SaleItemResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, sale: Sale) -> "SaleResponse":
        assert sale.id is not None
        return cls(
            id=sale.id,
            date=sale.date,
            total=sale.total,
            payment_method=sale.payment_method,
            notes=sale.notes,
            sync_status=int(sale.sync_status),
            items=[SaleItemResponse.from_entity(i) for i in sale.items],
        )


class SaleListResponse(BaseModel):
    """Page of sales."""

    sales: list[SaleResponse]
    page: int
    limit: int


class SyncStatusUpdateResponse(BaseModel):
    """Result of a sync flag update."""

    id: int
    affected: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: str | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. SALE_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
