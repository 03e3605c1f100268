"""Data transfer objects between the API and use cases."""

from ventafacil.application.dto.requests import (
    CreateSaleItemRequest,
    CreateSaleRequest,
    UpdateSyncStatusRequest,
)
from ventafacil.application.dto.responses import (
    ErrorResponse,
    HealthResponse,
    SaleItemResponse,
    SaleListResponse,
    SaleResponse,
    SyncStatusUpdateResponse,
)

__all__ = [
    "CreateSaleItemRequest",
    "CreateSaleRequest",
    "UpdateSyncStatusRequest",
    "ErrorResponse",
    "HealthResponse",
    "SaleItemResponse",
    "SaleListResponse",
    "SaleResponse",
    "SyncStatusUpdateResponse",
]
