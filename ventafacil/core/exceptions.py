"""
Domain exceptions for the VentaFacil point of sale.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class VentaFacilError(Exception):
    """Base exception for all VentaFacil errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(VentaFacilError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class DraftLineNotFoundError(ValidationError):
    """Product is not part of the current sale."""

    def __init__(self, product_id: int):
        super().__init__(
            field="product_id",
            message=f"Product {product_id} is not in the current sale",
            value=product_id,
        )
        self.code = "DRAFT_LINE_NOT_FOUND"


# Storage Exceptions
class StorageError(VentaFacilError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ProductNotFoundError(StorageError):
    """Product not found in storage."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class SaleNotFoundError(StorageError):
    """Sale not found in storage."""

    def __init__(self, sale_id: int):
        super().__init__(
            f"Sale not found: {sale_id}",
            code="SALE_NOT_FOUND",
            details={"sale_id": sale_id},
        )


class DuplicateBarcodeError(StorageError):
    """Another product already uses this barcode."""

    def __init__(self, barcode: str):
        super().__init__(
            f"Barcode already in use: {barcode}",
            code="DUPLICATE_BARCODE",
            details={"barcode": barcode},
        )


class SaleIntegrityError(StorageError):
    """Sale references rows that do not exist (e.g. unknown product)."""

    def __init__(self, reason: str):
        super().__init__(
            f"Sale rejected by integrity constraints: {reason}",
            code="SALE_INTEGRITY_ERROR",
            details={"reason": reason},
        )


# Sync Exceptions
class SyncError(VentaFacilError):
    """Base exception for sale synchronization."""

    pass


class NetworkError(SyncError):
    """Remote service could not be reached."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Network error calling {url}: {reason}",
            code="NETWORK_ERROR",
            details={"url": url, "reason": reason},
        )


class RemoteRejectionError(SyncError):
    """Remote service answered with a non-success or unusable response."""

    def __init__(self, status_code: int, reason: str):
        super().__init__(
            f"Remote service rejected sale (HTTP {status_code}): {reason}",
            code="REMOTE_REJECTION",
            details={"status_code": status_code, "reason": reason[:200]},
        )
        self.status_code = status_code


# API Exceptions
class AuthenticationError(VentaFacilError):
    """Missing or unknown bearer token."""

    def __init__(self, reason: str = "Not authenticated"):
        super().__init__(reason, code="NOT_AUTHENTICATED")


class ConfigurationError(VentaFacilError):
    """Configuration error."""

    pass
