"""Tests for domain exceptions."""

import pytest

from ventafacil.core.exceptions import (
    AuthenticationError,
    DatabaseError,
    DraftLineNotFoundError,
    NetworkError,
    ProductNotFoundError,
    RemoteRejectionError,
    SaleIntegrityError,
    SaleNotFoundError,
    StorageError,
    SyncError,
    ValidationError,
    VentaFacilError,
)


class TestVentaFacilError:
    def test_defaults_code_to_class_name(self):
        err = VentaFacilError("boom")
        assert err.code == "VentaFacilError"
        assert err.details == {}
        assert str(err) == "boom"

    def test_to_dict(self):
        err = VentaFacilError("boom", code="X", details={"a": 1})
        assert err.to_dict() == {"error": "X", "message": "boom", "details": {"a": 1}}


class TestValidationErrors:
    def test_validation_error_details(self):
        err = ValidationError("quantity", "must be greater than zero", 0)
        assert err.code == "VALIDATION_ERROR"
        assert err.details["field"] == "quantity"
        assert err.details["value"] == "0"
        assert "quantity" in err.message

    def test_value_is_truncated(self):
        err = ValidationError("notes", "too long", "x" * 500)
        assert len(err.details["value"]) == 100

    def test_draft_line_not_found(self):
        err = DraftLineNotFoundError(42)
        assert isinstance(err, ValidationError)
        assert err.code == "DRAFT_LINE_NOT_FOUND"
        assert err.details["value"] == "42"


class TestHierarchy:
    @pytest.mark.parametrize(
        "err",
        [
            DatabaseError("commit_sale", "disk I/O error"),
            ProductNotFoundError(1),
            SaleNotFoundError(1),
            SaleIntegrityError("FOREIGN KEY constraint failed"),
        ],
    )
    def test_storage_errors(self, err):
        assert isinstance(err, StorageError)
        assert isinstance(err, VentaFacilError)

    def test_network_error(self):
        err = NetworkError("http://x/api/sales", "connection refused")
        assert isinstance(err, SyncError)
        assert err.code == "NETWORK_ERROR"
        assert err.details["url"] == "http://x/api/sales"

    def test_remote_rejection_keeps_status(self):
        err = RemoteRejectionError(500, "x" * 1000)
        assert isinstance(err, SyncError)
        assert err.status_code == 500
        assert len(err.details["reason"]) == 200

    def test_authentication_error(self):
        err = AuthenticationError()
        assert err.code == "NOT_AUTHENTICATED"
        assert err.message == "Not authenticated"
