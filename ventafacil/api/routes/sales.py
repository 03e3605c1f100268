"""Backend sale endpoints (the Remote Sale Service)."""

from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends, Query, status

from ventafacil.api.dependencies import (
    get_current_user,
    get_record_sale_use_case,
    get_server_sales_store,
)
from ventafacil.application.dto.requests import CreateSaleRequest, UpdateSyncStatusRequest
from ventafacil.application.dto.responses import (
    ErrorResponse,
    SaleListResponse,
    SaleResponse,
    SyncStatusUpdateResponse,
)
from ventafacil.application.use_cases import RecordRemoteSaleUseCase
from ventafacil.core.exceptions import SaleNotFoundError, ValidationError
from ventafacil.infrastructure.storage.sqlite import SQLiteServerSalesStore

router = APIRouter(prefix="/api/sales", tags=["sales"])


def _parse_bound(field: str, value: str, end_of_day: bool) -> datetime:
    """Parse an ISO date or timestamp. A bare end date covers the whole day."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(field, "Expected an ISO date or timestamp", value) from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    if end_of_day and "T" not in value and " " not in value:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


@router.post(
    "",
    response_model=SaleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_sale(
    request: CreateSaleRequest,
    user_id: int = Depends(get_current_user),
    use_case: RecordRemoteSaleUseCase = Depends(get_record_sale_use_case),
) -> SaleResponse:
    """Record a sale with its items and decrement backend stock atomically."""
    result = await use_case.execute(user_id, request)
    return SaleResponse.from_entity(result.sale)


@router.get("", response_model=SaleListResponse)
async def list_sales(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=500),
    user_id: int = Depends(get_current_user),
    store: SQLiteServerSalesStore = Depends(get_server_sales_store),
) -> SaleListResponse:
    """List the caller's sales, newest first."""
    sales = await store.list_sales(user_id, limit=limit, offset=(page - 1) * limit)
    return SaleListResponse(
        sales=[SaleResponse.from_entity(s) for s in sales],
        page=page,
        limit=limit,
    )


@router.get("/unsynced", response_model=list[SaleResponse])
async def list_unsynced_sales(
    user_id: int = Depends(get_current_user),
    store: SQLiteServerSalesStore = Depends(get_server_sales_store),
) -> list[SaleResponse]:
    """Sales still flagged as pending, oldest first, with items."""
    sales = await store.list_unsynced(user_id)
    return [SaleResponse.from_entity(s) for s in sales]


@router.get(
    "/date-range",
    response_model=list[SaleResponse],
    responses={400: {"model": ErrorResponse}},
)
async def list_sales_by_date_range(
    start_date: str = Query(..., description="ISO date or timestamp"),
    end_date: str = Query(..., description="ISO date or timestamp"),
    user_id: int = Depends(get_current_user),
    store: SQLiteServerSalesStore = Depends(get_server_sales_store),
) -> list[SaleResponse]:
    start = _parse_bound("start_date", start_date, end_of_day=False)
    end = _parse_bound("end_date", end_date, end_of_day=True)
    if end < start:
        raise ValidationError("end_date", "Must not be before start_date", end_date)

    sales = await store.list_by_date_range(user_id, start, end)
    return [SaleResponse.from_entity(s) for s in sales]


@router.get(
    "/{sale_id}",
    response_model=SaleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_sale(
    sale_id: int,
    user_id: int = Depends(get_current_user),
    store: SQLiteServerSalesStore = Depends(get_server_sales_store),
) -> SaleResponse:
    sale = await store.get_sale(user_id, sale_id)
    if sale is None:
        raise SaleNotFoundError(sale_id)
    return SaleResponse.from_entity(sale)


@router.patch("/{sale_id}/sync", response_model=SyncStatusUpdateResponse)
async def update_sync_status(
    sale_id: int,
    request: UpdateSyncStatusRequest,
    user_id: int = Depends(get_current_user),
    store: SQLiteServerSalesStore = Depends(get_server_sales_store),
) -> SyncStatusUpdateResponse:
    """Set the sync flag. `affected` is 0 when the sale does not exist."""
    affected = await store.update_sync_status(user_id, sale_id, request.sync_status)
    return SyncStatusUpdateResponse(id=sale_id, affected=affected)
