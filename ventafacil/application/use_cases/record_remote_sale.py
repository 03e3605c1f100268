"""Record Remote Sale Use Case - the backend side of a client sync."""

from dataclasses import dataclass
from datetime import UTC, datetime

from ventafacil.application.dto.requests import CreateSaleRequest
from ventafacil.config import get_logger
from ventafacil.core.entities.sale import Sale, SaleItem
from ventafacil.core.exceptions import ValidationError
from ventafacil.core.interfaces.sales_store import IServerSalesStore

logger = get_logger(__name__)


@dataclass
class RecordRemoteSaleResult:
    """Result of recording a sale."""

    sale: Sale


class RecordRemoteSaleUseCase:
    """Validate a submitted sale and persist it atomically for a user."""

    def __init__(self, sales_store: IServerSalesStore):
        self._sales_store = sales_store

    async def execute(
        self, user_id: int, request: CreateSaleRequest
    ) -> RecordRemoteSaleResult:
        logger.info(
            "record_remote_sale_started",
            user_id=user_id,
            items=len(request.items),
            total=request.total,
        )

        if not request.items:
            raise ValidationError("items", "A sale needs at least one item")
        if request.total <= 0:
            raise ValidationError(
                "total", "Total must be greater than zero", request.total
            )
        for item in request.items:
            if item.quantity <= 0:
                raise ValidationError(
                    "quantity", "Quantity must be greater than zero", item.quantity
                )

        sale = Sale(
            date=request.date or datetime.now(UTC),
            total=request.total,
            payment_method=request.payment_method,
            notes=request.notes,
            items=[
                SaleItem(
                    product_id=item.product_id,
                    product_name="",
                    quantity=item.quantity,
                    price=item.price,
                )
                for item in request.items
            ],
        )

        created = await self._sales_store.create_sale(user_id, sale)

        logger.info(
            "record_remote_sale_completed",
            user_id=user_id,
            sale_id=created.id,
        )
        return RecordRemoteSaleResult(sale=created)
