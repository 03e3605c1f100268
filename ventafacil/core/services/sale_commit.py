"""
Sale commit engine.

Turns the composer's draft into a persisted Sale. The sale row, its items
and the stock decrements are written by the sales store inside a single
transaction, so a half-recorded sale cannot exist. Stock sufficiency is not
checked; stock may go negative.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from ventafacil.config import get_logger
from ventafacil.core.entities.draft import SaleDraft
from ventafacil.core.entities.sale import Sale, SaleItem
from ventafacil.core.entities.sync_status import SyncStatus
from ventafacil.core.exceptions import StorageError, ValidationError
from ventafacil.core.interfaces.sales_store import ISalesStore
from ventafacil.core.services.sale_composer import SaleComposer

logger = get_logger(__name__)


class SaleCommitEngine:
    """Commits the current draft to the local ledger."""

    def __init__(
        self,
        composer: SaleComposer,
        sales_store: ISalesStore,
        sync_trigger: Callable[[], Any] | None = None,
    ):
        self._composer = composer
        self._sales_store = sales_store
        self._sync_trigger = sync_trigger

    @staticmethod
    def build_sale(draft: SaleDraft) -> Sale:
        """
        Build an unsaved Sale from a draft.

        Raises:
            ValidationError: empty draft or non-positive total
        """
        if draft.is_empty:
            raise ValidationError("items", "sale has no items")

        items = [
            SaleItem(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                price=line.price,
            )
            for line in draft.lines
        ]
        total = sum(item.quantity * item.price for item in items)
        if total <= 0:
            raise ValidationError("total", "must be greater than zero", total)

        return Sale(
            date=datetime.now(UTC),
            total=total,
            payment_method=draft.payment_method,
            notes=draft.notes,
            sync_status=SyncStatus.PENDING,
            items=items,
        )

    async def commit(self) -> Sale:
        """
        Persist the current draft.

        The draft is detached from the composer before the write, so items
        scanned meanwhile start the next sale. On success a background sync
        is requested; the commit never waits for it. On failure nothing is
        written and the draft is put back so the sale can be retried.

        Raises:
            ValidationError: draft is empty or its total is not positive
            StorageError: the transaction failed and was rolled back
        """
        sale = self.build_sale(self._composer.draft)

        logger.info(
            "sale_commit_started",
            lines=len(sale.items),
            total=sale.total,
        )

        # Lines scanned while the write is in flight go to a fresh draft.
        draft = self._composer.detach()
        try:
            sale = await self._sales_store.commit_sale(sale)
        except StorageError as e:
            self._composer.restore(draft)
            logger.error(
                "sale_commit_failed",
                error_code=e.code,
                error=e.message,
            )
            raise
        except BaseException:
            self._composer.restore(draft)
            raise

        logger.info(
            "sale_committed",
            sale_id=sale.id,
            items=len(sale.items),
            total=sale.total,
        )

        if self._sync_trigger is not None:
            self._sync_trigger()

        return sale
