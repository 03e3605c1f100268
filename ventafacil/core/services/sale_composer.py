"""
Sale composer.

Owns the in-memory draft for the sale being built at checkout. The draft
only changes through the operations below. Stock is never checked here:
a sale can always be composed, even past available stock.
"""

from ventafacil.config import get_logger
from ventafacil.core.entities.draft import DEFAULT_PAYMENT_METHOD, DraftLine, SaleDraft
from ventafacil.core.entities.product import Product
from ventafacil.core.exceptions import DraftLineNotFoundError, ValidationError

logger = get_logger(__name__)


class SaleComposer:
    """Builds the current sale before it is committed."""

    def __init__(self, default_payment_method: str = DEFAULT_PAYMENT_METHOD):
        self._default_payment_method = default_payment_method
        self._draft = self._new_draft()

    def _new_draft(self) -> SaleDraft:
        return SaleDraft(payment_method=self._default_payment_method)

    @property
    def draft(self) -> SaleDraft:
        """A copy of the current draft. Change it through the methods below."""
        return self._draft.model_copy(deep=True)

    @property
    def total(self) -> float:
        return self._draft.total

    def add_item(self, product: Product, quantity: int = 1) -> SaleDraft:
        """
        Add a product to the draft.

        A product already in the draft has its quantity increased; otherwise a
        new line is appended with the product's current price as snapshot.
        """
        if quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", quantity)
        if product.id is None:
            raise ValidationError("product_id", "product has not been saved")

        line = self._draft.find_line(product.id)
        if line is not None:
            line.quantity += quantity
        else:
            self._draft.lines.append(
                DraftLine(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    price=product.price,
                )
            )

        logger.debug(
            "draft_item_added",
            product_id=product.id,
            quantity=quantity,
            total=self._draft.total,
        )
        return self.draft

    def update_item_quantity(self, product_id: int, quantity: int) -> SaleDraft:
        """Replace a line's quantity. Use remove_item to drop a line."""
        if quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", quantity)

        line = self._draft.find_line(product_id)
        if line is None:
            raise DraftLineNotFoundError(product_id)

        line.quantity = quantity
        logger.debug(
            "draft_item_updated",
            product_id=product_id,
            quantity=quantity,
            total=self._draft.total,
        )
        return self.draft

    def remove_item(self, product_id: int) -> SaleDraft:
        """Remove a product's line. Unknown products are ignored."""
        self._draft.lines = [
            line for line in self._draft.lines if line.product_id != product_id
        ]
        logger.debug("draft_item_removed", product_id=product_id, total=self._draft.total)
        return self.draft

    def set_payment_method(self, method: str) -> None:
        self._draft.payment_method = method

    def set_notes(self, notes: str) -> None:
        self._draft.notes = notes

    def clear(self) -> None:
        """Reset to an empty draft with default payment method and no notes."""
        self._draft = self._new_draft()

    def detach(self) -> SaleDraft:
        """
        Hand the current draft to a commit and start a fresh one.

        Items scanned while the commit is running land in the fresh draft.
        """
        draft = self._draft
        self._draft = self._new_draft()
        return draft

    def restore(self, draft: SaleDraft) -> None:
        """
        Put back a draft whose commit failed.

        Lines added since detach() are merged into it the same way add_item
        merges: same product sums quantities, new products are appended.
        """
        for line in self._draft.lines:
            existing = draft.find_line(line.product_id)
            if existing is not None:
                existing.quantity += line.quantity
            else:
                draft.lines.append(line)
        self._draft = draft
        logger.debug("draft_restored", lines=len(draft.lines), total=draft.total)
