"""In-memory sale draft (the cart being built at checkout)."""

from pydantic import BaseModel, Field, computed_field

DEFAULT_PAYMENT_METHOD = "efectivo"


class DraftLine(BaseModel):
    """One product line of the draft with its price snapshot."""

    product_id: int
    product_name: str
    quantity: int
    price: float

    @property
    def line_total(self) -> float:
        return self.quantity * self.price


class SaleDraft(BaseModel):
    """Uncommitted sale.

    The total is derived from the lines on every read, so it cannot drift
    from sum(quantity * price).
    """

    lines: list[DraftLine] = Field(default_factory=list)
    payment_method: str = DEFAULT_PAYMENT_METHOD
    notes: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> float:
        return sum(line.quantity * line.price for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find_line(self, product_id: int) -> DraftLine | None:
        """Return the line for a product, if present."""
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None
