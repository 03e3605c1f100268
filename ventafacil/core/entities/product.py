"""Product domain entity."""

from pydantic import BaseModel

from ventafacil.core.entities.sync_status import SyncStatus


class Product(BaseModel):
    """A sellable product tracked in the local ledger.

    Stock is an integer that may go negative after an oversell; it is never
    clamped.
    """

    id: int | None = None
    name: str
    description: str | None = None
    price: float
    cost: float | None = None
    stock: int = 0
    barcode: str | None = None  # unique when set
    category: str | None = None
    image_url: str | None = None
    sync_status: SyncStatus = SyncStatus.PENDING

    @property
    def margin(self) -> float | None:
        """Unit margin (price - cost), None when cost is unknown."""
        if self.cost is None:
            return None
        return self.price - self.cost
