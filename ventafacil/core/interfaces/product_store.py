"""Abstract interface for local product storage."""

from abc import ABC, abstractmethod

from ventafacil.core.entities.product import Product


class IProductStore(ABC):
    """Interface for product persistence in the local ledger."""

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        """Create a new product."""
        pass

    @abstractmethod
    async def get_product(self, product_id: int) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def get_by_barcode(self, barcode: str) -> Product | None:
        """Get product by barcode."""
        pass

    @abstractmethod
    async def search(self, term: str, limit: int = 100) -> list[Product]:
        """Search products by name substring or exact barcode."""
        pass

    @abstractmethod
    async def list_products(self, limit: int = 100, offset: int = 0) -> list[Product]:
        """List products ordered by name."""
        pass

    @abstractmethod
    async def list_categories(self) -> list[str]:
        """List distinct non-empty categories."""
        pass

    @abstractmethod
    async def update_product(self, product: Product) -> Product:
        """Update product fields (stock included, as an absolute value)."""
        pass

    @abstractmethod
    async def delete_product(self, product_id: int) -> bool:
        """Delete a product. Returns True if a row was removed."""
        pass

    @abstractmethod
    async def adjust_stock(self, product_id: int, delta: int) -> Product:
        """Apply a relative stock change (restock or manual correction)."""
        pass

    @abstractmethod
    async def import_products(self, products: list[Product]) -> list[Product]:
        """Insert many products, all or nothing."""
        pass
