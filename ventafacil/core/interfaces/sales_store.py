"""Abstract interfaces for sale storage (device ledger and backend of record)."""

from abc import ABC, abstractmethod
from datetime import datetime

from ventafacil.core.entities.sale import Sale, SaleItem
from ventafacil.core.entities.sync_status import SyncStatus


class ISalesStore(ABC):
    """Interface for sale persistence in the local ledger."""

    @abstractmethod
    async def commit_sale(self, sale: Sale) -> Sale:
        """
        Persist a sale, its items and the stock decrements as one unit.

        Either everything is written or nothing is.
        """
        pass

    @abstractmethod
    async def get_sale(self, sale_id: int) -> Sale | None:
        """Get sale by ID with items."""
        pass

    @abstractmethod
    async def get_items(self, sale_id: int) -> list[SaleItem]:
        """Get the items of a sale in insertion order."""
        pass

    @abstractmethod
    async def list_sales(self, limit: int = 100, offset: int = 0) -> list[Sale]:
        """List sales with items, newest first."""
        pass

    @abstractmethod
    async def list_by_date_range(self, start: datetime, end: datetime) -> list[Sale]:
        """List sales whose date falls within [start, end], newest first."""
        pass

    @abstractmethod
    async def list_pending(self) -> list[Sale]:
        """List PENDING sales (without items) in local creation order."""
        pass

    @abstractmethod
    async def mark_synced(self, sale_id: int, server_id: int | None) -> None:
        """Record the backend id and flip the sale to SYNCED."""
        pass

    @abstractmethod
    async def count_by_status(self) -> dict[SyncStatus, int]:
        """Count sales per sync status."""
        pass


class IServerSalesStore(ABC):
    """Interface for sale persistence in the backend of record."""

    @abstractmethod
    async def create_sale(self, user_id: int, sale: Sale) -> Sale:
        """Persist a sale, its items and the stock decrements as one unit."""
        pass

    @abstractmethod
    async def get_sale(self, user_id: int, sale_id: int) -> Sale | None:
        """Get one of the user's sales with items."""
        pass

    @abstractmethod
    async def list_sales(
        self, user_id: int, limit: int = 50, offset: int = 0
    ) -> list[Sale]:
        """List the user's sales, newest first."""
        pass

    @abstractmethod
    async def list_unsynced(self, user_id: int) -> list[Sale]:
        """List the user's sales with sync_status 0, oldest first, with items."""
        pass

    @abstractmethod
    async def list_by_date_range(
        self, user_id: int, start: datetime, end: datetime
    ) -> list[Sale]:
        """List the user's sales whose date falls within [start, end], newest first."""
        pass

    @abstractmethod
    async def update_sync_status(
        self, user_id: int, sale_id: int, sync_status: SyncStatus
    ) -> int:
        """Set sync_status on one of the user's sales. Returns affected rows."""
        pass
