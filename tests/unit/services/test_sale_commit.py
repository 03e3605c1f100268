"""Tests for SaleCommitEngine with a mocked sales store."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from ventafacil.core.entities import Product, Sale, SaleDraft, SyncStatus
from ventafacil.core.exceptions import DatabaseError, ValidationError
from ventafacil.core.interfaces import ISalesStore
from ventafacil.core.services import SaleCommitEngine, SaleComposer


@pytest.fixture
def composer() -> SaleComposer:
    composer = SaleComposer()
    composer.add_item(Product(id=1, name="A", price=10.0), 2)
    composer.add_item(Product(id=2, name="B", price=15.0), 1)
    composer.set_notes("mesa 4")
    return composer


@pytest.fixture
def sales_store() -> AsyncMock:
    store = AsyncMock(spec=ISalesStore)

    async def _commit(sale: Sale) -> Sale:
        return sale.model_copy(update={"id": 101})

    store.commit_sale.side_effect = _commit
    return store


class TestBuildSale:
    """Tests for draft -> Sale conversion."""

    def test_builds_pending_sale(self, composer):
        sale = SaleCommitEngine.build_sale(composer.draft)

        assert sale.id is None
        assert sale.total == 35.0
        assert sale.sync_status == SyncStatus.PENDING
        assert sale.payment_method == "efectivo"
        assert sale.notes == "mesa 4"
        assert [(i.product_id, i.quantity, i.price) for i in sale.items] == [
            (1, 2, 10.0),
            (2, 1, 15.0),
        ]

    def test_total_matches_items(self, composer):
        sale = SaleCommitEngine.build_sale(composer.draft)
        assert sale.total == sale.items_total

    def test_empty_draft_rejected(self):
        with pytest.raises(ValidationError):
            SaleCommitEngine.build_sale(SaleDraft())

    def test_zero_total_rejected(self):
        composer = SaleComposer()
        composer.add_item(Product.model_construct(id=1, name="Gratis", price=0.0), 1)
        with pytest.raises(ValidationError):
            SaleCommitEngine.build_sale(composer.draft)


class TestCommit:
    """Tests for SaleCommitEngine.commit()."""

    async def test_commit_persists_and_clears(self, composer, sales_store):
        engine = SaleCommitEngine(composer, sales_store)

        sale = await engine.commit()

        assert sale.id == 101
        assert sale.total == 35.0
        sales_store.commit_sale.assert_awaited_once()
        assert composer.draft.is_empty

    async def test_commit_triggers_sync(self, composer, sales_store):
        trigger = MagicMock()
        engine = SaleCommitEngine(composer, sales_store, sync_trigger=trigger)

        await engine.commit()

        trigger.assert_called_once_with()

    async def test_empty_draft_does_not_touch_store(self, sales_store):
        trigger = MagicMock()
        engine = SaleCommitEngine(SaleComposer(), sales_store, sync_trigger=trigger)

        with pytest.raises(ValidationError):
            await engine.commit()

        sales_store.commit_sale.assert_not_awaited()
        trigger.assert_not_called()

    async def test_storage_failure_keeps_draft(self, composer, sales_store):
        """A failed commit leaves the draft intact for retry and skips sync."""
        sales_store.commit_sale.side_effect = DatabaseError("commit_sale", "disk full")
        trigger = MagicMock()
        engine = SaleCommitEngine(composer, sales_store, sync_trigger=trigger)

        with pytest.raises(DatabaseError):
            await engine.commit()

        assert len(composer.draft.lines) == 2
        assert composer.total == 35.0
        trigger.assert_not_called()

    async def test_retry_after_failure(self, composer, sales_store):
        async def _ok(sale: Sale) -> Sale:
            return sale.model_copy(update={"id": 7})

        sales_store.commit_sale.side_effect = [
            DatabaseError("commit_sale", "locked"),
            None,
        ]
        engine = SaleCommitEngine(composer, sales_store)

        with pytest.raises(DatabaseError):
            await engine.commit()

        sales_store.commit_sale.side_effect = _ok
        sale = await engine.commit()
        assert sale.id == 7
        assert composer.draft.is_empty


class TestScanDuringCommit:
    """Items added while the write is in flight must not be lost."""

    @staticmethod
    def _slow_store(gate: asyncio.Event, fail: bool = False) -> AsyncMock:
        store = AsyncMock(spec=ISalesStore)

        async def _commit(sale: Sale) -> Sale:
            await gate.wait()
            if fail:
                raise DatabaseError("commit_sale", "disk full")
            return sale.model_copy(update={"id": 5})

        store.commit_sale.side_effect = _commit
        return store

    async def test_item_scanned_during_commit_starts_next_sale(self, composer):
        gate = asyncio.Event()
        engine = SaleCommitEngine(composer, self._slow_store(gate))

        task = asyncio.create_task(engine.commit())
        await asyncio.sleep(0)
        composer.add_item(Product(id=3, name="C", price=5.0), 1)
        gate.set()
        sale = await task

        assert [i.product_id for i in sale.items] == [1, 2]
        assert sale.total == 35.0
        assert [(line.product_id, line.quantity) for line in composer.draft.lines] == [(3, 1)]
        assert composer.draft.notes == ""

    async def test_failed_commit_merges_scanned_items(self, composer):
        gate = asyncio.Event()
        engine = SaleCommitEngine(composer, self._slow_store(gate, fail=True))

        task = asyncio.create_task(engine.commit())
        await asyncio.sleep(0)
        composer.add_item(Product(id=1, name="A", price=10.0), 1)
        composer.add_item(Product(id=3, name="C", price=5.0), 1)
        gate.set()
        with pytest.raises(DatabaseError):
            await task

        lines = [(line.product_id, line.quantity) for line in composer.draft.lines]
        assert lines == [(1, 3), (2, 1), (3, 1)]
        assert composer.total == 50.0
        assert composer.draft.notes == "mesa 4"
