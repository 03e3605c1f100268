"""
Sync engine.

Uploads PENDING sales from the local ledger to the backend of record.

Per sale: PENDING -> SYNCED on an acknowledged upload, PENDING -> PENDING on
any failure. There is no failed state; a sale that could not be uploaded is
simply included again in the next run. Within a run, a failing sale is
logged and the batch moves on to the next one, and each sale gets at most one
attempt.

Sales are uploaded one at a time in local creation order so the backend
assigns its identifiers in the same order.

Known gap: the upload carries no idempotency key. If the backend stores a sale
but the local SYNCED flag is never written (crash, storage failure), the next
run uploads it again and the backend records a duplicate.
"""

import asyncio
import contextlib
from dataclasses import dataclass, field

from ventafacil.config import get_logger
from ventafacil.core.entities.sale import Sale
from ventafacil.core.exceptions import StorageError, SyncError, VentaFacilError
from ventafacil.core.interfaces.remote import IConnectivityProbe, IRemoteSaleService
from ventafacil.core.interfaces.sales_store import ISalesStore

logger = get_logger(__name__)


@dataclass
class SyncReport:
    """Outcome of one sync run."""

    attempted: int = 0
    synced: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    skipped_reason: str | None = None  # "offline", "unauthenticated", "error"

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None


class SyncEngine:
    """Reconciles PENDING local sales with the backend."""

    def __init__(
        self,
        sales_store: ISalesStore,
        remote: IRemoteSaleService,
        probe: IConnectivityProbe,
    ):
        self._sales_store = sales_store
        self._remote = remote
        self._probe = probe

        self._lock = asyncio.Lock()
        self._task: asyncio.Task[SyncReport] | None = None
        self._rerun_requested = False
        self._periodic_task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def sync_pending(self) -> SyncReport:
        """
        Run one sync pass and wait for it.

        Offline or unauthenticated runs return a skipped report without
        raising. Runs never overlap.

        Raises:
            StorageError: pending sales could not be read
        """
        async with self._lock:
            return await self._run()

    async def _run(self) -> SyncReport:
        report = SyncReport()

        if not self._remote.is_authenticated:
            logger.warning("sync_skipped_unauthenticated")
            report.skipped_reason = "unauthenticated"
            return report

        if not await self._probe.is_reachable():
            logger.info("sync_skipped_offline")
            report.skipped_reason = "offline"
            return report

        pending = await self._sales_store.list_pending()
        if not pending:
            logger.debug("sync_nothing_pending")
            return report

        logger.info("sync_started", pending=len(pending))

        for sale in pending:
            report.attempted += 1
            if await self._sync_one(sale):
                report.synced.append(sale.id)  # type: ignore[arg-type]
            else:
                report.failed.append(sale.id)  # type: ignore[arg-type]

        logger.info(
            "sync_finished",
            attempted=report.attempted,
            synced=len(report.synced),
            failed=len(report.failed),
        )
        return report

    async def _sync_one(self, sale: Sale) -> bool:
        """Upload one sale. Failures are logged and reported as False."""
        try:
            items = await self._sales_store.get_items(sale.id)  # type: ignore[arg-type]
            payload = sale.model_copy(update={"items": items}).to_remote_payload()
            receipt = await self._remote.create_sale(payload)
            await self._sales_store.mark_synced(sale.id, receipt.server_id)  # type: ignore[arg-type]
        except (SyncError, StorageError) as e:
            logger.warning(
                "sale_sync_failed",
                sale_id=sale.id,
                error_code=e.code,
                error=e.message,
            )
            return False

        logger.info("sale_synced", sale_id=sale.id, server_id=receipt.server_id)
        return True

    def request_sync(self) -> asyncio.Task[SyncReport]:
        """
        Schedule a sync run in the background and return its task.

        If a run is already in flight, one more run follows it so that sales
        committed in the meantime are picked up.
        """
        if self._task is not None and not self._task.done():
            self._rerun_requested = True
            return self._task

        self._task = asyncio.create_task(self._run_detached(), name="ventafacil-sync")
        return self._task

    async def _run_detached(self) -> SyncReport:
        while True:
            self._rerun_requested = False
            try:
                report = await self.sync_pending()
            except VentaFacilError as e:
                logger.error("sync_run_failed", error_code=e.code, error=e.message)
                report = SyncReport(skipped_reason="error")
            if not self._rerun_requested:
                return report

    async def wait_idle(self) -> SyncReport | None:
        """Wait for the in-flight background run, if any."""
        if self._task is None:
            return None
        return await self._task

    def start(self, interval: float) -> None:
        """Trigger a background run every `interval` seconds (<= 0 disables)."""
        if interval <= 0:
            return
        if self._periodic_task is not None and not self._periodic_task.done():
            return
        self._periodic_task = asyncio.create_task(
            self._periodic(interval), name="ventafacil-sync-periodic"
        )
        logger.info("sync_periodic_started", interval=interval)

    async def _periodic(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            # Not awaited: cancelling the trigger must not cancel a run.
            self.request_sync()

    async def stop(self) -> None:
        """Stop the periodic trigger and wait for any in-flight run."""
        if self._periodic_task is not None:
            self._periodic_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._periodic_task
            self._periodic_task = None
            logger.info("sync_periodic_stopped")
        await self.wait_idle()
