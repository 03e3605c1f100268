"""Synchronization state shared by ledger rows."""

from enum import IntEnum


class SyncStatus(IntEnum):
    """Sync state as stored in the `sync_status` column."""

    PENDING = 0
    SYNCED = 1
