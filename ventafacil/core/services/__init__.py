"""Core business services."""

from ventafacil.core.services.sale_commit import SaleCommitEngine
from ventafacil.core.services.sale_composer import SaleComposer
from ventafacil.core.services.sync_engine import SyncEngine, SyncReport

__all__ = [
    "SaleComposer",
    "SaleCommitEngine",
    "SyncEngine",
    "SyncReport",
]
