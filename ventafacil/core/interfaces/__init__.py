"""Core interfaces (ports) for dependency injection."""

from ventafacil.core.interfaces.product_store import IProductStore
from ventafacil.core.interfaces.remote import (
    IConnectivityProbe,
    IRemoteSaleService,
    RemoteSaleReceipt,
)
from ventafacil.core.interfaces.sales_store import IServerSalesStore, ISalesStore

__all__ = [
    # Storage interfaces
    "IProductStore",
    "ISalesStore",
    "IServerSalesStore",
    # Remote interfaces
    "IRemoteSaleService",
    "IConnectivityProbe",
    "RemoteSaleReceipt",
]
