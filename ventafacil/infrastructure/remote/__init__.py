"""Remote sale service adapters."""

from ventafacil.infrastructure.remote.connectivity import HttpConnectivityProbe
from ventafacil.infrastructure.remote.sales_client import HttpRemoteSaleService

__all__ = ["HttpRemoteSaleService", "HttpConnectivityProbe"]
