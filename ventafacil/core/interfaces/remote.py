"""Abstract interfaces for the remote sale service and network reachability."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class RemoteSaleReceipt:
    """Backend acknowledgment of a created sale."""

    server_id: int
    body: dict[str, Any] = field(default_factory=dict)


class IRemoteSaleService(ABC):
    """Client for the backend's create-sale endpoint."""

    @abstractmethod
    async def create_sale(self, payload: dict[str, Any]) -> RemoteSaleReceipt:
        """
        Submit one sale with its items.

        Raises:
            NetworkError: transport failure or timeout
            RemoteRejectionError: non-2xx status or unusable body
        """
        pass

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        """Whether a bearer token is configured."""
        pass


class IConnectivityProbe(ABC):
    """Answers whether the backend can currently be reached."""

    @abstractmethod
    async def is_reachable(self) -> bool:
        """Return False instead of raising when the network is down."""
        pass
