"""Backend reachability check."""

import httpx

from ventafacil.config import get_logger
from ventafacil.config.settings import RemoteSettings
from ventafacil.core.interfaces.remote import IConnectivityProbe

logger = get_logger(__name__)


class HttpConnectivityProbe(IConnectivityProbe):
    """Considers the backend reachable when `GET /health` answers below 500."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 3.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = f"{base_url.rstrip('/')}/health"
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(
        cls, settings: RemoteSettings, client: httpx.AsyncClient | None = None
    ) -> "HttpConnectivityProbe":
        return cls(settings.base_url, timeout=settings.health_timeout, client=client)

    async def is_reachable(self) -> bool:
        try:
            if self._client is not None:
                response = await self._client.get(self.url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.url)
        except httpx.HTTPError as e:
            logger.debug("backend_unreachable", url=self.url, error=str(e))
            return False

        return response.status_code < 500
