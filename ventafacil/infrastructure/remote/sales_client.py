"""
HTTP client for the backend's sale endpoint.

Posts one sale per request with a bearer token and maps every failure mode
onto the sync exception hierarchy.
"""

import time
from typing import Any

import httpx

from ventafacil.config import get_logger
from ventafacil.config.settings import RemoteSettings
from ventafacil.core.exceptions import NetworkError, RemoteRejectionError
from ventafacil.core.interfaces.remote import IRemoteSaleService, RemoteSaleReceipt

logger = get_logger(__name__)


class HttpRemoteSaleService(IRemoteSaleService):
    """
    `POST {base_url}/sales` over httpx.

    A shared AsyncClient may be passed in; otherwise one is opened per
    request.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(
        cls, settings: RemoteSettings, client: httpx.AsyncClient | None = None
    ) -> "HttpRemoteSaleService":
        token = settings.api_token.get_secret_value() if settings.api_token else None
        return cls(
            base_url=settings.base_url,
            token=token,
            timeout=settings.timeout,
            client=client,
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    async def create_sale(self, payload: dict[str, Any]) -> RemoteSaleReceipt:
        url = f"{self.base_url}/sales"
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}

        start_time = time.time()
        try:
            if self._client is not None:
                response = await self._client.post(
                    url, json=payload, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise NetworkError(url, f"timeout after {self.timeout}s") from e
        except httpx.HTTPError as e:
            # Transport failures, but also undecodable bodies and redirect loops
            raise NetworkError(url, str(e) or e.__class__.__name__) from e

        if not response.is_success:
            raise RemoteRejectionError(response.status_code, response.text)

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteRejectionError(response.status_code, "invalid JSON body") from e

        server_id = self._extract_id(body)
        if server_id is None:
            raise RemoteRejectionError(response.status_code, "response has no sale id")

        logger.info(
            "remote_sale_posted",
            server_id=server_id,
            items=len(payload.get("items", [])),
            elapsed_ms=int((time.time() - start_time) * 1000),
        )
        return RemoteSaleReceipt(server_id=server_id, body=body)

    @staticmethod
    def _extract_id(body: Any) -> int | None:
        if not isinstance(body, dict):
            return None
        # Older backends answered with {"sale_id": ...}
        value = body.get("id", body.get("sale_id"))
        if isinstance(value, bool):
            return None
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError):
            return None
