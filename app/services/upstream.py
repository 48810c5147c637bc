from typing import Any, Mapping, Optional

import httpx

from app.core.exceptions.errors import UpstreamError
from app.utils.logging import get_logger


class UpstreamClient:
    """Thin async client for the REST Countries API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        # Opened on first use so the app can be started again after shutdown
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            )
        return self._client

    async def get_json(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        get_logger().info(f"Calling: {url}")
        try:
            response = await self.client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise UpstreamError(
                f"timeout of {self.timeout}s exceeded", url=url
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Upstream request failed: {exc}", url=url) from exc

        if not response.is_success:
            raise UpstreamError(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
                url=url,
            )
        return response.json()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
