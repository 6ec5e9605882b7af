"""Shared async HTTP client used for verification calls."""

from typing import Any, Optional

import httpx


class HttpClient:
    """Thin async wrapper around httpx.AsyncClient with a configurable timeout.

    One instance is shared by every request the gate handles; httpx pools
    connections and is safe for concurrent use. ``transport`` lets tests plug
    in an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def post_json(self, url: str, payload: Any, **kwargs: Any) -> httpx.Response:
        return await self._client.post(url, json=payload, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
