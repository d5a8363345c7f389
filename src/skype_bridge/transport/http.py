"""
HTTP transport for the Skype web gateway.

Status codes are left to callers: a poll body may carry an errorCode on a
non-2xx response, and sends only log failures. Transport failures are raised.
"""

from typing import Any, Optional

import httpx

from skype_bridge.errors import TransportError

DEFAULT_GATEWAY_URL = "https://client-s.gateway.messenger.live.com"
DEFAULT_PING_URL = "https://web.skype.com/api/v1/session-ping"
DEFAULT_TIMEOUT = 60.0


class HttpClient:
    def __init__(self, timeout: float = DEFAULT_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def post(
        self,
        url: str,
        headers: dict[str, str],
        body: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        kwargs: dict[str, Any] = {"headers": headers}
        if body is not None:
            kwargs["json"] = body
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            return await self._client.post(url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"POST {url} failed: {e}", details={"url": url}) from e

    @staticmethod
    def json_body(resp: httpx.Response) -> Any:
        """Decode a JSON body, treating an empty or non-JSON body as {}."""
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            return {}

    async def close(self) -> None:
        await self._client.aclose()
