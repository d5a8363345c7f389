"""
Presence signals: the endpoint "active" assertion and the web session ping.

Both are fire-and-forget. A failed signal is logged and never raised.
"""

import asyncio
import logging

from skype_bridge.errors import BridgeError
from skype_bridge.headers import HeaderStore
from skype_bridge.transport.http import DEFAULT_GATEWAY_URL, DEFAULT_PING_URL, HttpClient

logger = logging.getLogger(__name__)

ACTIVE_TIMEOUT = 12
DEFAULT_ACTIVE_INTERVAL = 10.0


class Keepalive:
    def __init__(
        self,
        http: HttpClient,
        store: HeaderStore,
        gateway_url: str = DEFAULT_GATEWAY_URL,
        ping_url: str = DEFAULT_PING_URL,
    ):
        self._http = http
        self._store = store
        self.active_url = f"{gateway_url.rstrip('/')}/v1/users/ME/endpoints/SELF/active"
        self.ping_url = ping_url
        self._pending: set[asyncio.Task[bool]] = set()

    async def active(self) -> bool:
        """Mark this endpoint active on the gateway."""
        try:
            resp = await self._http.post(self.active_url, self._store.snapshot(), {"timeout": ACTIVE_TIMEOUT})
        except BridgeError as e:
            logger.warning("active failed: %s", e)
            return False
        if resp.status_code >= 400:
            logger.warning("active returned HTTP %s", resp.status_code)
            return False
        logger.debug("active succeeded")
        return True

    async def ping(self) -> bool:
        """Keep the web session alive. Carries the bearer session token."""
        try:
            headers = self._store.snapshot()
            if self._store.token:
                headers["X-Skypetoken"] = self._store.token
            resp = await self._http.post(self.ping_url, headers)
        except BridgeError as e:
            logger.warning("ping failed: %s", e)
            return False
        if resp.status_code >= 400:
            logger.warning("ping returned HTTP %s", resp.status_code)
            return False
        logger.debug("ping succeeded")
        return True

    def signal_active(self) -> asyncio.Task[bool]:
        """Schedule an active signal without waiting for it."""
        task = asyncio.get_running_loop().create_task(self.active())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def run_active_timer(self, interval: float = DEFAULT_ACTIVE_INTERVAL) -> None:
        """Signal presence every `interval` seconds, forever."""
        while True:
            await asyncio.sleep(interval)
            self.signal_active()

    async def drain(self) -> None:
        """Wait for in-flight signals (used at shutdown and in tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending))
