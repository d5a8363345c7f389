"""
Long-poll loop over the gateway subscription.

Each poll is issued only after the previous one has been fully processed,
so at most one request is ever in flight. A transport failure ends the loop.
"""

import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Optional, Union

from skype_bridge.headers import HeaderStore
from skype_bridge.keepalive import Keepalive
from skype_bridge.models.config import BridgeConfig
from skype_bridge.models.events import PollResponse
from skype_bridge.models.message import CanonicalMessage
from skype_bridge.normalizer import normalize
from skype_bridge.transport.http import HttpClient

logger = logging.getLogger(__name__)

MessageHandler = Callable[[CanonicalMessage], Union[None, Awaitable[None]]]


class PollLoop:
    def __init__(
        self,
        http: HttpClient,
        store: HeaderStore,
        keepalive: Keepalive,
        config: BridgeConfig,
        on_message: Optional[MessageHandler] = None,
    ):
        self._http = http
        self._store = store
        self._keepalive = keepalive
        self._config = config
        self.on_message = on_message
        self.poll_url = f"{config.gateway}/v1/users/ME/endpoints/SELF/subscriptions/0/poll"

    async def run(self) -> None:
        """Poll forever. Transport errors propagate."""
        while True:
            await self.poll_once()

    async def poll_once(self) -> int:
        """One poll round trip. Returns the number of messages dispatched."""
        headers = self._store.snapshot()
        headers["ContextId"] = str(int(time.time() * 1000))

        logger.debug("poll %s", self.poll_url)
        resp = await self._http.post(self.poll_url, headers)
        if resp.status_code >= 400:
            logger.warning("poll returned HTTP %s", resp.status_code)
        payload = self._http.json_body(resp)
        body = PollResponse.model_validate(payload if isinstance(payload, dict) else {})

        dispatched = 0
        if body.error_code:
            logger.warning("poll errorCode %s", body.error_code)
        if body.event_messages:
            logger.debug("poll parsing %d event(s)", len(body.event_messages))
            for event in body.event_messages:
                message = normalize(event, self._config)
                if message is not None:
                    await self._dispatch(message)
                    dispatched += 1

        self._keepalive.signal_active()
        return dispatched

    async def _dispatch(self, message: CanonicalMessage) -> Any:
        if self.on_message is None:
            return None
        result = self.on_message(message)
        if inspect.isawaitable(result):
            return await result
        return result
