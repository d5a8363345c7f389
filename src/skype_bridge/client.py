"""
SkypeBridge, the endpoint a host application talks to.

    bridge = SkypeBridge(config)
    bridge.ready(on_ready)
    await bridge.connect()
    poll = bridge.received(on_message)
    await bridge.forward("alice", "hello", "IRC")
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from skype_bridge.auth import CredentialAcquirer
from skype_bridge.headers import HeaderStore
from skype_bridge.keepalive import Keepalive
from skype_bridge.models.config import BridgeConfig
from skype_bridge.models.message import BotMessage, SessionCredentials
from skype_bridge.outbound import OutboundSender
from skype_bridge.poller import MessageHandler, PollLoop
from skype_bridge.transport.http import HttpClient

logger = logging.getLogger(__name__)

Callback = Callable[..., Union[None, Awaitable[None]]]
InitHook = Callable[[BridgeConfig, "SkypeBridge"], Union[None, Awaitable[None]]]


async def _call(func: Callback, *args: Any) -> None:
    result = func(*args)
    if inspect.isawaitable(result):
        await result


class SkypeBridge:
    """Async Skype web bridge: one session, one room."""

    def __init__(
        self,
        config: BridgeConfig,
        init_hook: Optional[InitHook] = None,
        http: Optional[HttpClient] = None,
        acquirer: Optional[CredentialAcquirer] = None,
    ):
        self.config = config
        self._init_hook = init_hook

        self.http = http or HttpClient()
        self.store = HeaderStore()
        self.acquirer = acquirer or CredentialAcquirer(config, self.store)
        self.keepalive = Keepalive(self.http, self.store, config.gateway_url, config.ping_url)
        self.poller = PollLoop(self.http, self.store, self.keepalive, config)
        self.outbound = OutboundSender(self.http, self.store, config)

        self._ready_callbacks: list[Callback] = []
        self._ready_event = asyncio.Event()
        self._tasks: list[asyncio.Task[None]] = []
        self._poll_task: Optional[asyncio.Task[None]] = None

    @property
    def ident(self) -> str:
        return "skype#" + self.config.room.replace("@thread.skype", "")

    @property
    def is_ready(self) -> bool:
        return self._ready_event.is_set()

    def ready(self, callback: Callback) -> None:
        """Call `callback` once session credentials are captured."""
        self._ready_callbacks.append(callback)

    async def init(self, done: Optional[Callback] = None) -> None:
        """Run the host's init hook, then `done`."""
        if self._init_hook is not None:
            await _call(self._init_hook, self.config, self)
        if done is not None:
            await _call(done)

    async def connect(self) -> SessionCredentials:
        """Log in. AcquisitionTimeout propagates and is fatal."""
        credentials = await self.acquirer.acquire()
        self._ready_event.set()
        for callback in list(self._ready_callbacks):
            await _call(callback)
        return credentials

    def received(self, handler: MessageHandler) -> asyncio.Task[None]:
        """Register the inbound handler and start polling plus the active timer.

        Polling waits for connect() to finish. Awaiting the returned task
        surfaces a fatal poll transport error. Calling it again only swaps the
        handler: one poll loop runs per bridge.
        """
        self.poller.on_message = handler
        if self._poll_task is not None and not self._poll_task.done():
            return self._poll_task
        logger.debug("listening for new messages on Skype")
        loop = asyncio.get_running_loop()
        poll = loop.create_task(self._poll_when_ready())
        timer = loop.create_task(self._active_when_ready())
        self._tasks.extend([poll, timer])
        self._poll_task = poll
        return poll

    async def _poll_when_ready(self) -> None:
        await self._ready_event.wait()
        await self.poller.run()

    async def _active_when_ready(self) -> None:
        await self._ready_event.wait()
        await self.keepalive.run_active_timer(self.config.active_interval)

    async def send(
        self,
        message: Union[str, BotMessage],
        user: Optional[str] = None,
        source: Optional[str] = None,
    ) -> bool:
        """Send to the configured room. Failures are logged, never raised."""
        return await self.outbound.send(self.config.room, message, user=user, source=source)

    async def forward(self, user: str, message: Union[str, BotMessage], source: str) -> bool:
        """Send with a `<b>user</b>@source: ` prefix."""
        return await self.outbound.forward(self.config.room, user, message, source)

    async def ping(self) -> bool:
        return await self.keepalive.ping()

    async def close(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        await self.keepalive.drain()
        await self.http.close()
