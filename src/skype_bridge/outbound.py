"""
Outbound messages to a conversation.

User text is entity-encoded twice: the web client decodes once when it
renders and once more internally. Bot content is trusted markup and goes out
as is. Failures are logged and the message is dropped.
"""

import html
import logging
import time
from typing import Optional, Union

from skype_bridge.errors import BridgeError
from skype_bridge.headers import HeaderStore
from skype_bridge.models.config import BridgeConfig
from skype_bridge.models.message import BotMessage, SendBody
from skype_bridge.transport.http import HttpClient

logger = logging.getLogger(__name__)

FORMATTERS = {
    "bold": "<b>{text}</b>",
    "italic": "<i>{text}</i>",
}


def wrap_formatter(kind: str, *text: str) -> str:
    """Wrap text in markup by name; unknown names return the joined text."""
    joined = " ".join(text)
    template = FORMATTERS.get(kind)
    if template is None:
        logger.debug("formatter %s not found", kind)
        return joined
    return template.format(text=joined)


def encode(text: str) -> str:
    return html.escape(text, quote=True)


def attribution(user: str, source: str) -> str:
    return f"{wrap_formatter('bold', user)}@{source}: "


class OutboundSender:
    def __init__(self, http: HttpClient, store: HeaderStore, config: BridgeConfig):
        self._http = http
        self._store = store
        self._config = config
        self._last_id = 0

    def send_url(self, room: str) -> str:
        return f"{self._config.gateway}/v1/users/ME/conversations/{room}/messages"

    def next_client_message_id(self) -> str:
        """Millisecond timestamp, bumped so consecutive ids always increase."""
        now = int(time.time() * 1000)
        self._last_id = max(now, self._last_id + 1)
        return str(self._last_id)

    def build_body(
        self,
        message: Union[str, BotMessage],
        user: Optional[str] = None,
        source: Optional[str] = None,
    ) -> SendBody:
        prefix = attribution(user, source) if user and source else ""
        if isinstance(message, BotMessage):
            content = prefix + message.content
        else:
            content = encode(encode(prefix + message))
        return SendBody(
            imdisplayname=self._config.display_name or "",
            clientmessageid=self.next_client_message_id(),
            content=content,
        )

    async def send(
        self,
        room: str,
        message: Union[str, BotMessage],
        user: Optional[str] = None,
        source: Optional[str] = None,
    ) -> bool:
        """Post a message to `room`. Returns False when it was dropped."""
        url = self.send_url(room)
        body = self.build_body(message, user=user, source=source)
        logger.debug("send %s", body.content)
        try:
            resp = await self._http.post(url, self._store.snapshot(), body.model_dump(by_alias=True))
        except BridgeError as e:
            logger.error("Send request failed: %s", e)
            return False
        if resp.status_code not in (200, 201):
            logger.error("Send request to %s returned status %s: %s", url, resp.status_code, resp.text[:200])
            return False
        return True

    async def forward(self, room: str, user: str, message: Union[str, BotMessage], source: str) -> bool:
        """Send with a `<b>user</b>@source: ` attribution prefix."""
        return await self.send(room, message, user=user, source=source)
