"""
Turns raw poll events into canonical chat messages.

Filter pipeline, any stage may drop the event:
- only NewMessage resources of type Text / RichText
- sender taken from the contacts path, transport prefix stripped
- own messages dropped (no echo)
- only the configured room
- content entity-decoded and markup-stripped in one HTML parse
"""

import logging
import warnings
from typing import Any, Optional, Union

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

from skype_bridge.models.config import BridgeConfig
from skype_bridge.models.events import TEXT_MESSAGE_TYPES, PollEvent, ResourceType
from skype_bridge.models.message import CanonicalMessage

logger = logging.getLogger(__name__)

CONTACT_PREFIX = "8:"


def _path_tail(link: Optional[str], marker: str) -> Optional[str]:
    if not link or marker not in link:
        return None
    return link.split(marker, 1)[1]


def sender_id(link: Optional[str]) -> Optional[str]:
    """'.../contacts/8:alice' -> 'alice'"""
    tail = _path_tail(link, "/contacts/")
    if tail is None:
        return None
    if tail.startswith(CONTACT_PREFIX):
        tail = tail[len(CONTACT_PREFIX):]
    return tail


def conversation_id(link: Optional[str]) -> Optional[str]:
    """'.../conversations/19:abc@thread.skype' -> '19:abc@thread.skype'"""
    return _path_tail(link, "/conversations/")


def plain_text(content: str) -> str:
    """Decode entities once and drop all markup tags."""
    with warnings.catch_warnings():
        # Messages that are only a URL or a file name are still chat text.
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        return BeautifulSoup(content, "html.parser").get_text()


def normalize(event: Union[PollEvent, dict[str, Any]], config: BridgeConfig) -> Optional[CanonicalMessage]:
    if not isinstance(event, PollEvent):
        event = PollEvent.model_validate(event)

    resource = event.resource
    if event.resource_type != ResourceType.NEW_MESSAGE or resource is None:
        return None
    if resource.messagetype not in TEXT_MESSAGE_TYPES:
        return None

    sender = sender_id(resource.sender)
    if not sender:
        logger.debug("dropping message without sender: %s", resource.sender)
        return None
    if sender == config.username:
        return None

    room = conversation_id(resource.conversation_link)
    if room != config.room:
        logger.debug("got message in room %s, not %s", room, config.room)
        return None

    if not resource.content:
        logger.warning("message from %s has no content: %r", sender, event)

    text = plain_text(resource.content or "")
    logger.debug("message from %s", sender)
    return CanonicalMessage(sender=sender, room=room, text=text)
