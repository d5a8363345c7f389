"""
Poll stream events: the eventMessages array of a poll response.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResourceType:
    NEW_MESSAGE = "NewMessage"
    USER_PRESENCE = "UserPresence"
    ENDPOINT_PRESENCE = "EndpointPresence"
    CONVERSATION_UPDATE = "ConversationUpdate"
    THREAD_UPDATE = "ThreadUpdate"


class MessageType:
    TEXT = "Text"
    RICH_TEXT = "RichText"
    TYPING = "Control/Typing"
    CLEAR_TYPING = "Control/ClearTyping"


TEXT_MESSAGE_TYPES = {MessageType.TEXT, MessageType.RICH_TEXT}


class EventResource(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    messagetype: Optional[str] = None
    content: Optional[str] = None
    sender: Optional[str] = Field(default=None, alias="from")   # ".../contacts/8:<id>"
    conversation_link: Optional[str] = Field(default=None, alias="conversationLink")
    imdisplayname: Optional[str] = None


class PollEvent(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    id: Optional[Any] = None
    resource_type: Optional[str] = Field(default=None, alias="resourceType")
    resource_link: Optional[str] = Field(default=None, alias="resourceLink")
    time: Optional[Any] = None
    resource: Optional[EventResource] = None


class PollResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    error_code: Optional[Any] = Field(default=None, alias="errorCode")
    event_messages: Optional[list[PollEvent]] = Field(default=None, alias="eventMessages")
