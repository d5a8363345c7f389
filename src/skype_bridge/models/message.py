"""
Chat message models: inbound canonical form and outbound send body.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CanonicalMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    sender: str
    room: str
    text: str


class BotMessage(BaseModel):
    """Pre-formatted markup from an automated source, sent without encoding."""
    content: str


class SendBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_mentions: bool = Field(default=False, alias="Has-Mentions")
    messagetype: str = "RichText"
    imdisplayname: str = ""
    clientmessageid: str
    contenttype: str = "text"
    content: str = ""


class SessionCredentials(BaseModel):
    headers: dict[str, str]
    skype_token: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None
