"""
Bridge configuration.
"""

from typing import Optional

from pydantic import BaseModel, model_validator

from skype_bridge.transport.http import DEFAULT_GATEWAY_URL, DEFAULT_PING_URL


class BridgeConfig(BaseModel):
    username: str
    password: str = ""
    room: str
    display_name: Optional[str] = None
    microsoft: bool = False               # federated Microsoft account login
    gateway_url: str = DEFAULT_GATEWAY_URL
    ping_url: str = DEFAULT_PING_URL
    headless: bool = True
    login_timeout: float = 50.0
    active_interval: float = 10.0

    @model_validator(mode="after")
    def _default_display_name(self) -> "BridgeConfig":
        if not self.display_name:
            self.display_name = self.username
        return self

    @property
    def gateway(self) -> str:
        return self.gateway_url.rstrip("/")
