"""
skype-bridge: relay chat between a Skype group conversation and a host app.

Logs in through the Skype web client in a headless browser, then long-polls
the messaging gateway with the captured session headers.
"""

from skype_bridge.client import SkypeBridge
from skype_bridge.auth import CredentialAcquirer
from skype_bridge.headers import HeaderStore
from skype_bridge.keepalive import Keepalive
from skype_bridge.poller import PollLoop
from skype_bridge.normalizer import normalize
from skype_bridge.outbound import OutboundSender, wrap_formatter
from skype_bridge.errors import BridgeError, AcquisitionTimeout, CredentialsNotReady, TransportError
from skype_bridge.models.config import BridgeConfig
from skype_bridge.models.message import BotMessage, CanonicalMessage

__version__ = "0.1.0"
__all__ = [
    "SkypeBridge",
    "CredentialAcquirer",
    "HeaderStore",
    "Keepalive",
    "PollLoop",
    "normalize",
    "OutboundSender",
    "wrap_formatter",
    "BridgeError",
    "AcquisitionTimeout",
    "CredentialsNotReady",
    "TransportError",
    "BridgeConfig",
    "BotMessage",
    "CanonicalMessage",
]
