"""
Skype bridge error types.
"""

from typing import Any, Optional


class BridgeError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class AcquisitionTimeout(BridgeError):
    """Login did not yield session credentials before the watchdog fired."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("acquisition_timeout", message, details)


class CredentialsNotReady(BridgeError):
    def __init__(self, message: str = "Session credentials have not been captured yet"):
        super().__init__("credentials_not_ready", message)


class TransportError(BridgeError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("transport_error", message, details)
