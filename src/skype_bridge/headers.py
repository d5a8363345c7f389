"""
Header store for the credential headers captured at login.

Written once when acquisition completes, read by every request afterwards.
All access happens on the event loop thread, so replace-and-copy is enough.
"""

from typing import Any, Iterable, Mapping, Optional, Union

from skype_bridge.errors import CredentialsNotReady
from skype_bridge.models.message import SessionCredentials

# Request-scoped fields that must never leak from the captured request.
TRANSPORT_SCOPED = ("ContextId", "Content-Length")

RawHeaders = Union[Mapping[str, str], Iterable[Mapping[str, Any]]]


def unwind(raw: RawHeaders) -> dict[str, str]:
    """Flatten browser header entries ([{name, value}, ...]) into a dict."""
    if isinstance(raw, Mapping):
        return {str(k): str(v) for k, v in raw.items()}
    return {str(h["name"]): str(h["value"]) for h in raw}


def _drop(headers: dict[str, str], name: str) -> None:
    lowered = name.lower()
    for key in [k for k in headers if k.lower() == lowered]:
        del headers[key]


class HeaderStore:
    def __init__(self) -> None:
        self._headers: Optional[dict[str, str]] = None
        self._token: Optional[str] = None

    @property
    def populated(self) -> bool:
        return self._headers is not None

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def update(self, raw: RawHeaders) -> None:
        """Replace the stored header set wholesale."""
        self._headers = unwind(raw)

    def inject(self, name: str, value: str) -> None:
        """Overwrite a header whatever casing the captured request used."""
        if self._headers is None:
            raise CredentialsNotReady()
        headers = dict(self._headers)
        _drop(headers, name)
        headers[name] = value
        self._headers = headers

    def snapshot(self) -> dict[str, str]:
        """Copy of the headers with transport-scoped fields removed."""
        if self._headers is None:
            raise CredentialsNotReady()
        headers = dict(self._headers)
        for name in TRANSPORT_SCOPED:
            _drop(headers, name)
        return headers

    def credentials(self) -> SessionCredentials:
        return SessionCredentials(headers=self.snapshot(), skype_token=self._token)
