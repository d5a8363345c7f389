"""Keepalive: active and ping signals are fire-and-forget."""

import asyncio
import json

import httpx
import pytest

from skype_bridge.headers import HeaderStore
from skype_bridge.keepalive import Keepalive
from skype_bridge.transport.http import HttpClient


def make_keepalive(handler) -> tuple[Keepalive, HttpClient]:
    http = HttpClient(transport=httpx.MockTransport(handler))
    store = HeaderStore()
    store.update({"RegistrationToken": "reg", "ContextId": "7"})
    store.set_token("skype-token")
    return Keepalive(http, store), http


@pytest.mark.asyncio
async def test_active_posts_timeout_body():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201)

    keepalive, http = make_keepalive(handler)
    assert await keepalive.active() is True

    request = seen[0]
    assert str(request.url).endswith("/v1/users/ME/endpoints/SELF/active")
    assert json.loads(request.content) == {"timeout": 12}
    assert "ContextId" not in request.headers
    await http.close()


@pytest.mark.asyncio
async def test_ping_carries_session_token():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    keepalive, http = make_keepalive(handler)
    assert await keepalive.ping() is True

    assert str(seen[0].url) == "https://web.skype.com/api/v1/session-ping"
    assert seen[0].headers["X-Skypetoken"] == "skype-token"
    await http.close()


@pytest.mark.asyncio
async def test_signal_failures_are_not_raised(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    keepalive, http = make_keepalive(handler)
    assert await keepalive.active() is False
    assert await keepalive.ping() is False
    assert "active failed" in caplog.text
    assert "ping failed" in caplog.text
    await http.close()


@pytest.mark.asyncio
async def test_active_timer_signals_repeatedly():
    count = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal count
        count += 1
        return httpx.Response(201)

    keepalive, http = make_keepalive(handler)
    timer = asyncio.get_running_loop().create_task(keepalive.run_active_timer(0.01))
    await asyncio.sleep(0.1)
    timer.cancel()
    await keepalive.drain()

    assert count >= 3
    await http.close()
