"""Poll loop: serialization, ordering, soft and fatal errors."""

import asyncio
import json

import httpx
import pytest

from skype_bridge.errors import TransportError
from skype_bridge.headers import HeaderStore
from skype_bridge.keepalive import Keepalive
from skype_bridge.models.config import BridgeConfig
from skype_bridge.models.message import CanonicalMessage
from skype_bridge.poller import PollLoop
from skype_bridge.transport.http import HttpClient

GATEWAY = "https://client-s.gateway.messenger.live.com/v1/users/ME"


def event(sender: str, text: str, room: str = "room1") -> dict:
    return {
        "resourceType": "NewMessage",
        "resource": {
            "messagetype": "RichText",
            "from": f"{GATEWAY}/contacts/8:{sender}",
            "conversationLink": f"{GATEWAY}/conversations/{room}",
            "content": text,
        },
    }


class Gateway:
    """Scripted poll responses; raises a transport error once they run out."""

    def __init__(self, bodies: list[dict]):
        self.bodies = list(bodies)
        self.polls: list[httpx.Request] = []
        self.actives = 0
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/active"):
            self.actives += 1
            return httpx.Response(201)
        self.polls.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.005)
            if not self.bodies:
                raise httpx.ReadTimeout("gateway gone", request=request)
            return httpx.Response(200, content=json.dumps(self.bodies.pop(0)).encode())
        finally:
            self.in_flight -= 1


def make_loop(gateway: Gateway, received: list) -> tuple[PollLoop, Keepalive, HttpClient]:
    http = HttpClient(transport=httpx.MockTransport(gateway))
    store = HeaderStore()
    store.update({"RegistrationToken": "reg", "Content-Length": "0"})
    config = BridgeConfig(username="bridgeuser", room="room1")
    keepalive = Keepalive(http, store, config.gateway_url)
    return PollLoop(http, store, keepalive, config, on_message=received.append), keepalive, http


@pytest.mark.asyncio
async def test_events_dispatched_in_array_order():
    received: list[CanonicalMessage] = []
    gateway = Gateway([{"eventMessages": [event("a", "e1"), event("b", "e2"), event("c", "e3")]}])
    loop, keepalive, http = make_loop(gateway, received)

    assert await loop.poll_once() == 3

    assert [m.text for m in received] == ["e1", "e2", "e3"]
    await keepalive.drain()
    await http.close()


@pytest.mark.asyncio
async def test_one_poll_in_flight_and_transport_error_is_fatal():
    received: list[CanonicalMessage] = []
    bodies = [{"eventMessages": [event("a", str(i))]} for i in range(5)]
    gateway = Gateway(bodies)
    loop, keepalive, http = make_loop(gateway, received)

    with pytest.raises(TransportError):
        await loop.run()

    assert gateway.max_in_flight == 1
    assert len(gateway.polls) == 6
    assert [m.text for m in received] == ["0", "1", "2", "3", "4"]
    await keepalive.drain()
    assert gateway.actives == 5
    await http.close()


@pytest.mark.asyncio
async def test_error_code_is_soft(caplog):
    received: list[CanonicalMessage] = []
    gateway = Gateway([{"errorCode": 729}, {"eventMessages": [event("a", "after")]}])
    loop, keepalive, http = make_loop(gateway, received)

    assert await loop.poll_once() == 0
    assert await loop.poll_once() == 1

    assert "errorCode 729" in caplog.text
    assert [m.text for m in received] == ["after"]
    await keepalive.drain()
    assert gateway.actives == 2
    await http.close()


@pytest.mark.asyncio
async def test_poll_headers_carry_fresh_context_id():
    gateway = Gateway([{}, {}])
    loop, keepalive, http = make_loop(gateway, [])

    await loop.poll_once()
    await loop.poll_once()

    first, second = gateway.polls
    assert first.url.path == "/v1/users/ME/endpoints/SELF/subscriptions/0/poll"
    assert first.headers["RegistrationToken"] == "reg"
    assert int(first.headers["ContextId"]) <= int(second.headers["ContextId"])
    await keepalive.drain()
    await http.close()


@pytest.mark.asyncio
async def test_filtered_events_are_skipped():
    received: list[CanonicalMessage] = []
    gateway = Gateway([{"eventMessages": [
        {"resourceType": "UserPresence", "resource": {}},
        event("bridgeuser", "echo"),
        event("a", "elsewhere", room="room2"),
        event("a", "kept"),
    ]}])
    loop, keepalive, http = make_loop(gateway, received)

    assert await loop.poll_once() == 1
    assert [m.text for m in received] == ["kept"]
    await keepalive.drain()
    await http.close()


@pytest.mark.asyncio
async def test_async_handler_is_awaited_before_next_event():
    order: list[str] = []

    async def handler(message: CanonicalMessage) -> None:
        await asyncio.sleep(0.001)
        order.append(message.text)

    gateway = Gateway([{"eventMessages": [event("a", "1"), event("a", "2")]}])
    loop, keepalive, http = make_loop(gateway, [])
    loop.on_message = handler

    await loop.poll_once()
    assert order == ["1", "2"]
    await keepalive.drain()
    await http.close()


@pytest.mark.asyncio
async def test_failed_status_without_body_is_logged(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/active"):
            return httpx.Response(201)
        return httpx.Response(503)

    http = HttpClient(transport=httpx.MockTransport(handler))
    store = HeaderStore()
    store.update({"RegistrationToken": "reg"})
    config = BridgeConfig(username="bridgeuser", room="room1")
    keepalive = Keepalive(http, store, config.gateway_url)
    loop = PollLoop(http, store, keepalive, config, on_message=[].append)

    assert await loop.poll_once() == 0
    assert "poll returned HTTP 503" in caplog.text
    await keepalive.drain()
    await http.close()
