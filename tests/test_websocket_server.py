"""
Tests for the WebSocket Server

Tests frame handling and delivery with mock sessions; no sockets are
opened.
"""

import asyncio
import json
import threading
from http import HTTPStatus

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import websockets

from weather_room import RoomDescription, RoomService, WeatherClient, WebSocketServer
from weather_room.schemas import create_chat_message, create_specific_event


class MockWebSocket:
    """Mock WebSocket that records sent frames and yields queued ones."""

    def __init__(self, incoming=None):
        self.sent_messages = []
        self._incoming = list(incoming or [])

    async def send(self, message):
        self.sent_messages.append(message)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._incoming:
            raise StopAsyncIteration
        return self._incoming.pop(0)


def body(frame):
    return json.loads(frame[frame.index("{"):])


@pytest.fixture
def ws_server():
    room = RoomDescription()
    room.add_command("/weatherLike", "What's the weather like at <zipcode>")
    service = RoomService("weather-1", room, MagicMock())
    return WebSocketServer(service, "localhost", 9080)


@pytest.mark.asyncio
async def test_handle_client_sends_ack_and_processes_frames(ws_server):
    websocket = MockWebSocket(
        ['roomHello,weather-1,{"userId":"u1","username":"Alice","version":2}']
    )

    await ws_server.handle_client(websocket)

    frames = websocket.sent_messages
    assert frames[0] == 'ack,{"version": [1, 2]}'
    assert frames[1].startswith("player,u1,")
    assert body(frames[1])["type"] == "location"
    assert frames[2].startswith("player,*,")
    assert body(frames[2])["content"]["*"] == "Alice is here"
    # Session is unregistered once it ends
    assert websocket not in ws_server.clients


@pytest.mark.asyncio
async def test_broadcast_reaches_every_session(ws_server):
    alice = MockWebSocket()
    bob = MockWebSocket()
    ws_server.clients.update({alice, bob})

    await ws_server.process_message(
        alice, 'room,weather-1,{"userId":"u1","username":"Alice","content":"hi"}'
    )

    assert len(alice.sent_messages) == 1
    assert len(bob.sent_messages) == 1
    assert body(bob.sent_messages[0])["content"] == "hi"


@pytest.mark.asyncio
async def test_specific_message_only_reaches_sender(ws_server):
    alice = MockWebSocket()
    bob = MockWebSocket()
    ws_server.clients.update({alice, bob})

    await ws_server.send_message(alice, create_specific_event("u1", "psst"))

    assert len(alice.sent_messages) == 1
    assert bob.sent_messages == []


@pytest.mark.asyncio
async def test_broadcast_skips_closed_sessions(ws_server):
    closed = AsyncMock()
    closed.send.side_effect = websockets.exceptions.ConnectionClosedOK(None, None)
    open_ws = MockWebSocket()
    ws_server.clients.update({closed, open_ws})

    await ws_server.broadcast(create_chat_message("Alice", "hello"))

    assert len(open_ws.sent_messages) == 1


@pytest.mark.asyncio
async def test_malformed_frame_is_dropped(ws_server):
    websocket = MockWebSocket()

    await ws_server.process_message(websocket, "this is not a frame")

    assert websocket.sent_messages == []


@pytest.mark.asyncio
async def test_binary_frame_is_decoded(ws_server):
    websocket = MockWebSocket()
    ws_server.clients.add(websocket)

    await ws_server.process_message(
        websocket,
        b'roomJoin,weather-1,{"userId":"u1","username":"Alice","version":2}',
    )

    assert body(websocket.sent_messages[0])["type"] == "location"


@pytest.mark.asyncio
async def test_service_error_does_not_escape(ws_server, caplog):
    websocket = MockWebSocket()
    ws_server.room_service.handle_message = AsyncMock(
        side_effect=RuntimeError("boom")
    )

    await ws_server.process_message(
        websocket, 'roomJoin,weather-1,{"userId":"u1","username":"Alice"}'
    )

    assert websocket.sent_messages == []

    record = next(r for r in caplog.records if r.levelname == "ERROR")
    assert "roomJoin,weather-1,{\"userId\":\"u1\"" in record.getMessage()
    assert "boom" in record.getMessage()
    assert record.exc_info is not None


def test_process_request_health(ws_server):
    connection = MagicMock()
    request = MagicMock(path="/health")

    response = ws_server.process_request(connection, request)

    connection.respond.assert_called_once_with(HTTPStatus.OK, "OK\n")
    assert response is connection.respond.return_value


def test_process_request_unknown_path(ws_server):
    connection = MagicMock()

    ws_server.process_request(connection, MagicMock(path="/elsewhere"))

    connection.respond.assert_called_once_with(
        HTTPStatus.NOT_FOUND, "Not Found\n"
    )


def test_process_request_room_path_continues_handshake(ws_server):
    connection = MagicMock()

    assert ws_server.process_request(connection, MagicMock(path="/room?x=1")) is None
    connection.respond.assert_not_called()


# Concurrent sessions


class QueueWebSocket:
    """Mock WebSocket whose incoming frames are fed through a queue."""

    def __init__(self):
        self.sent_messages = []
        self.incoming = asyncio.Queue()

    async def send(self, message):
        self.sent_messages.append(message)

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self.incoming.get()
        if frame is None:
            raise StopAsyncIteration
        return frame


async def wait_for_frame(websocket, predicate, timeout=2.0):
    """Poll until a sent frame matches predicate."""
    deadline = asyncio.get_running_loop().time() + timeout
    while asyncio.get_running_loop().time() < deadline:
        for frame in websocket.sent_messages:
            if predicate(frame):
                return frame
        await asyncio.sleep(0.01)
    raise AssertionError("expected frame was not sent")


@pytest.mark.asyncio
async def test_slow_weather_lookup_only_delays_its_own_session():
    weather_client = WeatherClient("https://weather.example", timeout=3)
    ws_server = WebSocketServer(
        RoomService("weather-1", RoomDescription(), weather_client),
        "localhost",
        9080,
    )

    entered = threading.Event()
    release = threading.Event()

    def slow_get(*args, **kwargs):
        entered.set()
        release.wait(3)
        response = MagicMock()
        response.status_code = 200
        response.json.return_value = {
            "observation": {
                "obs_name": "Cary",
                "wx_phrase": "Fair",
                "temp": 70,
                "wdir_cardinal": "N",
                "wspd": 3,
            }
        }
        return response

    alice = QueueWebSocket()
    bob = QueueWebSocket()

    with patch("weather_room.weather.requests.get", side_effect=slow_get):
        sessions = [
            asyncio.create_task(ws_server.handle_client(alice)),
            asyncio.create_task(ws_server.handle_client(bob)),
        ]
        try:
            await alice.incoming.put(
                'room,weather-1,{"userId":"u1","username":"Alice",'
                '"content":"/weatherlike 12345"}'
            )
            while not entered.is_set():
                await asyncio.sleep(0.01)

            await bob.incoming.put(
                'room,weather-1,{"userId":"u2","username":"Bob",'
                '"content":"/look"}'
            )
            location = await wait_for_frame(
                bob, lambda frame: frame.startswith("player,u2,")
            )
            assert body(location)["type"] == "location"
            # Alice's lookup is still waiting on the provider
            assert not any("TADA" in frame for frame in bob.sent_messages)

            release.set()
            report = await wait_for_frame(bob, lambda frame: "TADA" in frame)
            assert body(report)["content"]["*"] == (
                "What's the weatherLike? Alice: 12345"
            )
        finally:
            release.set()
            await alice.incoming.put(None)
            await bob.incoming.put(None)
            await asyncio.gather(*sessions)
            weather_client.close()
