"""
WebSocket Server for the Weather Room

Accepts sessions from the mediator, parses their frames into envelopes,
hands them to the RoomService and delivers the resulting messages either
to the originating session or to every session in the room.
"""

import logging
from http import HTTPStatus
from typing import Set

import websockets
import websockets.exceptions

from .room_service import RoomService
from .schemas import Message, create_ack_message, parse_envelope

logger = logging.getLogger(__name__)

HEALTH_PATH = "/health"


class WebSocketServer:
    """
    WebSocket server for handling mediator sessions.

    Each session is served by its own handler coroutine, so frames from one
    session are processed in order while sessions run concurrently.
    """

    def __init__(
        self,
        room_service: RoomService,
        host: str,
        port: int,
        path: str = "/room",
    ):
        """
        Initialize the WebSocket server.

        Args:
            room_service: The service that handles envelopes
            host: Host address to bind to
            port: Port to listen on
            path: Path of the room endpoint
        """
        self.room_service = room_service
        self.host = host
        self.port = port
        self.path = path
        self.clients: Set = set()
        self.server = None

    async def start(self):
        """Start the WebSocket server."""
        self.server = await websockets.serve(
            self.handle_client,
            self.host,
            self.port,
            process_request=self.process_request,
        )
        logger.info(
            f"WebSocket server started on ws://{self.host}:{self.port}{self.path}"
        )

    async def stop(self):
        """Stop the WebSocket server."""
        if self.server:
            self.server.close()
            await self.server.wait_closed()
            logger.info("WebSocket server stopped")

    def process_request(self, connection, request):
        """
        Answer plain HTTP requests before the WebSocket handshake.

        Returns:
            A response for the health check or unknown paths, None to
            continue with the handshake
        """
        path = request.path.split("?", 1)[0]
        if path == HEALTH_PATH:
            return connection.respond(HTTPStatus.OK, "OK\n")
        if path != self.path:
            return connection.respond(HTTPStatus.NOT_FOUND, "Not Found\n")
        return None

    async def handle_client(self, websocket):
        """
        Handle a mediator session.

        Args:
            websocket: The WebSocket connection
        """
        self.clients.add(websocket)
        client_id = id(websocket)
        logger.info(f"Session {client_id} connected")

        try:
            await self._send(websocket, create_ack_message())
            async for message in websocket:
                await self.process_message(websocket, message)
        except websockets.exceptions.ConnectionClosed:
            logger.info(f"Session {client_id} disconnected")
        except Exception as e:
            logger.error(f"Error handling session {client_id}: {e}")
        finally:
            self.clients.discard(websocket)

    async def process_message(self, websocket, message):
        """
        Process an incoming frame from a session.

        Args:
            websocket: The WebSocket connection
            message: The frame text
        """
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")

        try:
            envelope = parse_envelope(message)
        except ValueError as e:
            logger.warning(f"Dropping malformed frame: {e}")
            return

        async def send(outbound: Message):
            await self.send_message(websocket, outbound)

        try:
            await self.room_service.handle_message(envelope, send)
        except websockets.exceptions.ConnectionClosed:
            raise
        except Exception as e:
            logger.error(
                f"Error processing {envelope.target} message {message[:80]!r}: {e}",
                exc_info=True,
            )

    async def send_message(self, websocket, message: Message):
        """
        Deliver a message: broadcasts go to every session, anything else
        to the session it came from.
        """
        if message.is_broadcast:
            await self.broadcast(message)
        else:
            await self._send(websocket, message)

    async def broadcast(self, message: Message):
        """Broadcast a message to all sessions."""
        frame = message.to_frame()
        for websocket in list(self.clients):
            try:
                await websocket.send(frame)
            except websockets.exceptions.ConnectionClosed:
                pass

    async def _send(self, websocket, message: Message):
        await websocket.send(message.to_frame())
