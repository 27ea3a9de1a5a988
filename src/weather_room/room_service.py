"""
Room Service for the Weather Room

Handles every envelope the mediator sends to this room.
Supports:
    - roomHello / roomJoin: describe the room to the arriving player
    - roomGoodbye / roomPart: say goodbye to the leaving player
    - room: chat messages and commands

Architecture:
    - Async/await for non-blocking I/O
    - Stateless apart from the shared RoomDescription, so sessions can be
      served concurrently
"""

import logging

from .commands import COMMAND_MARKER, CommandInterpreter, Send
from .room_state import RoomDescription
from .schemas import (
    Envelope,
    MessageKind,
    create_broadcast_event,
    create_chat_message,
    create_location_message,
)
from .weather import WeatherClient

logger = logging.getLogger(__name__)

HELLO_ALL = "%s is here"
HELLO_USER = "Welcome!"
GOODBYE_ALL = "%s has gone"
GOODBYE_USER = "Bye!"


class RoomService:
    """
    Main room service for handling envelopes from players
    """

    def __init__(
        self,
        room_id: str,
        room: RoomDescription,
        weather_client: WeatherClient,
    ):
        """
        Initialize the room service

        Args:
            room_id: Identifier of this room
            room: Description of the room, shared by all sessions
            weather_client: Client used by the /weatherLike command
        """
        self.room_id = room_id
        self.room = room
        self.interpreter = CommandInterpreter(room, weather_client)

        logger.info(f"RoomService initialized for room: {room_id}")

    async def handle_message(self, envelope: Envelope, send: Send):
        """
        Entry point for handling an inbound envelope

        Args:
            envelope: The parsed envelope
            send: Coroutine that delivers an outbound message
        """
        if envelope.kind is MessageKind.OTHER:
            logger.debug(f"Discarding message with target '{envelope.target}'")
            return

        user_id = envelope.user_id
        username = envelope.username
        if not user_id or username is None:
            logger.warning(
                f"Discarding {envelope.target} message without userId "
                f"or username: {envelope.body}"
            )
            return

        if envelope.target_id and envelope.target_id != self.room_id:
            logger.debug(
                f"Message addressed to room {envelope.target_id}, "
                f"handling it in {self.room_id}"
            )

        logger.debug(
            f"Received message from {username}({user_id}): {envelope.body}"
        )

        if envelope.kind is MessageKind.HELLO:
            await send(create_location_message(user_id, self.room))
            await send(
                create_broadcast_event(
                    HELLO_ALL % username, user_id, HELLO_USER
                )
            )
        elif envelope.kind is MessageKind.JOIN:
            await send(create_location_message(user_id, self.room))
        elif envelope.kind is MessageKind.GOODBYE:
            await send(
                create_broadcast_event(
                    GOODBYE_ALL % username, user_id, GOODBYE_USER
                )
            )
        elif envelope.kind is MessageKind.PART:
            pass
        elif envelope.kind is MessageKind.CHAT_OR_COMMAND:
            await self.handle_chat(user_id, username, envelope.content, send)

    async def handle_chat(
        self, user_id: str, username: str, content: str, send: Send
    ):
        """
        Handles chat content: commands go to the interpreter, anything
        else is echoed to the room as is.
        """
        if not isinstance(content, str) or not content:
            logger.debug(f"Ignoring empty chat message from {username}")
            return

        if content.startswith(COMMAND_MARKER):
            await self.interpreter.process_command(
                user_id, username, content, send
            )
        else:
            await send(create_chat_message(username, content))
