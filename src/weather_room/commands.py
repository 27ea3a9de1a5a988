"""
Command Interpreter

Handles chat content that starts with the command marker (``/``):
movement, looking around, and the room's custom ``/weatherLike`` command.
"""

import logging
import re
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

from .exits import pretty_direction, resolve_exit
from .room_state import RoomDescription
from .schemas import (
    Message,
    create_broadcast_event,
    create_exit_message,
    create_location_message,
    create_specific_event,
)
from .weather import WeatherClient

logger = logging.getLogger(__name__)

COMMAND_MARKER = "/"
ZIP_LENGTH = 5
_ZIP_PATTERN = re.compile(r"[0-9]{5}")

LOOK_UNKNOWN = "It doesn't look interesting"
UNKNOWN_COMMAND = (
    "This room is run by highly trained hamsters. Sadly, their training is "
    "limited and they don't understand `%s`"
)
UNSPECIFIED_DIRECTION = (
    "You didn't say which way you wanted to go so you just stand "
    "there...hoping the wind will move you.  It doesn't."
)
UNKNOWN_DIRECTION = "There isn't a door in that direction (%s)"
GO_FORTH = "You head %s"

WEATHER_QUESTION = "What's the weatherLike? %s"
WEATHER_HUM = "The instruments hum and the lights fade in and out.  \n\n"
WEATHER_USAGE = (
    "You concentrate really, really hard.\n\nYou quietly look around and "
    "glance at the instrument panel and read:\n\n 'It's room temperature.  "
    "Try typing a zip code with the command.'"
)
WEATHER_TOO_SHORT = (
    "Suddenly you hear a loud CLANK!  You look at the instrument panel and "
    "read:\n\n 'Whoopsie!  You need at least 5 digits for a valid zip code.  "
    "Try again.'  "
)
WEATHER_NOT_NUMERIC = (
    "Suddenly you hear a loud KER-THUNK!  You look at the instrument panel "
    "and read:\n\n Are you trying to choke me?  You need 5 NUMBERS for a "
    "valid zip code.  I'm not that smart.  Try again.  "
)

Send = Callable[[Message], Awaitable[None]]


class Command(Enum):
    """Commands understood by this room."""

    GO = "/go"
    LOOK = "/look"
    EXAMINE = "/examine"
    WEATHER_LIKE = "/weatherlike"
    UNKNOWN = ""

    @classmethod
    def from_word(cls, word: str) -> "Command":
        for command in cls:
            if command.value == word and command is not cls.UNKNOWN:
                return command
        return cls.UNKNOWN


def split_command(content: str) -> Tuple[str, Optional[str]]:
    """
    Split command content into its first word and the remainder.

    The content is lower-cased and trimmed; the remainder is None when
    nothing follows the first word.
    """
    parts = content.lower().strip().split(None, 1)
    if not parts:
        return "", None

    first_word = parts[0]
    remainder = parts[1].strip() if len(parts) > 1 else None
    return first_word, remainder or None


class CommandInterpreter:
    """
    Turns player commands into outbound messages.

    Holds no per-request state; the room description and weather client
    are shared by every session.
    """

    def __init__(self, room: RoomDescription, weather_client: WeatherClient):
        self.room = room
        self.weather_client = weather_client

    async def process_command(
        self, user_id: str, username: str, content: str, send: Send
    ):
        """
        Process a command from a player.

        Args:
            user_id: Id of the player issuing the command
            username: Current display name of the player
            content: Original command text, e.g. ``/go North``
            send: Coroutine that delivers an outbound message
        """
        first_word, remainder = split_command(content)
        command = Command.from_word(first_word)
        logger.debug(f"Command {command.name} from {username}({user_id})")

        if command is Command.GO:
            await self._handle_go(user_id, remainder, send)
        elif command in (Command.LOOK, Command.EXAMINE):
            await self._handle_look(user_id, remainder, send)
        elif command is Command.WEATHER_LIKE:
            await self._handle_weather_like(user_id, username, remainder, send)
        else:
            await send(
                create_specific_event(user_id, UNKNOWN_COMMAND % content)
            )

    async def _handle_go(self, user_id: str, remainder: Optional[str], send: Send):
        exit_id = resolve_exit(remainder)

        if exit_id is None:
            if remainder is None:
                text = UNSPECIFIED_DIRECTION
            else:
                text = UNKNOWN_DIRECTION % remainder
            await send(create_specific_event(user_id, text))
            return

        await send(
            create_exit_message(
                user_id, exit_id, GO_FORTH % pretty_direction(exit_id)
            )
        )

    async def _handle_look(
        self, user_id: str, remainder: Optional[str], send: Send
    ):
        # Looking at the room itself shows the full location snapshot
        if remainder is None or "room" in remainder:
            await send(create_location_message(user_id, self.room))
        else:
            await send(create_specific_event(user_id, LOOK_UNKNOWN))

    async def _handle_weather_like(
        self,
        user_id: str,
        username: str,
        remainder: Optional[str],
        send: Send,
    ):
        await send(
            create_broadcast_event(
                WEATHER_QUESTION % username, user_id, WEATHER_HUM
            )
        )

        if remainder is None:
            await send(
                create_broadcast_event(
                    WEATHER_QUESTION % username, user_id, WEATHER_USAGE
                )
            )
            return

        question = WEATHER_QUESTION % f"{username}: {remainder}"
        if len(remainder) < ZIP_LENGTH:
            await send(
                create_broadcast_event(question, user_id, WEATHER_TOO_SHORT)
            )
            return

        zip_code = remainder[:ZIP_LENGTH]
        if not _ZIP_PATTERN.fullmatch(zip_code):
            await send(
                create_broadcast_event(question, user_id, WEATHER_NOT_NUMERIC)
            )
            return

        report = await self.weather_client.lookup(zip_code)
        await send(
            create_broadcast_event(
                WEATHER_QUESTION % f"{username}: {zip_code}",
                user_id,
                report.text,
            )
        )
