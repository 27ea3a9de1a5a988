"""
Outbound Event Definitions

Contains functions for creating the standardized messages the room sends
to players: location snapshots, broadcast and specific events, exits and
chat echoes.
"""

import itertools
from typing import Optional

from ..room_state import RoomDescription
from .envelope import BROADCAST, Message

BOOKMARK_PREFIX = "room-"
PROTOCOL_VERSIONS = [1, 2]

_bookmarks = itertools.count(1)


def _next_bookmark() -> str:
    return f"{BOOKMARK_PREFIX}{next(_bookmarks)}"


def create_ack_message() -> Message:
    """Create the ack sent when a session opens, listing supported versions."""
    return Message("ack", None, {"version": PROTOCOL_VERSIONS})


def create_location_message(user_id: str, room: RoomDescription) -> Message:
    """
    Create a location message describing the room to one player.

    Args:
        user_id: Player receiving the snapshot
        room: The room description

    Returns:
        Message: ``player,<userId>`` location message
    """
    payload = {"type": "location"}
    payload.update(room.to_dict())
    return Message("player", user_id, payload)


def create_broadcast_event(
    all_content: Optional[str],
    user_id: Optional[str] = None,
    user_content: Optional[str] = None,
) -> Message:
    """
    Create an event sent to everyone in the room.

    Args:
        all_content: Text shown to every occupant
        user_id: Optional player who should see different text
        user_content: Text shown to ``user_id`` instead of ``all_content``

    Returns:
        Message: ``player,*`` event
    """
    content = {}
    if all_content is not None:
        content[BROADCAST] = all_content
    if user_id is not None and user_content is not None:
        content[user_id] = user_content

    return Message(
        "player",
        BROADCAST,
        {"type": "event", "content": content, "bookmark": _next_bookmark()},
    )


def create_specific_event(user_id: str, content: str) -> Message:
    """Create an event shown only to one player."""
    return Message(
        "player",
        user_id,
        {
            "type": "event",
            "content": {user_id: content},
            "bookmark": _next_bookmark(),
        },
    )


def create_exit_message(user_id: str, exit_id: str, content: str) -> Message:
    """
    Create a message telling the mediator to move a player out of the room.

    Args:
        user_id: Player leaving
        exit_id: Exit the player is taking
        content: Narration shown while leaving
    """
    return Message(
        "playerLocation",
        user_id,
        {
            "type": "exit",
            "exitId": exit_id,
            "content": content,
        },
    )


def create_chat_message(username: str, content: str) -> Message:
    """Create a chat message echoed to the whole room."""
    return Message(
        "player",
        BROADCAST,
        {
            "type": "chat",
            "username": username,
            "content": content,
            "bookmark": _next_bookmark(),
        },
    )
