"""
Envelope Definitions

Inbound and outbound protocol envelopes exchanged with the mediator.

Wire Format:
    Every frame is a routing prefix followed by a JSON object:

        <target>,<targetId>,{ ... body ... }

    Frames sent by the room use targets ``player``, ``playerLocation``
    and ``ack`` (which carries no target id).
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

BROADCAST = "*"


class MessageKind(Enum):
    """Kinds of inbound messages, keyed by their wire target."""

    HELLO = "roomHello"
    JOIN = "roomJoin"
    GOODBYE = "roomGoodbye"
    PART = "roomPart"
    CHAT_OR_COMMAND = "room"
    OTHER = "other"

    @classmethod
    def from_target(cls, target: str) -> "MessageKind":
        """Return the kind for a wire target; unknown targets map to OTHER."""
        for kind in cls:
            if kind.value == target and kind is not cls.OTHER:
                return kind
        return cls.OTHER


@dataclass
class Envelope:
    """
    An inbound message.

    Attributes:
        kind: Kind of message
        target: Raw wire target
        target_id: Room id the message is addressed to
        body: Parsed JSON body
    """

    kind: MessageKind
    target: str
    target_id: Optional[str]
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> Optional[str]:
        return self.body.get("userId")

    @property
    def username(self) -> Optional[str]:
        return self.body.get("username")

    @property
    def version(self) -> Optional[int]:
        return self.body.get("version")

    @property
    def content(self) -> Optional[str]:
        return self.body.get("content")


@dataclass
class Message:
    """
    An outbound message.

    Attributes:
        target: Wire target (``player``, ``playerLocation``, ``ack``)
        target_id: Player id, ``*`` for the whole room, or None
        payload: JSON-serializable body
    """

    target: str
    target_id: Optional[str]
    payload: Dict[str, Any]

    @property
    def is_broadcast(self) -> bool:
        return self.target_id == BROADCAST

    def to_frame(self) -> str:
        """Render the message in wire format."""
        body = json.dumps(self.payload)
        if self.target_id is None:
            return f"{self.target},{body}"
        return f"{self.target},{self.target_id},{body}"


def parse_envelope(frame: str) -> Envelope:
    """
    Parse a wire frame into an Envelope.

    Args:
        frame: Raw text received from the mediator

    Returns:
        The parsed Envelope

    Raises:
        ValueError: If the frame has no routing prefix or its body is not
            a JSON object
    """
    brace = frame.find("{")
    if brace <= 0:
        raise ValueError(f"Malformed frame: {frame[:80]!r}")

    prefix = frame[:brace].rstrip(",")
    if not prefix:
        raise ValueError(f"Missing target in frame: {frame[:80]!r}")

    target, _, target_id = prefix.partition(",")
    body = json.loads(frame[brace:])
    if not isinstance(body, dict):
        raise ValueError("Frame body must be a JSON object")

    return Envelope(
        kind=MessageKind.from_target(target.strip()),
        target=target.strip(),
        target_id=target_id.strip() or None,
        body=body,
    )
