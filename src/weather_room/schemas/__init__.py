"""
Schemas for the Weather Room

This module contains the inbound envelope parser and the builders for
the outbound messages sent to players.
"""

from .envelope import (
    BROADCAST,
    Envelope,
    Message,
    MessageKind,
    parse_envelope,
)
from .events import (
    create_ack_message,
    create_broadcast_event,
    create_chat_message,
    create_exit_message,
    create_location_message,
    create_specific_event,
)

__all__ = [
    "BROADCAST",
    "Envelope",
    "Message",
    "MessageKind",
    "parse_envelope",
    "create_ack_message",
    "create_broadcast_event",
    "create_chat_message",
    "create_exit_message",
    "create_location_message",
    "create_specific_event",
]
