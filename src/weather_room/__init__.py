"""
Weather Room Package

This package provides a single Game On room: the room description and
its cached views, the command interpreter, the weather lookup and the
WebSocket server that connects the room to the mediator.
"""

from .room_state import (
    RoomDescription,
    MapData,
    InvalidArgument,
    Cached,
    CacheState,
    EMPTY_COMMANDS,
    EMPTY_INVENTORY,
)
from .exits import resolve_exit, pretty_direction
from .commands import Command, CommandInterpreter, split_command
from .weather import WeatherClient, WeatherReport
from .room_service import RoomService
from .map_client import MapClient
from .config import RoomConfig
from .websocket_server import WebSocketServer

__all__ = [
    "RoomDescription",
    "MapData",
    "InvalidArgument",
    "Cached",
    "CacheState",
    "EMPTY_COMMANDS",
    "EMPTY_INVENTORY",
    "resolve_exit",
    "pretty_direction",
    "Command",
    "CommandInterpreter",
    "split_command",
    "WeatherClient",
    "WeatherReport",
    "RoomService",
    "MapClient",
    "RoomConfig",
    "WebSocketServer",
]
