"""
Room State Management for the Weather Room

This module holds the descriptive state of the room hosted by this
service: its names, description, custom commands and inventory. The
commands and inventory are rendered into cached, immutable views that are
used when building location messages.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Set, Tuple, Union

logger = logging.getLogger(__name__)

DEFAULT_NAME = "weather"
DEFAULT_FULL_NAME = "A Weather Room"
DEFAULT_DESCRIPTION = (
    "Welcome to the Weather Room.  Here you see all types of maps, globes, "
    "thermometers, and weather vanes.  On one wall you see a window.  "
    "Another wall has a TV with the Weather Channel playing...you can't "
    "hear it.  You want to know what the current temperature in your "
    "hometown is so you type in a special command followed by the zip "
    "code.....  "
)

EMPTY_COMMANDS: Mapping[str, str] = MappingProxyType({})
EMPTY_INVENTORY: Tuple[str, ...] = tuple()


class InvalidArgument(ValueError):
    """Raised when a room state mutation is called with a missing argument."""


class CacheState(Enum):
    """Marker for a view that must be rebuilt before it is read."""

    DIRTY = "dirty"


@dataclass(frozen=True)
class Cached:
    """A rendered view of one of the room collections."""

    view: Any


@dataclass
class MapData:
    """
    Room attributes as known by the map service.

    Attributes:
        name: Short room name
        full_name: Display name of the room
        description: Room description
    """

    name: Optional[str] = None
    full_name: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapData":
        """Create from a map service ``info`` object."""
        return cls(
            name=data.get("name"),
            full_name=data.get("fullName"),
            description=data.get("description"),
        )


class RoomDescription:
    """
    Describes the room to players.

    A single instance is created at startup and shared by every session.
    All access to the commands and items goes through a lock, and every
    mutation swaps the matching view back to ``CacheState.DIRTY`` inside
    the same critical section, so readers never see a stale or half-built
    view.
    """

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        full_name: str = DEFAULT_FULL_NAME,
        description: str = DEFAULT_DESCRIPTION,
    ):
        self._lock = threading.Lock()
        self._name = name
        self._full_name = full_name
        self._description = description

        self._commands: Dict[str, str] = {}
        self._commands_view: Union[Cached, CacheState] = CacheState.DIRTY

        self._items: Set[str] = set()
        self._items_view: Union[Cached, CacheState] = CacheState.DIRTY

    def update_data(self, data: MapData):
        """
        Update the room description from map service data.

        Args:
            data: Map data; fields that are None are left unchanged
        """
        with self._lock:
            if data.name is not None:
                self._name = data.name
            if data.full_name is not None:
                self._full_name = data.full_name
            if data.description is not None:
                self._description = data.description

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str):
        with self._lock:
            self._name = name

    @property
    def full_name(self) -> str:
        return self._full_name

    @full_name.setter
    def full_name(self, full_name: str):
        with self._lock:
            self._full_name = full_name

    @property
    def description(self) -> str:
        return self._description

    @description.setter
    def description(self, description: str):
        with self._lock:
            self._description = description

    # Commands

    def get_commands(self) -> Mapping[str, str]:
        """
        Custom commands are optional. Build, cache and return a read-only
        mapping of command to description for use in location messages.

        Returns:
            Mapping of commands. Never None; ``EMPTY_COMMANDS`` when the
            room has no custom commands.
        """
        with self._lock:
            current = self._commands_view
            if isinstance(current, Cached):
                return current.view

            if self._commands:
                view = MappingProxyType(dict(self._commands))
            else:
                view = EMPTY_COMMANDS
            self._commands_view = Cached(view)
            return view

    def add_command(self, command: str, description: Optional[str]):
        """
        Add or replace a custom room command.

        Args:
            command: Command token, e.g. ``/weatherLike``
            description: What the command does

        Raises:
            InvalidArgument: If description is None
        """
        if description is None:
            raise InvalidArgument("description is required")

        with self._lock:
            self._commands[command] = description
            self._commands_view = CacheState.DIRTY

    def remove_command(self, command: str):
        """Remove a custom room command if present."""
        with self._lock:
            self._commands.pop(command, None)
            self._commands_view = CacheState.DIRTY

    # Inventory

    def get_inventory(self) -> Tuple[str, ...]:
        """
        Room inventory objects are optional. Build, cache and return a
        sorted tuple of the items in the room.

        Returns:
            Tuple of item names. Never None; ``EMPTY_INVENTORY`` when the
            room is empty.
        """
        with self._lock:
            current = self._items_view
            if isinstance(current, Cached):
                return current.view

            if self._items:
                view = tuple(sorted(self._items))
            else:
                view = EMPTY_INVENTORY
            self._items_view = Cached(view)
            return view

    def add_item(self, item_name: str):
        with self._lock:
            self._items.add(item_name)
            self._items_view = CacheState.DIRTY

    def remove_item(self, item_name: str):
        with self._lock:
            self._items.discard(item_name)
            self._items_view = CacheState.DIRTY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "fullName": self.full_name,
            "description": self.description,
            "commands": dict(self.get_commands()),
            "roomInventory": list(self.get_inventory()),
        }

    def __str__(self) -> str:
        with self._lock:
            return (
                f"name={self._name}, fullName={self._full_name}, "
                f"description={self._description}, "
                f"commands={self._commands}, items={sorted(self._items)}"
            )
