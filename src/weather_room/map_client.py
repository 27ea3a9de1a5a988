"""
Map Service Client

Registers this room with the map (directory) service so that players
can find it, and reads back what the map knows about the room.
"""

import logging
from typing import Any, Dict, Optional

import requests

from .room_state import MapData, RoomDescription

logger = logging.getLogger(__name__)

GENERATED_ROOM_ID = "TheGeneratedIdForThisRoom"
ROOM_ID_PLACEHOLDER = "ROOM_ID"
DOORS = {
    "n": "A door with a barometer hanging next to it",
    "s": "A door with a dripping rain gauge beside it",
    "e": "A door facing the sunrise",
    "w": "A door facing the sunset",
}


def is_placeholder_room_id(room_id: Optional[str]) -> bool:
    """Return True if the room id was not set by the environment."""
    return not room_id or ROOM_ID_PLACEHOLDER in room_id


class MapClient:
    """
    Talks to the map service over HTTP.
    """

    def __init__(
        self,
        map_url: Optional[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: int = 5,
    ):
        """
        Initialize the map client.

        Args:
            map_url: Base URL of the map service, e.g. ``http://map/map/v1``
            username: Optional basic auth user
            password: Optional basic auth password
            timeout: Timeout for HTTP calls in seconds
        """
        self.map_url = map_url.rstrip("/") if map_url else None
        self.timeout = timeout
        self._auth = (username, password) if username else None

    @property
    def configured(self) -> bool:
        return bool(self.map_url)

    def build_registration(
        self, room: RoomDescription, endpoint_url: str
    ) -> Dict[str, Any]:
        """
        Build the registration document for a room.

        Args:
            room: The room description
            endpoint_url: Public WebSocket URL of this room

        Returns:
            dict: Registration payload
        """
        return {
            "name": room.name,
            "fullName": room.full_name,
            "description": room.description,
            "doors": dict(DOORS),
            "connectionDetails": {
                "type": "websocket",
                "target": endpoint_url,
            },
        }

    def update_room(
        self, room_id: str, room: RoomDescription, endpoint_url: str
    ) -> Optional[MapData]:
        """
        Register or refresh the room with the map service.

        Args:
            room_id: Id assigned to this room by the map
            room: The room description
            endpoint_url: Public WebSocket URL of this room

        Returns:
            MapData from the map's response, or None if it sent none

        Raises:
            RuntimeError: If no map URL is configured
            requests.RequestException: If the call fails
        """
        if not self.configured:
            raise RuntimeError("Map service URL is not configured")

        url = f"{self.map_url}/sites/{room_id}"
        payload = self.build_registration(room, endpoint_url)
        logger.debug(f"Registering room {room_id} at {url}")

        try:
            response = requests.put(
                url, json=payload, auth=self._auth, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to register room {room_id}: {e}")
            raise

        logger.info(f"Registered room {room_id} with the map service")

        try:
            info = response.json().get("info")
        except (ValueError, AttributeError):
            info = None
        if isinstance(info, dict):
            return MapData.from_dict(info)
        return None
