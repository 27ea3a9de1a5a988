#!/usr/bin/env python3
"""
Weather Room Server

Hosts a single Game On room over WebSocket.
"""

import asyncio
import logging
import sys

from .config import RoomConfig
from .map_client import GENERATED_ROOM_ID, MapClient, is_placeholder_room_id
from .room_service import RoomService
from .room_state import RoomDescription
from .weather import WeatherClient
from .websocket_server import WebSocketServer

logger = logging.getLogger(__name__)

REGISTRATION_TIMEOUT = 10  # seconds


def create_room() -> RoomDescription:
    """Create the room description with its custom commands."""
    room = RoomDescription()
    room.add_command("/weatherLike", "What's the weather like at <zipcode>")
    return room


async def register_room(
    map_client: MapClient,
    room_id: str,
    room: RoomDescription,
    endpoint_url: str,
) -> bool:
    """
    Register the room with the map service without blocking the loop.

    Failures are logged; the room keeps serving local traffic.

    Returns:
        bool: True if the map accepted the registration
    """
    loop = asyncio.get_running_loop()
    try:
        map_data = await asyncio.wait_for(
            loop.run_in_executor(
                None, map_client.update_room, room_id, room, endpoint_url
            ),
            timeout=REGISTRATION_TIMEOUT,
        )
    except asyncio.TimeoutError:
        logger.error(f"Registration of room {room_id} timed out")
        return False
    except Exception as e:
        logger.error(f"Could not register room {room_id}: {e}")
        return False

    if map_data:
        room.update_data(map_data)
    return True


async def run_server(config: RoomConfig):
    """
    Run the room server.

    Args:
        config: Service configuration
    """
    room = create_room()
    room_id = config.room_id

    if is_placeholder_room_id(room_id):
        # The room id was not set by the environment; make one up.
        room_id = GENERATED_ROOM_ID
    elif config.map_url:
        map_client = MapClient(
            config.map_url,
            config.map_username,
            config.map_password,
            timeout=config.map_timeout,
        )
        await register_room(map_client, room_id, room, config.endpoint_url)
    else:
        logger.warning(
            f"ROOM_ID is set to {room_id} but MAP_URL is not; "
            f"skipping registration"
        )

    logger.info(f"Room initialized: {room}")

    weather_client = WeatherClient(
        config.weather_url,
        config.weather_username,
        config.weather_password,
        timeout=config.weather_timeout,
    )
    room_service = RoomService(room_id, room, weather_client)
    ws_server = WebSocketServer(
        room_service, config.ws_host, config.ws_port, config.ws_path
    )

    await ws_server.start()
    logger.info(f"Room '{room_id}' is ready")

    try:
        await asyncio.Event().wait()
    except asyncio.CancelledError:
        logger.info("Server shutdown requested")
    finally:
        await ws_server.stop()
        weather_client.close()
        logger.info("Room server stopped")


def main():
    """Main entry point for the room server."""
    config = RoomConfig.from_env()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info("Starting weather room server...")

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Shutting down room server...")
        sys.exit(0)


if __name__ == "__main__":
    main()
