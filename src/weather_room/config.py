"""Configuration for the Weather Room."""

import os
from dataclasses import dataclass
from typing import Optional


def _optional(name: str) -> Optional[str]:
    value = os.environ.get(name, "").strip()
    return value or None


@dataclass
class RoomConfig:
    """Service configuration, read from the environment."""

    room_id: Optional[str] = None
    ws_host: str = "0.0.0.0"
    ws_port: int = 9080
    ws_path: str = "/room"
    room_endpoint: Optional[str] = None
    map_url: Optional[str] = None
    map_username: Optional[str] = None
    map_password: Optional[str] = None
    map_timeout: int = 5
    weather_url: Optional[str] = None
    weather_username: Optional[str] = None
    weather_password: Optional[str] = None
    weather_timeout: float = 5
    log_level: str = "INFO"

    @property
    def endpoint_url(self) -> str:
        """Public WebSocket URL announced to the map service."""
        if self.room_endpoint:
            return self.room_endpoint
        return f"ws://{self.ws_host}:{self.ws_port}{self.ws_path}"

    @classmethod
    def from_env(cls) -> "RoomConfig":
        """Load configuration from environment variables."""
        return cls(
            room_id=_optional("ROOM_ID"),
            ws_host=os.environ.get("WEBSOCKET_HOST", cls.ws_host),
            ws_port=int(os.environ.get("WEBSOCKET_PORT", str(cls.ws_port))),
            ws_path=os.environ.get("WEBSOCKET_PATH", cls.ws_path),
            room_endpoint=_optional("ROOM_ENDPOINT"),
            map_url=_optional("MAP_URL"),
            map_username=_optional("MAP_USERNAME"),
            map_password=_optional("MAP_PASSWORD"),
            map_timeout=int(os.environ.get("MAP_TIMEOUT", str(cls.map_timeout))),
            weather_url=_optional("WEATHER_URL"),
            weather_username=_optional("WEATHER_USERNAME"),
            weather_password=_optional("WEATHER_PASSWORD"),
            weather_timeout=float(
                os.environ.get("WEATHER_TIMEOUT", str(cls.weather_timeout))
            ),
            log_level=os.environ.get("LOG_LEVEL", cls.log_level).upper(),
        )
