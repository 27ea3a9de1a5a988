"""
Weather Lookup

Queries the external weather provider for current observations at a US
zip code and turns the result into narrative text for the room.

The HTTP call is blocking, so it runs in a worker thread and is bounded
by a timeout; a slow provider only delays the player who asked.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

WEATHER_TIMEOUT = 5  # seconds
MAX_WORKERS = 32
LOOKUP_GRACE = 1.0  # seconds allowed beyond the HTTP timeout

OBSERVATION_PATH = "/location/{location}/observations.json"
OBSERVATION_PARAMS = {"language": "en-US", "units": "e"}

SUCCESS_TEMPLATE = (
    "Suddenly you hear a loud WHOOSH followed by a familar TADA!  You look "
    "at the instrument panel and read: \n\nThe weather condition in {zip} "
    "is:\n\n{report}"
)
REPORT_TEMPLATE = (
    "{obs_name} reports the weather is {wx_phrase} and {temp}°F.  "
    "Wind is {wdir_cardinal} at {wspd} Mph."
)
STATUS_TEMPLATE = (
    "Suddenly you hear a loud KLAXON HORN followed by a familar 'Danger, "
    "Will Robinson! Danger!'.  You look at the instrument panel and read: "
    "\n\nAttempted to find the Current Weather conditions for {zip} but "
    "instead received this HTTP response code: \n\n {status} {message}"
)
FAILURE_TEMPLATE = (
    "Suddenly the lights flicker and the instrument panel goes dark.  "
    "A faint message scrolls past: \n\nCould not get the Current Weather "
    "conditions for {zip}: {reason}"
)
NOT_CONFIGURED = (
    "The instrument panel stays dark.  Nobody has connected it to a "
    "weather service yet."
)


@dataclass
class WeatherReport:
    """
    Outcome of a weather lookup.

    Attributes:
        zip_code: The zip code that was looked up
        ok: True if current conditions were retrieved
        text: Narrative shown to the player
        status: HTTP status code, if a response was received
    """

    zip_code: str
    ok: bool
    text: str
    status: Optional[int] = None


def format_report(observation: Dict[str, Any]) -> str:
    """
    Build the weather sentence from an observation object.

    Raises:
        KeyError: If a required field is missing
        TypeError, ValueError: If a numeric field is not a number
    """
    return REPORT_TEMPLATE.format(
        obs_name=observation["obs_name"],
        wx_phrase=observation["wx_phrase"],
        temp=int(observation["temp"]),
        wdir_cardinal=observation["wdir_cardinal"],
        wspd=int(observation["wspd"]),
    )


def _provider_message(response: requests.Response) -> str:
    """Extract the provider's error message, falling back to the reason."""
    try:
        errors = response.json().get("errors") or []
        message = errors[0]["error"]["message"]
        if message:
            return str(message)
    except (ValueError, AttributeError, LookupError, TypeError):
        pass
    return response.reason or ""


class WeatherClient:
    """
    Client for the weather provider's observations endpoint.

    Credentials and endpoint are supplied by configuration.
    """

    def __init__(
        self,
        base_url: Optional[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = WEATHER_TIMEOUT,
        max_workers: int = MAX_WORKERS,
        grace: float = LOOKUP_GRACE,
    ):
        """
        Initialize the weather client.

        Args:
            base_url: Provider base URL, e.g. ``https://host/api/weather/v1``
            username: Basic auth user
            password: Basic auth password
            timeout: HTTP timeout for the provider call in seconds
            max_workers: Lookups that can run at the same time
            grace: Extra seconds a running lookup may take before it is
                abandoned
        """
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout
        self.grace = grace
        self._auth = (username, password) if username else None
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="weather"
        )

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def build_url(self, zip_code: str) -> str:
        location = quote(f"{zip_code}:4:US", safe="")
        return self.base_url + OBSERVATION_PATH.format(location=location)

    def fetch(self, zip_code: str) -> WeatherReport:
        """
        Perform the blocking lookup.

        Args:
            zip_code: Five digit zip code

        Returns:
            WeatherReport: Narrative for the player; failures are reported,
            never raised
        """
        if not self.configured:
            logger.warning("Weather lookup requested but no endpoint is set")
            return WeatherReport(zip_code, False, NOT_CONFIGURED)

        url = self.build_url(zip_code)
        try:
            response = requests.get(
                url,
                params=OBSERVATION_PARAMS,
                auth=self._auth,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Weather lookup for {zip_code} failed: {e}")
            return WeatherReport(
                zip_code,
                False,
                FAILURE_TEMPLATE.format(
                    zip=zip_code, reason="the weather service is unreachable"
                ),
            )

        if response.status_code != 200:
            message = _provider_message(response)
            logger.warning(
                f"Weather lookup for {zip_code} returned "
                f"{response.status_code} {message}"
            )
            return WeatherReport(
                zip_code,
                False,
                STATUS_TEMPLATE.format(
                    zip=zip_code, status=response.status_code, message=message
                ),
                status=response.status_code,
            )

        try:
            report = format_report(response.json()["observation"])
        except (ValueError, KeyError, TypeError) as e:
            logger.error(
                f"Unexpected weather response for {zip_code}: {e!r}"
            )
            return WeatherReport(
                zip_code,
                False,
                FAILURE_TEMPLATE.format(
                    zip=zip_code, reason="the reading was garbled"
                ),
                status=response.status_code,
            )

        logger.info(f"Weather lookup for {zip_code}: {report}")
        return WeatherReport(
            zip_code,
            True,
            SUCCESS_TEMPLATE.format(zip=zip_code, report=report),
            status=response.status_code,
        )

    async def lookup(self, zip_code: str) -> WeatherReport:
        """
        Look up the weather without blocking the event loop.

        Args:
            zip_code: Five digit zip code

        Returns:
            WeatherReport: Result of the lookup, including timeouts
        """
        loop = asyncio.get_running_loop()
        started = asyncio.Event()

        def run():
            loop.call_soon_threadsafe(started.set)
            return self.fetch(zip_code)

        future = loop.run_in_executor(self._executor, run)

        # Time spent waiting for a free worker is not charged to the provider
        await started.wait()
        limit = self.timeout + self.grace
        try:
            return await asyncio.wait_for(future, timeout=limit)
        except asyncio.TimeoutError:
            logger.error(
                f"Weather lookup for {zip_code} timed out after {limit}s"
            )
            return WeatherReport(
                zip_code,
                False,
                FAILURE_TEMPLATE.format(
                    zip=zip_code, reason="the weather service took too long"
                ),
            )

    def close(self):
        """Release the worker threads."""
        self._executor.shutdown(wait=False)
