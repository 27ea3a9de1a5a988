"""
Exit Resolution

Maps the direction a player typed (``/go N``, ``/go north``) to the exit
id understood by the map service, and exit ids back to display text.
Only the four compass doors are known here; richer topology belongs to
the map service.
"""

from typing import Optional

_LONG_DIRECTIONS = ("north", "south", "east", "west")
_SHORT_DIRECTIONS = ("n", "s", "e", "w")

_PRETTY_DIRECTIONS = {
    "n": "North",
    "s": "South",
    "e": "East",
    "w": "West",
}


def resolve_exit(direction: Optional[str]) -> Optional[str]:
    """
    Resolve a direction token to an exit id.

    Args:
        direction: Direction read from the command, e.g. ``"North"``

    Returns:
        One of ``n``, ``s``, ``e``, ``w``, or None if the direction is
        missing or unknown
    """
    if direction is None:
        return None

    token = direction.strip().lower()
    if token in _LONG_DIRECTIONS:
        return token[0]
    if token in _SHORT_DIRECTIONS:
        return token
    return None


def pretty_direction(exit_id: str) -> str:
    """Return the display form of an exit id, or the id itself if unknown."""
    return _PRETTY_DIRECTIONS.get(exit_id, exit_id)
