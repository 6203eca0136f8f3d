"""Domain data structures for located markers."""

from typing import NamedTuple


class Marker(NamedTuple):
    """A labeled point in time, in seconds from the start of the audio."""

    time: float
    label: str


def placeholder_label(position: int) -> str:
    """Returns the label used for an unnamed marker at a 1-based position."""
    return f"Marker {position}"
