"""Rendering of markers as label file text.

Formatters turn a sequence of markers into the body of a label file. Only
Audacity point labels are registered; the output is plain text with one
line per marker.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from bwfmarkers.domain import Marker
from bwfmarkers.utils import get_logger

logger: logging.Logger = get_logger(__name__)


class LabelFormatter(ABC):
    """Abstract base class for label file formatters."""

    @abstractmethod
    def format_time(self, seconds: float) -> str:
        """Convert time in seconds to formatted time string."""
        pass

    @abstractmethod
    def generate_entry(self, marker: Marker) -> str:
        """Generate a single label entry."""
        pass

    def render(self, markers: Sequence[Marker]) -> str:
        """Render markers, in the given order, as the label file body."""
        return "\n".join(self.generate_entry(marker) for marker in markers) + "\n"


class AudacityLabelFormatter(LabelFormatter):
    """Formatter for Audacity point labels.

    Each line is ``start<TAB>end<TAB>text`` with start equal to end. Label
    text is written verbatim; embedded tabs or newlines are not escaped.
    """

    def format_time(self, seconds: float) -> str:
        """Convert time in seconds to a six-decimal seconds string."""
        return f"{seconds:.6f}"

    def generate_entry(self, marker: Marker) -> str:
        """Generate a single point label line."""
        time_str: str = self.format_time(marker.time)
        logger.debug("Label entry: Time %s, Text %s", time_str, marker.label)
        return f"{time_str}\t{time_str}\t{marker.label}"


FORMATTERS: dict[str, LabelFormatter] = {
    "audacity": AudacityLabelFormatter(),
}


def format_labels(markers: Sequence[Marker]) -> str:
    """Render markers as an Audacity label file body."""
    return FORMATTERS["audacity"].render(markers)
