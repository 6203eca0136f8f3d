"""
Conversion of a metadata document into an Audacity label file.

The converter glues the pieces of the marker pipeline together: the XML
text is parsed into a generic tree, markers are located and sorted, and the
label file body is rendered. The output name is derived from the name of
the original audio file, e.g. ``take 1.wav`` becomes ``take 1_markers.txt``.

An empty result is not an error at this level: callers decide whether a
document without markers is reported as such (see
:meth:`ConversionResult.require_markers`).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from bwfmarkers.domain import Marker
from bwfmarkers.markers.document import parse_document
from bwfmarkers.markers.labels import format_labels
from bwfmarkers.markers.locator import locate
from bwfmarkers.utils import get_logger

logger: logging.Logger = get_logger(__name__)

OUTPUT_SUFFIX = "_markers"
OUTPUT_EXTENSION = ".txt"


class NoMarkersFoundError(LookupError):
    """Raised when a document parsed cleanly but holds no markers."""


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one metadata document."""

    output_file_name: str
    content: str
    markers: tuple[Marker, ...]

    @property
    def is_empty(self) -> bool:
        return not self.markers

    def require_markers(self) -> ConversionResult:
        """Returns self, or raises NoMarkersFoundError when empty."""
        if self.is_empty:
            raise NoMarkersFoundError(
                f"No markers found for {self.output_file_name}"
            )
        return self


def output_file_name(original_file_name: str) -> str:
    """Derives the label file name from the original audio file name."""
    base_name, _extension = os.path.splitext(os.path.basename(original_file_name))
    return f"{base_name}{OUTPUT_SUFFIX}{OUTPUT_EXTENSION}"


def convert(document_text: str, original_file_name: str) -> ConversionResult:
    """
    Converts metadata XML text into label file content.

    Arguments:
        document_text (str): XML produced by the metadata extraction tool.
        original_file_name (str): Name of the audio file the XML describes.

    Returns:
        ConversionResult: Output name, label file body and sorted markers.

    Raises:
        DocumentParseError: If the XML is not well-formed.
    """
    document = parse_document(document_text)
    markers: list[Marker] = locate(document)
    name: str = output_file_name(original_file_name)
    logger.info("Converted %s: %d markers", original_file_name, len(markers))
    return ConversionResult(
        output_file_name=name,
        content=format_labels(markers),
        markers=tuple(markers),
    )


def convert_file(xml_path: str | Path, original_file_name: str | None = None) -> ConversionResult:
    """Converts an XML file on disk; the output is named after the XML file by default."""
    path = Path(xml_path)
    document_text: str = path.read_text(encoding="utf-8")
    return convert(document_text, original_file_name or path.name)


def write_labels(
    result: ConversionResult,
    output_dir: str | Path,
    stored_name: str | None = None,
) -> Path:
    """Writes the label file body to ``output_dir`` and returns its path."""
    folder = Path(output_dir)
    folder.mkdir(parents=True, exist_ok=True)
    output_path: Path = folder / (stored_name or result.output_file_name)
    with open(output_path, "w", encoding="utf-8", newline="") as file:
        file.write(result.content)
    logger.info("Labels saved to %s", output_path)
    return output_path
