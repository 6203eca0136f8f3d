"""Batch conversion of WAV (or metadata XML) files into label files.

Each input is handled on its own: a failure is recorded in that input's
:class:`FileResult` and never stops its siblings.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from bwfmarkers.config import AppConfig, get_settings
from bwfmarkers.extraction import (
    MetadataExtractionError,
    MetadataToolUnavailableError,
    NoBwfDataError,
    extract_metadata_xml,
)
from bwfmarkers.markers import (
    ConversionResult,
    DocumentParseError,
    convert,
    output_file_name,
    write_labels,
)
from bwfmarkers.utils import get_logger

logger: logging.Logger = get_logger(__name__)

WAV_EXTENSION = ".wav"

MESSAGE_NO_BWF_DATA = "This file does not contain BWF markers"
MESSAGE_FILE_NOT_FOUND = (
    "File could not be read (possibly due to special characters in filename)"
)
MESSAGE_PROCESSING_ERROR = "Could not process this file format"
MESSAGE_TOOL_UNAVAILABLE = "Metadata extraction tool is not available"
MESSAGE_INVALID_DATA = "File contains invalid BWF data"
MESSAGE_NO_MARKERS = "This file does not contain any markers"
MESSAGE_NOT_WAV = "Only WAV files are allowed"
MESSAGE_UNEXPECTED = "Failed to process file"


class ConversionStatus(StrEnum):
    """Outcome of one input of a batch."""

    CONVERTED = "converted"
    NO_MARKERS = "no_markers"
    FAILED = "failed"


@dataclass(frozen=True)
class FileResult:
    """Per-input result reported back to the caller."""

    original_file: str
    status: ConversionStatus
    labels_file: Path | None = None
    marker_count: int = 0
    error: str | None = None
    content: str | None = None


def plan_stored_names(
    original_names: Sequence[str],
    output_dir: Path,
    *,
    clock: Callable[[], float] = time.time,
) -> list[str]:
    """Assigns every input a stored label file name unique in ``output_dir``.

    The display name is kept when free; otherwise it gets a millisecond
    timestamp prefix.
    """
    stamp = int(clock() * 1000)
    taken: set[str] = set()
    planned: list[str] = []
    for original_name in original_names:
        name = output_file_name(original_name)
        candidate = name
        counter = 0
        while candidate in taken or (output_dir / candidate).exists():
            suffix = f"_{counter}" if counter else ""
            candidate = f"{stamp}{suffix}-{name}"
            counter += 1
        taken.add(candidate)
        planned.append(candidate)
    return planned


def _failed(original_name: str, message: str) -> FileResult:
    return FileResult(original_file=original_name, status=ConversionStatus.FAILED, error=message)


def _check_wav_input(path: Path, settings: AppConfig) -> str | None:
    """Returns a user-facing rejection message, or None when the input is acceptable."""
    if path.suffix.lower() != WAV_EXTENSION:
        return MESSAGE_NOT_WAV
    if path.is_file() and path.stat().st_size > settings.upload.max_file_size_bytes:
        return f"File size exceeds {settings.upload.max_file_size_mb}MB limit"
    return None


def process_file(
    path: str | Path,
    stored_name: str,
    *,
    from_xml: bool = False,
    output_dir: Path,
    settings: AppConfig,
) -> FileResult:
    """Converts one input, translating expected failures into a FileResult."""
    source = Path(path)
    original_name = source.name

    try:
        if from_xml:
            document_text = source.read_text(encoding="utf-8")
        else:
            rejection = _check_wav_input(source, settings)
            if rejection:
                logger.warning("Rejected %s: %s", original_name, rejection)
                return _failed(original_name, rejection)
            document_text = extract_metadata_xml(source, settings)

        result: ConversionResult = convert(document_text, original_name)
    except FileNotFoundError as err:
        logger.error("Error processing %s: %s", original_name, err)
        return _failed(original_name, MESSAGE_FILE_NOT_FOUND)
    except MetadataToolUnavailableError as err:
        logger.error("Error processing %s: %s", original_name, err)
        return _failed(original_name, MESSAGE_TOOL_UNAVAILABLE)
    except NoBwfDataError as err:
        logger.warning("No BWF data in %s: %s", original_name, err)
        return _failed(original_name, MESSAGE_NO_BWF_DATA)
    except MetadataExtractionError as err:
        logger.error("Error processing %s: %s", original_name, err)
        return _failed(original_name, MESSAGE_PROCESSING_ERROR)
    except (DocumentParseError, UnicodeDecodeError) as err:
        logger.error("Invalid metadata for %s: %s", original_name, err)
        return _failed(original_name, MESSAGE_INVALID_DATA)

    if result.is_empty:
        logger.warning("No markers found in %s", original_name)
        return FileResult(
            original_file=original_name,
            status=ConversionStatus.NO_MARKERS,
            error=MESSAGE_NO_MARKERS,
        )

    labels_file = write_labels(result, output_dir, stored_name)
    return FileResult(
        original_file=original_name,
        status=ConversionStatus.CONVERTED,
        labels_file=labels_file,
        marker_count=len(result.markers),
        content=result.content,
    )


def process_batch(
    paths: Iterable[str | Path],
    *,
    from_xml: bool = False,
    output_dir: str | Path | None = None,
    settings: AppConfig | None = None,
) -> list[FileResult]:
    """
    Converts every input independently and returns results in input order.

    Arguments:
        paths: WAV files, or metadata XML files when ``from_xml`` is set.
        from_xml (bool): Skip extraction and read the inputs as XML.
        output_dir: Destination folder; defaults to the configured one.
        settings (AppConfig): Settings override, mostly for tests.

    Returns:
        list[FileResult]: One result per input.
    """
    settings = settings or get_settings()
    sources: list[Path] = [Path(path) for path in paths]
    folder = Path(output_dir) if output_dir is not None else settings.output.folder
    stored_names = plan_stored_names([source.name for source in sources], folder)

    def _run(index: int) -> FileResult:
        try:
            return process_file(
                sources[index],
                stored_names[index],
                from_xml=from_xml,
                output_dir=folder,
                settings=settings,
            )
        except Exception as err:
            logger.error(
                "Unexpected failure processing %s: %s",
                sources[index],
                err,
                exc_info=True,
            )
            return _failed(sources[index].name, MESSAGE_UNEXPECTED)

    workers = max(1, min(settings.batch.max_workers, len(sources)))
    logger.info("Processing %d files with %d workers", len(sources), workers)
    if workers == 1:
        return [_run(index) for index in range(len(sources))]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_run, range(len(sources))))
