"""Extraction of embedded BWF metadata through the ``bwfmetaedit`` tool."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from bwfmarkers.config import AppConfig, get_settings
from bwfmarkers.utils import get_logger

logger: logging.Logger = get_logger(__name__)

_MISSING_FILE_MARKERS = ("file does not exist", "no such file")


class MetadataExtractionError(RuntimeError):
    """Raised when metadata could not be extracted from an audio file."""


class MetadataToolUnavailableError(MetadataExtractionError):
    """Raised when the extraction executable cannot be found."""


class InputFileNotFoundError(MetadataExtractionError, FileNotFoundError):
    """Raised when the audio file cannot be read by the extraction tool."""


class NoBwfDataError(MetadataExtractionError):
    """Raised when the audio file carries no extractable BWF metadata."""


def _resolve_executable(executable: str) -> str:
    resolved = shutil.which(executable)
    if resolved is None:
        raise MetadataToolUnavailableError(
            f"Metadata extraction tool not found: {executable}"
        )
    return resolved


def _tool_environment() -> dict[str, str]:
    return {**os.environ, "LANG": "en_US.UTF-8", "LC_ALL": "en_US.UTF-8"}


def extract_metadata_xml(wav_path: str | Path, settings: AppConfig | None = None) -> str:
    """
    Runs the extraction tool on a WAV file and returns its XML output.

    The XML is written to a temporary directory under the configured temp
    folder and removed before returning.

    Raises:
        MetadataToolUnavailableError: The tool is not installed.
        InputFileNotFoundError: The WAV file does not exist or is unreadable.
        NoBwfDataError: The file holds no BWF metadata.
        MetadataExtractionError: Any other extraction failure.
    """
    settings = settings or get_settings()
    wav_file = Path(wav_path)
    if not wav_file.is_file():
        raise InputFileNotFoundError(f"File does not exist: {wav_file}")

    executable = _resolve_executable(settings.extraction.executable)
    timeout = settings.extraction.timeout_seconds
    settings.tmp_folder.mkdir(parents=True, exist_ok=True)

    with tempfile.TemporaryDirectory(dir=settings.tmp_folder) as work_dir:
        xml_path = Path(work_dir) / "metadata.xml"
        logger.debug("Running %s on %s", executable, wav_file)
        try:
            subprocess.run(
                [executable, f"--out-xml={xml_path}", str(wav_file)],
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=_tool_environment(),
                timeout=timeout if timeout > 0 else None,
            )
        except FileNotFoundError as err:
            raise MetadataToolUnavailableError(
                f"Metadata extraction tool not found: {executable}"
            ) from err
        except subprocess.TimeoutExpired as err:
            raise MetadataExtractionError(
                f"Metadata extraction exceeded {timeout:.0f}s for {wav_file.name}"
            ) from err
        except subprocess.CalledProcessError as err:
            details = " ".join(f"{err.stdout or ''} {err.stderr or ''}".split())
            if any(marker in details.lower() for marker in _MISSING_FILE_MARKERS):
                raise InputFileNotFoundError(details or str(err)) from err
            raise NoBwfDataError(
                f"No BWF metadata in {wav_file.name}: {details or err}"
            ) from err
        except OSError as err:
            raise MetadataExtractionError(
                f"Metadata extraction failed for {wav_file.name}: {err}"
            ) from err

        if not xml_path.is_file():
            raise NoBwfDataError(f"No BWF metadata in {wav_file.name}")
        return xml_path.read_text(encoding="utf-8", errors="replace")
