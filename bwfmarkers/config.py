"""Typed application settings loaded from environment variables.

Settings are immutable. `get_settings()` returns the cached instance and
`reload_settings()` rebuilds it from the current environment, which is what
the CLI does after loading a `.env` file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_EXECUTABLE = "bwfmetaedit"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_TMP_FOLDER = "temp"
DEFAULT_OUTPUT_FOLDER = "outputs"
DEFAULT_MAX_FILE_SIZE_MB = 100


@dataclass(frozen=True)
class ExtractionConfig:
    """Controls for the external metadata-extraction tool."""

    executable: str = DEFAULT_EXECUTABLE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class OutputConfig:
    """Where generated label files are stored."""

    folder: Path = Path(DEFAULT_OUTPUT_FOLDER)


@dataclass(frozen=True)
class UploadConfig:
    """Limits applied to input audio files."""

    max_file_size_mb: int = DEFAULT_MAX_FILE_SIZE_MB

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@dataclass(frozen=True)
class BatchConfig:
    """Concurrency controls for multi-file conversions."""

    max_workers: int = 1


@dataclass(frozen=True)
class AppConfig:
    """Top-level application settings."""

    extraction: ExtractionConfig
    output: OutputConfig
    upload: UploadConfig
    batch: BatchConfig
    tmp_folder: Path = Path(DEFAULT_TMP_FOLDER)


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name, "").strip()
    return value or default


def _env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _default_workers() -> int:
    return os.cpu_count() or 1


def _build_settings() -> AppConfig:
    return AppConfig(
        extraction=ExtractionConfig(
            executable=_env_str("BWFMETAEDIT_PATH", DEFAULT_EXECUTABLE),
            timeout_seconds=_env_float(
                "BWF_EXTRACT_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
            ),
        ),
        output=OutputConfig(
            folder=Path(_env_str("BWF_OUTPUT_DIR", DEFAULT_OUTPUT_FOLDER)),
        ),
        upload=UploadConfig(
            max_file_size_mb=_env_int(
                "MAX_FILE_SIZE_MB", DEFAULT_MAX_FILE_SIZE_MB, minimum=1
            ),
        ),
        batch=BatchConfig(
            max_workers=_env_int(
                "BWF_MAX_WORKERS", _default_workers(), minimum=1
            ),
        ),
        tmp_folder=Path(_env_str("BWF_TMP_DIR", DEFAULT_TMP_FOLDER)),
    )


_SETTINGS: AppConfig | None = None


def get_settings() -> AppConfig:
    """Returns the current settings, loading them on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = _build_settings()
    return _SETTINGS


def reload_settings() -> AppConfig:
    """Rebuilds settings from the current environment."""
    global _SETTINGS
    _SETTINGS = _build_settings()
    return _SETTINGS
