import contextlib
import io
import logging
import sys
from collections.abc import Generator
from pathlib import Path
from typing import Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import bwfmarkers.__main__ as bwfmarkers_main
import bwfmarkers.config as config
from bwfmarkers.config import (
    AppConfig,
    BatchConfig,
    ExtractionConfig,
    OutputConfig,
    UploadConfig,
)


@pytest.fixture
def run_cli(monkeypatch):
    """Run the bwfmarkers CLI with a custom argv list."""

    monkeypatch.setattr(bwfmarkers_main, "load_dotenv", lambda: None)

    def _run_cli(args: Sequence[str], *, expect_exit: bool = True) -> tuple[int, str]:
        argv = ["bwfmarkers", *args]
        monkeypatch.setattr(sys, "argv", argv)
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stdout):
            try:
                bwfmarkers_main.main()
            except SystemExit as exc:  # pragma: no cover - exercised in tests
                return exc.code, stdout.getvalue()
        if expect_exit:
            raise AssertionError("CLI did not exit as expected")
        return 0, stdout.getvalue()

    return _run_cli


@pytest.fixture(autouse=True)
def _silence_halo(monkeypatch):
    """Replace Halo spinners with a no-op context manager for tests."""

    class _DummyHalo:
        def __init__(self, *args, **kwargs):
            self.text = kwargs.get("text")

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr("bwfmarkers.__main__.Halo", _DummyHalo, raising=False)


@pytest.fixture(autouse=True)
def _reset_settings() -> Generator[None, None, None]:
    """Keeps global settings stable across tests."""
    yield
    config.reload_settings()


@pytest.fixture
def make_settings(tmp_path: Path):
    """Build settings rooted in the test's temporary directory."""

    def _make_settings(
        *,
        executable: str = "bwfmetaedit",
        timeout_seconds: float = 5.0,
        max_file_size_mb: int = 100,
        max_workers: int = 1,
    ) -> AppConfig:
        return AppConfig(
            extraction=ExtractionConfig(
                executable=executable, timeout_seconds=timeout_seconds
            ),
            output=OutputConfig(folder=tmp_path / "outputs"),
            upload=UploadConfig(max_file_size_mb=max_file_size_mb),
            batch=BatchConfig(max_workers=max_workers),
            tmp_folder=tmp_path / "tmp",
        )

    return _make_settings


@pytest.fixture
def caplog_info(caplog):
    caplog.set_level(logging.INFO)
    return caplog
