import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL_ENV = "LOG_LEVEL"

_LOGGING_CONFIGURED = False


def _resolve_level(level: str | int | None) -> int:
    """Resolves an explicit level, LOG_LEVEL, or INFO, in that order."""
    candidate: str | int | None = level
    if candidate is None:
        candidate = os.getenv(LOG_LEVEL_ENV, "").strip() or None
    if candidate is None:
        return logging.INFO
    if isinstance(candidate, int):
        return candidate
    resolved = logging.getLevelName(candidate.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int | None = None) -> int:
    """Configures root logging once and returns the applied level."""
    global _LOGGING_CONFIGURED

    resolved_level = _resolve_level(level)
    root_logger = logging.getLogger()
    if not _LOGGING_CONFIGURED and not root_logger.handlers:
        logging.basicConfig(format=LOG_FORMAT, level=resolved_level)
        for handler in root_logger.handlers:
            handler.setLevel(resolved_level)
    root_logger.setLevel(resolved_level)
    _LOGGING_CONFIGURED = True
    return resolved_level


def get_logger(name: str) -> logging.Logger:
    if not _LOGGING_CONFIGURED:
        configure_logging()
    return logging.getLogger(name)
