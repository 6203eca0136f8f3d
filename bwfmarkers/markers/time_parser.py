"""Conversion of textual marker times to seconds.

Supported notations:
    - plain seconds: "83.456", "12"
    - minutes and seconds: "1:23.456"
    - hours, minutes and seconds: "00:01:23.456"

Anything else gets a best-effort numeric parse. Malformed values degrade to
zero so one bad timestamp never aborts a whole conversion.
"""

from __future__ import annotations

import math
import re

PLAIN_SECONDS_PATTERN = re.compile(r"^\d+\.?\d*$")
NUMERIC_PREFIX_PATTERN = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(text: str) -> float | None:
    """Parses a float, falling back to the longest leading numeric prefix."""
    try:
        value = float(text)
    except ValueError:
        value = None
    if value is not None and math.isfinite(value):
        return value

    match = NUMERIC_PREFIX_PATTERN.match(text)
    if match is None:
        return None
    try:
        value = float(match.group(0))
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _parse_clock(text: str) -> float:
    parts = text.split(":")
    if len(parts) not in (2, 3):
        return 0.0

    values: list[float] = []
    for part in parts:
        value = parse_number(part)
        if value is None:
            return 0.0
        values.append(value)

    if len(values) == 3:
        hours, minutes, seconds = values
        return hours * 3600 + minutes * 60 + seconds
    minutes, seconds = values
    return minutes * 60 + seconds


def _finite_or_zero(seconds: int | float | None) -> float:
    if seconds is None:
        return 0.0
    try:
        seconds = float(seconds)
    except OverflowError:
        return 0.0
    return seconds if math.isfinite(seconds) else 0.0


def parse_time(value: str | int | float | None) -> float:
    """Converts a time value to seconds. Never raises; bad input yields 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return _finite_or_zero(value)
    if not isinstance(value, str):
        return 0.0

    if PLAIN_SECONDS_PATTERN.match(value):
        return _finite_or_zero(float(value))
    if ":" in value:
        return _finite_or_zero(_parse_clock(value))
    return _finite_or_zero(parse_number(value))
