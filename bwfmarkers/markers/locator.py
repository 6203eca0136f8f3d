"""Locating timestamped markers inside a parsed metadata document.

Different producers and tool versions lay out cue metadata differently, so
the locator tries a fixed list of shape-specific strategies in priority
order and keeps the first non-empty result. When no known shape matches, a
generic walk over the whole tree picks up anything that looks like a marker.

All strategies take the generic tree built by
:func:`bwfmarkers.markers.document.parse_document` and return a (possibly
empty) list of :class:`~bwfmarkers.domain.Marker` in discovery order.
Unnamed markers get ``Marker <n>`` where ``n`` is their 1-based discovery
position within the strategy that found them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from operator import attrgetter
from typing import Any, NamedTuple, TypeAlias

from bwfmarkers.domain import Marker, placeholder_label
from bwfmarkers.markers.document import ATTRIBUTES_KEY, TEXT_KEY, DocumentValue
from bwfmarkers.markers.time_parser import parse_number, parse_time
from bwfmarkers.utils import get_logger

logger: logging.Logger = get_logger(__name__)

TIME_FIELDS: tuple[str, ...] = ("time", "position", "offset", "sample", "frame")
LABEL_FIELDS: tuple[str, ...] = ("name", "label", "title", "text", "marker", "comment")
CUE_POINT_KEYS: tuple[str, ...] = ("CuePoint", "cue", "markers")

DEFAULT_SAMPLE_RATE = 44100.0
MAX_TRAVERSAL_DEPTH = 256

Strategy: TypeAlias = Callable[[dict[str, DocumentValue]], list[Marker]]


class FieldMatch(NamedTuple):
    """Outcome of probing a node for one of several field names."""

    found: bool
    name: str | None = None
    value: str | float | None = None


# Tree helpers


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _attributes(node: Any) -> dict[str, Any]:
    return _mapping(_mapping(node).get(ATTRIBUTES_KEY))


def _text(value: Any) -> str | float | None:
    """Returns the scalar content of a leaf value, if it has one."""
    value = _first(value)
    if isinstance(value, dict):
        value = value.get(TEXT_KEY)
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        return value
    return None


def _string(value: Any) -> str | None:
    text = _text(value)
    return text if isinstance(text, str) and text else None


def _path(node: Any, *keys: str) -> dict[str, Any]:
    """Follows ``keys`` through first elements of each level."""
    current = _mapping(node)
    for key in keys:
        current = _mapping(_first(current.get(key)))
    return current


# Marker predicate


def _is_usable_time(value: Any) -> bool:
    return (isinstance(value, str) and bool(value)) or (
        isinstance(value, (int, float)) and not isinstance(value, bool)
    )


def _is_usable_label(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def find_field(
    node: Any,
    field_names: tuple[str, ...],
    accept: Callable[[Any], bool] = _is_usable_time,
) -> FieldMatch:
    """Probes ``node`` and its attribute bag for the first of ``field_names``.

    ``found`` is true when any of the names is present at either level. The
    returned name and value belong to the first name, in priority order, whose
    value passes ``accept``; when none does, only ``found`` is reported.
    """
    if not isinstance(node, dict):
        return FieldMatch(False)

    attributes = _attributes(node)
    present = False
    for name in field_names:
        if name not in node and name not in attributes:
            continue
        present = True
        value = _text(node.get(name)) or _text(attributes.get(name))
        if accept(value):
            return FieldMatch(True, name, value)
    return FieldMatch(present)


def looks_like_marker(node: Any) -> bool:
    """Returns whether ``node`` exposes any time-like or label-like field."""
    return (
        find_field(node, TIME_FIELDS).found
        or find_field(node, LABEL_FIELDS, _is_usable_label).found
    )


# Strategies


def conformance_points(document: dict[str, DocumentValue]) -> list[Marker]:
    """``conformance_point_document/conformance_point_list/conformance_point``."""
    point_list = _path(document, "conformance_point_document", "conformance_point_list")
    markers: list[Marker] = []
    for point in _as_list(point_list.get("conformance_point")):
        attributes = _attributes(point)
        time_value = _string(attributes.get("time"))
        if time_value is None:
            continue
        label = (
            _string(attributes.get("marker"))
            or _string(attributes.get("name"))
            or placeholder_label(len(markers) + 1)
        )
        markers.append(Marker(parse_time(time_value), label))
    return markers


def named_markers_block(document: dict[str, DocumentValue]) -> list[Marker]:
    """``BWF_data/markers/marker`` entries with ``position`` and ``name`` children."""
    block = _path(document, "BWF_data", "markers")
    markers: list[Marker] = []
    for entry in _as_list(block.get("marker")):
        entry = _mapping(entry)
        position = _text(entry.get("position"))
        if not _is_usable_time(position):
            continue
        label = (
            _string(entry.get("name"))
            or _string(entry.get("label"))
            or placeholder_label(len(markers) + 1)
        )
        markers.append(Marker(parse_time(position), label))
    return markers


def loose_markers_array(document: dict[str, DocumentValue]) -> list[Marker]:
    """Root ``markers`` element holding ``marker`` entries, singular or listed."""
    markers: list[Marker] = []
    for group in _as_list(document.get("markers")):
        for entry in _as_list(_mapping(group).get("marker")):
            attributes = _attributes(entry)
            offset = _string(attributes.get("position")) or _string(attributes.get("time"))
            if offset is None:
                continue
            label = (
                _string(attributes.get("name"))
                or _string(attributes.get("label"))
                or _string(attributes.get("marker"))
                or placeholder_label(len(markers) + 1)
            )
            markers.append(Marker(parse_time(offset), label))
    return markers


def _sample_rate(cues: dict[str, Any]) -> float:
    raw = _text(_attributes(cues).get("samplerate"))
    if isinstance(raw, str):
        rate = parse_number(raw)
    elif isinstance(raw, (int, float)):
        rate = float(raw)
    else:
        rate = None
    if rate is None or rate <= 0:
        return DEFAULT_SAMPLE_RATE
    return rate


def sample_accurate_cues(document: dict[str, DocumentValue]) -> list[Marker]:
    """``conformance_point_document/File/Cues/Cue`` with sample positions."""
    cues = _path(document, "conformance_point_document", "File", "Cues")
    entries = _as_list(cues.get("Cue"))
    if not entries:
        return []

    sample_rate = _sample_rate(cues)
    markers: list[Marker] = []
    for cue in entries:
        cue = _mapping(cue)
        position = _text(cue.get("Position"))
        if not _is_usable_time(position):
            continue
        if isinstance(position, str):
            sample = parse_number(position) or 0.0
        else:
            sample = float(position)
        label = _string(cue.get("Label")) or placeholder_label(len(markers) + 1)
        marker = Marker(parse_time(sample / sample_rate), label)
        markers.append(marker)
        logger.debug(
            "Found cue marker: %s at %.3fs (sample %s)", label, marker.time, position
        )
    return markers


def _walk(root: Any) -> Iterator[tuple[Any, int]]:
    """Yields ``(node, depth)`` for every mapping and list, depth first.

    Attribute bags are part of their owning element and are not yielded.
    """
    stack: list[tuple[Any, int]] = [(root, 0)]
    visited: set[int] = set()
    while stack:
        node, depth = stack.pop()
        if id(node) in visited:
            continue
        visited.add(id(node))
        yield node, depth
        if depth >= MAX_TRAVERSAL_DEPTH:
            logger.warning("Metadata document exceeds depth %d; subtree skipped", depth)
            continue

        if isinstance(node, dict):
            children = [
                value for key, value in node.items()
                if key != ATTRIBUTES_KEY and isinstance(value, (dict, list))
            ]
        else:
            children = [value for value in node if isinstance(value, (dict, list))]
        stack.extend((child, depth + 1) for child in reversed(children))


def embedded_cue_points(document: dict[str, DocumentValue]) -> list[Marker]:
    """Cue points anywhere inside ``conformance_point_document/File/Core/bext``."""
    bext = _path(document, "conformance_point_document", "File", "Core", "bext")
    markers: list[Marker] = []
    if not bext:
        return markers

    for node, _depth in _walk(bext):
        if not isinstance(node, dict):
            continue
        for key in CUE_POINT_KEYS:
            for entry in _as_list(node.get(key)):
                attributes = _attributes(entry)
                position = _string(attributes.get("position"))
                if position is None:
                    continue
                label = (
                    _string(attributes.get("label"))
                    or _string(attributes.get("name"))
                    or placeholder_label(len(markers) + 1)
                )
                markers.append(Marker(parse_time(position), label))
    return markers


def generic_markers(document: dict[str, DocumentValue]) -> list[Marker]:
    """Walks the whole tree collecting every node that looks like a marker."""
    markers: list[Marker] = []
    for node, depth in _walk(document):
        if depth == 0 or not looks_like_marker(node):
            continue
        time_match = find_field(node, TIME_FIELDS)
        if time_match.value is None:
            continue
        label_match = find_field(node, LABEL_FIELDS, _is_usable_label)
        label = (
            label_match.value.strip()
            if isinstance(label_match.value, str)
            else placeholder_label(len(markers) + 1)
        )
        markers.append(Marker(parse_time(time_match.value), label))
        logger.debug(
            "Found potential marker via %s field: %s", time_match.name, markers[-1]
        )
    return markers


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("conformance_points", conformance_points),
    ("named_markers_block", named_markers_block),
    ("loose_markers_array", loose_markers_array),
    ("sample_accurate_cues", sample_accurate_cues),
    ("embedded_cue_points", embedded_cue_points),
    ("generic_markers", generic_markers),
)


def locate(document: Any) -> list[Marker]:
    """Returns the markers of ``document`` sorted by time.

    The first strategy yielding markers wins. Ties in time keep discovery
    order. An unknown or empty document yields an empty list.
    """
    if not isinstance(document, dict):
        return []

    for name, strategy in STRATEGIES:
        markers = strategy(document)
        if markers:
            logger.info("Found %d markers using %s", len(markers), name)
            return sorted(markers, key=attrgetter("time"))

    logger.info("No markers found in metadata document")
    return []
