"""Parsing of metadata XML into a generic mapping/list tree.

The tree follows an attribute-bag convention:

    <Cues samplerate="48000"><Cue><Position>24000</Position></Cue></Cues>

becomes

    {"Cues": {"$": {"samplerate": "48000"},
              "Cue": [{"Position": ["24000"]}]}}

Elements without attributes or children collapse to their text. Child
elements are always lists, attributes live under ``ATTRIBUTES_KEY`` and
non-blank text of mixed elements under ``TEXT_KEY``. Namespace URIs are
dropped so producers that namespace their output resolve to the same keys.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import TypeAlias

from bwfmarkers.utils import get_logger

logger: logging.Logger = get_logger(__name__)

ATTRIBUTES_KEY = "$"
TEXT_KEY = "_"

DocumentValue: TypeAlias = "str | float | list[DocumentValue] | dict[str, DocumentValue]"


class DocumentParseError(ValueError):
    """Raised when metadata text is not a well-formed XML document."""

    def __init__(self, message: str, *, position: tuple[int, int] | None = None) -> None:
        super().__init__(message)
        self.position = position


def _local_name(name: str) -> str:
    return name.rsplit("}", 1)[-1]


def _build_node(
    element: ET.Element,
    children: list[ET.Element],
    values: dict[int, DocumentValue],
) -> DocumentValue:
    text = element.text or ""
    if not element.attrib and not children:
        return text

    node: dict[str, DocumentValue] = {}
    if element.attrib:
        node[ATTRIBUTES_KEY] = {
            _local_name(name): value for name, value in element.attrib.items()
        }

    fragments = [text]
    for child in children:
        child_list = node.setdefault(_local_name(child.tag), [])
        child_list.append(values.pop(id(child)))
        fragments.append(child.tail or "")
    content = "".join(fragments)
    if content.strip():
        node[TEXT_KEY] = content
    return node


def _element_to_value(root: ET.Element) -> DocumentValue:
    """Converts ``root`` bottom-up with an explicit stack, so depth is unbounded."""
    values: dict[int, DocumentValue] = {}
    stack: list[tuple[ET.Element, bool]] = [(root, False)]
    while stack:
        element, expanded = stack.pop()
        children = list(element)
        if not expanded:
            stack.append((element, True))
            stack.extend((child, False) for child in reversed(children))
            continue
        values[id(element)] = _build_node(element, children, values)
    return values[id(root)]


def parse_document(text: str) -> dict[str, DocumentValue]:
    """Parses XML text into the generic document tree.

    Raises:
        DocumentParseError: If the text is not well-formed XML.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as err:
        raise DocumentParseError(
            f"XML parsing failed: {err}",
            position=getattr(err, "position", None),
        ) from err

    document = {_local_name(root.tag): _element_to_value(root)}
    logger.debug("Parsed metadata document with root element %s", root.tag)
    return document
