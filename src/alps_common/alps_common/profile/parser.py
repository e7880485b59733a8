# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Parse ALPS profile text (JSON or XML) into :class:`Descriptor` lists.

Only top-level descriptors become :class:`Descriptor` records. Their
immediate nested descriptors are kept as :class:`DescriptorRef` children;
anything nested deeper is not visited.
"""

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any, Iterator, List, Optional, Tuple

from alps_common.constants import DEFAULT_PROFILE_TITLE, JSON_FORMAT_NAME, XML_FORMAT_NAME

from .descriptor import Descriptor, DescriptorRef, Profile
from .errors import FormatUnrecognizedError, ParseError

LOGGER = logging.getLogger(__name__)


def detect_format(content: str) -> str:
    """Return ``"JSON"`` or ``"XML"`` based on the first non-blank character."""
    stripped = content.lstrip("\ufeff").lstrip()
    if stripped.startswith(("{", "[")):
        return JSON_FORMAT_NAME
    if stripped.startswith("<"):
        return XML_FORMAT_NAME
    raise FormatUnrecognizedError()


def parse(content: str, format: str) -> List[Descriptor]:
    """Parse *content* and return its top-level descriptors."""
    return parse_profile(content, format).descriptors


def parse_profile(content: str, format: Optional[str] = None) -> Profile:
    """Parse *content* into a :class:`Profile`.

    When *format* is omitted it is sniffed with :func:`detect_format`.
    Raises :class:`ParseError` for malformed input.
    """
    if format is None:
        format = detect_format(content)
    format = format.upper()
    if format == JSON_FORMAT_NAME:
        title, descriptors = _parse_json(content)
    elif format == XML_FORMAT_NAME:
        title, descriptors = _parse_xml(content)
    else:
        raise FormatUnrecognizedError(f"Unsupported profile format: {format!r}")

    LOGGER.debug("Parsed %s profile %r with %d descriptors", format, title, len(descriptors))
    return Profile(title=title, format=format, descriptors=descriptors)


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return [value]
    return []


def _json_fault_location(exc: json.JSONDecodeError) -> Tuple[int, int]:
    """Return the 1-based line and column of the fault behind *exc*.

    A trailing comma is only noticed at the closing bracket that follows it,
    often on the next line; the comma itself is reported instead.
    """
    doc, pos = exc.doc, exc.pos
    if pos < len(doc) and doc[pos] in "]}":
        before = doc[:pos].rstrip()
        if before.endswith(","):
            comma = len(before) - 1
            line = doc.count("\n", 0, comma) + 1
            return line, comma - doc.rfind("\n", 0, comma)
    return exc.lineno, exc.colno


def _parse_json(content: str) -> Tuple[str, List[Descriptor]]:
    try:
        data = json.loads(content.lstrip("\ufeff"))
    except json.JSONDecodeError as exc:
        line, column = _json_fault_location(exc)
        raise ParseError(exc.msg, JSON_FORMAT_NAME, line, column) from exc

    alps = data.get("alps") if isinstance(data, dict) else None
    if not isinstance(alps, dict):
        return DEFAULT_PROFILE_TITLE, []

    title = _text(alps.get("title")) or DEFAULT_PROFILE_TITLE
    descriptors = [
        _descriptor_from_dict(item)
        for item in _as_list(alps.get("descriptor"))
        if isinstance(item, dict)
    ]
    return title, descriptors


def _descriptor_from_dict(item: dict) -> Descriptor:
    children = tuple(
        DescriptorRef(href=_text(child.get("href")), id=_text(child.get("id")))
        for child in _as_list(item.get("descriptor"))
        if isinstance(child, dict)
    )
    descriptor_id = _text(item.get("id"))
    return Descriptor(
        id=descriptor_id,
        title=_text(item.get("title")) or descriptor_id,
        type=_text(item.get("type")),
        rt=_text(item.get("rt")),
        tag=_text(item.get("tag")),
        definition=_text(item.get("def")),
        children=children,
    )


# ---------------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------------


def _local_name(tag: Any) -> str:
    # Comments and processing instructions carry a callable tag.
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _child_elements(element: ET.Element, name: str) -> Iterator[ET.Element]:
    return (child for child in element if _local_name(child.tag) == name)


def _parse_xml(content: str) -> Tuple[str, List[Descriptor]]:
    try:
        root = ET.fromstring(content.lstrip("\ufeff"))
    except ET.ParseError as exc:
        line, column = exc.position
        raise ParseError(str(exc), XML_FORMAT_NAME, line, column + 1) from exc

    title = DEFAULT_PROFILE_TITLE
    for element in root.iter():
        if _local_name(element.tag) == "title":
            title = "".join(element.itertext()).strip() or DEFAULT_PROFILE_TITLE
            break

    if _local_name(root.tag) != "alps":
        LOGGER.debug("XML root is <%s>, not <alps>; no descriptors read", root.tag)
        return title, []

    descriptors = [_descriptor_from_element(el) for el in _child_elements(root, "descriptor")]
    return title, descriptors


def _descriptor_from_element(element: ET.Element) -> Descriptor:
    children = tuple(
        DescriptorRef(href=nested.get("href"), id=nested.get("id"))
        for nested in _child_elements(element, "descriptor")
    )
    descriptor_id = element.get("id")
    return Descriptor(
        id=descriptor_id,
        title=element.get("title") or descriptor_id,
        type=element.get("type"),
        rt=element.get("rt"),
        tag=element.get("tag"),
        definition=element.get("def"),
        children=children,
    )
