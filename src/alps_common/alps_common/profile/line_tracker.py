# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Map descriptor attribute values to 1-based source line numbers."""

import re
from typing import Dict, Optional

from alps_common.constants import JSON_FORMAT_NAME


def _attribute_pattern(attribute: str, format: str) -> "re.Pattern[str]":
    name = re.escape(attribute)
    if format.upper() == JSON_FORMAT_NAME:
        return re.compile(rf'"{name}"\s*:\s*"([^"]+)"')
    return re.compile(rf"(?<![\w:.-]){name}\s*=\s*[\"']([^\"']+)[\"']")


def extract_attribute_lines(content: str, format: str, attribute: str) -> Dict[str, int]:
    """Return a dict mapping each value of *attribute* to the line it first appears on.

    Works on raw text, so it also answers for profiles that fail to parse.
    """
    pattern = _attribute_pattern(attribute, format)
    result: Dict[str, int] = {}
    for lineno, line in enumerate(content.splitlines(), start=1):
        for match in pattern.finditer(line):
            result.setdefault(match.group(1), lineno)
    return result


def extract_id_lines(content: str, format: str) -> Dict[str, int]:
    """Return a dict mapping descriptor ids to the line declaring them."""
    return extract_attribute_lines(content, format, "id")


def line_for(line_map: Dict[str, int], *keys: Optional[str]) -> Optional[int]:
    """Return the first matching line number from *line_map*, or None."""
    for key in keys:
        if key is not None and key in line_map:
            return line_map[key]
    return None
