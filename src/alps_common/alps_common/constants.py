# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from typing import Dict, Final, FrozenSet

JSON_FORMAT_NAME: Final[str] = "JSON"
XML_FORMAT_NAME: Final[str] = "XML"

DEFAULT_PROFILE_TITLE: Final[str] = "ALPS Diagram"
UNKNOWN_STATE: Final[str] = "UnknownState"
GRAPH_NAME: Final[str] = "application_state_diagram"

# Tags that promote a descriptor to a state even without children.
STATE_TAGS: Final[FrozenSet[str]] = frozenset({"collection", "item"})

TRANSITION_SYMBOLS: Final[Dict[str, str]] = {
    "safe": "\U0001F7E9",  # green square
    "unsafe": "\U0001F7E5",  # red square
    "idempotent": "\U0001F7E8",  # yellow square
}
DEFAULT_TRANSITION_SYMBOL: Final[str] = "⬛"  # black square

DOT_MEDIA_TYPE: Final[str] = "text/vnd.graphviz"
SVG_MEDIA_TYPE: Final[str] = "image/svg+xml"

# Profiles sent through a query string are capped at 10KB.
MAX_QUERY_PROFILE_BYTES: Final[int] = 10240
