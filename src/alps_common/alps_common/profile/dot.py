# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Serialize a classified ALPS graph into Graphviz DOT text.

Every state node carries ``URL="#<id>"`` and every transition edge carries
``URL="#<transition>"`` plus ``class="<transition>"``; a rendering UI uses
these to map clicks back to descriptors and to highlight all edges of a
transition. Output is deterministic for a given descriptor list.
"""

import re
from typing import List, Optional

from alps_common.constants import DEFAULT_TRANSITION_SYMBOL, GRAPH_NAME, TRANSITION_SYMBOLS

from .descriptor import Descriptor
from .graph import AlpsGraph, Edge, build_edges

LABEL_MODES = ("title", "id")

_DOT_ID_RE = re.compile(r"^[A-Za-z_\x80-\uffff][A-Za-z0-9_\x80-\uffff]*$")
_DOT_KEYWORDS = frozenset({"node", "edge", "graph", "digraph", "subgraph", "strict"})
_INDENT = "    "


def transition_symbol(transition_type: Optional[str]) -> str:
    """Return the colored glyph for a transition type (black for anything unknown)."""
    return TRANSITION_SYMBOLS.get(transition_type or "", DEFAULT_TRANSITION_SYMBOL)


def quote(value: str) -> str:
    """Return *value* as a double-quoted DOT string."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def node_id(value: str) -> str:
    """Return *value* unquoted when it is a plain DOT identifier, quoted otherwise."""
    if _DOT_ID_RE.match(value) and value.lower() not in _DOT_KEYWORDS:
        return value
    return quote(value)


def _header(title: str) -> List[str]:
    return [
        f"digraph {GRAPH_NAME} {{",
        f"{_INDENT}graph [",
        f'{_INDENT * 2}labelloc="t";',
        f'{_INDENT * 2}fontname="Helvetica"',
        f"{_INDENT * 2}label={quote(title)};",
        f"{_INDENT}];",
        f'{_INDENT}node [shape = box, style = "bold,filled" fillcolor="lightgray", margin="0.3,0.1"];',
        "",
    ]


def _state_label(state: Descriptor, label_mode: str) -> str:
    if label_mode == "id":
        return state.id or ""
    return state.label


def _edge_line(edge: Edge) -> str:
    label = f"{transition_symbol(edge.type)} {edge.transition}"
    return (
        f"{_INDENT}{node_id(edge.source)} -> {node_id(edge.target)} "
        f"[label={quote(label)} URL={quote('#' + edge.transition)} fontsize=13 "
        f"class={quote(edge.transition)} penwidth=1.5];"
    )


def emit(
    title: str,
    states: List[Descriptor],
    transitions: List[Descriptor],
    descriptors: List[Descriptor],
    label_mode: str = "title",
    plain_pass: bool = True,
) -> str:
    """Return DOT text for the given states and transitions.

    *descriptors* is the full descriptor list, used to find the source
    states of each transition. With *plain_pass* the state nodes are
    declared a second time without node styling.
    """
    if label_mode not in LABEL_MODES:
        raise ValueError(f"label_mode must be one of {LABEL_MODES}, got {label_mode!r}")
    return _render(title, states, build_edges(transitions, descriptors), label_mode, plain_pass)


def emit_graph(graph: AlpsGraph, label_mode: str = "title", plain_pass: bool = True) -> str:
    """Serialize an already built :class:`AlpsGraph`."""
    if label_mode not in LABEL_MODES:
        raise ValueError(f"label_mode must be one of {LABEL_MODES}, got {label_mode!r}")
    return _render(graph.title, graph.states, graph.edges, label_mode, plain_pass)


def _render(
    title: str,
    states: List[Descriptor],
    edges: List[Edge],
    label_mode: str,
    plain_pass: bool,
) -> str:
    named_states = [s for s in states if s.id]
    lines = _header(title)

    for state in named_states:
        lines.append(
            f"{_INDENT}{node_id(state.id)} [margin=0.1, label={quote(_state_label(state, label_mode))}, "
            f"shape=box, URL={quote('#' + state.id)}]"
        )
    lines.append("")

    lines.extend(_edge_line(edge) for edge in edges)
    lines.append("")

    if plain_pass:
        for state in named_states:
            lines.append(
                f"{_INDENT}{node_id(state.id)} [label={quote(_state_label(state, label_mode))} "
                f"URL={quote('#' + state.id)}]"
            )
        lines.append("")

    lines.append("}")
    return "\n".join(lines)
