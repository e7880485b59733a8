# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Classify descriptors into states and transitions and resolve edges.

Classification is a pure function of descriptor fields:

- a **state** has an id, no ``type``/``rt``/``def`` and at least one child,
  or carries a ``collection`` / ``item`` tag;
- a **transition** has both ``type`` and ``rt``;
- everything else is an ontology term and stays out of the graph.

Unresolvable transition sources fall back to :data:`UNKNOWN_STATE` and
unresolvable targets are kept verbatim, so incomplete profiles still
produce a renderable graph.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional

from alps_common.constants import STATE_TAGS, UNKNOWN_STATE

from .descriptor import Descriptor, Profile, strip_fragment
from .errors import UnresolvedReferenceWarning

LOGGER = logging.getLogger(__name__)


class Classification(NamedTuple):
    states: List[Descriptor]
    transitions: List[Descriptor]


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    transition: str
    type: Optional[str] = None


@dataclass
class Relationships:
    """Parent/child index used to highlight related diagram elements."""

    children_of: Dict[str, List[str]] = field(default_factory=dict)
    parent_of: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Dict[str, List[str]]]:
        return {"parentOf": self.parent_of, "childrenOf": self.children_of}


@dataclass
class AlpsGraph:
    title: str
    states: List[Descriptor]
    transitions: List[Descriptor]
    edges: List[Edge]
    relationships: Relationships
    warnings: List[UnresolvedReferenceWarning] = field(default_factory=list)


def is_state(descriptor: Descriptor) -> bool:
    if descriptor.tag in STATE_TAGS:
        return True
    return bool(
        descriptor.id
        and not descriptor.type
        and not descriptor.rt
        and not descriptor.definition
        and descriptor.children
    )


def is_transition(descriptor: Descriptor) -> bool:
    return bool(descriptor.type and descriptor.rt)


def classify(descriptors: List[Descriptor]) -> Classification:
    """Split *descriptors* into states and transitions, preserving order."""
    return Classification(
        states=[d for d in descriptors if is_state(d)],
        transitions=[d for d in descriptors if is_transition(d)],
    )


def resolve_sources(transition_id: str, descriptors: List[Descriptor]) -> List[str]:
    """Return ids of descriptors that nest *transition_id*.

    A child matches on ``href == "#<id>"`` or ``id == <id>``. Returns
    ``[UNKNOWN_STATE]`` when nothing matches.
    """
    sources = [
        d.id
        for d in descriptors
        if d.id and any(child.points_to(transition_id) for child in d.children)
    ]
    return sources or [UNKNOWN_STATE]


def resolve_target(transition: Descriptor) -> str:
    """Return the transition's ``rt`` without its leading ``#``."""
    return strip_fragment(transition.rt or "")


def build_relationships(descriptors: List[Descriptor]) -> Relationships:
    relationships = Relationships()
    for parent in descriptors:
        if not parent.id or not parent.children:
            continue
        children: List[str] = []
        relationships.children_of[parent.id] = children
        for child in parent.children:
            child_id = child.target
            if not child_id:
                continue
            children.append(child_id)
            relationships.parent_of.setdefault(child_id, []).append(parent.id)
    return relationships


def build_edges(
    transitions: List[Descriptor],
    descriptors: List[Descriptor],
    warnings: Optional[List[UnresolvedReferenceWarning]] = None,
) -> List[Edge]:
    """Resolve one edge per source state of every identified transition.

    Unresolved references are appended to *warnings* when it is given.
    """
    known_ids = {d.id for d in descriptors if d.id}
    edges: List[Edge] = []
    for transition in transitions:
        if not transition.id or not transition.rt:
            continue
        sources = resolve_sources(transition.id, descriptors)
        target = resolve_target(transition)

        if warnings is not None:
            if sources == [UNKNOWN_STATE]:
                warnings.append(UnresolvedReferenceWarning(transition.id, "source", UNKNOWN_STATE))
            if target not in known_ids:
                warnings.append(UnresolvedReferenceWarning(transition.id, "target", transition.rt))

        edges.extend(Edge(source, target, transition.id, transition.type) for source in sources)
    return edges


def build_graph(profile: Profile) -> AlpsGraph:
    """Run classification, edge resolution and relationship indexing."""
    states, transitions = classify(profile.descriptors)
    warnings: List[UnresolvedReferenceWarning] = []
    edges = build_edges(transitions, profile.descriptors, warnings)
    for warning in warnings:
        LOGGER.debug("%s", warning)

    return AlpsGraph(
        title=profile.title,
        states=states,
        transitions=transitions,
        edges=edges,
        relationships=build_relationships(profile.descriptors),
        warnings=warnings,
    )
