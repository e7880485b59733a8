# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""ALPS profile processing: parse, classify, emit.

Public API
----------
parse_profile / parse    Parse JSON or XML profile text into descriptors.
detect_format            Sniff JSON vs XML from the first non-blank character.
classify                 Split descriptors into states and transitions.
resolve_sources          Find the states that nest a transition.
build_relationships      Parent/child index for diagram highlighting.
build_graph              Run the whole classification stage on a Profile.
emit / emit_graph        Serialize states and transitions as DOT text.
ProfileValidator         Location-tagged diagnostics for editors and the CLI.
get_generator            Pick a diagram generator ("dot", "svg") by name.
ProfileSession           Per-editor validate-then-preview state.
"""

from .descriptor import Descriptor, DescriptorRef, Profile, strip_fragment
from .dot import emit, emit_graph, transition_symbol
from .errors import (
    AlpsError,
    FormatUnrecognizedError,
    ParseError,
    RenderError,
    UnresolvedReferenceWarning,
)
from .generators import (
    GENERATORS,
    DiagramArtifact,
    DiagramGenerator,
    DotGenerator,
    GeneratorOptions,
    SvgGenerator,
    get_generator,
    render_svg,
)
from .graph import (
    AlpsGraph,
    Classification,
    Edge,
    Relationships,
    build_edges,
    build_graph,
    build_relationships,
    classify,
    is_state,
    is_transition,
    resolve_sources,
    resolve_target,
)
from .line_tracker import extract_attribute_lines, extract_id_lines, line_for
from .parser import detect_format, parse, parse_profile
from .session import ProfileSession, SessionUpdate
from .suggestions import suggest
from .validator import IssueSeverity, ProfileValidator, ValidationIssue, ValidationResult

__all__ = [
    "AlpsError",
    "AlpsGraph",
    "Classification",
    "Descriptor",
    "DescriptorRef",
    "DiagramArtifact",
    "DiagramGenerator",
    "DotGenerator",
    "Edge",
    "FormatUnrecognizedError",
    "GENERATORS",
    "GeneratorOptions",
    "IssueSeverity",
    "ParseError",
    "Profile",
    "ProfileSession",
    "ProfileValidator",
    "Relationships",
    "RenderError",
    "SessionUpdate",
    "SvgGenerator",
    "UnresolvedReferenceWarning",
    "ValidationIssue",
    "ValidationResult",
    "build_edges",
    "build_graph",
    "build_relationships",
    "classify",
    "detect_format",
    "emit",
    "emit_graph",
    "extract_attribute_lines",
    "extract_id_lines",
    "get_generator",
    "is_state",
    "is_transition",
    "line_for",
    "parse",
    "parse_profile",
    "render_svg",
    "resolve_sources",
    "resolve_target",
    "strip_fragment",
    "suggest",
    "transition_symbol",
]
