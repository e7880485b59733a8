# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Diagram generators selectable by name.

Each generator turns profile text into a :class:`DiagramArtifact`. New
variants are added to :data:`GENERATORS`; callers pick one through
configuration with :func:`get_generator`.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Protocol

import graphviz

from alps_common.constants import DOT_MEDIA_TYPE, SVG_MEDIA_TYPE

from .dot import LABEL_MODES, emit_graph
from .errors import RenderError
from .graph import AlpsGraph, build_graph
from .parser import parse_profile

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratorOptions:
    label_mode: str = "title"
    plain_pass: bool = True
    engine: str = "dot"

    def __post_init__(self):
        if self.label_mode not in LABEL_MODES:
            raise ValueError(f"label_mode must be one of {LABEL_MODES}, got {self.label_mode!r}")


@dataclass(frozen=True)
class DiagramArtifact:
    media_type: str
    body: str
    title: str
    relationships: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


class DiagramGenerator(Protocol):
    name: str

    def generate(self, content: str, format: Optional[str] = None) -> DiagramArtifact:
        ...


def render_svg(dot_source: str, engine: str = "dot") -> str:
    """Lay out *dot_source* with Graphviz and return the SVG document."""
    try:
        return graphviz.Source(dot_source, engine=engine).pipe(format="svg", encoding="utf-8")
    except graphviz.ExecutableNotFound as exc:
        raise RenderError(f"Graphviz executable not found: {exc}") from exc
    except graphviz.CalledProcessError as exc:
        stderr = exc.stderr.decode("utf-8", "replace") if isinstance(exc.stderr, bytes) else exc.stderr
        raise RenderError(f"Graphviz failed to render diagram: {stderr or exc}") from exc


class DotGenerator:
    """Emits Graphviz DOT text."""

    name = "dot"

    def __init__(self, options: Optional[GeneratorOptions] = None):
        self.options = options or GeneratorOptions()

    def build(self, content: str, format: Optional[str] = None) -> AlpsGraph:
        return build_graph(parse_profile(content, format))

    def generate(self, content: str, format: Optional[str] = None) -> DiagramArtifact:
        graph = self.build(content, format)
        body = emit_graph(graph, self.options.label_mode, self.options.plain_pass)
        return DiagramArtifact(
            media_type=DOT_MEDIA_TYPE,
            body=body,
            title=graph.title,
            relationships=graph.relationships.to_dict(),
            warnings=[str(w) for w in graph.warnings],
        )


class SvgGenerator:
    """Emits DOT text and renders it to SVG through Graphviz."""

    name = "svg"

    def __init__(self, options: Optional[GeneratorOptions] = None):
        self.options = options or GeneratorOptions()
        self._dot = DotGenerator(self.options)

    def generate(self, content: str, format: Optional[str] = None) -> DiagramArtifact:
        artifact = self._dot.generate(content, format)
        LOGGER.debug("Rendering %r with Graphviz engine %s", artifact.title, self.options.engine)
        svg = render_svg(artifact.body, self.options.engine)
        return replace(artifact, media_type=SVG_MEDIA_TYPE, body=svg)


GENERATORS: Dict[str, Callable[[GeneratorOptions], DiagramGenerator]] = {
    DotGenerator.name: DotGenerator,
    SvgGenerator.name: SvgGenerator,
}


def get_generator(name: str, options: Optional[GeneratorOptions] = None) -> DiagramGenerator:
    """Instantiate the generator registered as *name*."""
    try:
        factory = GENERATORS[name]
    except KeyError:
        raise KeyError(
            f"Unknown diagram generator {name!r}. Known generators: {', '.join(sorted(GENERATORS))}"
        ) from None
    return factory(options or GeneratorOptions())
