# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from unittest import mock

import graphviz
import pytest

from alps_common.constants import DOT_MEDIA_TYPE, SVG_MEDIA_TYPE
from alps_common.profile.errors import RenderError
from alps_common.profile.generators import (
    GENERATORS,
    DotGenerator,
    GeneratorOptions,
    SvgGenerator,
    get_generator,
    render_svg,
)
from alps_common.profile.session import ProfileSession

SVG = '<svg xmlns="http://www.w3.org/2000/svg"><g class="graph"/></svg>'


@pytest.fixture
def graphviz_source():
    with mock.patch("alps_common.profile.generators.graphviz.Source") as source:
        source.return_value.pipe.return_value = SVG
        yield source


class TestGeneratorOptions:
    def test_defaults(self):
        options = GeneratorOptions()
        assert options.label_mode == "title"
        assert options.plain_pass is True
        assert options.engine == "dot"

    def test_rejects_unknown_label_mode(self):
        with pytest.raises(ValueError):
            GeneratorOptions(label_mode="name")


class TestRegistry:
    def test_registered_names(self):
        assert set(GENERATORS) == {"dot", "svg"}

    @pytest.mark.parametrize("name, cls", [("dot", DotGenerator), ("svg", SvgGenerator)])
    def test_get_generator(self, name, cls):
        generator = get_generator(name, GeneratorOptions(label_mode="id"))
        assert isinstance(generator, cls)
        assert generator.name == name
        assert generator.options.label_mode == "id"

    def test_unknown_generator(self):
        with pytest.raises(KeyError, match="Known generators: dot, svg"):
            get_generator("png")


class TestDotGenerator:
    def test_artifact(self, shopping_json):
        artifact = DotGenerator().generate(shopping_json)
        assert artifact.media_type == DOT_MEDIA_TYPE
        assert artifact.title == "ALPS Online Shopping"
        assert artifact.body.startswith("digraph application_state_diagram {")
        assert artifact.relationships["childrenOf"]["Cart"] == ["id", "goProductList"]
        assert artifact.warnings == []

    def test_warnings_are_strings(self):
        content = '{"alps": {"descriptor": [{"id": "go", "type": "safe", "rt": "#Nowhere"}]}}'
        artifact = DotGenerator().generate(content, "JSON")
        assert artifact.warnings == [
            "Transition 'go' has unresolved source 'UnknownState'",
            "Transition 'go' has unresolved target '#Nowhere'",
        ]

    def test_options_reach_emitter(self, shopping_json):
        artifact = DotGenerator(GeneratorOptions(label_mode="id", plain_pass=False)).generate(
            shopping_json
        )
        assert 'Cart [margin=0.1, label="Cart"' in artifact.body
        assert 'Cart [label="Cart" URL="#Cart"]' not in artifact.body


class TestSvgGenerator:
    def test_renders_dot_through_graphviz(self, graphviz_source, shopping_json):
        artifact = SvgGenerator(GeneratorOptions(engine="neato")).generate(shopping_json)
        assert artifact.media_type == SVG_MEDIA_TYPE
        assert artifact.body == SVG
        assert artifact.title == "ALPS Online Shopping"

        dot_source = graphviz_source.call_args.args[0]
        assert dot_source.startswith("digraph application_state_diagram {")
        assert graphviz_source.call_args.kwargs == {"engine": "neato"}
        graphviz_source.return_value.pipe.assert_called_once_with(format="svg", encoding="utf-8")

    def test_missing_executable(self, graphviz_source):
        graphviz_source.return_value.pipe.side_effect = graphviz.ExecutableNotFound(["dot"])
        with pytest.raises(RenderError, match="Graphviz executable not found"):
            render_svg("digraph {}")

    def test_layout_failure(self, graphviz_source):
        graphviz_source.return_value.pipe.side_effect = graphviz.CalledProcessError(
            1, ["dot"], stderr=b"syntax error in line 1"
        )
        with pytest.raises(RenderError, match="syntax error in line 1"):
            render_svg("digraph {")


class TestProfileSession:
    def test_valid_update_produces_artifact(self, shopping_json):
        session = ProfileSession()
        update = session.update(shopping_json)
        assert update.ok
        assert update.format == "JSON"
        assert update.result.is_valid
        assert session.last_artifact is update.artifact

    def test_invalid_update_keeps_last_diagram(self, shopping_json):
        session = ProfileSession(file="shop.json")
        good = session.update(shopping_json)

        bad = session.update(shopping_json[:-10])
        assert not bad.ok
        assert bad.artifact is None
        assert bad.result.errors[0].file == "shop.json"
        assert session.last_artifact is good.artifact

    def test_warnings_do_not_block_preview(self):
        content = """{"alps": {"descriptor": [
  {"id": "Home", "tag": "collection"},
  {"id": "goHome", "type": "safe", "rt": "#Home"}
]}}"""
        update = ProfileSession().update(content)
        assert update.ok
        assert update.result.has_warnings

    def test_render_failure_is_reported(self, graphviz_source, shopping_xml):
        graphviz_source.return_value.pipe.side_effect = graphviz.ExecutableNotFound(["dot"])
        session = ProfileSession(generator=SvgGenerator())
        update = session.update(shopping_xml)
        assert not update.ok
        assert isinstance(update.error, RenderError)
        assert session.last_artifact is None

    def test_sessions_are_independent(self, shopping_json):
        first, second = ProfileSession(), ProfileSession()
        first.update(shopping_json)
        assert second.last_artifact is None
        assert first.validator is not second.validator

    @pytest.mark.parametrize(
        "fixture, descriptor_id, line",
        [("shopping_json", "Cart", 20), ("shopping_xml", "Cart", 17), ("shopping_json", "Nope", None)],
    )
    def test_locate(self, request, fixture, descriptor_id, line):
        content = request.getfixturevalue(fixture)
        assert ProfileSession().locate(content, descriptor_id) == line

    def test_locate_unrecognized_content(self):
        assert ProfileSession().locate("plain text", "Cart") is None
