# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from unittest.mock import patch

import graphviz
import httpx
import pytest

from alps_core.cli.config import AlpsEditorConfig
from alps_server.app import create_app, error_payload, format_from_content_type
from alps_common.profile import ParseError, RenderError

SVG = "<svg/>"


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def config(tmp_path) -> AlpsEditorConfig:
    return AlpsEditorConfig(save_dir=str(tmp_path))


@pytest.fixture
def app(config):
    return create_app(config)


class TestHelpers:
    @pytest.mark.parametrize(
        "content_type, expected",
        [
            ("application/json", "JSON"),
            ("application/json; charset=utf-8", "JSON"),
            ("application/xml", "XML"),
            ("text/plain", None),
            ("", None),
        ],
    )
    def test_format_from_content_type(self, content_type, expected):
        assert format_from_content_type(content_type) == expected

    def test_error_payload_for_parse_error(self):
        payload = error_payload(ParseError("Expecting value", "JSON", 3, 1))
        assert payload["class"] == "ParseError"
        assert payload["error-message"] == "Expecting value"
        assert payload["line"] == 3
        assert payload["exception-message"] == "Invalid JSON format: Expecting value (line 3, column 1)"

    def test_error_payload_for_other_errors(self):
        payload = error_payload(RenderError("boom"))
        assert payload == {
            "class": "RenderError",
            "exception-message": "boom",
            "error-message": "",
            "invalid-descriptor": "",
            "line": "",
        }


class TestGenerateEndpoint:
    @pytest.mark.anyio
    async def test_json_profile(self, app, shopping_json):
        async with _client(app) as client:
            resp = await client.post(
                "/api/", content=shopping_json, headers={"Content-Type": "application/json"}
            )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/vnd.graphviz")
        assert 'label="ALPS Online Shopping";' in resp.text

    @pytest.mark.anyio
    async def test_xml_profile_matches_json(self, app, shopping_json, shopping_xml):
        async with _client(app) as client:
            from_json = await client.post(
                "/api/", content=shopping_json, headers={"Content-Type": "application/json"}
            )
            from_xml = await client.post(
                "/api/", content=shopping_xml, headers={"Content-Type": "application/xml"}
            )
        assert from_xml.status_code == 200
        assert from_xml.text == from_json.text

    @pytest.mark.anyio
    async def test_unsupported_content_type(self, app, shopping_json):
        async with _client(app) as client:
            resp = await client.post("/api/", content=shopping_json, headers={"Content-Type": "text/plain"})
        assert resp.status_code == 400
        assert resp.text == "Unsupported Content-Type. Only accepts XML or JSON."

    @pytest.mark.anyio
    async def test_malformed_profile(self, app):
        body = '{\n  "alps": {\n    "descriptor": [\n      {"id": "a",}\n    ]\n  }\n}\n'
        async with _client(app) as client:
            resp = await client.post("/api/", content=body, headers={"Content-Type": "application/json"})
        assert resp.status_code == 500
        payload = resp.json()
        assert payload["class"] == "ParseError"
        assert payload["line"] == 4

    @pytest.mark.anyio
    async def test_svg_generator(self, tmp_path, shopping_json):
        app = create_app(AlpsEditorConfig(generator="svg", save_dir=str(tmp_path)))
        with patch("alps_common.profile.generators.graphviz.Source") as source:
            source.return_value.pipe.return_value = SVG
            async with _client(app) as client:
                resp = await client.post(
                    "/api/", content=shopping_json, headers={"Content-Type": "application/json"}
                )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("image/svg+xml")
        assert resp.text == SVG


class TestProfileQueryEndpoint:
    @pytest.mark.anyio
    async def test_returns_profile_and_diagram(self, app, shopping_xml):
        async with _client(app) as client:
            resp = await client.get("/api/profile", params={"profile": shopping_xml})
        assert resp.status_code == 200
        data = resp.json()
        assert data["profile"] == shopping_xml
        assert data["diagram"].startswith("digraph application_state_diagram {")

    @pytest.mark.anyio
    async def test_invalid_profile(self, app):
        async with _client(app) as client:
            resp = await client.get("/api/profile", params={"profile": "not a profile"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid profile format"

    @pytest.mark.anyio
    async def test_payload_too_large(self, tmp_path, shopping_json):
        app = create_app(AlpsEditorConfig(save_dir=str(tmp_path), max_query_bytes=1024))
        async with _client(app) as client:
            resp = await client.get("/api/profile", params={"profile": shopping_json})
        assert resp.status_code == 413
        assert resp.json() == {"error": "Payload too large", "max_size": "1KB"}

    @pytest.mark.anyio
    async def test_missing_parameter(self, app):
        async with _client(app) as client:
            resp = await client.get("/api/profile")
        assert resp.status_code == 422

    @pytest.mark.anyio
    async def test_render_failure(self, tmp_path, shopping_json):
        app = create_app(AlpsEditorConfig(generator="svg", save_dir=str(tmp_path)))
        with patch("alps_common.profile.generators.graphviz.Source") as source:
            source.return_value.pipe.side_effect = graphviz.ExecutableNotFound(["dot"])
            async with _client(app) as client:
                resp = await client.get("/api/profile", params={"profile": shopping_json})
        assert resp.status_code == 500
        data = resp.json()
        assert data["error"] == "ALPS processing failed"
        assert data["input"] == shopping_json
        assert "Graphviz executable not found" in data["message"]


class TestSaveFileEndpoint:
    @pytest.mark.anyio
    async def test_saves_verbatim(self, app, tmp_path, shopping_json):
        async with _client(app) as client:
            resp = await client.post(
                "/api/save-file", json={"fileName": "shop.json", "content": shopping_json}
            )
        assert resp.json() == {"success": True}
        assert (tmp_path / "shop.json").read_text(encoding="utf-8") == shopping_json

    @pytest.mark.anyio
    async def test_traversal_is_stripped(self, app, tmp_path):
        async with _client(app) as client:
            resp = await client.post(
                "/api/save-file", json={"fileName": "../../evil.json", "content": "{}"}
            )
        assert resp.json() == {"success": True}
        assert (tmp_path / "evil.json").exists()

    @pytest.mark.anyio
    async def test_unusable_name(self, app):
        async with _client(app) as client:
            resp = await client.post("/api/save-file", json={"fileName": "..", "content": "{}"})
        assert resp.json() == {"success": False, "message": "Failed to save file"}

    @pytest.mark.anyio
    async def test_unwritable_directory(self, tmp_path):
        app = create_app(AlpsEditorConfig(save_dir=str(tmp_path / "missing")))
        async with _client(app) as client:
            resp = await client.post("/api/save-file", json={"fileName": "a.json", "content": "{}"})
        assert resp.json()["success"] is False


class TestValidateEndpoint:
    @pytest.mark.anyio
    async def test_clean_profile(self, app, shopping_xml):
        async with _client(app) as client:
            resp = await client.post(
                "/api/validate", content=shopping_xml, headers={"Content-Type": "application/xml"}
            )
        assert resp.json() == {"format": "XML", "valid": True, "issues": []}

    @pytest.mark.anyio
    async def test_reports_issues(self, app, shopping_json):
        body = shopping_json.replace('{"href": "#goCart"}', '{"href": "#goCrt"}')
        async with _client(app) as client:
            resp = await client.post("/api/validate", content=body)
        data = resp.json()
        assert data["format"] == "JSON"
        assert data["valid"] is False
        assert any(issue["line"] == 12 for issue in data["issues"])


class TestRelationshipsEndpoint:
    @pytest.mark.anyio
    async def test_index(self, app, shopping_json):
        async with _client(app) as client:
            resp = await client.post(
                "/api/relationships", content=shopping_json, headers={"Content-Type": "application/json"}
            )
        assert resp.status_code == 200
        assert resp.json()["childrenOf"]["ProductDetail"] == ["id", "name", "doAddToCart"]

    @pytest.mark.anyio
    async def test_unrecognized_body(self, app):
        async with _client(app) as client:
            resp = await client.post("/api/relationships", content="hello")
        assert resp.status_code == 400
        assert resp.json()["class"] == "FormatUnrecognizedError"
