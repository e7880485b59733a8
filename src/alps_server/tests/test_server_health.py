# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from unittest.mock import patch

import graphviz
import httpx
import pytest

from alps_core.cli.config import AlpsEditorConfig
from alps_server.app import create_app
from alps_server.health import (
    DependencyStatus,
    check_renderer,
    check_save_dir,
    get_detailed_health,
    get_readiness,
)

GRAPHVIZ_VERSION = "alps_server.health.graphviz.version"


def _not_found():
    return graphviz.ExecutableNotFound(["dot"])


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


# ---------------------------------------------------------------------------
# Dependency checks
# ---------------------------------------------------------------------------


@pytest.mark.anyio
@patch(GRAPHVIZ_VERSION, return_value=(2, 43, 0))
async def test_renderer_healthy(mock_version):
    result = await check_renderer()
    assert result.status == DependencyStatus.healthy
    assert result.detail == "version 2.43.0"


@pytest.mark.anyio
@patch(GRAPHVIZ_VERSION, side_effect=_not_found())
async def test_renderer_missing(mock_version):
    result = await check_renderer()
    assert result.status == DependencyStatus.unhealthy
    assert "dot" in result.detail


@pytest.mark.anyio
async def test_save_dir(tmp_path):
    assert (await check_save_dir(str(tmp_path))).status == DependencyStatus.healthy
    missing = await check_save_dir(str(tmp_path / "missing"))
    assert missing.status == DependencyStatus.unhealthy
    assert "not a writable directory" in missing.detail


@pytest.mark.anyio
@patch(GRAPHVIZ_VERSION, return_value=(9, 0, 0))
async def test_detailed_health_all_ok(mock_version, tmp_path):
    report = await get_detailed_health(AlpsEditorConfig(save_dir=str(tmp_path)))
    assert report.status == "healthy"
    assert [d.name for d in report.dependencies] == ["graphviz", "save_dir"]


@pytest.mark.anyio
@pytest.mark.parametrize("generator, expected", [("dot", "degraded"), ("svg", "unhealthy")])
async def test_missing_renderer_depends_on_generator(generator, expected, tmp_path):
    config = AlpsEditorConfig(generator=generator, save_dir=str(tmp_path))
    with patch(GRAPHVIZ_VERSION, side_effect=_not_found()):
        assert (await get_detailed_health(config)).status == expected


@pytest.mark.anyio
@patch(GRAPHVIZ_VERSION, side_effect=_not_found())
async def test_readiness(mock_version, tmp_path):
    assert await get_readiness(AlpsEditorConfig(generator="dot", save_dir=str(tmp_path)))
    assert not await get_readiness(AlpsEditorConfig(generator="svg", save_dir=str(tmp_path)))


# ---------------------------------------------------------------------------
# Endpoint tests
# ---------------------------------------------------------------------------


@pytest.mark.anyio
@patch(GRAPHVIZ_VERSION)
async def test_liveness_always_200(mock_version, tmp_path):
    app = create_app(AlpsEditorConfig(save_dir=str(tmp_path)))
    async with _client(app) as client:
        resp = await client.get("/healthz/live")
    assert resp.status_code == 200
    assert resp.json() == {"status": "alive"}
    mock_version.assert_not_called()


@pytest.mark.anyio
@patch(GRAPHVIZ_VERSION, side_effect=_not_found())
async def test_readiness_endpoint_svg_without_graphviz(mock_version, tmp_path):
    app = create_app(AlpsEditorConfig(generator="svg", save_dir=str(tmp_path)))
    async with _client(app) as client:
        resp = await client.get("/healthz/ready")
    assert resp.status_code == 503
    assert resp.json() == {"status": "not ready"}


@pytest.mark.anyio
@patch(GRAPHVIZ_VERSION, side_effect=_not_found())
async def test_readiness_endpoint_dot(mock_version, tmp_path):
    app = create_app(AlpsEditorConfig(save_dir=str(tmp_path)))
    async with _client(app) as client:
        resp = await client.get("/healthz/ready")
    assert resp.status_code == 200
    mock_version.assert_not_called()


@pytest.mark.anyio
@patch(GRAPHVIZ_VERSION, side_effect=_not_found())
async def test_detailed_endpoint(mock_version, tmp_path):
    app = create_app(AlpsEditorConfig(generator="svg", save_dir=str(tmp_path)))
    async with _client(app) as client:
        resp = await client.get("/healthz")
    assert resp.status_code == 503
    data = resp.json()
    assert data["status"] == "unhealthy"
    assert data["dependencies"][0]["status"] == "unhealthy"
    assert data["dependencies"][1]["status"] == "healthy"
