# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""HTTP API for the ALPS diagram editor.

Endpoints
---------
POST /api/                Profile body in, diagram out (format from Content-Type).
GET  /api/profile         Profile in the ``profile`` query parameter, JSON out.
POST /api/save-file       Save ``{fileName, content}`` into the save directory.
POST /api/validate        Location-tagged diagnostics for a profile.
POST /api/relationships   Parent/child descriptor index for highlighting.
GET  /healthz[/live|/ready], GET /metrics
"""

import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from alps_common.constants import JSON_FORMAT_NAME, XML_FORMAT_NAME
from alps_common.profile import (
    AlpsError,
    DiagramGenerator,
    DotGenerator,
    ParseError,
    ProfileValidator,
    detect_format,
    get_generator,
    parse_profile,
)
from alps_core.cli.config import AlpsEditorConfig, get_config

from .health import get_detailed_health, get_readiness
from .logging_middleware import RequestContextMiddleware
from .metrics import PrometheusMiddleware, metrics_endpoint, record_parse_failure, track_generation
from .storage import save_profile

LOGGER = logging.getLogger(__name__)


class SaveFileRequest(BaseModel):
    fileName: str
    content: str


def format_from_content_type(content_type: str) -> Optional[str]:
    if "application/xml" in content_type:
        return XML_FORMAT_NAME
    if "application/json" in content_type:
        return JSON_FORMAT_NAME
    return None


def error_payload(exc: Exception) -> Dict[str, Any]:
    """Describe a processing failure for the editor's error display."""
    is_parse_error = isinstance(exc, ParseError)
    return {
        "class": type(exc).__name__,
        "exception-message": str(exc),
        "error-message": exc.message if is_parse_error else "",
        "invalid-descriptor": "",
        "line": exc.line if is_parse_error and exc.line is not None else "",
    }


async def _read_text(request: Request) -> str:
    return (await request.body()).decode("utf-8", errors="replace")


def create_app(config: Optional[AlpsEditorConfig] = None) -> FastAPI:
    config = config or get_config()
    generator: DiagramGenerator = get_generator(config.generator, config.generator_options())
    validator = ProfileValidator()

    app = FastAPI(title="ALPS diagram API")
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.state.config = config
    app.state.generator = generator

    async def _generate(content: str, format: Optional[str]):
        try:
            with track_generation(generator.name):
                artifact = await run_in_threadpool(generator.generate, content, format)
        except ParseError as exc:
            record_parse_failure(exc.format)
            raise
        for warning in artifact.warnings:
            LOGGER.info("%s", warning)
        return artifact

    @app.post("/api/")
    async def generate_diagram(request: Request) -> Response:
        format = format_from_content_type(request.headers.get("content-type", ""))
        if format is None:
            return PlainTextResponse(
                "Unsupported Content-Type. Only accepts XML or JSON.", status_code=400
            )
        content = await _read_text(request)
        try:
            artifact = await _generate(content, format)
        except AlpsError as exc:
            LOGGER.warning("Diagram generation failed: %s", exc)
            return JSONResponse(error_payload(exc), status_code=500)
        return Response(content=artifact.body, media_type=artifact.media_type)

    @app.get("/api/profile")
    async def process_profile(profile: str = Query(...)) -> JSONResponse:
        try:
            parse_profile(profile)
        except AlpsError as exc:
            return JSONResponse(
                {"error": "Invalid profile format", "details": str(exc)}, status_code=400
            )

        if len(profile.encode("utf-8")) > config.max_query_bytes:
            return JSONResponse(
                {"error": "Payload too large", "max_size": f"{config.max_query_bytes // 1024}KB"},
                status_code=413,
            )

        try:
            artifact = await _generate(profile, None)
        except AlpsError as exc:
            LOGGER.warning("ALPS processing failed: %s", exc)
            return JSONResponse(
                {"error": "ALPS processing failed", "message": str(exc), "input": profile},
                status_code=500,
            )
        return JSONResponse({"profile": profile, "diagram": artifact.body})

    @app.post("/api/save-file")
    async def save_file(payload: SaveFileRequest) -> JSONResponse:
        try:
            await run_in_threadpool(save_profile, config.save_dir, payload.fileName, payload.content)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Failed to save %r: %s", payload.fileName, exc)
            return JSONResponse({"success": False, "message": "Failed to save file"})
        return JSONResponse({"success": True})

    @app.post("/api/validate")
    async def validate_profile(request: Request) -> JSONResponse:
        format = format_from_content_type(request.headers.get("content-type", ""))
        content = await _read_text(request)
        result = await run_in_threadpool(validator.validate, content, format)
        return JSONResponse(result.to_dict())

    @app.post("/api/relationships")
    async def relationships(request: Request) -> JSONResponse:
        content = await _read_text(request)
        try:
            format = format_from_content_type(request.headers.get("content-type", ""))
            graph = DotGenerator().build(content, format or detect_format(content))
        except AlpsError as exc:
            return JSONResponse(error_payload(exc), status_code=400)
        return JSONResponse(graph.relationships.to_dict())

    @app.get("/healthz/live")
    async def liveness() -> Dict[str, str]:
        return {"status": "alive"}

    @app.get("/healthz/ready")
    async def readiness() -> JSONResponse:
        if await get_readiness(config):
            return JSONResponse({"status": "ready"})
        return JSONResponse({"status": "not ready"}, status_code=503)

    @app.get("/healthz")
    async def health() -> JSONResponse:
        report = await get_detailed_health(config)
        status_code = 503 if report.status == "unhealthy" else 200
        return JSONResponse(asdict(report), status_code=status_code)

    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"])

    return app
