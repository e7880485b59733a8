# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Prometheus metrics for the diagram API.

Request metrics are labelled by route template rather than raw path, and
diagram generation is tracked per generator so a slow Graphviz layout is
visible separately from DOT emission.
"""

import time
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

_SKIP_PATHS = frozenset(("/metrics", "/healthz/live", "/healthz/ready"))

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

DIAGRAMS_GENERATED = Counter(
    "diagrams_generated_total",
    "Diagram generation attempts",
    ["generator", "status"],
)

DIAGRAM_GENERATION_SECONDS = Histogram(
    "diagram_generation_seconds",
    "Time spent turning a profile into a diagram",
    ["generator"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
)

PROFILE_PARSE_FAILURES = Counter(
    "profile_parse_failures_total",
    "Profiles rejected because they could not be parsed",
    ["format"],
)


def route_label(request: Request) -> str:
    """Return the matched route template, or the raw path when nothing matched."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Records request count and duration for every non-probe request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        endpoint = route_label(request)
        REQUEST_COUNT.labels(
            method=request.method, endpoint=endpoint, status_code=response.status_code
        ).inc()
        REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(elapsed)
        return response


@contextmanager
def track_generation(generator: str) -> Iterator[None]:
    """Count and time one generation; an exception counts as a failure and propagates."""
    start = time.perf_counter()
    status = "failure"
    try:
        yield
        status = "success"
    finally:
        DIAGRAMS_GENERATED.labels(generator=generator, status=status).inc()
        DIAGRAM_GENERATION_SECONDS.labels(generator=generator).observe(time.perf_counter() - start)


def record_parse_failure(format: str):
    PROFILE_PARSE_FAILURES.labels(format=format or "unknown").inc()


async def metrics_endpoint() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
