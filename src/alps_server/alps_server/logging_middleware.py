# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Per-request logging context for the diagram API."""

import logging
import time
import uuid

from fastapi import Request
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from alps_core.logconfig import request_duration_var, request_endpoint_var, request_id_var

LOGGER = logging.getLogger(__name__)
REQUEST_ID_HEADER = "X-Request-ID"
_MAX_CLIENT_ID_LENGTH = 128


def resolve_request_id(request: Request) -> str:
    """Pick the id that tags every log line of this request.

    An editor may send its own ``X-Request-ID`` to correlate a preview with
    its logs; otherwise the active OpenTelemetry trace id is used, and a
    fresh UUID when there is no trace.
    """
    client_id = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if client_id and len(client_id) <= _MAX_CLIENT_ID_LENGTH and client_id.isprintable():
        return client_id

    span_ctx = trace.get_current_span().get_span_context()
    if span_ctx and span_ctx.trace_id:
        return format(span_ctx.trace_id, "032x")
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Fills the logging contextvars read by ``RequestContextFilter``.

    ``duration_ms`` is only known once the handler returns, so it is set
    after ``call_next`` and appears on the completion record.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = resolve_request_id(request)
        request_id_var.set(rid)
        request_endpoint_var.set(request.url.path)
        request_duration_var.set("")

        start = time.perf_counter()
        response = await call_next(request)
        request_duration_var.set(f"{(time.perf_counter() - start) * 1000:.2f}")

        LOGGER.debug("%s %s -> %d", request.method, request.url.path, response.status_code)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
