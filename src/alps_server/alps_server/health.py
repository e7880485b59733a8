# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Health check logic for the diagram API.

The ``dot`` generator is pure Python, so the only external dependency is
the Graphviz executable used by ``svg``. A missing executable degrades the
service unless ``svg`` is the configured generator. The save directory is
checked because ``/api/save-file`` writes into it.
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List

import graphviz

from alps_common.profile.generators import SvgGenerator
from alps_core.cli.config import AlpsEditorConfig

LOGGER = logging.getLogger(__name__)
HEALTH_CHECK_TIMEOUT_S = 2.0


class DependencyStatus(str, Enum):
    healthy = "healthy"
    unhealthy = "unhealthy"


@dataclass
class DependencyHealth:
    name: str
    status: DependencyStatus
    latency_ms: float
    detail: str = ""


@dataclass
class HealthReport:
    status: str  # "healthy", "degraded", or "unhealthy"
    dependencies: List[DependencyHealth] = field(default_factory=list)


async def _probe(name: str, probe: Callable[[], str]) -> DependencyHealth:
    """Run a blocking *probe* off the event loop, bounded by the check timeout.

    The probe returns a detail string on success and raises on failure.
    """
    loop = asyncio.get_running_loop()
    start = time.perf_counter()
    try:
        detail = await asyncio.wait_for(
            loop.run_in_executor(None, probe), timeout=HEALTH_CHECK_TIMEOUT_S
        )
        status = DependencyStatus.healthy
    except Exception as exc:
        LOGGER.debug("Health probe %s failed: %s", name, exc)
        detail, status = str(exc) or type(exc).__name__, DependencyStatus.unhealthy
    latency = (time.perf_counter() - start) * 1000
    return DependencyHealth(name=name, status=status, latency_ms=latency, detail=detail)


def _graphviz_version() -> str:
    return "version " + ".".join(str(part) for part in graphviz.version())


async def check_renderer() -> DependencyHealth:
    """Check that the Graphviz ``dot`` executable can be run."""
    return await _probe("graphviz", _graphviz_version)


async def check_save_dir(save_dir: str) -> DependencyHealth:
    """Check that saved profiles can be written to *save_dir*."""

    def writable() -> str:
        if not (os.path.isdir(save_dir) and os.access(save_dir, os.W_OK)):
            raise OSError(f"{save_dir} is not a writable directory")
        return ""

    return await _probe("save_dir", writable)


def _overall(config: AlpsEditorConfig, renderer: DependencyHealth, others: List[DependencyHealth]) -> str:
    if renderer.status == DependencyStatus.unhealthy and config.generator == SvgGenerator.name:
        return "unhealthy"
    if any(d.status == DependencyStatus.unhealthy for d in [renderer, *others]):
        return "degraded"
    return "healthy"


async def get_detailed_health(config: AlpsEditorConfig) -> HealthReport:
    """Run all dependency checks concurrently and return a full health report."""
    renderer, storage = await asyncio.gather(check_renderer(), check_save_dir(config.save_dir))
    return HealthReport(status=_overall(config, renderer, [storage]), dependencies=[renderer, storage])


async def get_readiness(config: AlpsEditorConfig) -> bool:
    """Check if the service can serve diagram requests with its configured generator."""
    if config.generator != SvgGenerator.name:
        return True
    renderer = await check_renderer()
    return renderer.status == DependencyStatus.healthy
