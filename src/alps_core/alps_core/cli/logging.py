# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""User-facing status messages for the command line.

Messages are printed with rich and mirrored to the ``alps_core.cli`` logger
so they also land in the log file when one is configured.
"""

import logging

from rich.console import Console

LOGGER = logging.getLogger("alps_core.cli")
console = Console(stderr=True)

_STYLES = {
    "debug": "dim",
    "info": "",
    "warning": "yellow",
    "error": "bold red",
}


def log(message: str, level: str = "info"):
    level = level.lower()
    LOGGER.log(getattr(logging, level.upper(), logging.INFO), message)
    if level == "debug":
        return
    style = _STYLES.get(level, "")
    console.print(message, style=style or None, markup=False, highlight=False)
