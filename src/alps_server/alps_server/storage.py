# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Persist edited profiles to the configured save directory."""

import logging
import os

LOGGER = logging.getLogger(__name__)


def sanitize_filename(file_name: str) -> str:
    """Strip directory traversal sequences and path separators from *file_name*."""
    safe = file_name.replace("..", "")
    for sep in ("/", "\\"):
        safe = safe.replace(sep, "")
    return safe


def save_profile(save_dir: str, file_name: str, content: str) -> str:
    """Write *content* verbatim and return the path written.

    Raises ``ValueError`` when nothing usable is left of *file_name*.
    """
    safe = sanitize_filename(file_name)
    if not safe:
        raise ValueError(f"Invalid file name: {file_name!r}")
    path = os.path.join(save_dir, safe)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(content)
    LOGGER.info("Saved profile to %s (%d bytes)", path, len(content))
    return path
