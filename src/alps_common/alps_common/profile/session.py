# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Per-editor state for the validate-then-preview loop.

A :class:`ProfileSession` owns what an editor needs between edits (the
compiled schema validator, the selected generator and the last good
diagram), so separate editors never share mutable state.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import AlpsError
from .generators import DiagramArtifact, DiagramGenerator, DotGenerator
from .line_tracker import extract_id_lines
from .parser import detect_format
from .validator import ProfileValidator, ValidationResult

LOGGER = logging.getLogger(__name__)


@dataclass
class SessionUpdate:
    format: Optional[str]
    result: ValidationResult
    artifact: Optional[DiagramArtifact] = None
    error: Optional[AlpsError] = None

    @property
    def ok(self) -> bool:
        return self.artifact is not None


class ProfileSession:
    def __init__(
        self,
        generator: Optional[DiagramGenerator] = None,
        validator: Optional[ProfileValidator] = None,
        file: str = "<profile>",
    ):
        self.generator = generator or DotGenerator()
        self.validator = validator or ProfileValidator()
        self.file = file
        self.last_artifact: Optional[DiagramArtifact] = None

    def update(self, content: str) -> SessionUpdate:
        """Validate *content* and, when it has no errors, regenerate the diagram.

        On failure the previous diagram stays available as ``last_artifact``.
        """
        result = self.validator.validate(content, file=self.file)
        if result.has_errors:
            LOGGER.debug("Skipping preview: %d validation errors", len(result.errors))
            return SessionUpdate(result.format, result)

        try:
            artifact = self.generator.generate(content, result.format)
        except AlpsError as exc:
            LOGGER.warning("Diagram generation failed: %s", exc)
            return SessionUpdate(result.format, result, error=exc)

        self.last_artifact = artifact
        return SessionUpdate(result.format, result, artifact)

    def locate(self, content: str, descriptor_id: str) -> Optional[int]:
        """Return the line declaring *descriptor_id*, for jump-to-definition."""
        try:
            format = detect_format(content)
        except AlpsError:
            return None
        return extract_id_lines(content, format).get(descriptor_id)
