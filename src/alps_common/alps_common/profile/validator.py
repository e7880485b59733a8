# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Standalone validation of ALPS profiles.

Produces location-tagged diagnostics for an editor or the command line.
The diagram pipeline never depends on this module: an invalid profile can
still be parsed and drawn as far as its structure allows.
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator

from alps_common.constants import JSON_FORMAT_NAME, UNKNOWN_STATE

from .descriptor import Profile, strip_fragment
from .errors import FormatUnrecognizedError, ParseError
from .graph import classify, resolve_sources, resolve_target
from .line_tracker import extract_attribute_lines, extract_id_lines, line_for
from .parser import detect_format, parse_profile
from .schema import ALPS_JSON_SCHEMA, DESCRIPTOR_TYPES
from .suggestions import suggest

LOGGER = logging.getLogger(__name__)


class IssueSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """A validation problem found in a profile."""

    file: str
    line: Optional[int]
    severity: IssueSeverity
    message: str
    context: Optional[str] = None  # descriptor id or JSON path
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        loc = f"{self.file}"
        if self.line is not None:
            loc += f":{self.line}"
        msg = f"{loc}: {self.severity.value}: {self.message}"
        if self.context:
            msg += f" (in {self.context})"
        if self.suggestion:
            msg += f". Did you mean {self.suggestion}?"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "severity": self.severity.value,
            "message": self.message,
            "context": self.context,
            "suggestion": self.suggestion,
        }


@dataclass
class ValidationResult:
    """Result of validating a profile."""

    format: Optional[str] = None
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        return any(i.severity == IssueSeverity.ERROR for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == IssueSeverity.WARNING for i in self.issues)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.WARNING]

    def add_error(
        self,
        file: str,
        message: str,
        line: Optional[int] = None,
        context: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        self.issues.append(
            ValidationIssue(file, line, IssueSeverity.ERROR, message, context, suggestion)
        )

    def add_warning(
        self,
        file: str,
        message: str,
        line: Optional[int] = None,
        context: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        self.issues.append(
            ValidationIssue(file, line, IssueSeverity.WARNING, message, context, suggestion)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "valid": self.is_valid,
            "issues": [i.to_dict() for i in self.issues],
        }


def _is_local_reference(ref: str) -> bool:
    return ref.startswith("#") or not any(c in ref for c in ":/")


class ProfileValidator:
    """Validates ALPS profile text.

    The compiled JSON Schema validator is built once per instance, so a
    long-lived validator (e.g. one per editing session) avoids recompiling
    the schema on every keystroke.
    """

    def __init__(self, schema: Optional[Dict[str, Any]] = None):
        self._schema_validator = Draft202012Validator(schema or ALPS_JSON_SCHEMA)

    def validate(
        self, content: str, format: Optional[str] = None, file: str = "<profile>"
    ) -> ValidationResult:
        result = ValidationResult()
        try:
            format = (format or detect_format(content)).upper()
        except FormatUnrecognizedError as exc:
            result.add_error(file, str(exc))
            return result
        result.format = format

        try:
            profile = parse_profile(content, format)
        except (ParseError, FormatUnrecognizedError) as exc:
            line = exc.line if isinstance(exc, ParseError) else None
            result.add_error(file, str(exc), line=line)
            return result

        id_lines = extract_id_lines(content, format)
        if format == JSON_FORMAT_NAME:
            self._validate_schema(json.loads(content.lstrip("\ufeff")), id_lines, file, result)
        self._validate_ids(profile, id_lines, file, result)
        self._validate_references(profile, content, id_lines, file, result)
        self._validate_transitions(profile, id_lines, file, result)

        LOGGER.debug(
            "Validated %s profile: %d errors, %d warnings",
            format,
            len(result.errors),
            len(result.warnings),
        )
        return result

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------

    def _validate_schema(
        self, data: Any, id_lines: Dict[str, int], file: str, result: ValidationResult
    ):
        for err in sorted(self._schema_validator.iter_errors(data), key=lambda e: list(e.path)):
            location = "/".join(str(part) for part in err.path) or "<root>"
            owner = _owning_id(data, list(err.path))
            result.add_error(file, err.message, line=line_for(id_lines, owner), context=location)

    def _validate_ids(
        self, profile: Profile, id_lines: Dict[str, int], file: str, result: ValidationResult
    ):
        counts = Counter(profile.ids)
        for descriptor_id, count in counts.items():
            if count > 1:
                result.add_error(
                    file,
                    f"Duplicate descriptor id '{descriptor_id}' ({count} occurrences)",
                    line=line_for(id_lines, descriptor_id),
                    context=descriptor_id,
                )
        # JSON profiles get this from the schema.
        if profile.format == JSON_FORMAT_NAME:
            return
        for descriptor in profile.descriptors:
            if descriptor.type and descriptor.type not in DESCRIPTOR_TYPES:
                result.add_error(
                    file,
                    f"Invalid descriptor type '{descriptor.type}'",
                    line=line_for(id_lines, descriptor.id),
                    context=descriptor.id,
                    suggestion=suggest(descriptor.type, list(DESCRIPTOR_TYPES)),
                )

    def _validate_references(
        self,
        profile: Profile,
        content: str,
        id_lines: Dict[str, int],
        file: str,
        result: ValidationResult,
    ):
        known = set(profile.ids)
        href_lines = extract_attribute_lines(content, profile.format, "href")
        for descriptor in profile.descriptors:
            for child in descriptor.children:
                if not child.href or not _is_local_reference(child.href):
                    continue
                target = strip_fragment(child.href)
                if target not in known:
                    result.add_error(
                        file,
                        f"Descriptor not found: '{child.href}'",
                        line=line_for(href_lines, child.href) or line_for(id_lines, descriptor.id),
                        context=descriptor.id,
                        suggestion=suggest(target, profile.ids),
                    )

    def _validate_transitions(
        self, profile: Profile, id_lines: Dict[str, int], file: str, result: ValidationResult
    ):
        known = set(profile.ids)
        for transition in classify(profile.descriptors).transitions:
            if not transition.id:
                continue
            rt = transition.rt or ""
            target = resolve_target(transition)
            if _is_local_reference(rt) and target not in known:
                result.add_warning(
                    file,
                    f"Return target '{rt}' does not match any descriptor",
                    line=line_for(id_lines, transition.id),
                    context=transition.id,
                    suggestion=suggest(target, profile.ids),
                )
            if resolve_sources(transition.id, profile.descriptors) == [UNKNOWN_STATE]:
                result.add_warning(
                    file,
                    f"Transition is not nested in any state; it is drawn from '{UNKNOWN_STATE}'",
                    line=line_for(id_lines, transition.id),
                    context=transition.id,
                )


def _owning_id(data: Any, path: List[Any]) -> Optional[str]:
    """Return the id of the innermost object along *path* that declares one."""
    owner = None
    node = data
    for part in path:
        if isinstance(node, dict) and isinstance(node.get("id"), str):
            owner = node["id"]
        try:
            node = node[part]
        except (KeyError, IndexError, TypeError):
            break
    if isinstance(node, dict) and isinstance(node.get("id"), str):
        owner = node["id"]
    return owner
