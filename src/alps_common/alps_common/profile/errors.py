# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Exception taxonomy for ALPS profile processing.

Parse-stage errors (:class:`FormatUnrecognizedError`, :class:`ParseError`)
abort the pipeline. :class:`UnresolvedReferenceWarning` is never raised by
the graph builder; instances are collected on the built graph instead.
"""

from typing import Optional


class AlpsError(Exception):
    """Base class for fatal profile processing errors."""


class FormatUnrecognizedError(AlpsError, ValueError):
    """The profile text is neither JSON nor XML."""

    def __init__(self, message: str = "Profile must be valid JSON or XML"):
        super().__init__(message)


class ParseError(AlpsError, ValueError):
    """The profile text is syntactically malformed."""

    def __init__(
        self,
        message: str,
        format: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.message = message
        self.format = format
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        loc = ""
        if self.line is not None:
            loc = f" (line {self.line}"
            if self.column is not None:
                loc += f", column {self.column}"
            loc += ")"
        return f"Invalid {self.format} format: {self.message}{loc}"


class UnresolvedReferenceWarning(UserWarning):
    """A transition source or target could not be matched to a state."""

    def __init__(self, transition: str, role: str, reference: str):
        self.transition = transition
        self.role = role
        self.reference = reference
        super().__init__(
            f"Transition '{transition}' has unresolved {role} '{reference}'"
        )


class RenderError(AlpsError):
    """The graph layout engine failed to render a graph description."""
