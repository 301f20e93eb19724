"""Error taxonomy for call-site resolution.

Hard errors abort a resolution and are raised to the caller. Lookups that
merely find nothing (a call site, an argument, an assignment) are soft and
show up as empty fields of the returned diagnostic instead.
"""

from __future__ import annotations


class ResolveError(Exception):
    """Base class for hard failures while building a diagnostic."""

    def __init__(self, message: str, filename: str | None = None) -> None:
        super().__init__(message)
        self.filename = filename


class StackReadError(ResolveError):
    """Raised when the call stack cannot be read at the requested depth."""


class SourceReadError(ResolveError):
    """Raised when the source file named by a stack frame cannot be read."""


class ParseError(ResolveError):
    """Raised when a source file is not valid Python."""


__all__ = ["ParseError", "ResolveError", "SourceReadError", "StackReadError"]
