"""Stable boundary between the resolver core and the assertion layer."""

from contract.errors import ParseError, ResolveError, SourceReadError, StackReadError
from contract.models import CallSpan, Diagnostic

__all__ = [
    "CallSpan",
    "Diagnostic",
    "ParseError",
    "ResolveError",
    "SourceReadError",
    "StackReadError",
]
