"""Source loading and stack introspection."""

from frontend.base import LanguageFrontEnd, PythonFrontEnd
from frontend.source_cache import SourceCache, SourceFile
from frontend.stack import resolve_caller

__all__ = [
    "LanguageFrontEnd",
    "PythonFrontEnd",
    "SourceCache",
    "SourceFile",
    "resolve_caller",
]
