"""Language front end used to parse source files and read caller frames."""

from __future__ import annotations

import ast
from typing import Protocol

from frontend.stack import resolve_caller


class LanguageFrontEnd(Protocol):
    """Parser plus stack introspection for one host language."""

    def parse(self, text: str, filename: str) -> ast.Module: ...

    def caller(self, skip: int) -> tuple[str, int]: ...


class PythonFrontEnd:
    """Front end backed by the standard ``ast`` module and frame objects."""

    def parse(self, text: str, filename: str) -> ast.Module:
        return ast.parse(text, filename)

    def caller(self, skip: int) -> tuple[str, int]:
        # One extra frame for this method.
        return resolve_caller(skip + 1)


__all__ = ["LanguageFrontEnd", "PythonFrontEnd"]
