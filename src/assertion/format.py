"""Text helpers for assertion failure messages."""

from __future__ import annotations

from typing import Any

from rich.pretty import pretty_repr


def indent_code(code: str, spaces: int, indent_first_line: bool, new_line: bool) -> str:
    """Indent every line of ``code`` by ``spaces``.

    With ``new_line`` the result starts on a fresh line, so the first line of
    ``code`` is indented like the rest. Empty input stays empty.
    """
    if not code:
        return ""

    space = " " * spaces
    lines = code.split("\n")
    if new_line:
        first_line = ""
    else:
        first_line = lines.pop(0)

    indented = [space + first_line if indent_first_line else first_line]
    indented.extend(space + line for line in lines)
    return "\n".join(indented)


def dump_value(value: Any, width: int = 80) -> str:
    """Type-tagged pretty representation, e.g. ``(int)123``."""
    return f"({type(value).__name__}){pretty_repr(value, max_width=width)}"
