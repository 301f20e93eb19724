"""Stack frame lookup for the code that invoked an assertion."""

from __future__ import annotations

import sys

from contract.errors import StackReadError


def resolve_caller(skip: int) -> tuple[str, int]:
    """Return ``(filename, line)`` of a frame on the active call stack.

    Args:
        skip: Number of frames to skip above the function calling
            ``resolve_caller``. ``0`` selects that function's own frame, ``1``
            its caller, and so on.

    Raises:
        StackReadError: If the stack is not that deep or the frame carries no
            file or line information.
    """
    if skip < 0:
        msg = f"skip must be non-negative, got {skip}"
        raise StackReadError(msg)

    try:
        frame = sys._getframe(skip + 1)
    except ValueError as exc:
        msg = "fail to read call stack"
        raise StackReadError(msg) from exc

    try:
        filename = frame.f_code.co_filename
        line = frame.f_lineno
    finally:
        del frame

    if not filename or not line:
        msg = "fail to read source code information"
        raise StackReadError(msg, filename or None)

    return filename, line


__all__ = ["resolve_caller"]
