"""Pick argument expressions out of a matched call."""

from __future__ import annotations

import ast
import logging
from collections.abc import Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Positional index (negative counts from the end) or keyword name.
ArgIndex = int | str


@dataclass(frozen=True)
class ArgumentSlot:
    """One requested argument; ``expr`` is ``None`` when it does not exist."""

    index: ArgIndex
    expr: ast.expr | None

    @property
    def absent(self) -> bool:
        return self.expr is None


def _positional(call: ast.Call, index: int) -> ast.expr | None:
    if index < 0:
        index += len(call.args)
    if index < 0 or index >= len(call.args):
        return None
    return call.args[index]


def _keyword(call: ast.Call, name: str) -> ast.expr | None:
    for keyword in call.keywords:
        if keyword.arg == name:
            return keyword.value
    return None


def extract_args(call: ast.Call | None, indices: Sequence[ArgIndex]) -> list[ArgumentSlot]:
    """Return one slot per requested index, in request order.

    Invalid indices never raise; they produce absent slots. A missing call
    yields only absent slots.
    """
    slots: list[ArgumentSlot] = []
    for index in indices:
        expr: ast.expr | None = None
        if call is not None:
            if isinstance(index, str):
                expr = _keyword(call, index)
            else:
                expr = _positional(call, index)
            if expr is None:
                logger.debug("argument %r not present in call at line %d", index, call.lineno)
        slots.append(ArgumentSlot(index=index, expr=expr))
    return slots


__all__ = ["ArgIndex", "ArgumentSlot", "extract_args"]
