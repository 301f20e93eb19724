"""Close the related-variable set over the bindings found by the backward scan."""

from __future__ import annotations

import ast
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from dataflow.related import find_related, is_included

if TYPE_CHECKING:
    from dataflow.assignments import AssignmentRecord


def expand(arg: ast.expr | None, records: Sequence[AssignmentRecord]) -> set[str]:
    """Variables related to ``arg`` directly or through one of ``records``.

    A bare-name argument is removed from its own result since it would only
    ever be related to itself.
    """
    if arg is None:
        return set()

    names = {expr.path for expr in find_related(arg)}
    for record in records:
        for side in record.sides():
            names.update(expr.path for expr in find_related(side))

    if isinstance(arg, ast.Name):
        names.discard(arg.id)
    return names


def drop_dominated(names: Iterable[str]) -> set[str]:
    """Drop every name that is a strict prefix of a longer collected chain."""
    unique = set(names)
    return {
        name
        for name in unique
        if not any(other != name and is_included(name, other) for other in unique)
    }


def merge_related(groups: Iterable[Iterable[str]]) -> list[str]:
    """Union of per-argument sets, longest chains only, sorted."""
    merged: set[str] = set()
    for group in groups:
        merged.update(group)
    return sorted(drop_dominated(merged))


__all__ = ["drop_dominated", "expand", "merge_related"]
