"""Relatedness analysis and backward assignment scanning."""

from dataflow.assignments import AssignmentRecord, backward_scan
from dataflow.expansion import drop_dominated, expand, merge_related
from dataflow.related import (
    RelatedExpr,
    find_related,
    is_included,
    is_related,
    var_path,
)

__all__ = [
    "AssignmentRecord",
    "RelatedExpr",
    "backward_scan",
    "drop_dominated",
    "expand",
    "find_related",
    "is_included",
    "is_related",
    "merge_related",
    "var_path",
]
