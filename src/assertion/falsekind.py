from __future__ import annotations

import numbers
from enum import Enum
from typing import Any


class FalseKind(Enum):
    """Why a value failed a truth test."""

    POSITIVE = "positive"
    NONE = "none"
    FALSE = "false"
    ZERO = "zero"
    EMPTY_STRING = "empty_string"
    EMPTY = "empty"


# Appended to single-token expressions to spell out the failed expectation.
FALSE_KIND_SUFFIX: dict[FalseKind, str] = {
    FalseKind.NONE: " is not None",
    FalseKind.FALSE: " is True",
    FalseKind.ZERO: " != 0",
    FalseKind.EMPTY_STRING: ' != ""',
    FalseKind.EMPTY: " is non-empty",
}


def parse_false_kind(value: Any) -> FalseKind:
    """Classify ``value``; anything truthy is ``FalseKind.POSITIVE``."""
    if value is None:
        return FalseKind.NONE
    if isinstance(value, bool):
        return FalseKind.POSITIVE if value else FalseKind.FALSE
    if isinstance(value, numbers.Number):
        return FalseKind.ZERO if value == 0 else FalseKind.POSITIVE
    if isinstance(value, (str, bytes)):
        return FalseKind.POSITIVE if value else FalseKind.EMPTY_STRING
    return FalseKind.POSITIVE if value else FalseKind.EMPTY
