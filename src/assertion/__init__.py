"""Assertion helpers whose failures quote the failing source."""

from assertion.checks import (
    AssertionFailure,
    Trigger,
    check,
    check_equal,
    check_nil_error,
    check_non_nil_error,
    check_not_equal,
)
from assertion.falsekind import FalseKind, parse_false_kind
from assertion.tracker import (
    Assertion,
    assert_,
    default_resolver,
    equal,
    nil_error,
    non_nil_error,
    not_equal,
)

__all__ = [
    "Assertion",
    "AssertionFailure",
    "FalseKind",
    "Trigger",
    "assert_",
    "check",
    "check_equal",
    "check_nil_error",
    "check_non_nil_error",
    "check_not_equal",
    "default_resolver",
    "equal",
    "nil_error",
    "non_nil_error",
    "not_equal",
    "parse_false_kind",
]
