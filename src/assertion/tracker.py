"""Object and function APIs for writing assertions in tests.

Usage::

    from assertion import Assertion

    def test_something():
        a = Assertion()
        v1 = 123
        v3 = ["wrong", "right"][0]
        a.use(lambda: v1, lambda: v3)
        a.assert_(v1 == 123 and v3 == "right")

Output::

    test_sample.py:6: Assertion failed:
        v1 == 123 and v3 == "right"
    Referenced variables are assigned in following statements:
        v1 = 123
        v3 = ["wrong", "right"][0]
    Related variables:
        v1 = (int)123
        v3 = (str)'wrong'
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from assertion.checks import (
    Trigger,
    check,
    check_equal,
    check_nil_error,
    check_non_nil_error,
    check_not_equal,
)
from contract.errors import ResolveError
from dataflow.assignments import captured_path
from diagnose.resolver import Resolver

if TYPE_CHECKING:
    from collections.abc import Mapping

    from settings.config import DiagnosticConfig

logger = logging.getLogger(__name__)

_default_lock = threading.Lock()
_default_resolver: Resolver | None = None


def default_resolver() -> Resolver:
    """Resolver shared by the module-level helpers and new :class:`Assertion` objects."""
    global _default_resolver
    with _default_lock:
        if _default_resolver is None:
            _default_resolver = Resolver()
        return _default_resolver


class Assertion:
    """Assertion helpers bound to a resolver and a set of tracked variables."""

    def __init__(
        self,
        resolver: Resolver | None = None,
        config: DiagnosticConfig | None = None,
    ) -> None:
        self.resolver = resolver or default_resolver()
        self.config = config
        self._vars: dict[str, Callable[[], Any]] = {}

    @property
    def vars(self) -> Mapping[str, Callable[[], Any]]:
        return MappingProxyType(self._vars)

    def assert_(self, expr: Any) -> None:
        """Fail when ``expr`` is ``None``, ``False``, zero or empty."""
        check(expr, Trigger("assert_", 1, [0], self._vars), self.resolver, self.config)

    def equal(self, v1: Any, v2: Any) -> None:
        check_equal(
            v1, v2, Trigger("equal", 1, [0, 1], self._vars), self.resolver, self.config
        )

    def not_equal(self, v1: Any, v2: Any) -> None:
        check_not_equal(
            v1, v2, Trigger("not_equal", 1, [0, 1], self._vars), self.resolver, self.config
        )

    def nil_error(self, *result: Any) -> None:
        """Fail when the last result is an exception, e.g. ``a.nil_error(parse(text))``.

        A single tuple argument is treated as the values returned by a call.
        """
        check_nil_error(
            result, Trigger("nil_error", 1, [-1], self._vars), self.resolver, self.config
        )

    def non_nil_error(self, *result: Any) -> None:
        check_non_nil_error(
            result, Trigger("non_nil_error", 1, [-1], self._vars), self.resolver, self.config
        )

    def use(self, *captures: Callable[[], Any]) -> None:
        """Track variables so failures print their current values.

        Each capture must be written as ``lambda: name`` or ``lambda: obj.attr``
        directly in the call; anything else is ignored. The ``use`` call itself
        is excluded from assignment lookups so it never hides the statement
        that really assigned a tracked variable.
        """
        indices = [i for i, capture in enumerate(captures) if callable(capture)]
        if not indices:
            return

        try:
            site, slots = self.resolver.locate("use", 1, indices)
        except ResolveError as exc:
            logger.warning("cannot track variables: %s", exc)
            return

        if site is None:
            return

        self.resolver.add_excluded(site)
        for index, slot in zip(indices, slots):
            path = captured_path(slot.expr) if slot.expr is not None else None
            if path is not None:
                self._vars[path] = captures[index]


def assert_(expr: Any) -> None:
    """Module-level :meth:`Assertion.assert_` without tracked variables."""
    check(expr, Trigger("assert_", 1, [0]), default_resolver())


def equal(v1: Any, v2: Any) -> None:
    check_equal(v1, v2, Trigger("equal", 1, [0, 1]), default_resolver())


def not_equal(v1: Any, v2: Any) -> None:
    check_not_equal(v1, v2, Trigger("not_equal", 1, [0, 1]), default_resolver())


def nil_error(*result: Any) -> None:
    check_nil_error(result, Trigger("nil_error", 1, [-1]), default_resolver())


def non_nil_error(*result: Any) -> None:
    check_non_nil_error(result, Trigger("non_nil_error", 1, [-1]), default_resolver())
