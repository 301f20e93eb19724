"""Failure checks that turn a resolver diagnostic into an assertion message.

Each check returns silently when its condition holds. Otherwise it resolves
the calling expression and raises :class:`AssertionFailure`.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from assertion.falsekind import FALSE_KIND_SUFFIX, FalseKind, parse_false_kind
from assertion.format import dump_value, indent_code
from contract.errors import ResolveError
from dataflow.related import is_included
from settings.config import load_config

if TYPE_CHECKING:
    from contract.models import Diagnostic
    from diagnose.resolver import Resolver
    from locate.arguments import ArgIndex
    from settings.config import DiagnosticConfig

logger = logging.getLogger(__name__)

# Frames between ``Resolver.resolve`` and the check's caller: _diagnose, the check.
_CHECK_FRAMES = 2


@dataclass
class Trigger:
    """How to find the user-facing call that triggered a check.

    ``skip`` counts the wrapper frames between the test code and the check
    function; a method that calls :func:`check` directly uses ``1``.
    """

    func_name: str
    skip: int
    args: Sequence[ArgIndex]
    vars: Mapping[str, Callable[[], Any]] = field(default_factory=dict)


class AssertionFailure(AssertionError):
    """Raised when a check fails; carries the diagnostic when one was built."""

    def __init__(self, message: str, diagnostic: Diagnostic | None = None) -> None:
        super().__init__(message)
        self.diagnostic = diagnostic


def _diagnose(trigger: Trigger, resolver: Resolver) -> Diagnostic:
    try:
        return resolver.resolve(
            trigger.func_name, trigger.skip + _CHECK_FRAMES, trigger.args
        )
    except ResolveError as exc:
        msg = f"Assertion failed with an internal error: {exc}"
        raise AssertionFailure(msg) from exc


def _arg(diagnostic: Diagnostic, index: int, config: DiagnosticConfig) -> str:
    return diagnostic.args[index] or config.empty_placeholder


def _assignments_block(diagnostic: Diagnostic, config: DiagnosticConfig) -> str:
    if not config.show_assignments:
        return ""
    statements: list[str] = []
    for group in diagnostic.assignments:
        for statement in group:
            if statement not in statements:
                statements.append(statement)
    if not statements:
        return ""
    body = "\n".join(indent_code(s, config.indent, True, False) for s in statements)
    return f"\nReferenced variables are assigned in following statements:\n{body}"


def _read_var(getter: Callable[[], Any], config: DiagnosticConfig) -> str:
    try:
        value = getter()
    except Exception as exc:  # noqa: BLE001
        return f"<unavailable: {exc!r}>"
    return dump_value(value, config.value_width)


def _related_block(
    diagnostic: Diagnostic,
    tracked: Mapping[str, Callable[[], Any]],
    config: DiagnosticConfig,
) -> str:
    if not config.show_related:
        return ""
    # A tracked object is shown when any chain below it is related.
    names = sorted(
        name
        for name in tracked
        if any(is_included(name, related) for related in diagnostic.related_vars)
    )
    lines = [
        indent_code(f"{name} = {_read_var(tracked[name], config)}", config.indent, True, False)
        for name in names
    ]
    if not lines:
        return ""
    return "\nRelated variables:\n" + "\n".join(lines)


def _header(diagnostic: Diagnostic) -> str:
    return f"\n{diagnostic.filename}:{diagnostic.line}: Assertion failed:"


def _resolve_config(config: DiagnosticConfig | None) -> DiagnosticConfig:
    return config if config is not None else load_config(Path.cwd())


def check(
    expr: Any,
    trigger: Trigger,
    resolver: Resolver,
    config: DiagnosticConfig | None = None,
) -> None:
    """Fail when ``expr`` is false-equivalent (``None``, ``False``, zero, empty)."""
    kind = parse_false_kind(expr)
    if kind is FalseKind.POSITIVE:
        return

    diagnostic = _diagnose(trigger, resolver)
    config = _resolve_config(config)

    arg = _arg(diagnostic, 0, config)
    suffix = "" if " " in arg else FALSE_KIND_SUFFIX.get(kind, "")
    message = (
        _header(diagnostic)
        + "\n"
        + indent_code(arg, config.indent, True, False)
        + suffix
        + _assignments_block(diagnostic, config)
        + _related_block(diagnostic, trigger.vars, config)
    )
    raise AssertionFailure(message, diagnostic)


def _type_mismatch(v1: Any, v2: Any) -> bool:
    if v1 is None or v2 is None:
        return False
    t1, t2 = type(v1), type(v2)
    return not issubclass(t1, t2) and not issubclass(t2, t1)


def _pair(diagnostic: Diagnostic, config: DiagnosticConfig) -> str:
    return (
        f"\n[1] {indent_code(_arg(diagnostic, 0, config), config.indent, False, False)}"
        f"\n[2] {indent_code(_arg(diagnostic, 1, config), config.indent, False, False)}"
    )


def check_equal(
    v1: Any,
    v2: Any,
    trigger: Trigger,
    resolver: Resolver,
    config: DiagnosticConfig | None = None,
) -> None:
    """Fail unless ``v1 == v2``."""
    if v1 == v2:
        return

    diagnostic = _diagnose(trigger, resolver)
    config = _resolve_config(config)

    if _type_mismatch(v1, v2):
        title = "The type of following expressions should be the same."
    else:
        title = "The value of following expression should equal."

    values = (
        f"\nValues:\n[1] -> {dump_value(v1, config.value_width)}"
        f"\n[2] -> {dump_value(v2, config.value_width)}"
    )
    message = (
        _header(diagnostic)
        + f"\n{title}"
        + _pair(diagnostic, config)
        + _assignments_block(diagnostic, config)
        + values
        + _related_block(diagnostic, trigger.vars, config)
    )
    raise AssertionFailure(message, diagnostic)


def check_not_equal(
    v1: Any,
    v2: Any,
    trigger: Trigger,
    resolver: Resolver,
    config: DiagnosticConfig | None = None,
) -> None:
    """Fail when ``v1 == v2``."""
    if v1 != v2:
        return

    diagnostic = _diagnose(trigger, resolver)
    config = _resolve_config(config)

    message = (
        _header(diagnostic)
        + "\nThe value of following expression should not equal."
        + _pair(diagnostic, config)
        + _assignments_block(diagnostic, config)
        + "\nValue:\n"
        + indent_code(dump_value(v1, config.value_width), config.indent, True, False)
        + _related_block(diagnostic, trigger.vars, config)
    )
    raise AssertionFailure(message, diagnostic)


def _results(result: Sequence[Any]) -> Sequence[Any]:
    # A lone tuple is the unpacked return value of a call such as f().
    if len(result) == 1 and isinstance(result[0], tuple):
        return result[0]
    return result


def _format_error(error: BaseException) -> str:
    return "".join(traceback.format_exception_only(type(error), error)).strip()


def check_nil_error(
    result: Sequence[Any],
    trigger: Trigger,
    resolver: Resolver,
    config: DiagnosticConfig | None = None,
) -> None:
    """Fail when the last result is an exception instance."""
    results = _results(result)
    if not results or not isinstance(results[-1], BaseException):
        return

    error = results[-1]
    diagnostic = _diagnose(trigger, resolver)
    config = _resolve_config(config)

    message = (
        _header(diagnostic)
        + "\nFollowing expression should return a nil error.\n"
        + indent_code(_arg(diagnostic, 0, config), config.indent, True, False)
        + _assignments_block(diagnostic, config)
        + "\nThe error is:\n"
        + indent_code(_format_error(error), config.indent, True, False)
        + _related_block(diagnostic, trigger.vars, config)
    )
    raise AssertionFailure(message, diagnostic)


def check_non_nil_error(
    result: Sequence[Any],
    trigger: Trigger,
    resolver: Resolver,
    config: DiagnosticConfig | None = None,
) -> None:
    """Fail unless the last result is an exception instance.

    An empty result passes, as there is no error slot to inspect.
    """
    results = _results(result)
    if not results or isinstance(results[-1], BaseException):
        return

    diagnostic = _diagnose(trigger, resolver)
    config = _resolve_config(config)

    message = (
        _header(diagnostic)
        + "\nFollowing expression should return an error.\n"
        + indent_code(_arg(diagnostic, 0, config), config.indent, True, False)
        + _assignments_block(diagnostic, config)
        + "\nThe value is:\n"
        + indent_code(dump_value(results[-1], config.value_width), config.indent, True, False)
        + _related_block(diagnostic, trigger.vars, config)
    )
    raise AssertionFailure(message, diagnostic)
