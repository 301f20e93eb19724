"""Backward scan for the statements that last bound a set of variables.

The scan is purely line ordered. It does not model scopes, so a binding in a
nested block or nested function that is not visible at the call site can
still be reported as the most recent one.
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dataflow.related import RelatedExpr, is_related, var_path
from locate.call_site import CallRef

if TYPE_CHECKING:
    from frontend.source_cache import SourceFile
    from locate.call_site import FunctionNode

logger = logging.getLogger(__name__)

_COMPOUND_STATEMENTS = (
    ast.If,
    ast.For,
    ast.AsyncFor,
    ast.While,
    ast.With,
    ast.AsyncWith,
    ast.Try,
    ast.TryStar,
    ast.Match,
    ast.FunctionDef,
    ast.AsyncFunctionDef,
    ast.ClassDef,
)


@dataclass(frozen=True)
class AssignmentRecord:
    """A binding site retained for one or more related variables."""

    node: ast.AST
    paths: tuple[str, ...]

    @property
    def position(self) -> tuple[int, int]:
        return self.node.lineno, self.node.col_offset

    def sides(self) -> list[ast.AST]:
        """Expressions whose variables become related through this binding.

        Loop and ``with`` bindings contribute only their targets. Capture
        calls contribute nothing beyond the variable they captured.
        """
        node = self.node
        if isinstance(node, ast.Assign):
            return [*node.targets, node.value]
        if isinstance(node, (ast.AugAssign, ast.NamedExpr)):
            return [node.target, node.value]
        if isinstance(node, ast.AnnAssign):
            return [node.target] if node.value is None else [node.target, node.value]
        if isinstance(node, (ast.For, ast.AsyncFor)):
            return [node.target]
        if isinstance(node, (ast.With, ast.AsyncWith)):
            return [item.optional_vars for item in node.items if item.optional_vars]
        return []

    def render(self, source: SourceFile) -> str:
        """Source text of the binding; loops and ``with`` show only the header clause."""
        node = self.node
        if isinstance(node, (ast.For, ast.AsyncFor)):
            keyword = "async for" if isinstance(node, ast.AsyncFor) else "for"
            return f"{keyword} {source.segment(node.target)} in {source.segment(node.iter)}"
        if isinstance(node, (ast.With, ast.AsyncWith)):
            keyword = "async with" if isinstance(node, ast.AsyncWith) else "with"
            items = ", ".join(_render_withitem(source, item) for item in node.items)
            return f"{keyword} {items}"
        return source.segment(node)


def _render_withitem(source: SourceFile, item: ast.withitem) -> str:
    text = source.segment(item.context_expr)
    if item.optional_vars is not None:
        text = f"{text} as {source.segment(item.optional_vars)}"
    return text


def flatten_targets(target: ast.AST) -> Iterable[ast.AST]:
    """Yield the individual targets of a possibly unpacking assignment target."""
    if isinstance(target, (ast.Tuple, ast.List)):
        for element in target.elts:
            yield from flatten_targets(element)
    elif isinstance(target, ast.Starred):
        yield from flatten_targets(target.value)
    else:
        yield target


def captured_path(arg: ast.AST) -> str | None:
    """Variable captured by reference in a ``lambda: var`` argument."""
    if not isinstance(arg, ast.Lambda):
        return None
    arguments = arg.args
    if (
        arguments.posonlyargs
        or arguments.args
        or arguments.kwonlyargs
        or arguments.vararg
        or arguments.kwarg
    ):
        return None
    return var_path(arg.body)


def _binds(targets: Iterable[ast.AST], expr_path: str) -> bool:
    for target in targets:
        for flat in flatten_targets(target):
            path = var_path(flat)
            if path is not None and is_related(expr_path, path):
                return True
    return False


class _BackwardScanner:
    def __init__(
        self,
        filename: str,
        line: int,
        expr_path: str,
        exclusions: Collection[CallRef],
    ) -> None:
        self.filename = filename
        self.line = line
        self.expr_path = expr_path
        self.exclusions = exclusions
        self.last: ast.AST | None = None
        self._statements: list[ast.stmt] = []

    def scan(self, function: FunctionNode) -> ast.AST | None:
        for statement in function.body:
            self._visit(statement)
        return self.last

    def _visit(self, node: ast.AST) -> None:
        lineno = getattr(node, "lineno", None)
        if lineno is not None and lineno >= self.line:
            return
        if isinstance(node, ast.Call) and CallRef.of(self.filename, node) in self.exclusions:
            logger.debug("skipping excluded call at %s:%d", self.filename, node.lineno)
            return

        is_statement = isinstance(node, ast.stmt)
        if is_statement:
            self._statements.append(node)

        site = self._binding_site(node)
        if site is not None:
            self.last = site

        for child in ast.iter_child_nodes(node):
            self._visit(child)

        if is_statement:
            self._statements.pop()

    def _binding_site(self, node: ast.AST) -> ast.AST | None:
        path = self.expr_path
        if isinstance(node, ast.Assign):
            return node if _binds(node.targets, path) else None
        if isinstance(node, (ast.AugAssign, ast.NamedExpr)):
            return node if _binds([node.target], path) else None
        if isinstance(node, ast.AnnAssign):
            if node.value is None:
                return None
            return node if _binds([node.target], path) else None
        if isinstance(node, (ast.For, ast.AsyncFor)):
            return node if _binds([node.target], path) else None
        if isinstance(node, (ast.With, ast.AsyncWith)):
            targets = [item.optional_vars for item in node.items if item.optional_vars]
            return node if _binds(targets, path) else None
        if isinstance(node, ast.Call):
            return self._capture_site(node)
        return None

    def _capture_site(self, call: ast.Call) -> ast.AST | None:
        args = [*call.args, *(keyword.value for keyword in call.keywords)]
        for arg in args:
            captured = captured_path(arg)
            if captured is not None and is_related(self.expr_path, captured):
                statement = self._statements[-1] if self._statements else None
                if statement is None or isinstance(statement, _COMPOUND_STATEMENTS):
                    return call
                return statement
        return None


def backward_scan(
    source: SourceFile,
    function: FunctionNode | None,
    line: int,
    related: Iterable[RelatedExpr],
    exclusions: Collection[CallRef] = frozenset(),
) -> list[AssignmentRecord]:
    """Find the most recent binding before ``line`` for each related variable.

    Only nodes starting strictly before ``line`` are considered, and the last
    qualifying one in source order wins. Calls listed in ``exclusions`` are
    skipped together with everything inside them. Variables with no prior
    binding contribute nothing. Records are deduplicated and returned in
    source order.
    """
    if function is None:
        return []

    found: dict[int, tuple[ast.AST, list[str]]] = {}
    for expr in related:
        scanner = _BackwardScanner(source.filename, line, expr.path, exclusions)
        site = scanner.scan(function)
        if site is None:
            logger.debug("no assignment found for %s before line %d", expr.path, line)
            continue
        _, paths = found.setdefault(id(site), (site, []))
        if expr.path not in paths:
            paths.append(expr.path)

    records = [
        AssignmentRecord(node=site, paths=tuple(paths)) for site, paths in found.values()
    ]
    records.sort(key=lambda record: record.position)
    return records


__all__ = [
    "AssignmentRecord",
    "backward_scan",
    "captured_path",
    "flatten_targets",
]
