"""Match a stack frame's line back to the call expression that produced it."""

from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from frontend.source_cache import SourceFile

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef


@dataclass(frozen=True)
class CallRef:
    """Position identity of a call expression: file, line and column."""

    filename: str
    line: int
    col: int

    @classmethod
    def of(cls, filename: str, call: ast.Call) -> CallRef:
        return cls(filename=filename, line=call.lineno, col=call.col_offset)


@dataclass(frozen=True)
class CallSite:
    """A matched call plus the function declaration enclosing it."""

    source: SourceFile
    line: int
    call: ast.Call
    function: FunctionNode | None

    @property
    def filename(self) -> str:
        return self.source.filename

    @property
    def ref(self) -> CallRef:
        return CallRef.of(self.source.filename, self.call)

    @property
    def text(self) -> str:
        return self.source.segment(self.call)


def simple_name(name: str) -> str:
    """Strip any qualifier: ``"pkg.Check"`` becomes ``"Check"``."""
    return name.rsplit(".", 1)[-1]


def callee_name(call: ast.Call) -> str | None:
    func = call.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return None


def _spans_line(node: ast.AST, line: int) -> bool:
    end_line = getattr(node, "end_lineno", None) or node.lineno
    return node.lineno <= line <= end_line


class _CallSiteFinder(ast.NodeVisitor):
    """Pre-order walk that stops at the first call matching name and line."""

    def __init__(self, name: str, line: int) -> None:
        self.name = name
        self.line = line
        self.call: ast.Call | None = None
        self.function: FunctionNode | None = None
        self._functions: list[FunctionNode] = []

    def generic_visit(self, node: ast.AST) -> None:
        if self.call is None:
            super().generic_visit(node)

    def _visit_function(self, node: FunctionNode) -> None:
        self._functions.append(node)
        try:
            self.generic_visit(node)
        finally:
            self._functions.pop()

    visit_FunctionDef = _visit_function
    visit_AsyncFunctionDef = _visit_function

    def visit_Call(self, node: ast.Call) -> None:
        if self.call is not None:
            return
        if callee_name(node) == self.name and _spans_line(node, self.line):
            self.call = node
            self.function = self._functions[-1] if self._functions else None
            return
        self.generic_visit(node)


def match_call(source: SourceFile, function_name: str, line: int) -> CallSite | None:
    """Find the call to ``function_name`` whose span covers ``line``.

    The first match in pre-order wins when several calls with the same name
    overlap the line. Returns ``None`` when nothing matches.
    """
    finder = _CallSiteFinder(simple_name(function_name), line)
    finder.visit(source.tree)
    if finder.call is None:
        return None
    return CallSite(source=source, line=line, call=finder.call, function=finder.function)


def find_calls(source: SourceFile, function_name: str) -> list[ast.Call]:
    """Every call to ``function_name`` in the file, in source order."""
    name = simple_name(function_name)
    calls = [
        node
        for node in ast.walk(source.tree)
        if isinstance(node, ast.Call) and callee_name(node) == name
    ]
    return sorted(calls, key=lambda call: (call.lineno, call.col_offset))


__all__ = [
    "CallRef",
    "CallSite",
    "FunctionNode",
    "callee_name",
    "find_calls",
    "match_call",
    "simple_name",
]
