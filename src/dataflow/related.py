"""Find the variable references an expression depends on.

A reference is a bare name or an attribute chain rooted at a name. Only the
longest chain at a position is reported: ``obj.field.method()`` relates to
``obj.field``, never to ``obj`` as well.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RelatedExpr:
    """A variable reference identified by its dotted path."""

    path: str
    node: ast.expr = field(compare=False, hash=False, repr=False)


def var_path(node: ast.AST | None) -> str | None:
    """Dotted path of a name or name-rooted attribute chain, else ``None``."""
    parts: list[str] = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.append(node.id)
    return ".".join(reversed(parts))


def is_included(parent: str, child: str) -> bool:
    """True when ``child`` is ``parent`` or a member chain below it.

    ``a.b.c`` is included in ``a``, ``a.b`` and ``a.b.c`` but not in ``a.bc``.
    """
    if len(child) < len(parent):
        return False
    if child == parent:
        return True
    return child.startswith(parent) and child[len(parent)] == "."


def is_related(expr_path: str, target_path: str) -> bool:
    """Whether binding ``target_path`` also binds the value of ``expr_path``."""
    return is_included(target_path, expr_path)


def _bound_names(target: ast.AST) -> set[str]:
    return {node.id for node in ast.walk(target) if isinstance(node, ast.Name)}


class RelatedVisitor(ast.NodeVisitor):
    """Collect maximal variable references below a node, keyed by path."""

    def __init__(self) -> None:
        self.related: dict[str, RelatedExpr] = {}

    def _add(self, path: str, node: ast.expr) -> None:
        self.related.setdefault(path, RelatedExpr(path=path, node=node))

    def visit_Name(self, node: ast.Name) -> None:
        self._add(node.id, node)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        path = var_path(node)
        if path is not None:
            self._add(path, node)
            return
        # Never descend into the attribute name itself.
        self.visit(node.value)

    def visit_Call(self, node: ast.Call) -> None:
        func = node.func
        if isinstance(func, ast.Attribute):
            self.visit(func.value)
        elif not isinstance(func, ast.Name):
            self.visit(func)
        for arg in node.args:
            self.visit(arg)
        for keyword in node.keywords:
            self.visit(keyword.value)

    def _visit_scoped(self, children: list[ast.AST], bound: set[str]) -> None:
        inner = RelatedVisitor()
        for child in children:
            inner.visit(child)
        for path, expr in inner.related.items():
            if path.split(".", 1)[0] not in bound:
                self._add(path, expr.node)

    def _visit_comprehension(
        self, node: ast.ListComp | ast.SetComp | ast.GeneratorExp | ast.DictComp
    ) -> None:
        bound: set[str] = set()
        children: list[ast.AST] = []
        for generator in node.generators:
            bound |= _bound_names(generator.target)
            children.append(generator.iter)
            children.extend(generator.ifs)
        if isinstance(node, ast.DictComp):
            children.extend([node.key, node.value])
        else:
            children.append(node.elt)
        self._visit_scoped(children, bound)

    visit_ListComp = _visit_comprehension
    visit_SetComp = _visit_comprehension
    visit_GeneratorExp = _visit_comprehension
    visit_DictComp = _visit_comprehension

    def visit_Lambda(self, node: ast.Lambda) -> None:
        arguments = node.args
        params = [
            *arguments.posonlyargs,
            *arguments.args,
            *arguments.kwonlyargs,
            *(arg for arg in (arguments.vararg, arguments.kwarg) if arg is not None),
        ]
        self._visit_scoped([node.body], {param.arg for param in params})


def find_related(node: ast.AST | None) -> list[RelatedExpr]:
    """Variable references in ``node`` in first-seen order."""
    if node is None:
        return []
    visitor = RelatedVisitor()
    visitor.visit(node)
    return list(visitor.related.values())


__all__ = [
    "RelatedExpr",
    "RelatedVisitor",
    "find_related",
    "is_included",
    "is_related",
    "var_path",
]
