from __future__ import annotations

import ast
import textwrap

from dataflow.assignments import backward_scan, captured_path, flatten_targets
from dataflow.related import find_related
from frontend.source_cache import SourceFile
from locate.call_site import CallRef, find_calls, match_call

FILENAME = "<assignments>"


def _source(text: str) -> SourceFile:
    text = textwrap.dedent(text).lstrip("\n")
    return SourceFile.from_text(FILENAME, text, ast.parse(text, FILENAME))


def _scan(text: str, exclusions: frozenset[CallRef] = frozenset()) -> list[str]:
    source = _source(text)
    call = find_calls(source, "check")[0]
    site = match_call(source, "check", call.lineno)
    assert site is not None
    related = [expr for arg in site.call.args for expr in find_related(arg)]
    records = backward_scan(source, site.function, site.line, related, exclusions)
    return [record.render(source) for record in records]


def test_last_binding_before_the_call_wins() -> None:
    assert _scan(
        """
        def f():
            x = 1
            x = 2
            check(x)
            x = 3
        """
    ) == ["x = 2"]


def test_each_related_variable_gets_its_own_binding() -> None:
    assert _scan(
        """
        def f():
            a = 1
            b = 2
            check(a > b)
        """
    ) == ["a = 1", "b = 2"]


def test_augmented_assignment_is_a_binding() -> None:
    assert _scan(
        """
        def f():
            total = 0
            total += 5
            check(total)
        """
    ) == ["total += 5"]


def test_annotation_without_value_is_not_a_binding() -> None:
    assert _scan(
        """
        def f():
            value: int
            check(value)
        """
    ) == []
    assert _scan(
        """
        def f():
            value: int = 3
            check(value)
        """
    ) == ["value: int = 3"]


def test_loop_binding_renders_header_clause() -> None:
    assert _scan(
        """
        def f(items):
            for i, c in enumerate(items):
                check(c.value)
        """
    ) == ["for i, c in enumerate(items)"]


def test_with_binding_renders_header_clause() -> None:
    assert _scan(
        """
        def f(path):
            with open(path) as handle:
                check(handle.name)
        """
    ) == ["with open(path) as handle"]


def test_walrus_records_the_named_expression() -> None:
    assert _scan(
        """
        def f(items):
            if (n := len(items)) > 1:
                check(n)
        """
    ) == ["n := len(items)"]


def test_unpacking_targets_bind_every_element() -> None:
    assert _scan(
        """
        def f(items):
            first, *rest = items
            check(rest)
        """
    ) == ["first, *rest = items"]


def test_parent_binding_covers_member_access() -> None:
    assert _scan(
        """
        def f(make):
            obj = make()
            check(obj.attr)
        """
    ) == ["obj = make()"]


def test_member_binding_does_not_cover_parent() -> None:
    assert _scan(
        """
        def f(obj):
            obj.attr = 1
            check(obj)
        """
    ) == []


def test_attribute_target_matches_same_chain() -> None:
    assert _scan(
        """
        class Thing:
            def method(self):
                self.value = 1
                check(self.value)
        """
    ) == ["self.value = 1"]


def test_capture_records_enclosing_statement() -> None:
    assert _scan(
        """
        def f(register):
            v = 1
            result = register(lambda: v)
            check(v)
        """
    ) == ["result = register(lambda: v)"]


def test_capture_in_compound_header_records_the_call() -> None:
    assert _scan(
        """
        def f(register):
            v = 1
            if register(lambda: v):
                pass
            check(v)
        """
    ) == ["register(lambda: v)"]


def test_excluded_call_is_not_a_binding() -> None:
    text = """
        def f(register):
            v = 1
            register(lambda: v)
            check(v)
        """

    assert _scan(text) == ["register(lambda: v)"]
    assert _scan(text, frozenset({CallRef(FILENAME, 3, 4)})) == ["v = 1"]


def test_shared_binding_is_reported_once() -> None:
    source = _source(
        """
        def f():
            a, b = 1, 2
            check(a + b)
        """
    )
    site = match_call(source, "check", 3)
    assert site is not None

    records = backward_scan(
        source, site.function, 3, find_related(site.call.args[0])
    )

    assert len(records) == 1
    assert records[0].paths == ("a", "b")
    assert records[0].render(source) == "a, b = 1, 2"


def test_module_level_call_has_no_assignments() -> None:
    source = _source(
        """
        x = 1
        check(x)
        """
    )
    site = match_call(source, "check", 2)
    assert site is not None

    assert backward_scan(source, site.function, 2, find_related(site.call.args[0])) == []


def test_scan_is_not_scope_aware() -> None:
    assert _scan(
        """
        def f():
            x = 1
            def g():
                x = 2
            check(x)
        """
    ) == ["x = 2"]


def test_multiline_binding_is_dedented() -> None:
    assert _scan(
        """
        def f():
            data = {
                "a": 1,
            }
            check(data)
        """
    ) == ['data = {\n    "a": 1,\n}']


def test_captured_path() -> None:
    def parse(text: str) -> ast.expr:
        return ast.parse(text, mode="eval").body

    assert captured_path(parse("lambda: v")) == "v"
    assert captured_path(parse("lambda: self.value")) == "self.value"
    assert captured_path(parse("lambda x: v")) is None
    assert captured_path(parse("lambda: v + 1")) is None
    assert captured_path(parse("v")) is None


def test_flatten_targets() -> None:
    target = ast.parse("a, (b, *c), d.e = value").body[0]
    assert isinstance(target, ast.Assign)

    flat = [ast.unparse(node) for node in flatten_targets(target.targets[0])]

    assert flat == ["a", "b", "c", "d.e"]
