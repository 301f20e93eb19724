from __future__ import annotations

import ast

from locate.arguments import extract_args


def _call(source: str) -> ast.Call:
    node = ast.parse(source, mode="eval").body
    assert isinstance(node, ast.Call)
    return node


def _texts(call: ast.Call, indices: list[int | str]) -> list[str | None]:
    return [
        None if slot.expr is None else ast.unparse(slot.expr)
        for slot in extract_args(call, indices)
    ]


def test_negative_index_counts_from_end() -> None:
    call = _call("check(a, b, c)")

    assert _texts(call, [-1]) == _texts(call, [2]) == ["c"]
    assert _texts(call, [-3]) == ["a"]


def test_invalid_indices_yield_absent_slots_in_place() -> None:
    call = _call("check(a, b)")

    slots = extract_args(call, [0, 5, -3, 1])

    assert len(slots) == 4
    assert [slot.absent for slot in slots] == [False, True, True, False]
    assert [slot.index for slot in slots] == [0, 5, -3, 1]


def test_order_follows_requested_indices() -> None:
    call = _call("check(a, b, c)")

    assert _texts(call, [2, 0, 1]) == ["c", "a", "b"]


def test_keyword_names_select_keyword_values() -> None:
    call = _call("check(a, expected=b + 1, *rest)")

    assert _texts(call, ["expected", "missing"]) == ["b + 1", None]
    assert _texts(call, [1]) == ["*rest"]


def test_missing_call_yields_only_absent_slots() -> None:
    slots = extract_args(None, [0, 1])

    assert [slot.absent for slot in slots] == [True, True]
