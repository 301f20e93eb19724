from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

import assertion
from assertion import Assertion, AssertionFailure, Trigger, check
from contract.errors import StackReadError
from diagnose.resolver import Resolver
from frontend.base import PythonFrontEnd
from frontend.source_cache import SourceCache
from settings.config import DiagnosticConfig


def _assertion(**overrides: object) -> Assertion:
    return Assertion(resolver=Resolver(), config=DiagnosticConfig(**overrides))


@dataclass
class _Server:
    host: str
    port: int


def _parse_port(text: str) -> tuple[int | None, ValueError | None]:
    try:
        return int(text), None
    except ValueError as exc:
        return None, exc


def test_assert_passes_on_truthy_values() -> None:
    a = _assertion()

    a.assert_(True)
    a.assert_(1)
    a.assert_("x")
    a.assert_([0])


def test_assert_reports_expression_and_assignments() -> None:
    a = _assertion()
    x, y = 1, 2

    with pytest.raises(AssertionFailure) as info:
        a.assert_(x > y)

    message = str(info.value)
    assert message.startswith("\ntest_assertion.py:")
    assert ": Assertion failed:\n    x > y\n" in message
    assert (
        "Referenced variables are assigned in following statements:\n"
        "    x, y = 1, 2"
    ) in message
    assert info.value.diagnostic is not None
    assert info.value.diagnostic.function == "test_assert_reports_expression_and_assignments"


def test_assert_spells_out_single_token_expectations() -> None:
    a = _assertion()
    flag = False
    value = None
    count = 0
    text = ""
    items: list[int] = []

    failures = []
    for run in (
        lambda: a.assert_(flag),
        lambda: a.assert_(value),
        lambda: a.assert_(count),
        lambda: a.assert_(text),
        lambda: a.assert_(items),
    ):
        with pytest.raises(AssertionFailure) as info:
            run()
        failures.append(str(info.value))

    assert "\n    flag is True" in failures[0]
    assert "\n    value is not None" in failures[1]
    assert "\n    count != 0" in failures[2]
    assert '\n    text != ""' in failures[3]
    assert "\n    items is non-empty" in failures[4]


def test_use_prints_tracked_related_values() -> None:
    a = _assertion()
    v1 = 123
    v2 = ["wrong", "right"]
    v3 = v2[0]
    v4 = "unrelated"
    a.use(lambda: v1, lambda: v2, lambda: v3, lambda: v4)

    with pytest.raises(AssertionFailure) as info:
        a.assert_(v1 == 123 and v3 == "right")

    message = str(info.value)
    assert "    v1 = 123\n    v3 = v2[0]" in message
    assert "a.use(" not in message
    assert message.endswith(
        "Related variables:\n"
        "    v1 = (int)123\n"
        "    v2 = (list)['wrong', 'right']\n"
        "    v3 = (str)'wrong'"
    )
    assert "v4" not in message
    assert sorted(a.vars) == ["v1", "v2", "v3", "v4"]
    assert len(a.resolver.exclusions) == 1


def test_use_ignores_non_capture_arguments() -> None:
    a = _assertion()
    value = 1

    a.use(lambda: value, lambda: value + 1, len)

    assert list(a.vars) == ["value"]


def test_options_hide_blocks() -> None:
    a = _assertion(show_assignments=False, show_related=False, indent=2)
    v1 = 0
    a.use(lambda: v1)

    with pytest.raises(AssertionFailure) as info:
        a.assert_(v1)

    message = str(info.value)
    assert message.endswith("Assertion failed:\n  v1 != 0")


def test_equal_reports_both_sides() -> None:
    a = _assertion()
    left = [1, 2]
    right = [1]

    a.equal(1, 1.0)
    with pytest.raises(AssertionFailure) as info:
        a.equal(left, right)

    message = str(info.value)
    assert "\nThe value of following expression should equal.\n[1] left\n[2] right" in message
    assert "    left = [1, 2]\n    right = [1]" in message
    assert "\nValues:\n[1] -> (list)[1, 2]\n[2] -> (list)[1]" in message


def test_equal_reports_type_mismatch() -> None:
    a = _assertion()
    number = 1

    with pytest.raises(AssertionFailure) as info:
        a.equal(number, "1")

    message = str(info.value)
    assert "\nThe type of following expressions should be the same.\n" in message
    assert "[1] number\n[2] \"1\"" in message
    assert "[1] -> (int)1\n[2] -> (str)'1'" in message


def test_not_equal_reports_shared_value() -> None:
    a = _assertion()
    first = 3
    second = 3

    a.not_equal(first, 4)
    with pytest.raises(AssertionFailure) as info:
        a.not_equal(first, second)

    message = str(info.value)
    assert "\nThe value of following expression should not equal.\n[1] first\n[2] second" in message
    assert "\nValue:\n    (int)3" in message


def test_unresolved_argument_uses_placeholder() -> None:
    with pytest.raises(AssertionFailure) as info:
        check(False, Trigger("nothere", 0, [0]), Resolver(), DiagnosticConfig())

    assert str(info.value).endswith("Assertion failed:\n    <EMPTY> is True")
    assert info.value.diagnostic is not None
    assert not info.value.diagnostic.found


class _NoStackFrontEnd(PythonFrontEnd):
    def caller(self, skip: int) -> tuple[str, int]:
        raise StackReadError("fail to read call stack")


def test_resolver_errors_become_internal_failures() -> None:
    resolver = Resolver(cache=SourceCache(frontend=_NoStackFrontEnd()))
    a = Assertion(resolver=resolver, config=DiagnosticConfig())

    with pytest.raises(AssertionFailure) as info:
        a.assert_(0)

    assert str(info.value) == (
        "Assertion failed with an internal error: fail to read call stack"
    )
    assert info.value.diagnostic is None


def test_use_logs_and_skips_when_stack_is_unreadable(
    caplog: pytest.LogCaptureFixture,
) -> None:
    resolver = Resolver(cache=SourceCache(frontend=_NoStackFrontEnd()))
    a = Assertion(resolver=resolver, config=DiagnosticConfig())
    value = 1

    with caplog.at_level("WARNING", logger="assertion.tracker"):
        a.use(lambda: value)

    assert a.vars == {}
    assert "cannot track variables" in caplog.text


def test_module_level_helpers(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    total = 2

    assertion.assert_(total)
    assertion.equal(total, 2)
    assertion.not_equal(total, 3)
    with pytest.raises(AssertionFailure) as info:
        assertion.equal(total, 5)

    assert "\n[1] total\n[2] 5" in str(info.value)
    assert assertion.default_resolver() is assertion.default_resolver()


def test_use_prints_tracked_object_of_related_attribute() -> None:
    a = _assertion()
    server = _Server(host="localhost", port=8080)
    a.use(lambda: server)

    with pytest.raises(AssertionFailure) as info:
        a.equal(server.port, 80)

    message = str(info.value)
    assert info.value.diagnostic is not None
    assert info.value.diagnostic.related_vars == ["server.port"]
    assert "\nRelated variables:\n    server = (_Server)" in message
    assert "port=8080" in message


def test_nil_error_reports_call_and_error() -> None:
    a = _assertion()
    text = "eighty"

    a.nil_error(_parse_port("80"))
    a.nil_error()
    with pytest.raises(AssertionFailure) as info:
        a.nil_error(_parse_port(text))

    message = str(info.value)
    assert (
        ": Assertion failed:\n"
        "Following expression should return a nil error.\n"
        "    _parse_port(text)\n"
        "Referenced variables are assigned in following statements:\n"
        '    text = "eighty"\n'
        "The error is:\n"
        "    ValueError: invalid literal for int() with base 10: 'eighty'"
    ) in message


def test_nil_error_quotes_last_argument() -> None:
    a = _assertion()
    value, err = _parse_port("x")

    with pytest.raises(AssertionFailure) as info:
        a.nil_error(value, err)

    assert "should return a nil error.\n    err\n" in str(info.value)
    assert "    value, err = _parse_port(\"x\")" in str(info.value)


def test_non_nil_error_reports_missing_error() -> None:
    a = _assertion()

    a.non_nil_error(_parse_port("eighty"))
    a.non_nil_error()
    with pytest.raises(AssertionFailure) as info:
        a.non_nil_error(_parse_port("80"))

    message = str(info.value)
    assert (
        "\nFollowing expression should return an error.\n"
        '    _parse_port("80")\n'
        "The value is:\n"
        "    (NoneType)None"
    ) in message


def test_module_level_error_helpers(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)
    failure = ValueError("boom")

    assertion.nil_error(None)
    assertion.non_nil_error(failure)
    with pytest.raises(AssertionFailure) as info:
        assertion.nil_error(1, failure)

    assert "should return a nil error.\n    failure\n" in str(info.value)
    assert "The error is:\n    ValueError: boom" in str(info.value)
