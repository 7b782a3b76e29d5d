"""Tests for short-circuit operator and optional-chaining collectors."""

from __future__ import annotations

from decision_scan.analyzer.control_flow import classify_line
from decision_scan.analyzer.operators import (
    JsxContext,
    detect_jsx_expressions,
    is_boolean_expression,
    parse_boolean_expressions,
    parse_optional_chaining,
)


def _collect(ctx, lines, index, function_line):
    flags = classify_line(lines[index])
    jsx = detect_jsx_expressions(lines, index, flags)
    return parse_boolean_expressions(ctx, lines, index, flags, jsx, function_line)


def test_return_expression(make_ctx, summarize):
    lines = ["function f() {", "  return a && b || c;", "}"]
    ctx = make_ctx({1: (1, 3)})
    assert summarize(_collect(ctx, lines, 1, 1)) == [("&&", 2, 1), ("||", 2, 1)]


def test_control_condition_is_left_to_control_flow(make_ctx):
    lines = ["function f() {", "  if (a && b) {", "}"]
    ctx = make_ctx({1: (1, 3)})
    assert _collect(ctx, lines, 1, 1) == []


def test_operator_before_callback_goes_to_host(make_ctx, summarize):
    lines = ["function f() {", "  const ok = a && items.map(x => x || y);", "}"]
    ctx = make_ctx({1: (1, 3), 2: (2, 2)})
    assert summarize(_collect(ctx, lines, 1, 2)) == [("&&", 2, 1), ("||", 2, 2)]


def test_operators_in_strings_are_ignored(make_ctx):
    lines = ["function f() {", "  log('a && b', x);", "}"]
    ctx = make_ctx({1: (1, 3)})
    assert _collect(ctx, lines, 1, 1) == []


def test_jsx_expression_detection():
    lines = ["  {isOpen && <Modal />}"]
    jsx = detect_jsx_expressions(lines, 0, classify_line(lines[0]))
    assert jsx.is_expression
    assert jsx.any


def test_jsx_continuation_detection():
    lines = ["  {user &&", "    isAdmin && <Panel />"]
    jsx = detect_jsx_expressions(lines, 1, classify_line(lines[1]))
    assert jsx.is_continuation
    assert not jsx.is_expression


def test_is_boolean_expression():
    plain = classify_line("x = a && b;")
    assert is_boolean_expression("x = a && b;", plain, JsxContext())
    control = classify_line("while (a && b) {")
    assert not is_boolean_expression("while (a && b) {", control, JsxContext())


def test_optional_chaining(summarize):
    assert summarize(parse_optional_chaining("a?.b?.c", 4, 1)) == [("?.", 4, 1), ("?.", 4, 1)]
    assert parse_optional_chaining("const n = x ? .5 : 1;", 4, 1) == []
    assert parse_optional_chaining("const s = 'a?.b';", 4, 1) == []
