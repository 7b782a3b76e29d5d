"""Tests for ternary certification and nullish coalescing."""

from __future__ import annotations

import pytest

from decision_scan.analyzer.ternaries import (
    DepthState,
    depth_at,
    find_matching_colon,
    is_nullish_operator,
    is_optional_chain,
    is_optional_parameter_marker,
    is_ternary_condition_line,
    nullish_positions,
    parse_nullish_coalescing,
    parse_ternary_operators,
    ternary_positions,
)


def test_simple_ternary_has_matching_colon():
    line = "const x = a ? b : c;"
    assert find_matching_colon([line], 0, line.index("?"))


def test_colon_in_object_literal_is_not_a_match():
    line = "const x = a ? { k: 1 } : c;"
    # The first ':' is inside braces; the match is the one after them.
    assert ternary_positions([line], 0) == [line.index("?")]


@pytest.mark.parametrize(
    "line",
    [
        "function f(a?: string) {}",
        "interface P { name?: string }",
        "const y = obj?.prop;",
        "const z = a ?? b;",
        "x ??= 5;",
        'const s = "why? because: reasons";',
    ],
)
def test_non_ternary_question_marks(line):
    assert ternary_positions([line], 0) == []


def test_nested_ternaries_each_count():
    line = "const v = a ? b ? 1 : 2 : 3;"
    assert len(ternary_positions([line], 0)) == 2


def test_statement_end_stops_search():
    line = "const v = a ? b; const w = c;"
    assert not find_matching_colon([line], 0, line.index("?"))


def test_jsx_ternary_spanning_lines():
    lines = ["{isOpen ? (", "  <Modal />", ") : null}"]
    assert ternary_positions(lines, 0) == [lines[0].index("?")]


def test_question_mark_helpers():
    assert is_optional_chain("a?.b", 1)
    assert not is_optional_chain("a?.5:1", 1)
    assert is_nullish_operator("a ?? b", 2)
    assert is_nullish_operator("a ?? b", 3)
    assert is_optional_parameter_marker("(a?: string)", 2)
    assert not is_optional_parameter_marker("a ? b : c", 2)


def test_depth_at():
    assert depth_at("f(a, [b, {c", 11) == DepthState(paren=1, brace=1, bracket=1)


def test_depth_state_within_tolerance():
    target = DepthState(paren=1)
    assert DepthState(paren=2).within(target, 1)
    assert not DepthState(paren=3).within(target, 1)
    assert DepthState(paren=0).below(target)


def test_nullish_coalescing():
    assert nullish_positions("a ?? b ?? c") == [2, 7]
    points = parse_nullish_coalescing("x ??= 5", 4, 1)
    assert [(p.type, p.line, p.function_line) for p in points] == [("??", 4, 1)]


def test_split_ternary_condition(summarize):
    lines = ["const v = a &&", "  b ? x", "  : y;"]
    assert is_ternary_condition_line(lines, 0)
    assert not is_ternary_condition_line(lines, 1)

    points = parse_ternary_operators(lines, 1, 7)
    assert summarize(points) == [("&&", 1, 7), ("ternary", 2, 7)]


def test_split_ternary_condition_uses_resolver(summarize):
    lines = ["const v = a ||", "  b ? x", "  : y;"]
    points = parse_ternary_operators(lines, 1, 7, resolve=lambda n: 3)
    assert summarize(points) == [("||", 1, 3), ("ternary", 2, 7)]


def test_question_dot_is_never_a_ternary():
    assert ternary_positions(["const v = c ?.5 : 1;"], 0) == []
    assert ternary_positions(["const v = c ? .5 : 1;"], 0) == [12]
