"""Tests for control-flow keyword classification and collection."""

from __future__ import annotations

import pytest

from decision_scan.analyzer.control_flow import (
    classify_line,
    find_closing_paren,
    parse_control_flow,
)


@pytest.mark.parametrize(
    "line, attribute",
    [
        ("if (a) {", "is_if"),
        ("} else if (b) {", "is_else_if"),
        ("for (let i = 0; i < n; i++) {", "is_for"),
        ("while (x) {", "is_while"),
        ("} while (x);", "is_while"),
        ("switch (kind) {", "is_switch"),
        ("} catch (err) {", "is_catch"),
        ("} catch {", "is_catch"),
    ],
)
def test_classify_line_flags(line, attribute):
    assert getattr(classify_line(line), attribute)


def test_else_if_is_not_a_plain_if():
    flags = classify_line("} else if (b) {")
    assert flags.is_else_if
    assert not flags.is_if


@pytest.mark.parametrize(
    "line, kind",
    [
        ("for (let i = 0; i < n; i++) {", "for"),
        ("for (const x of xs) {", "for...of"),
        ("for (const key in obj) {", "for...in"),
        ("for await (const chunk of stream()) {", "for...of"),
    ],
)
def test_for_loop_kind(line, kind):
    assert classify_line(line).for_kind == kind


def test_keywords_in_strings_and_comments_are_ignored():
    assert not classify_line("const s = 'if (x) {';").is_control
    assert not classify_line("doThing(); // while (true)").is_control


def test_do_and_case_markers():
    assert classify_line("do {").do_match is not None
    assert classify_line("  case 'a':").case_match is not None
    assert classify_line("  default:").case_match is not None
    assert classify_line("const x = { default: 1 };").case_match is None


def test_find_closing_paren():
    line = "if (f(a) && ')') {"
    assert find_closing_paren(line, 3) == line.rindex(")")


def test_if_with_condition_operators(make_ctx, summarize):
    ctx = make_ctx({1: (1, 10)})
    line = "  if (a && b || c) {"
    points = parse_control_flow(ctx, line, 2, classify_line(line), 1)
    assert summarize(points) == [("if", 2, 1), ("&&", 2, 1), ("||", 2, 1)]


def test_if_operators_inside_callback(make_ctx, summarize):
    ctx = make_ctx({1: (1, 10), 2: (2, 2)})
    line = "  if (items.some(x => x.a && x.b)) {"
    points = parse_control_flow(ctx, line, 2, classify_line(line), 1)
    assert summarize(points) == [("if", 2, 1), ("&&", 2, 2)]


def test_for_of_does_not_count_header_operators(make_ctx, summarize):
    ctx = make_ctx({1: (1, 10)})
    line = "  for (const x of a || b) {"
    points = parse_control_flow(ctx, line, 3, classify_line(line), 1)
    assert summarize(points) == [("for...of", 3, 1)]


def test_else_if_switch_case_catch(make_ctx, summarize):
    ctx = make_ctx({1: (1, 20)})
    cases = [
        ("  } else if (a || b) {", 2, [("else if", 2, 1), ("||", 2, 1)]),
        ("  switch (mode) {", 3, [("switch", 3, 1)]),
        ("    case 'x':", 4, [("case", 4, 1)]),
        ("  } catch (e) {", 5, [("catch", 5, 1)]),
        ("  do {", 6, [("do...while", 6, 1)]),
        # The do...while was counted at ``do``; its tail adds only operators.
        ("  } while (a && b);", 7, [("&&", 7, 1)]),
        ("  while (a && b) {", 8, [("while", 8, 1), ("&&", 8, 1)]),
    ]
    for line, line_num, expected in cases:
        points = parse_control_flow(ctx, line, line_num, classify_line(line), 1)
        assert summarize(points) == expected, line


@pytest.mark.parametrize(
    "line",
    [
        "load().catch((err) => report(err));",
        "query.if(cond);",
        "stream.while(x);",
        "router.switch(route);",
        "$catch(handler);",
    ],
)
def test_method_calls_named_like_keywords(line):
    assert not classify_line(line).is_control
