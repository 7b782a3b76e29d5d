"""Tests for default-parameter and destructuring-default detection."""

from __future__ import annotations

import pytest

from decision_scan.analyzer.base_analyzer import FunctionBoundary
from decision_scan.analyzer.default_parameters import (
    extract_arrow_param_span,
    find_arrow_on_subsequent_lines,
    is_dependency_array,
    is_jsx_attribute_line,
    is_type_definition,
    parse_default_parameters,
    parse_destructured_assignments,
)


def test_signature_defaults(make_ctx, summarize):
    lines = ["function f(a, b = 2, c = 3) {}"]
    ctx = make_ctx({1: (1, 1)})
    points = parse_default_parameters(ctx, lines, 0, 1)
    assert summarize(points) == [("default parameter", 1, 1), ("default parameter", 1, 1)]


def test_arrow_defaults(make_ctx, summarize):
    lines = ["const add = (a, b = 1) => a + b;"]
    ctx = make_ctx({1: (1, 1)})
    assert summarize(parse_default_parameters(ctx, lines, 0, 1)) == [("default parameter", 1, 1)]


def test_bare_arrow_parameter_has_no_default(make_ctx):
    lines = ["const double = y => y * 2;"]
    ctx = make_ctx({1: (1, 1)})
    assert parse_default_parameters(ctx, lines, 0, 1) == []


def test_assignment_in_body_is_not_a_default(make_ctx):
    lines = ["function f(a) {", "  let total = 0;", "  total = a + 1;", "}"]
    ctx = make_ctx({1: (1, 4)})
    assert parse_default_parameters(ctx, lines, 1, 1) == []
    assert parse_default_parameters(ctx, lines, 2, 1) == []


@pytest.mark.parametrize(
    "before_arrow, is_assignment, expected",
    [
        ("(x, y)", False, (1, 5)),
        ("x", False, (0, 1)),
        ("()", False, None),
        ("{ a = 1 } ", False, (0, 9)),
        ("const f = y ", True, (9, 12)),
    ],
)
def test_extract_arrow_param_span(before_arrow, is_assignment, expected):
    assert extract_arrow_param_span(before_arrow, is_assignment) == expected


def test_dependency_array():
    assert is_dependency_array("}, [deps]);", 0, ["}, [deps]);"])
    assert is_dependency_array("[", 1, ["},", "["])
    assert not is_dependency_array("const a = [1];", 0, ["const a = [1];"])


def test_type_definition_and_jsx_attributes():
    assert is_type_definition("interface Props {")
    assert is_type_definition("type Mode = 'a' | 'b';")
    lines = ["<Button", '  variant="primary"']
    assert is_jsx_attribute_line(lines[1], 1, lines)


def test_arrow_lookahead():
    lines = ["const f = (", "  a = 1,", ") => a;"]
    assert find_arrow_on_subsequent_lines(1, lines) == 4
    assert find_arrow_on_subsequent_lines(2, lines) is None


def test_destructured_defaults(summarize):
    lines = ["const { x = 1, y = 2 } = obj;"]
    points = parse_destructured_assignments(lines, 0, 1, FunctionBoundary(1, 1))
    assert summarize(points) == [("default parameter", 1, 1), ("default parameter", 1, 1)]


def test_multi_line_destructuring(summarize):
    lines = ["const {", "  y = 2,", "  x = 1,"]
    points = parse_destructured_assignments(lines, 2, 2, FunctionBoundary(2, 3))
    assert summarize(points) == [("default parameter", 3, 2)]


def test_destructuring_rules():
    boundary = FunctionBoundary(1, 40)
    assert parse_destructured_assignments(["const x = 5;"], 0, 1, boundary) == []
    assert parse_destructured_assignments(["const { a = 1 } = o;"], 0, 1, None) == []

    far = [""] * 30 + ["const { a = 1 } = o;"]
    assert parse_destructured_assignments(far, 30, 1, boundary) == []
