"""Tests for the brace-counting function boundary finder."""

from __future__ import annotations

import pytest

from decision_scan.analyzer.base_analyzer import FunctionBoundary
from decision_scan.analyzer.function_boundaries import find_function_boundaries
from decision_scan.analyzer.function_extraction import ARROW_NODE_TYPE, FunctionRecord


def declared(line: int, name: str) -> FunctionRecord:
    return FunctionRecord(file="a.js", line=line, complexity=1, function_name=name)


def arrow(line: int) -> FunctionRecord:
    return FunctionRecord(file="a.js", line=line, complexity=1, node_type=ARROW_NODE_TYPE)


def boundary_of(source: str, function: FunctionRecord) -> tuple[int, int]:
    found = find_function_boundaries(source, [function])[function.line]
    return found.start, found.end


def test_named_function():
    assert boundary_of("function add(a, b) {\n  return a + b;\n}", declared(1, "add")) == (1, 3)


def test_declaration_above_reported_line():
    source = "export function load(\n  a,\n) {\n  go();\n}"
    assert boundary_of(source, declared(2, "load")) == (1, 5)


def test_type_literal_in_return_type():
    source = "function t(): { prop: string } {\n  return x;\n}"
    assert boundary_of(source, declared(1, "t")) == (1, 3)


def test_arrow_with_braced_body():
    assert boundary_of("const f = () => {\n  go();\n};", arrow(1)) == (1, 3)


def test_arrow_body_brace_on_next_line():
    assert boundary_of("const f = (a) =>\n{\n  go();\n}", arrow(1)) == (2, 4)


@pytest.mark.parametrize(
    "source",
    [
        "const f = () => true;",
        "items.map(item => item * 2);",
        "const found = items.find((x) => x.id === id);",
        "<button onClick={(e) => handleClick(e)}>",
        "const f = () => ({ prop: 'value' });",
    ],
)
def test_single_line_arrows(source):
    assert boundary_of(source, arrow(1)) == (1, 1)


@pytest.mark.parametrize(
    "source, end",
    [
        ("const C = () => (\n  <div />\n);", 3),
        ("const C = () => (\n  <div />\n));", 3),
        ("const f = () =>\n  someValue;", 2),
    ],
)
def test_multi_line_expression_arrows(source, end):
    assert boundary_of(source, arrow(1)) == (1, end)


@pytest.mark.parametrize(
    "source, end",
    [
        ("useEffect(() => {\n  load();\n}, [id]);", 3),
        ("useEffect(() => {\n  load();\n},\n[id]);", 4),
        ("useEffect(() => { load(); }, [id]);", 1),
        ("setTimeout(() => {\n  tick();\n}, 1000);", 3),
    ],
)
def test_callback_arguments_after_body(source, end):
    assert boundary_of(source, arrow(1)) == (1, end)


def test_several_functions_in_one_file():
    source = "function a() {\n  return 1;\n}\n\nfunction b() {\n  return 2;\n}"
    result = find_function_boundaries(source, [declared(1, "a"), declared(5, "b")])
    assert result == {1: FunctionBoundary(1, 3), 5: FunctionBoundary(5, 7)}


def test_unclosed_body_is_clamped_to_file():
    source = "function broken() {\n  if (x) {\n"
    assert boundary_of(source, declared(1, "broken")) == (1, 3)


def test_no_functions():
    assert find_function_boundaries("const x = 1;", []) == {}


def test_object_member_arrow_without_closing_brace():
    source = "function f() {\n  const o = { run: () => 1,\n    x: 2 };\n}"
    assert boundary_of(source, arrow(2)) == (2, 2)
