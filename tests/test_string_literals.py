"""Tests for string, template-literal and comment masking."""

from __future__ import annotations

import pytest

from decision_scan.analyzer.string_literals import (
    MaskingState,
    advance,
    comment_spans,
    find_code_tokens,
    has_question_mark_outside_string,
    is_comment_line,
    is_inside_comment,
    is_inside_string_literal,
    strip_comments,
)


@pytest.mark.parametrize(
    "line, token, expected",
    [
        ('a = "x && y"', "&&", True),
        ("a = 'x || y'", "||", True),
        ("a && 'b'", "&&", False),
        ("`a && b`", "&&", True),
        ("`${a && b}`", "&&", False),
        ('"a \\" && b"', "&&", True),
        ("`${fn({ a: 1 })} && x`", "&&", True),
    ],
)
def test_is_inside_string_literal(line, token, expected):
    assert is_inside_string_literal(line, line.index(token)) is expected


def test_template_expression_opens_with_two_characters():
    state = MaskingState(in_template_literal=True)
    new_state, width = advance(state, "$", "{")
    assert width == 2
    assert new_state.in_template_expression
    assert new_state.template_brace_depth == 1
    assert not new_state.inside_string


def test_escape_skips_next_character():
    state, _ = advance(MaskingState(in_single_quote=True), "\\")
    state, _ = advance(state, "'")
    assert state.in_single_quote


def test_question_mark_outside_string():
    assert has_question_mark_outside_string("a ? b : c")
    assert not has_question_mark_outside_string("x = 'why?'")
    assert has_question_mark_outside_string("`${a ? b : c}`")


def test_strip_comments():
    assert strip_comments("a && b // c || d") == "a && b "
    assert strip_comments("a /* x */ && b") == "a  && b"


def test_comment_spans_ignore_slashes_in_strings():
    line = 'const url = "http://x"; // note'
    spans = comment_spans(line)
    assert spans == [(line.index("//", 20), len(line))]
    assert is_inside_comment(line, len(line) - 1)
    assert not is_inside_comment(line, line.index("http"))


@pytest.mark.parametrize(
    "line, expected",
    [
        ("  // if (a && b)", True),
        ("/* block */", True),
        ("   * continued block", True),
        ("if (a) {", False),
        ("", False),
    ],
)
def test_is_comment_line(line, expected):
    assert is_comment_line(line) is expected


def test_find_code_tokens_non_overlapping():
    assert find_code_tokens("a && b && c", "&&") == [2, 7]


def test_find_code_tokens_skips_strings_and_comments():
    assert find_code_tokens('x && "y && z" // && w', "&&") == [2]


def test_find_code_tokens_window():
    line = "if (a && b) && c"
    assert find_code_tokens(line, "&&", 3, line.index(")")) == [6]
