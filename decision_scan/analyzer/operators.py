"""Short-circuit operators outside control-flow conditions, and ``?.``.

``&&``/``||`` in ``if``/loop/``switch``/``catch`` conditions are counted by
the control-flow collector.  Everything else lands here: returns, boolean
assignments, parenthesised expressions, JSX ``{cond && <X/>}`` blocks and
bare expressions.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from decision_scan.analyzer.attribution import AttributionContext
from decision_scan.analyzer.base_analyzer import DecisionPoint
from decision_scan.analyzer.control_flow import LineFlags
from decision_scan.analyzer.string_literals import (
    find_code_tokens,
    has_logical_operator,
    strip_comments,
)
from decision_scan.analyzer.ternaries import is_optional_chain, is_ternary_condition_line

RETURN_RE = re.compile(r"^\s*return\s+")
BOOLEAN_ASSIGNMENT_RE = re.compile(r"^\s*(const|let|var)\s+\w+\s*=\s*.*[&|]{2}")
PAREN_BOOLEAN_RE = re.compile(r"\([^)]*[&|]{2}[^)]*\)")
_JSX_BOOLEAN_RE = re.compile(r"\{[^}]*[&|]{2}")
_CALLBACK_START_RE = re.compile(r"=>|function\s*\(")

LOGICAL_TOKENS = ("&&", "||")


@dataclass(frozen=True, slots=True)
class JsxContext:
    """Whether a line opens, or continues, a JSX ``{...}`` logical expression."""

    is_expression: bool = False
    is_continuation: bool = False

    @property
    def any(self) -> bool:
        return self.is_expression or self.is_continuation


def detect_jsx_expressions(lines: Sequence[str], index: int, flags: LineFlags) -> JsxContext:
    line = strip_comments(lines[index])
    has_logical = has_logical_operator(line)
    is_expression = "{" in line and has_logical and _JSX_BOOLEAN_RE.search(line) is not None

    is_continuation = False
    if index > 0 and not (flags.is_if or flags.is_else_if or flags.is_for or flags.is_while):
        prev_line = strip_comments(lines[index - 1]).strip()
        is_continuation = "{" in prev_line and has_logical and "{" not in line
    return JsxContext(is_expression=is_expression, is_continuation=is_continuation)


def is_boolean_expression(line: str, flags: LineFlags, jsx: JsxContext) -> bool:
    """True when the line's ``&&``/``||`` are not part of a control condition."""
    if flags.is_control:
        return False
    return (
        RETURN_RE.match(line) is not None
        or BOOLEAN_ASSIGNMENT_RE.match(line) is not None
        or PAREN_BOOLEAN_RE.search(line) is not None
        or jsx.any
        or has_logical_operator(line)
    )


def find_boolean_expression_function_line(
    ctx: AttributionContext,
    line: str,
    line_num: int,
    operator_index: int,
    function_line: int,
) -> int:
    """Attribute an operator that precedes a callback opened on this line.

    ``const ok = a && items.map(x => ...)``: the ``&&`` runs in the host
    function, so it goes to the smallest containing function that is not
    one of the callbacks starting here.
    """
    callbacks = {fl for fl, b in ctx.boundaries.items() if b.start == line_num}
    if not callbacks:
        return function_line

    callback_start = _CALLBACK_START_RE.search(line)
    if callback_start is None or callback_start.start() <= operator_index:
        return function_line

    parents = [
        (fl, b)
        for fl, b in ctx.boundaries.items()
        if b.contains(line_num) and fl not in callbacks
    ]
    if not parents:
        return function_line
    parents.sort(key=lambda item: item[1].size)
    return parents[0][0]


def parse_boolean_expressions(
    ctx: AttributionContext,
    lines: Sequence[str],
    index: int,
    flags: LineFlags,
    jsx: JsxContext,
    function_line: int,
) -> list[DecisionPoint]:
    raw_line = lines[index]
    line = strip_comments(raw_line)
    line_num = index + 1
    if not is_boolean_expression(line, flags, jsx):
        return []
    # Counted by the ternary collector on the following line.
    if is_ternary_condition_line(lines, index):
        return []

    points: list[DecisionPoint] = []
    for token in LOGICAL_TOKENS:
        for position in find_code_tokens(raw_line, token):
            owner = find_boolean_expression_function_line(ctx, line, line_num, position, function_line)
            points.append(DecisionPoint.of(line_num, token, owner))
    return points


def parse_optional_chaining(line: str, line_num: int, function_line: int) -> list[DecisionPoint]:
    """One ``?.`` point per optional-chaining operator in live code."""
    return [
        DecisionPoint.of(line_num, "?.", function_line)
        for position in find_code_tokens(line, "?.")
        if is_optional_chain(line, position)
    ]
