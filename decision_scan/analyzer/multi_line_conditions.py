"""Logical operators on continuation lines of a multi-line condition.

::

    if (user &&
        user.active ||      <- counted here, owned by the ``if`` line's function
        isAdmin) {

A line claimed here is skipped by the generic boolean-expression collector.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from decision_scan.analyzer.attribution import (
    AttributionContext,
    get_function_line_for_control_structure,
    get_innermost_function,
)
from decision_scan.analyzer.base_analyzer import DecisionPoint
from decision_scan.analyzer.control_flow import LineFlags
from decision_scan.analyzer.operators import (
    BOOLEAN_ASSIGNMENT_RE,
    LOGICAL_TOKENS,
    PAREN_BOOLEAN_RE,
    RETURN_RE,
    JsxContext,
)
from decision_scan.analyzer.string_literals import (
    find_code_tokens,
    has_logical_operator,
    strip_comments,
)
from decision_scan.analyzer.ternaries import is_ternary_condition_line

MAX_LOOKBACK_LINES = 5

_CONDITION_START_PATTERNS = (
    re.compile(r"^\s*if\s*\("),
    re.compile(r"\belse\s+if\s*\("),
    re.compile(r"^\s*while\s*\("),
    re.compile(r"^\s*for\s*\("),
)
_STATEMENT_END_RE = re.compile(r"[;}]")


def is_condition_start(line: str) -> bool:
    return any(pattern.search(line) for pattern in _CONDITION_START_PATTERNS)


def is_boolean_assignment_line(line: str) -> bool:
    return BOOLEAN_ASSIGNMENT_RE.match(line) is not None


def is_boolean_expression_line(line: str) -> bool:
    return (
        RETURN_RE.match(line) is not None
        or is_boolean_assignment_line(line)
        or PAREN_BOOLEAN_RE.search(line) is not None
        or ("{" in line and has_logical_operator(line))
    )


def _stops_lookback(check_line: str) -> bool:
    has_logical = has_logical_operator(check_line)
    if "{" in check_line and has_logical:
        return True
    if is_boolean_assignment_line(check_line):
        return True
    return _STATEMENT_END_RE.search(check_line) is not None and not has_logical


def find_condition_start(lines: Sequence[str], index: int) -> int | None:
    """Index of the line that opened the condition continued on ``lines[index]``.

    Scans back at most ``MAX_LOOKBACK_LINES``.  A condition keyword wins;
    failing that, the earliest ``&&``/``||`` line reached counts as the start.
    """
    start = None
    for look_back in range(1, MAX_LOOKBACK_LINES + 1):
        if index - look_back < 0:
            break
        check_line = strip_comments(lines[index - look_back]).strip()
        if _stops_lookback(check_line):
            break
        if is_condition_start(check_line):
            return index - look_back
        if has_logical_operator(check_line):
            start = index - look_back
    return start


def parse_multi_line_conditions(
    ctx: AttributionContext,
    lines: Sequence[str],
    index: int,
    flags: LineFlags,
    jsx: JsxContext,
    default_function: int,
) -> list[DecisionPoint]:
    if index == 0 or flags.is_control or jsx.any:
        return []
    raw_line = lines[index]
    line = strip_comments(raw_line)
    if not has_logical_operator(line):
        return []
    if (
        RETURN_RE.match(line)
        or BOOLEAN_ASSIGNMENT_RE.match(line)
        or PAREN_BOOLEAN_RE.search(line)
    ):
        return []
    if is_ternary_condition_line(lines, index):
        return []

    prev_line = strip_comments(lines[index - 1]).strip()
    if is_boolean_assignment_line(prev_line) or is_boolean_expression_line(prev_line):
        return []

    start = index - 1 if is_condition_start(prev_line) else find_condition_start(lines, index)
    if start is None:
        return []

    if is_condition_start(strip_comments(lines[start])):
        owner = get_function_line_for_control_structure(ctx, start + 1)
    else:
        owner = get_innermost_function(ctx, start + 1)
    owner = owner or default_function
    line_num = index + 1
    return [
        DecisionPoint.of(line_num, token, owner)
        for token in LOGICAL_TOKENS
        for _ in find_code_tokens(raw_line, token)
    ]
