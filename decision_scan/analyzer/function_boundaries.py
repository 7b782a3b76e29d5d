"""Brace-counting function boundary finder.

Given the functions the linter scored in one file, estimate the inclusive
line range of each.  The result is keyed by the reported line so it can be
handed straight to the decision-point extractor.

Heuristics, in order:

- Named declarations: search up to 50 lines above the reported line for a
  declaration carrying the function's name.
- Arrow functions: start at the ``=>`` line (the reported line or the next).
- Expression-bodied arrows end where the expression does: on the arrow
  line itself, or on the next line opening with ``;``, ``}``, ``,`` or ``)``.
- Braced bodies end when their braces balance.  A hook callback followed by
  ``}, [deps]`` ends on the dependency-array line; a timer callback followed
  by ``}, 1000)`` ends on the closing-paren line.
- Anything unresolved ends 500 lines after its start, clamped to the file.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

from decision_scan.analyzer.base_analyzer import BoundaryMap, FunctionBoundary
from decision_scan.analyzer.function_extraction import (
    DECLARATION_LOOKBACK,
    DECLARATION_PATTERNS,
    FunctionRecord,
)

logger = logging.getLogger(__name__)

FALLBACK_SPAN = 500
_TAIL_SEARCH_LINES = 3

# ``) {``, ``): Type {``, ``}): Foo[] | null {``
_BODY_OPEN_RE = re.compile(r"\)\s*[:\w\s<>\[\]|'\"]*\s*\{")
_EXPRESSION_END_RE = re.compile(r"^[;},)]")
_DEPENDENCY_ARRAY_RE = re.compile(r"}\s*,\s*\[")
_TIMER_ARGUMENT_RE = re.compile(r"}\s*,\s*\d+")


def _brace_delta(text: str) -> int:
    return text.count("{") - text.count("}")


def _expression_ends_on_line(rest: str) -> bool:
    """True when the arrow expression following ``=>`` closes on this line."""
    stripped = rest.rstrip()
    if not stripped:
        return False
    return (
        stripped.endswith((";", ","))
        or rest.count(")") > rest.count("(")
        or rest.count("}") > rest.count("{")
    )


def _expression_end(lines: Sequence[str], arrow_index: int) -> int:
    """1-based last line of an expression-bodied arrow whose ``=>`` is on *arrow_index*."""
    line = lines[arrow_index]
    if _expression_ends_on_line(line[line.index("=>") + 2 :]):
        return arrow_index + 1
    j = arrow_index + 1
    while j < len(lines) and not _EXPRESSION_END_RE.match(lines[j].strip()):
        j += 1
    return min(j + 1, len(lines))


def _find_named_start(lines: Sequence[str], function_line: int, name: str) -> int:
    lower = max(0, function_line - DECLARATION_LOOKBACK)
    for i in range(min(function_line, len(lines)) - 1, lower - 1, -1):
        for pattern in DECLARATION_PATTERNS:
            match = pattern.search(lines[i])
            if match and match.group(1) == name:
                return i + 1
    return function_line


def _find_arrow_start(lines: Sequence[str], function_line: int) -> int:
    for i in (function_line - 1, function_line):
        if 0 <= i < len(lines) and "=>" in lines[i]:
            return i + 1
    return function_line


def _callback_tail_end(lines: Sequence[str], i: int) -> int | None:
    """End line for a body closing on *i* that is followed by hook or timer arguments."""
    line = lines[i]
    close = line.find("}")
    if close < 0:
        return None
    rest = line[close:]
    following = lines[i + 1] if i + 1 < len(lines) else ""
    combined = f"{rest} {following}"

    last = min(i + _TAIL_SEARCH_LINES, len(lines))
    if _DEPENDENCY_ARRAY_RE.search(combined):
        for k in range(i, last):
            if "]" in lines[k]:
                return k + 1
    elif _TIMER_ARGUMENT_RE.search(combined):
        for k in range(i, last):
            if ")" in lines[k] and (";" in lines[k] or k == i + 1):
                return k + 1
    return None


def _track_body(lines: Sequence[str], first: int, depth: int) -> int | None:
    """Follow braces from line index *first* until *depth* returns to zero."""
    for i in range(first, len(lines)):
        line = lines[i]
        depth += _brace_delta(line)
        if depth <= 0 and "}" in line:
            return _callback_tail_end(lines, i) or i + 1
    return None


def _arrow_end(lines: Sequence[str], start: int) -> tuple[int, int | None]:
    """``(start, end)`` for an arrow function beginning at or after *start*."""
    for i in range(start - 1, len(lines)):
        line = lines[i]
        if "=>" not in line:
            continue
        body = line[line.index("=>") :]
        if "{" in body:
            depth = _brace_delta(body)
            if depth <= 0:
                return i + 1, _callback_tail_end(lines, i) or i + 1
            return i + 1, _track_body(lines, i + 1, depth)
        if i + 1 < len(lines) and lines[i + 1].strip().startswith("{"):
            return i + 2, _track_body(lines, i + 2, 1)
        return i + 1, _expression_end(lines, i)
    return start, None


def _declaration_end(lines: Sequence[str], start: int) -> int | None:
    """End of a declared function whose header begins on *start*.

    Braces before the body opener (a type literal in the signature) are
    skipped.
    """
    for i in range(start - 1, len(lines)):
        line = lines[i]
        opener = _BODY_OPEN_RE.search(line)
        if opener:
            depth = _brace_delta(line[opener.end() - 1 :])
            if depth <= 0:
                return _callback_tail_end(lines, i) or i + 1
            return _track_body(lines, i + 1, depth)
        if "=>" in line and "{" not in line:
            return _expression_end(lines, i)
    return None


def find_function_boundary(lines: Sequence[str], function: FunctionRecord) -> FunctionBoundary:
    function_line = function.line
    if function.is_arrow:
        start, end = _arrow_end(lines, _find_arrow_start(lines, function_line))
    else:
        start = _find_named_start(lines, function_line, function.function_name)
        end = _declaration_end(lines, start)

    if end is None:
        end = min(start + FALLBACK_SPAN, len(lines))
        logger.debug(
            "No closing brace found for %s at line %d; assuming end=%d",
            function.function_name,
            function_line,
            end,
        )
    return FunctionBoundary(start, max(end, start))


def find_function_boundaries(source_code: str, functions: Iterable[FunctionRecord]) -> BoundaryMap:
    """Map each function's reported line to its estimated ``FunctionBoundary``."""
    lines = source_code.split("\n")
    return {function.line: find_function_boundary(lines, function) for function in functions}
