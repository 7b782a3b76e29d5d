"""Ternary certification and nullish-coalescing detection.

A ``?`` in live code is only a ternary when a matching ``:`` exists at the
same structural depth.  Optional chaining (``?.``), nullish coalescing
(``??``) and TypeScript optional markers (``name?: Type``) share the same
character and are filtered out before the colon search runs.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace

from decision_scan.analyzer.base_analyzer import DecisionPoint
from decision_scan.analyzer.string_literals import (
    find_code_tokens,
    has_question_mark_outside_string,
    string_literal_mask,
)

# Lines after the ``?`` that a JSX ternary may span before we give up.
MAX_CONTINUATION_LINES = 20

_IDENT_CHAR_RE = re.compile(r"[\w$\])]")
_OPTIONAL_MARKER_TAIL_RE = re.compile(r"\s*:")
_LOGICAL_TOKENS = ("&&", "||")

_OPENERS = {"(": "paren", "{": "brace", "[": "bracket"}
_CLOSERS = {")": "paren", "}": "brace", "]": "bracket"}


@dataclass(frozen=True, slots=True)
class DepthState:
    """Paren/brace/bracket nesting depth at a position."""

    paren: int = 0
    brace: int = 0
    bracket: int = 0

    def step(self, ch: str) -> DepthState:
        if ch in _OPENERS:
            field = _OPENERS[ch]
            return replace(self, **{field: getattr(self, field) + 1})
        if ch in _CLOSERS:
            field = _CLOSERS[ch]
            return replace(self, **{field: getattr(self, field) - 1})
        return self

    def below(self, other: DepthState) -> bool:
        return (
            self.paren < other.paren
            or self.brace < other.brace
            or self.bracket < other.bracket
        )

    def within(self, other: DepthState, tolerance: int) -> bool:
        """True when every depth is between *other* and *other* + tolerance."""
        return (
            other.paren <= self.paren <= other.paren + tolerance
            and other.brace <= self.brace <= other.brace + tolerance
            and other.bracket <= self.bracket <= other.bracket + tolerance
        )


def depth_at(line: str, index: int) -> DepthState:
    """Structural depth just before *index* (plain prefix scan, no masking)."""
    state = DepthState()
    for ch in line[:index]:
        state = state.step(ch)
    return state


# ------------------------------------------------------------------
# Question-mark classification
# ------------------------------------------------------------------


def is_optional_chain(line: str, index: int) -> bool:
    """``?.`` is optional chaining unless it is ``? .5`` style numeric."""
    return line[index + 1 : index + 2] == "." and not line[index + 2 : index + 3].isdigit()


def is_nullish_operator(line: str, index: int) -> bool:
    """True when the ``?`` at *index* is either half of ``??`` / ``??=``."""
    return line[index + 1 : index + 2] == "?" or (index > 0 and line[index - 1] == "?")


def is_optional_parameter_marker(line: str, index: int) -> bool:
    """``name?: Type`` in a signature or interface, not a ternary."""
    if index == 0 or not _IDENT_CHAR_RE.match(line[index - 1]):
        return False
    return _OPTIONAL_MARKER_TAIL_RE.match(line, index + 1) is not None


def _looks_like_jsx(line: str, index: int) -> bool:
    return "{" in line[:index] or line[index + 1 :].lstrip().startswith("(")


def _scan_for_colon(
    text: str,
    mask: Sequence[bool],
    start: int,
    depth: DepthState,
    target: DepthState,
    ternary_depth: int,
    jsx: bool,
    tolerance: int,
) -> tuple[bool | None, DepthState, int]:
    """Scan *text* from *start* for the colon closing a ternary.

    Returns ``(verdict, depth, ternary_depth)``.  ``verdict`` is ``True`` on a
    match, ``False`` when a stop condition ends the search, and ``None`` when
    the text ran out without deciding.
    """
    i = start
    while i < len(text):
        ch = text[i]
        if mask[i]:
            i += 1
            continue
        if ch == "?":
            nxt = text[i + 1 : i + 2]
            if nxt == ".":
                i += 2
                continue
            if nxt == "?":
                i += 3 if text[i + 2 : i + 3] == "=" else 2
                continue
            if not is_optional_parameter_marker(text, i):
                ternary_depth += 1
            i += 1
            continue
        if ch == ":":
            if ternary_depth > 0:
                ternary_depth -= 1
            elif depth == target or (tolerance and depth.within(target, tolerance)):
                return True, depth, ternary_depth
            i += 1
            continue
        depth = depth.step(ch)
        if depth.below(target):
            return False, depth, ternary_depth
        if ch in ";," and ternary_depth == 0 and depth == target and not jsx:
            return False, depth, ternary_depth
        if ch == ";" and tolerance and ternary_depth == 0 and depth == target:
            return False, depth, ternary_depth
        i += 1
    return None, depth, ternary_depth


def find_matching_colon(
    lines: Sequence[str],
    line_index: int,
    question_index: int,
) -> bool:
    """Return True when the ``?`` at ``lines[line_index][question_index]`` is a ternary.

    The same line is scanned first.  The search continues onto following
    lines when the expression looks like JSX or the line ended without a
    stop token, widening the depth tolerance by one for JSX.
    """
    line = lines[line_index]
    target = depth_at(line, question_index)
    jsx = _looks_like_jsx(line, question_index)

    verdict, depth, ternary_depth = _scan_for_colon(
        line, string_literal_mask(line), question_index + 1, target, target, 0, jsx, 0
    )
    if verdict is not None:
        return verdict

    tolerance = 1 if jsx else 0
    last = min(len(lines), line_index + 1 + MAX_CONTINUATION_LINES)
    for next_line in lines[line_index + 1 : last]:
        verdict, depth, ternary_depth = _scan_for_colon(
            next_line,
            string_literal_mask(next_line),
            0,
            depth,
            target,
            ternary_depth,
            jsx,
            tolerance,
        )
        if verdict is not None:
            return verdict
    return False


def ternary_positions(lines: Sequence[str], line_index: int) -> list[int]:
    """Indices of every certified ternary ``?`` on ``lines[line_index]``."""
    line = lines[line_index]
    mask = string_literal_mask(line)
    positions: list[int] = []
    for i, ch in enumerate(line):
        if ch != "?" or mask[i]:
            continue
        # Any ``?.``, numeric or not, is never a ternary.
        if line[i + 1 : i + 2] == "." or is_nullish_operator(line, i):
            continue
        if is_optional_parameter_marker(line, i):
            continue
        if find_matching_colon(lines, line_index, i):
            positions.append(i)
    return positions


def nullish_positions(line: str) -> list[int]:
    """Indices of ``??`` in live code, ``??=`` included."""
    return find_code_tokens(line, "??")


def parse_nullish_coalescing(line: str, line_num: int, function_line: int) -> list[DecisionPoint]:
    return [DecisionPoint.of(line_num, "??", function_line) for _ in nullish_positions(line)]


# ------------------------------------------------------------------
# Multi-line ternary conditions
# ------------------------------------------------------------------


def is_ternary_condition_line(lines: Sequence[str], line_index: int) -> bool:
    """True for a ``&&``/``||`` line whose ternary ``?`` sits on the next line.

    Matches the layout::

        const v = a &&
          b ? x
          : y;
    """
    if line_index + 2 >= len(lines):
        return False
    line = lines[line_index]
    if not any(find_code_tokens(line, token) for token in _LOGICAL_TOKENS):
        return False
    if has_question_mark_outside_string(line):
        return False
    if not has_question_mark_outside_string(lines[line_index + 1]):
        return False
    return lines[line_index + 2].strip().startswith(":")


def parse_ternary_operators(
    lines: Sequence[str],
    line_index: int,
    function_line: int,
    resolve: Callable[[int], int | None] | None = None,
) -> list[DecisionPoint]:
    """Emit ``ternary`` and ``??`` points for one line.

    When the previous line is the condition half of a split ternary its
    ``&&``/``||`` operators are emitted here too, ahead of this line's own
    points, attributed through *resolve* (falling back to *function_line*).
    """
    line_num = line_index + 1
    line = lines[line_index]
    points: list[DecisionPoint] = []

    ternaries = ternary_positions(lines, line_index)
    if ternaries and line_index > 0 and is_ternary_condition_line(lines, line_index - 1):
        prev_line = lines[line_index - 1]
        owner = (resolve(line_num - 1) if resolve else None) or function_line
        for token in _LOGICAL_TOKENS:
            for _ in find_code_tokens(prev_line, token):
                points.append(DecisionPoint.of(line_num - 1, token, owner))

    for _ in ternaries:
        points.append(DecisionPoint.of(line_num, "ternary", function_line))
    points.extend(parse_nullish_coalescing(line, line_num, function_line))
    return points
