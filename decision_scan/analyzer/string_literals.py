"""String, template-literal and comment masking for line-oriented scanning.

Decision-point tokens (``&&``, ``?``, ``??`` ...) that appear inside quoted
string content must never be counted, while tokens inside a template
literal's ``${...}`` expression are live code and must be.  A regular
expression cannot track that nesting, so every query here walks the line
character by character through an explicit ``MaskingState``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

# Naive comment stripper used for line classification.  It does not know
# about strings, so ``"http://x"`` loses its tail -- operator positions
# are always re-checked against the original line.
_COMMENT_RE = re.compile(r"//.*$|/\*.*?\*/")

_LOGICAL_OP_RE = re.compile(r"[&|]{2}")


@dataclass(frozen=True, slots=True)
class MaskingState:
    """Quote/template tracking state after consuming a prefix of a line."""

    in_single_quote: bool = False
    in_double_quote: bool = False
    in_template_literal: bool = False
    in_template_expression: bool = False
    template_brace_depth: int = 0
    escape_next: bool = False

    @property
    def inside_string(self) -> bool:
        """True when the next character would be string content."""
        return (
            self.in_single_quote
            or self.in_double_quote
            or (self.in_template_literal and not self.in_template_expression)
        )


def advance(state: MaskingState, ch: str, next_ch: str = "") -> tuple[MaskingState, int]:
    """Consume *ch* and return the new state plus the number of chars consumed.

    Two characters are consumed when ``${`` opens a template expression.
    """
    if state.escape_next:
        return replace(state, escape_next=False), 1
    if ch == "\\":
        return replace(state, escape_next=True), 1

    if state.in_template_expression:
        # Quotes and backticks inside ${...} belong to the embedded code.
        if ch == "{":
            return replace(state, template_brace_depth=state.template_brace_depth + 1), 1
        if ch == "}":
            depth = state.template_brace_depth - 1
            if depth <= 0:
                return replace(state, in_template_expression=False, template_brace_depth=0), 1
            return replace(state, template_brace_depth=depth), 1
        return state, 1

    if state.in_template_literal and ch == "$" and next_ch == "{":
        return replace(state, in_template_expression=True, template_brace_depth=1), 2

    if ch == "'" and not (state.in_double_quote or state.in_template_literal):
        return replace(state, in_single_quote=not state.in_single_quote), 1
    if ch == '"' and not (state.in_single_quote or state.in_template_literal):
        return replace(state, in_double_quote=not state.in_double_quote), 1
    if ch == "`" and not (state.in_single_quote or state.in_double_quote):
        if state.in_template_literal:
            return replace(
                state,
                in_template_literal=False,
                in_template_expression=False,
                template_brace_depth=0,
            ), 1
        return replace(state, in_template_literal=True), 1

    return state, 1


def string_literal_mask(line: str) -> list[bool]:
    """Return a per-character mask; ``True`` marks string content."""
    mask = [False] * len(line)
    state = MaskingState()
    i = 0
    while i < len(line):
        next_ch = line[i + 1] if i + 1 < len(line) else ""
        new_state, width = advance(state, line[i], next_ch)
        for k in range(i, min(i + width, len(line))):
            mask[k] = state.inside_string
        state = new_state
        i += width
    return mask


def is_inside_string_literal(line: str, char_index: int) -> bool:
    """Return True if *char_index* in *line* falls inside string content."""
    state = MaskingState()
    i = 0
    while i < char_index and i < len(line):
        next_ch = line[i + 1] if i + 1 < len(line) else ""
        state, width = advance(state, line[i], next_ch)
        i += width
    return state.inside_string


def has_question_mark_outside_string(line: str) -> bool:
    """Return True if *line* has at least one ``?`` in live code."""
    mask = string_literal_mask(line)
    return any(ch == "?" and not mask[i] for i, ch in enumerate(line))


# ------------------------------------------------------------------
# Comments
# ------------------------------------------------------------------


def strip_comments(line: str) -> str:
    """Remove ``// ...`` tails and inline ``/* ... */`` blocks."""
    return _COMMENT_RE.sub("", line)


def comment_spans(line: str) -> list[tuple[int, int]]:
    """Return ``[start, end)`` spans of comments that start outside strings."""
    mask = string_literal_mask(line)
    spans: list[tuple[int, int]] = []
    i = 0
    while i < len(line) - 1:
        if mask[i]:
            i += 1
            continue
        pair = line[i : i + 2]
        if pair == "//":
            spans.append((i, len(line)))
            break
        if pair == "/*":
            close = line.find("*/", i + 2)
            end = len(line) if close == -1 else close + 2
            spans.append((i, end))
            i = end
            continue
        i += 1
    return spans


def is_inside_comment(line: str, index: int) -> bool:
    return any(start <= index < end for start, end in comment_spans(line))


def is_comment_line(line: str) -> bool:
    """True for lines that are entirely a comment or a block-comment body."""
    stripped = line.strip()
    return stripped.startswith(("//", "/*", "*"))


# ------------------------------------------------------------------
# Token search
# ------------------------------------------------------------------


def has_logical_operator(line: str) -> bool:
    return _LOGICAL_OP_RE.search(line) is not None


def find_code_tokens(line: str, token: str, start: int = 0, end: int | None = None) -> list[int]:
    """Return indices of *token* in live code (not in strings or comments).

    Occurrences are found left to right without overlap, so ``a && b && c``
    yields two positions.
    """
    limit = len(line) if end is None else min(end, len(line))
    mask = string_literal_mask(line)
    spans = comment_spans(line)
    positions: list[int] = []
    index = line.find(token, start)
    while index != -1 and index + len(token) <= limit:
        in_comment = any(s <= index < e for s, e in spans)
        if not mask[index] and not in_comment:
            positions.append(index)
        index = line.find(token, index + len(token))
    return positions
