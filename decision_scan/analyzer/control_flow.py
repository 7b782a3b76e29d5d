"""Control-flow collectors: conditionals, loops, switch/case and catch.

Each keyword is matched only where it appears in live code.  The
``LineFlags`` produced by ``classify_line`` are also what the operator
collectors use to avoid counting a condition's ``&&``/``||`` twice.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from decision_scan.analyzer.attribution import (
    AttributionContext,
    callbacks_starting_on_line,
    get_function_line_for_control_structure,
)
from decision_scan.analyzer.base_analyzer import DecisionPoint
from decision_scan.analyzer.string_literals import (
    comment_spans,
    find_code_tokens,
    string_literal_mask,
)

_IF_RE = re.compile(r"(?<![.$])\bif\s*\(")
_ELSE_IF_RE = re.compile(r"\belse\s+if\s*\(")
_FOR_RE = re.compile(r"(?<![.$])\bfor\s*(?:await\s*)?\(")
_WHILE_RE = re.compile(r"(?<![.$])\bwhile\s*\(")
_DO_WHILE_TAIL_RE = re.compile(r"^\s*\}\s*while\s*\(")
_DO_RE = re.compile(r"(?<![.$])\bdo\s*(?:\{|$)")
_ELSE_TAIL_RE = re.compile(r"\belse\s+$")
_SWITCH_RE = re.compile(r"(?<![.$])\bswitch\s*\(")
_CASE_RE = re.compile(r"^\s*(?:case\b|default\s*:)")
_CATCH_RE = re.compile(r"(?<![.$])\bcatch\s*(?:\(|\{)")
_FOR_EACH_RE = re.compile(r"^\s*(?:(?:const|let|var)\s+)?.+?\s+(of|in)\s+")

_LOGICAL_TOKENS = ("&&", "||")


@dataclass(frozen=True, slots=True)
class KeywordMatch:
    """A keyword found in live code with the span of its parenthesised part."""

    start: int
    paren_open: int | None = None
    paren_close: int | None = None

    @property
    def has_condition(self) -> bool:
        return self.paren_open is not None


@dataclass(frozen=True, slots=True)
class LineFlags:
    """Which control constructs open on a line."""

    if_match: KeywordMatch | None = None
    else_if_match: KeywordMatch | None = None
    for_match: KeywordMatch | None = None
    for_kind: str = "for"
    while_match: KeywordMatch | None = None
    do_while_tail: KeywordMatch | None = None
    do_match: KeywordMatch | None = None
    switch_match: KeywordMatch | None = None
    case_match: KeywordMatch | None = None
    catch_match: KeywordMatch | None = None

    @property
    def is_if(self) -> bool:
        return self.if_match is not None

    @property
    def is_else_if(self) -> bool:
        return self.else_if_match is not None

    @property
    def is_for(self) -> bool:
        return self.for_match is not None

    @property
    def is_while(self) -> bool:
        return self.while_match is not None or self.do_while_tail is not None

    @property
    def is_switch(self) -> bool:
        return self.switch_match is not None

    @property
    def is_catch(self) -> bool:
        return self.catch_match is not None

    @property
    def is_control(self) -> bool:
        """True when the line's ``&&``/``||`` belong to a control condition."""
        return (
            self.is_if
            or self.is_else_if
            or self.is_for
            or self.is_while
            or self.is_switch
            or self.is_catch
        )


# ------------------------------------------------------------------
# Keyword matching
# ------------------------------------------------------------------


def _is_code(mask: list[bool], spans: list[tuple[int, int]], index: int) -> bool:
    return not mask[index] and not any(s <= index < e for s, e in spans)


def find_closing_paren(line: str, open_index: int, mask: list[bool] | None = None) -> int | None:
    """Index of the ``)`` balancing ``line[open_index]``, ignoring strings."""
    mask = mask if mask is not None else string_literal_mask(line)
    depth = 0
    for i in range(open_index, len(line)):
        if mask[i]:
            continue
        if line[i] == "(":
            depth += 1
        elif line[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    return None


def _keyword(
    pattern: re.Pattern[str],
    line: str,
    mask: list[bool],
    spans: list[tuple[int, int]],
    skip_else: bool = False,
) -> KeywordMatch | None:
    """First live-code match of *pattern*, with its paren span when it has one."""
    for match in pattern.finditer(line):
        if not _is_code(mask, spans, match.start()):
            continue
        if skip_else and _ELSE_TAIL_RE.search(line, 0, match.start()):
            continue
        if not match.group().endswith("("):
            return KeywordMatch(match.start())
        paren_open = match.end() - 1
        return KeywordMatch(match.start(), paren_open, find_closing_paren(line, paren_open, mask))
    return None


def classify_for_loop(line: str, match: KeywordMatch) -> str:
    """``for``, ``for...of`` or ``for...in`` from the loop header."""
    if not match.has_condition:
        return "for"
    header = line[match.paren_open + 1 : match.paren_close]
    if ";" in header:
        return "for"
    found = _FOR_EACH_RE.match(header)
    if found is None:
        return "for"
    return "for...of" if found.group(1) == "of" else "for...in"


def classify_line(line: str) -> LineFlags:
    mask = string_literal_mask(line)
    spans = comment_spans(line)

    else_if = _keyword(_ELSE_IF_RE, line, mask, spans)
    plain_if = _keyword(_IF_RE, line, mask, spans, skip_else=True)

    do_tail = None
    if _DO_WHILE_TAIL_RE.match(line):
        do_tail = _keyword(_WHILE_RE, line, mask, spans)
    loop_while = None if do_tail is not None else _keyword(_WHILE_RE, line, mask, spans)

    for_match = _keyword(_FOR_RE, line, mask, spans)
    return LineFlags(
        if_match=plain_if,
        else_if_match=else_if,
        for_match=for_match,
        for_kind=classify_for_loop(line, for_match) if for_match else "for",
        while_match=loop_while,
        do_while_tail=do_tail,
        do_match=_keyword(_DO_RE, line, mask, spans),
        switch_match=_keyword(_SWITCH_RE, line, mask, spans),
        case_match=KeywordMatch(0) if _CASE_RE.match(line) else None,
        catch_match=_keyword(_CATCH_RE, line, mask, spans),
    )


# ------------------------------------------------------------------
# Collectors
# ------------------------------------------------------------------


def _condition_operators(line: str, match: KeywordMatch) -> list[tuple[int, str]]:
    """``(index, token)`` for each ``&&``/``||`` inside the keyword's parens.

    An unbalanced condition (continued on the next line) is read to the end
    of the line.
    """
    if not match.has_condition:
        return []
    found = [
        (index, token)
        for token in _LOGICAL_TOKENS
        for index in find_code_tokens(line, token, match.paren_open, match.paren_close)
    ]
    return sorted(found)


def _emit_operators(
    operators: list[tuple[int, str]], line_num: int, function_line: int
) -> list[DecisionPoint]:
    return [DecisionPoint.of(line_num, token, function_line) for _, token in operators]


def parse_if_statement(
    ctx: AttributionContext, line: str, line_num: int, match: KeywordMatch, default_function: int
) -> list[DecisionPoint]:
    """``if`` plus its condition operators.

    Operators after an arrow inside the condition (``if (xs.some(x => a && b))``)
    belong to the callback opened on this line.
    """
    owner = get_function_line_for_control_structure(ctx, line_num) or default_function
    points = [DecisionPoint.of(line_num, "if", owner)]

    operators = _condition_operators(line, match)
    arrows = find_code_tokens(line, "=>", match.paren_open or 0, match.paren_close)
    callback = callbacks_starting_on_line(ctx, line_num, owner) if arrows else None
    for index, token in operators:
        if callback is not None and index > arrows[0]:
            points.append(DecisionPoint.of(line_num, token, callback.function_line))
        else:
            points.append(DecisionPoint.of(line_num, token, owner))
    return points


def parse_control_flow(
    ctx: AttributionContext,
    line: str,
    line_num: int,
    flags: LineFlags,
    default_function: int,
) -> list[DecisionPoint]:
    """Emit every control-flow decision point opened on *line*."""
    points: list[DecisionPoint] = []

    if flags.if_match is not None:
        points.extend(parse_if_statement(ctx, line, line_num, flags.if_match, default_function))

    if flags.else_if_match is not None:
        points.append(DecisionPoint.of(line_num, "else if", default_function))
        points.extend(
            _emit_operators(_condition_operators(line, flags.else_if_match), line_num, default_function)
        )

    if flags.for_match is not None:
        owner = get_function_line_for_control_structure(ctx, line_num) or default_function
        points.append(DecisionPoint.of(line_num, flags.for_kind, owner))
        if flags.for_kind == "for":
            points.extend(_emit_operators(_condition_operators(line, flags.for_match), line_num, owner))

    if flags.while_match is not None:
        owner = get_function_line_for_control_structure(ctx, line_num) or default_function
        points.append(DecisionPoint.of(line_num, "while", owner))
        points.extend(_emit_operators(_condition_operators(line, flags.while_match), line_num, owner))

    if flags.do_match is not None:
        points.append(DecisionPoint.of(line_num, "do...while", default_function))
    if flags.do_while_tail is not None:
        points.extend(
            _emit_operators(_condition_operators(line, flags.do_while_tail), line_num, default_function)
        )

    if flags.switch_match is not None:
        owner = get_function_line_for_control_structure(ctx, line_num) or default_function
        points.append(DecisionPoint.of(line_num, "switch", owner))
        points.extend(_emit_operators(_condition_operators(line, flags.switch_match), line_num, owner))

    if flags.case_match is not None:
        points.append(DecisionPoint.of(line_num, "case", default_function))

    if flags.catch_match is not None:
        points.append(DecisionPoint.of(line_num, "catch", default_function))
        points.extend(
            _emit_operators(_condition_operators(line, flags.catch_match), line_num, default_function)
        )

    return points
