"""Default-parameter detection.

``function f(a, b = 2)`` and ``({ x = 1 }) => ...`` each add a branch under
the classic complexity variant, as do defaults in a destructuring
assignment at the top of a function body.  Plain assignments that merely
contain ``=`` must not count, so most of this module is about deciding
whether a line is inside a parameter list at all.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, replace

from decision_scan.analyzer.attribution import AttributionContext
from decision_scan.analyzer.base_analyzer import DecisionPoint, FunctionBoundary
from decision_scan.analyzer.string_literals import strip_comments

# identifier = value, where value is a literal or a bare expression token.
DEFAULT_PARAM_RE = re.compile(
    r"""\b([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=\s*"""
    r"""(?:"[^"]*"|'[^']*'|`[^`]*`|\b(?:true|false|null|undefined)\b|\d+(?:\.\d+)?|[^=,)\s}]+)"""
)
# Same shape for destructuring, rejecting ==, <= and >= comparisons.
DESTRUCTURED_DEFAULT_RE = re.compile(
    r"""\b([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=\s*(?![=<>])"""
    r"""(?:"[^"]*"|'[^']*'|`[^`]*`|\b(?:true|false|null|undefined)\b|\d+(?:\.\d+)?|[^=,}\s]+)"""
)

# Destructuring defaults only count this close to the function start.
DESTRUCTURING_WINDOW = 15
PARAM_SCAN_LINES = 20
ARROW_LOOKAHEAD_LINES = 5
JSX_LOOKBACK_LINES = 10
DESTRUCTURING_LOOKBACK_LINES = 10

_VARIABLE_ASSIGNMENT_RE = re.compile(r"^\s*(const|let|var)\s+\w+\s*=")
_DESTRUCTURING_START_RE = re.compile(r"^\s*(const|let|var)\s+\{")
_PLAIN_DECLARATION_RE = re.compile(r"^\s*(const|let|var)\s+[a-zA-Z_$][a-zA-Z0-9_$]*\s*=\s*(?!\{)")
_SIGNATURE_PATTERNS = (
    re.compile(r"^\s*(?:export\s+)?(?:function|const|let|var)\s+\w+\s*[=(]"),
    re.compile(r"^\s*\([^)]*"),
    re.compile(r"=>\s*\([^)]*"),
    re.compile(r"\.\w+\s*\([^)]*"),
    re.compile(r"\([^)]*\{[^}]*\}"),
)
_JSX_EXPRESSION_RE = re.compile(r"\{[^}]*\}")
_JSX_TAG_RE = re.compile(r"<[A-Za-z]|</[A-Za-z]|/>")
_JSX_CLOSING_RE = re.compile(r"/>|</[A-Za-z]")
_JSX_OPENING_RE = re.compile(r"<[A-Za-z]")
_JSX_ATTRIBUTE_RE = re.compile(r"^\s*\w+\s*=\s*[\"'{]|\s+\w+\s*=\s*[\"'{]")
_NON_JSX_STATEMENT_RE = re.compile(r"^\s*(function|const|let|var|return|if|for|while)\s")
_METHOD_CALL_RE = re.compile(r"\w+\.\w+\s*\(")
_DEPENDENCY_ARRAY_RE = re.compile(r"}\s*,\s*\[")


# ------------------------------------------------------------------
# Line classification
# ------------------------------------------------------------------


def is_type_definition(line: str) -> bool:
    return re.match(r"^\s*(type|interface)\s+\w+", line) is not None


def is_const_let_var_assignment(line: str) -> bool:
    return (
        re.match(r"^\s*(const|let|var)\s+\w+\s*=\s*[^(]", line) is not None
        and re.match(r"^\s*(const|let|var)\s+\w+\s*=\s*\(", line) is None
    )


def is_arrow_function_assignment(line: str) -> bool:
    return (
        re.match(r"^\s*(const|let|var)\s+\w+\s*=\s*\([^)]*\)\s*=>", line) is not None
        or re.match(r"^\s*(const|let|var)\s+\w+\s*=\s*[^=]+\s*=>", line) is not None
    )


def is_regular_assignment(line: str) -> bool:
    """``x = y`` outside any parameter list or object literal."""
    return (
        re.match(r"^\s*\w+\s*=\s*\w+", line) is not None
        and re.search(r"\([^)]*=", line) is None
        and re.search(r",\s*$", line.strip()) is None
        and re.search(r"[{}]", line) is None
    )


def is_method_call(line: str) -> bool:
    return _METHOD_CALL_RE.search(line) is not None and "=>" not in line


def is_property_assignment(line: str) -> bool:
    return re.match(r"^\s*\w+(\.\w+)+\s*=", line) is not None


def is_return_statement(line: str) -> bool:
    return re.match(r"^\s*return\s+", line) is not None


def is_dependency_array(line: str, index: int, lines: Sequence[str]) -> bool:
    """``}, [deps]`` closing a hook callback, on one line or split over two."""
    if _DEPENDENCY_ARRAY_RE.search(line):
        return True
    if index > 0:
        prev_line = strip_comments(lines[index - 1])
        return re.search(r"}\s*,\s*$", prev_line) is not None and re.match(r"^\s*\[", line) is not None
    return False


def has_function_signature(line: str, is_arrow_param: bool) -> bool:
    if any(pattern.search(line) for pattern in _SIGNATURE_PATTERNS):
        return True
    return is_arrow_param and "(" in line


def _has_jsx_in_previous_lines(index: int, lines: Sequence[str]) -> bool:
    for i in range(index - 1, max(0, index - JSX_LOOKBACK_LINES) - 1, -1):
        prev_line = strip_comments(lines[i])
        if _JSX_CLOSING_RE.search(prev_line):
            return False
        if _JSX_OPENING_RE.search(prev_line):
            return True
        if _NON_JSX_STATEMENT_RE.match(prev_line):
            return False
    return False


def is_jsx_attribute_line(line: str, index: int, lines: Sequence[str]) -> bool:
    """``prop="value"`` / ``prop={expr}`` inside a JSX tag."""
    if not _JSX_ATTRIBUTE_RE.search(line):
        return False
    if _JSX_EXPRESSION_RE.search(line) or _JSX_TAG_RE.search(line):
        return True
    return _has_jsx_in_previous_lines(index, lines)


def has_exclusion_condition(line: str, index: int, lines: Sequence[str]) -> bool:
    return (
        is_type_definition(line)
        or is_const_let_var_assignment(line)
        or is_arrow_function_assignment(line)
        or is_return_statement(line)
        or is_method_call(line)
        or is_regular_assignment(line)
        or is_property_assignment(line)
        or _DEPENDENCY_ARRAY_RE.search(line) is not None
        or is_jsx_attribute_line(line, index, lines)
    )


def is_valid_arrow_default_context(line: str, index: int, lines: Sequence[str]) -> bool:
    """Like ``has_exclusion_condition`` but arrow assignments are allowed."""
    return not (
        is_type_definition(line)
        or is_return_statement(line)
        or is_method_call(line)
        or is_regular_assignment(line)
        or is_property_assignment(line)
        or _DEPENDENCY_ARRAY_RE.search(line) is not None
        or is_jsx_attribute_line(line, index, lines)
    )


# ------------------------------------------------------------------
# Arrow function parameter lists
# ------------------------------------------------------------------


def _balanced_span(text: str, open_index: int, opener: str, closer: str) -> int:
    """Index just past the closer that balances ``text[open_index]``, or -1."""
    depth = 1
    for i in range(open_index + 1, len(text)):
        if text[i] == opener:
            depth += 1
        elif text[i] == closer:
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


def extract_arrow_param_span(before_arrow: str, is_variable_assignment: bool = False) -> tuple[int, int] | None:
    """Return the ``[start, end)`` span of an arrow's parameter text.

    ``(a, b = 1) =>`` yields the text inside the last opening paren,
    ``{ a = 1 } =>`` the destructuring braces, and a bare ``x =>`` the whole
    prefix (which is how the tail of a multi-line parameter list is seen).
    In ``const f = x =>`` the bare parameter follows the declaration.
    """
    open_index = before_arrow.rfind("(")
    if open_index >= 0:
        end = _balanced_span(before_arrow, open_index, "(", ")")
        if end < 0 or end - 1 <= open_index + 1:
            return None
        return open_index + 1, end - 1

    stripped = before_arrow.strip()
    if stripped.startswith("{"):
        offset = before_arrow.index("{")
        end = _balanced_span(before_arrow, offset, "{", "}")
        return (offset, end) if end > 0 else None

    if is_variable_assignment:
        match = _VARIABLE_ASSIGNMENT_RE.match(before_arrow)
        if match and match.end() < len(before_arrow):
            return match.end(), len(before_arrow)
        return None
    return (0, len(before_arrow)) if before_arrow else None


def find_callback_function(
    ctx: AttributionContext, line_num: int, function_line: int
) -> tuple[int, FunctionBoundary | None]:
    """Smallest boundary starting on *line_num*; the arrow defined there."""
    callbacks = [
        (fl, b) for fl, b in ctx.boundaries.items() if b.start == line_num
    ]
    if not callbacks:
        return function_line, ctx.boundaries.get(function_line)
    best = callbacks[0]
    for fl, b in callbacks[1:]:
        if b.size < best[1].size or (b.size == best[1].size and b.start > best[1].start):
            best = (fl, b)
    return best


def parse_arrow_default_parameters(
    line: str, index: int, lines: Sequence[str], function_line: int
) -> list[DecisionPoint]:
    arrow_index = line.find("=>")
    if arrow_index <= 0:
        return []
    before_arrow = line[:arrow_index]
    span = extract_arrow_param_span(before_arrow, _VARIABLE_ASSIGNMENT_RE.match(line) is not None)
    if span is None:
        return []
    matches = DEFAULT_PARAM_RE.findall(before_arrow[span[0] : span[1]])
    if not matches or not is_valid_arrow_default_context(line, index, lines):
        return []
    return [DecisionPoint.of(index + 1, "default parameter", function_line) for _ in matches]


# ------------------------------------------------------------------
# Where does the parameter list end?
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParamScanState:
    """Bracket tracking while walking a signature looking for its ``)``."""

    paren_depth: int = 0
    brace_depth: int = 0
    found_param_start: bool = False
    found_closing_paren: bool = False


def find_arrow_on_subsequent_lines(
    index: int, lines: Sequence[str], max_lines: int = ARROW_LOOKAHEAD_LINES
) -> int | None:
    """Exclusive end line when a ``=>`` follows within *max_lines* lines."""
    for i in range(index + 1, min(index + max_lines + 1, len(lines))):
        if "=>" in strip_comments(lines[i]):
            return i + 2
    return None


def _arrow_param_end(check_line: str, line_num: int, check_line_num: int, line: str) -> int | None:
    if "=>" not in check_line:
        return None
    if line_num == check_line_num:
        if "=>" not in line or line.find("=") < line.find("=>"):
            return check_line_num + 1
        return check_line_num
    if line_num < check_line_num:
        return check_line_num + 1
    return None


def track_parameter_list(
    check_line: str, check_line_num: int, boundary_start: int, state: ParamScanState
) -> int | ParamScanState:
    """Walk one signature line; return the end line once the list closes."""
    for ch in check_line:
        if ch == "(":
            state = replace(state, paren_depth=state.paren_depth + 1, found_param_start=True)
        elif ch == ")":
            depth = state.paren_depth - 1
            state = replace(
                state,
                paren_depth=depth,
                found_closing_paren=depth == 0 and state.found_param_start,
            )
        elif ch == "{":
            if state.found_closing_paren and state.paren_depth == 0 and "function" in check_line:
                return check_line_num + 1 if check_line_num == boundary_start else check_line_num
            if not state.found_closing_paren or state.paren_depth > 0:
                state = replace(state, brace_depth=state.brace_depth + 1)
        elif ch == "}":
            state = replace(state, brace_depth=state.brace_depth - 1)

        if state.found_closing_paren and state.paren_depth == 0 and state.brace_depth == 0:
            return check_line_num
    return state


def find_parameter_list_end(line_num: int, boundary_start: int, lines: Sequence[str], line: str) -> int:
    """Exclusive line number where the signature of the function ends."""
    state = ParamScanState()
    for i in range(max(boundary_start - 1, 0), min(boundary_start + PARAM_SCAN_LINES, len(lines))):
        check_line = strip_comments(lines[i])
        arrow_end = _arrow_param_end(check_line, line_num, i + 1, line)
        if arrow_end is not None:
            return arrow_end
        result = track_parameter_list(check_line, i + 1, boundary_start, state)
        if isinstance(result, int):
            return result
        state = result

    if line_num == boundary_start:
        # Either the body opens on this line or nothing closed at all.
        return boundary_start + 1
    return boundary_start


def apply_parameter_list_fallbacks(
    param_list_end: int,
    boundary_start: int,
    line_num: int,
    index: int,
    lines: Sequence[str],
    line: str,
    has_signature: bool,
) -> int:
    """Widen a parameter list that the bracket walk closed too early."""
    if param_list_end != boundary_start or line_num < boundary_start:
        return param_list_end
    if DEFAULT_PARAM_RE.search(line) is None:
        return param_list_end

    if line_num == boundary_start and has_signature:
        return boundary_start + 1
    arrow_end = find_arrow_on_subsequent_lines(index, lines)
    if arrow_end is not None:
        return arrow_end
    return param_list_end


def detect_multi_line_arrow_parameter(line: str, index: int, lines: Sequence[str]) -> bool:
    """``(a = 1,`` with the ``=>`` on the next line."""
    arrow_next = index + 1 < len(lines) and "=>" in strip_comments(lines[index + 1])
    return (
        DEFAULT_PARAM_RE.search(line) is not None
        and "(" in line
        and arrow_next
        and "=>" not in line
    )


def _is_plain_declaration_without_function(line: str) -> bool:
    """``const x = cond ? 1 : 2`` on a boundary start line is not a signature."""
    return is_const_let_var_assignment(line) and "=>" not in line and "function" not in line


def _match_signature_defaults(line: str) -> list[str]:
    arrow_index = line.find("=>")
    if arrow_index <= 0:
        return DEFAULT_PARAM_RE.findall(line)
    before_arrow = line[:arrow_index]
    if _VARIABLE_ASSIGNMENT_RE.match(line):
        open_index = before_arrow.rfind("(")
        if open_index < 0:
            return []
        end = _balanced_span(before_arrow, open_index, "(", ")")
        if end - 1 <= open_index + 1:
            return []
        return DEFAULT_PARAM_RE.findall(before_arrow[open_index + 1 : end - 1])
    return DEFAULT_PARAM_RE.findall(before_arrow)


def parse_signature_default_parameters(
    line: str,
    index: int,
    lines: Sequence[str],
    function_line: int,
    boundary: FunctionBoundary,
) -> list[DecisionPoint]:
    line_num = index + 1
    is_arrow_param = line.find("=>") > 0
    has_signature = has_function_signature(line, is_arrow_param)
    param_list_end = find_parameter_list_end(line_num, boundary.start, lines, line)
    param_list_end = apply_parameter_list_fallbacks(
        param_list_end, boundary.start, line_num, index, lines, line, has_signature
    )

    if is_dependency_array(line, index, lines):
        return []
    in_param_list = boundary.start <= line_num < param_list_end
    on_signature = (
        has_signature
        and line_num == boundary.start
        and not _is_plain_declaration_without_function(line)
    )
    multi_line_arrow = detect_multi_line_arrow_parameter(line, index, lines)
    if not (in_param_list or is_arrow_param or on_signature or multi_line_arrow):
        return []

    matches = _match_signature_defaults(line)
    if not matches:
        return []
    if not in_param_list and not on_signature and is_jsx_attribute_line(line, index, lines):
        return []
    if not on_signature and has_exclusion_condition(line, index, lines):
        return []
    return [DecisionPoint.of(line_num, "default parameter", function_line) for _ in matches]


def parse_default_parameters(
    ctx: AttributionContext,
    lines: Sequence[str],
    index: int,
    function_line: int,
) -> list[DecisionPoint]:
    """Default parameters on ``lines[index]`` (comment-stripped).

    Arrow parameter lists are attributed to the callback that starts on
    the line.  The signature scan only runs when the arrow scan found none.
    """
    line = strip_comments(lines[index])
    line_num = index + 1
    boundary = ctx.boundaries.get(function_line)

    if line.find("=>") > 0:
        owner, boundary = find_callback_function(ctx, line_num, function_line)
        points = parse_arrow_default_parameters(line, index, lines, owner)
        if points:
            return points

    if boundary is None:
        return []
    return parse_signature_default_parameters(line, index, lines, function_line, boundary)


# ------------------------------------------------------------------
# Destructuring
# ------------------------------------------------------------------


def is_in_destructured_assignment(
    line: str, index: int, lines: Sequence[str], boundary: FunctionBoundary
) -> bool:
    """True when *line* sits inside ``const { ... } = obj``."""
    if _DESTRUCTURING_START_RE.match(line):
        return True
    line_num = index + 1
    for look_back in range(1, DESTRUCTURING_LOOKBACK_LINES + 1):
        if index - look_back < 0:
            break
        prev_line = strip_comments(lines[index - look_back]).strip()
        if _DESTRUCTURING_START_RE.match(prev_line):
            return True
        if "}" in prev_line and "=" in prev_line:
            break
        if prev_line.endswith(";"):
            break
        if line_num - look_back < boundary.start:
            break
    return False


def parse_destructured_assignments(
    lines: Sequence[str],
    index: int,
    function_line: int,
    boundary: FunctionBoundary | None,
) -> list[DecisionPoint]:
    line = strip_comments(lines[index])
    line_num = index + 1
    if boundary is None or not boundary.start <= line_num <= boundary.start + DESTRUCTURING_WINDOW:
        return []
    matches = DESTRUCTURED_DEFAULT_RE.findall(line)
    if not matches:
        return []
    if _PLAIN_DECLARATION_RE.match(line):
        return []
    if not is_in_destructured_assignment(line, index, lines, boundary):
        return []
    return [DecisionPoint.of(line_num, "default parameter", function_line) for _ in matches]
