"""Line-oriented decision-point extraction pipeline.

Runs every construct collector over each code line of a source file,
attributes findings to their owning function, and collapses accidental
duplicates.  No syntax tree is built: the collectors lean on the literal
masking scanner and the ternary matcher instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from decision_scan.analyzer.attribution import AttributionContext, get_innermost_function
from decision_scan.analyzer.base_analyzer import (
    REPEATABLE_TYPES,
    BaseDecisionPointParser,
    DecisionPoint,
)
from decision_scan.analyzer.control_flow import classify_line, parse_control_flow
from decision_scan.analyzer.default_parameters import (
    parse_default_parameters,
    parse_destructured_assignments,
)
from decision_scan.analyzer.multi_line_conditions import parse_multi_line_conditions
from decision_scan.analyzer.operators import (
    detect_jsx_expressions,
    parse_boolean_expressions,
    parse_optional_chaining,
)
from decision_scan.analyzer.string_literals import is_comment_line
from decision_scan.analyzer.ternaries import parse_ternary_operators

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = [".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts"]


def split_lines(source_code: str) -> list[str]:
    """Split on ``\\n`` only, so line numbers match the linter's."""
    return [line.rstrip("\r") for line in source_code.split("\n")]


def _scan_line(ctx: AttributionContext, lines: list[str], index: int) -> list[DecisionPoint]:
    raw_line = lines[index]
    if not raw_line.strip() or is_comment_line(raw_line):
        return []

    line_num = index + 1
    function_line = get_innermost_function(ctx, line_num)
    if function_line is None:
        return []

    flags = classify_line(raw_line)
    points = parse_control_flow(ctx, raw_line, line_num, flags, function_line)
    points.extend(
        parse_ternary_operators(
            lines,
            index,
            function_line,
            resolve=lambda n: get_innermost_function(ctx, n),
        )
    )
    points.extend(parse_optional_chaining(raw_line, line_num, function_line))

    jsx = detect_jsx_expressions(lines, index, flags)
    continuation = parse_multi_line_conditions(ctx, lines, index, flags, jsx, function_line)
    if continuation:
        points.extend(continuation)
    else:
        points.extend(parse_boolean_expressions(ctx, lines, index, flags, jsx, function_line))

    defaults = parse_default_parameters(ctx, lines, index, function_line)
    if not defaults:
        defaults = parse_destructured_assignments(
            lines, index, function_line, ctx.boundaries.get(function_line)
        )
    points.extend(defaults)
    return points


def deduplicate_decision_points(points: Iterable[DecisionPoint]) -> list[DecisionPoint]:
    """Drop repeated ``(line, type, function_line)`` keys, first one wins.

    ``&&``, ``||``, ``ternary`` and ``default parameter`` are exempt: one
    line can hold several independent instances of each.
    """
    seen: set[tuple[int, str, int]] = set()
    result: list[DecisionPoint] = []
    for point in points:
        if point.type in REPEATABLE_TYPES:
            result.append(point)
            continue
        if point.key in seen:
            continue
        seen.add(point.key)
        result.append(point)
    return result


def extract_decision_points(
    source_code: str,
    function_boundaries: Mapping[int, Any],
    functions: list[Any] | None = None,
) -> list[DecisionPoint]:
    """Return every decision point in *source_code*, in line order.

    Parameters:
        source_code: Full text of one source file.
        function_boundaries: ``function_line -> boundary``; values may be
            ``FunctionBoundary`` objects, ``(start, end)`` pairs or dicts.
        functions: Linter function records.  Accepted but not needed.

    Lines outside every boundary produce nothing.
    """
    ctx = AttributionContext.build(function_boundaries)
    lines = split_lines(source_code)

    raw: list[DecisionPoint] = []
    for index in range(len(lines)):
        raw.extend(_scan_line(ctx, lines, index))

    points = [p for p in deduplicate_decision_points(raw) if p.function_line in ctx.boundaries]
    # Stable: points on one line keep their detection order.
    points.sort(key=lambda p: p.line)
    logger.debug(
        "Extracted %d decision points (%d raw) across %d functions",
        len(points),
        len(raw),
        len(ctx.boundaries),
    )
    return points


class HeuristicDecisionPointParser(BaseDecisionPointParser):
    """``BaseDecisionPointParser`` backed by ``extract_decision_points``."""

    def get_supported_extensions(self) -> list[str]:
        return list(SUPPORTED_EXTENSIONS)

    def parse(
        self,
        source_code: str,
        function_boundaries: Mapping[int, Any],
        functions: list[Any] | None = None,
    ) -> list[DecisionPoint]:
        return extract_decision_points(source_code, function_boundaries, functions)


def get_parser() -> BaseDecisionPointParser:
    """Factory picked up by the parser registry."""
    return HeuristicDecisionPointParser()
