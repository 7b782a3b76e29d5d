"""Per-function complexity breakdown built from extracted decision points."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from decision_scan.analyzer.base_analyzer import DecisionPoint

# Display order, matching the order the linter's rule visits constructs.
BREAKDOWN_ORDER: tuple[str, ...] = (
    "if",
    "else if",
    "for",
    "for...of",
    "for...in",
    "while",
    "do...while",
    "switch",
    "case",
    "catch",
    "ternary",
    "&&",
    "||",
    "default parameter",
)

_INLINE_SYMBOLS = {"ternary": "?:"}


@dataclass(slots=True)
class ComplexityBreakdown:
    """Counts per decision-point type for one function, plus the base."""

    function_line: int
    base: int = 1
    counts: dict[str, int] = field(default_factory=lambda: dict.fromkeys(BREAKDOWN_ORDER, 0))
    decision_points: list[DecisionPoint] = field(default_factory=list)

    @property
    def calculated_total(self) -> int:
        return self.base + sum(self.counts.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "functionLine": self.function_line,
            "breakdown": {"base": self.base, **self.counts},
            "calculatedTotal": self.calculated_total,
            "decisionPoints": [dp.to_dict() for dp in self.decision_points],
        }


def calculate_complexity_breakdown(
    function_line: int,
    decision_points: Iterable[DecisionPoint],
    base_complexity: int = 1,
) -> ComplexityBreakdown:
    """Tally the points owned by *function_line*.

    Points of a type outside ``BREAKDOWN_ORDER`` (``??`` and ``?.``) are
    kept in ``decision_points`` but do not add to the total.
    """
    breakdown = ComplexityBreakdown(function_line=function_line, base=base_complexity or 1)
    for point in decision_points:
        if point.function_line != function_line:
            continue
        breakdown.decision_points.append(point)
        if point.type in breakdown.counts:
            breakdown.counts[point.type] += 1
    return breakdown


def _nonzero(breakdown: ComplexityBreakdown) -> list[tuple[str, int]]:
    return [(t, breakdown.counts[t]) for t in BREAKDOWN_ORDER if breakdown.counts.get(t, 0) > 0]


def format_complexity_breakdown(breakdown: ComplexityBreakdown, actual_complexity: int) -> str:
    """``complexity = 4 (1 base + 2 if + 1 &&)``"""
    parts = []
    if breakdown.base > 0:
        parts.append(f"{breakdown.base} base")
    parts.extend(f"{count} {dp_type}" for dp_type, count in _nonzero(breakdown))
    return f"complexity = {actual_complexity} ({' + '.join(parts)})"


def format_complexity_breakdown_inline(breakdown: ComplexityBreakdown) -> str:
    """``1 base +1 if +1 ?: +2 &&`` using the linter's operator symbols."""
    parts = []
    if breakdown.base > 0:
        parts.append(f"{breakdown.base} base")
    parts.extend(
        f"+{count} {_INLINE_SYMBOLS.get(dp_type, dp_type)}" for dp_type, count in _nonzero(breakdown)
    )
    return " ".join(parts)
