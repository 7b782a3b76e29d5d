"""Abstract parser interface and core data models for decision-point extraction.

Every decision-point parser (the line-oriented heuristic extractor, or an
AST-based cross-checker) implements ``BaseDecisionPointParser`` and emits
the shared ``DecisionPoint`` records defined here.  The mismatch analyzer
consumes those records regardless of which parser produced them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


# ------------------------------------------------------------------
# Decision point vocabulary
# ------------------------------------------------------------------

# type tag -> human-readable name
DECISION_POINT_NAMES: dict[str, str] = {
    "if": "if statement",
    "else if": "else if statement",
    "for": "for loop",
    "for...of": "for...of loop",
    "for...in": "for...in loop",
    "while": "while loop",
    "do...while": "do...while loop",
    "switch": "switch statement",
    "case": "case clause",
    "catch": "catch clause",
    "ternary": "ternary operator",
    "??": "nullish coalescing",
    "?.": "optional chaining",
    "&&": "logical AND",
    "||": "logical OR",
    "default parameter": "default parameter",
}

# Types that may legitimately repeat on one line for the same function.
REPEATABLE_TYPES = frozenset({"&&", "||", "ternary", "default parameter"})


# ------------------------------------------------------------------
# Data models
# ------------------------------------------------------------------


@dataclass(slots=True)
class DecisionPoint:
    """A single construct counted toward cyclomatic complexity.

    ``function_line`` is the key of the owning function in the boundary
    map, not necessarily the line the construct appears on.
    """

    line: int
    type: str
    name: str
    function_line: int

    def __post_init__(self) -> None:
        if self.type not in DECISION_POINT_NAMES:
            raise ValueError(
                f"Invalid decision point type={self.type!r}. "
                f"Expected one of {sorted(DECISION_POINT_NAMES)}"
            )

    @classmethod
    def of(cls, line: int, dp_type: str, function_line: int) -> DecisionPoint:
        """Build a point using the canonical name for *dp_type*."""
        return cls(
            line=line,
            type=dp_type,
            name=DECISION_POINT_NAMES.get(dp_type, dp_type),
            function_line=function_line,
        )

    @property
    def key(self) -> tuple[int, str, int]:
        return (self.line, self.type, self.function_line)

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase shape used in reports and API responses."""
        return {
            "line": self.line,
            "type": self.type,
            "name": self.name,
            "functionLine": self.function_line,
        }


@dataclass(frozen=True, slots=True)
class FunctionBoundary:
    """Inclusive 1-based line range owned by one function."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(
                f"Invalid boundary: end={self.end} is before start={self.start}"
            )

    @property
    def size(self) -> int:
        return self.end - self.start

    def contains(self, line: int) -> bool:
        return self.start <= line <= self.end

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True, slots=True)
class ContainingFunction:
    """A function whose boundary contains a given line."""

    function_line: int
    boundary: FunctionBoundary


BoundaryMap = dict[int, FunctionBoundary]


def normalize_boundaries(boundaries: Mapping[int, Any]) -> BoundaryMap:
    """Coerce a boundary mapping into ``{function_line: FunctionBoundary}``.

    Accepts ``FunctionBoundary`` values, ``(start, end)`` pairs, or
    ``{"start": ..., "end": ...}`` dicts so that callers can pass JSON
    payloads straight through.
    """
    result: BoundaryMap = {}
    for function_line, value in boundaries.items():
        if isinstance(value, FunctionBoundary):
            boundary = value
        elif isinstance(value, Mapping):
            boundary = FunctionBoundary(int(value["start"]), int(value["end"]))
        else:
            start, end = value
            boundary = FunctionBoundary(int(start), int(end))
        result[int(function_line)] = boundary
    return result


# ------------------------------------------------------------------
# Abstract parser
# ------------------------------------------------------------------


class BaseDecisionPointParser(ABC):
    """Interface that every decision-point parser must implement.

    The mismatch analyzer calls these methods in order:

    1. ``get_supported_extensions()`` -- used by the registry for routing.
    2. ``parse()``                    -- extract points for one source file.
    """

    @abstractmethod
    def get_supported_extensions(self) -> list[str]:
        """Return file extensions this parser handles (e.g. ``['.ts']``)."""
        ...

    @abstractmethod
    def parse(
        self,
        source_code: str,
        function_boundaries: Mapping[int, Any],
        functions: list[Any] | None = None,
    ) -> list[DecisionPoint]:
        """Return every decision point in *source_code*.

        Parameters:
            source_code: Full text content of the file.
            function_boundaries: ``function_line -> boundary`` for the file.
            functions: Optional function records reported by the linter.
        """
        ...
