"""Function attribution: decide which function owns a given source line.

Boundaries nest (callbacks inside components inside modules), so "the
function containing line N" is ambiguous.  The linter attributes a branch to
the innermost function that contains it, with two wrinkles this module
reproduces:

* a control structure (``if``/``for``/``while``/``switch``) whose line also
  opens a callback belongs to the enclosing function, not the callback;
* once a nested callback has closed, following lines fall back to its parent.

Tie-breaks between equally sized boundaries prefer the later start line.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from decision_scan.analyzer.base_analyzer import (
    BoundaryMap,
    ContainingFunction,
    normalize_boundaries,
)

LineIndex = dict[int, list[ContainingFunction]]


def build_line_index(boundaries: BoundaryMap) -> LineIndex:
    """Map every line to the functions whose boundary contains it."""
    index: LineIndex = {}
    for function_line, boundary in boundaries.items():
        entry = ContainingFunction(function_line, boundary)
        for line_num in range(boundary.start, boundary.end + 1):
            index.setdefault(line_num, []).append(entry)
    return index


@dataclass(frozen=True, slots=True)
class AttributionContext:
    """Per-file attribution inputs: the boundary map and its line index."""

    boundaries: BoundaryMap
    line_index: LineIndex = field(default_factory=dict)

    @classmethod
    def build(cls, boundaries: Mapping[int, Any]) -> AttributionContext:
        normalized = normalize_boundaries(boundaries)
        return cls(boundaries=normalized, line_index=build_line_index(normalized))

    def containing(self, line_num: int) -> list[ContainingFunction]:
        return self.line_index.get(line_num, [])


# ------------------------------------------------------------------
# Selection helpers
# ------------------------------------------------------------------


def valid_functions(
    functions: Iterable[ContainingFunction], line_num: int
) -> list[ContainingFunction]:
    return [f for f in functions if f.boundary.contains(line_num)]


def find_smallest_boundary_function(
    functions: Sequence[ContainingFunction],
) -> ContainingFunction:
    """Smallest boundary wins; on equal size the later start wins."""
    best = functions[0]
    for candidate in functions[1:]:
        if candidate.boundary.size < best.boundary.size:
            best = candidate
        elif (
            candidate.boundary.size == best.boundary.size
            and candidate.boundary.start > best.boundary.start
        ):
            best = candidate
    return best


def find_immediate_parent(
    sorted_functions: Sequence[ContainingFunction], line_num: int
) -> ContainingFunction | None:
    """Smallest function that started strictly before *line_num*."""
    parents = [
        f
        for f in sorted_functions
        if f.boundary.start < line_num and f.boundary.end >= line_num
    ]
    if not parents:
        return None
    parents.sort(key=lambda f: (f.boundary.size, -f.boundary.start))
    return parents[0]


def _single_line_on(
    functions: Iterable[ContainingFunction], line_num: int
) -> list[ContainingFunction]:
    return [
        f for f in functions if f.boundary.start == line_num and f.boundary.end == line_num
    ]


def _nested_in(
    functions: Iterable[ContainingFunction], parent: ContainingFunction
) -> list[ContainingFunction]:
    return [f for f in functions if f.boundary.start > parent.boundary.start]


def _simple_case(
    containing: Sequence[ContainingFunction], valid: Sequence[ContainingFunction]
) -> int | None:
    if not containing:
        return None
    if len(containing) == 1:
        return containing[0].function_line
    if not valid:
        return containing[0].function_line
    if len(valid) == 1:
        return valid[0].function_line
    return None


def _resolve_nested(
    sorted_functions: Sequence[ContainingFunction],
    parent: ContainingFunction,
    line_num: int,
) -> int | None:
    nested = _nested_in(sorted_functions, parent)
    active = [f for f in nested if f.boundary.start < line_num < f.boundary.end]
    ending = [
        f for f in nested if f.boundary.end <= line_num and f.boundary.start <= line_num
    ]

    if ending and not active:
        single_line = _single_line_on(
            [f for f in ending if f.boundary.end == line_num], line_num
        )
        if single_line:
            return find_smallest_boundary_function(single_line).function_line
        return parent.function_line

    if active:
        return find_smallest_boundary_function(active).function_line
    return None


# ------------------------------------------------------------------
# Public resolvers
# ------------------------------------------------------------------


def get_innermost_function(ctx: AttributionContext, line_num: int) -> int | None:
    """Return the owning ``function_line`` for *line_num*, or ``None``."""
    containing = ctx.containing(line_num)
    valid = valid_functions(containing, line_num)

    simple = _simple_case(containing, valid)
    if simple is not None or not containing:
        return simple

    sorted_functions = sorted(valid, key=lambda f: f.boundary.start)
    parent = find_immediate_parent(sorted_functions, line_num) or sorted_functions[0]

    starting_here = [
        f for f in _nested_in(sorted_functions, parent) if f.boundary.start == line_num
    ]
    single_line = _single_line_on(starting_here, line_num)
    if single_line:
        return find_smallest_boundary_function(single_line).function_line
    if starting_here:
        return parent.function_line

    nested = _resolve_nested(sorted_functions, parent, line_num)
    if nested is not None:
        return nested

    starting_on_line = [f for f in valid if f.boundary.start == line_num]
    if starting_on_line:
        return find_smallest_boundary_function(starting_on_line).function_line
    return find_smallest_boundary_function(valid).function_line


def get_function_line_for_control_structure(
    ctx: AttributionContext, line_num: int
) -> int | None:
    """Owner of an ``if``/``for``/``while``/``switch`` opened on *line_num*.

    Callbacks that start on the same line never own the keyword itself; the
    most recently started non-callback function that contains the line does.
    """
    valid = valid_functions(ctx.containing(line_num), line_num)
    if not valid:
        return get_innermost_function(ctx, line_num)

    sorted_functions = sorted(valid, key=lambda f: f.boundary.start)
    outermost_start = sorted_functions[0].boundary.start
    callbacks = {
        f.function_line
        for f in sorted_functions
        if f.boundary.start == line_num and f.boundary.start > outermost_start
    }
    if not callbacks:
        return get_innermost_function(ctx, line_num)

    hosts = [f for f in sorted_functions if f.function_line not in callbacks]
    if not hosts:
        return get_innermost_function(ctx, line_num)

    enclosing = [
        f for f in hosts if f.boundary.start < line_num and f.boundary.end >= line_num
    ]
    if enclosing:
        return max(enclosing, key=lambda f: f.boundary.start).function_line
    return hosts[0].function_line


def callbacks_starting_on_line(
    ctx: AttributionContext, line_num: int, owner: int | None
) -> ContainingFunction | None:
    """Innermost callback opened on *line_num* other than *owner*, if any."""
    candidates = [
        f
        for f in valid_functions(ctx.containing(line_num), line_num)
        if f.boundary.start == line_num and f.function_line != owner
    ]
    if not candidates:
        return None
    return find_smallest_boundary_function(candidates)
