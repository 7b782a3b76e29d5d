"""Compare extracted complexity against the linter's score, function by function.

Pipeline for one project:

1. Lint the project (or take pre-computed linter results).
2. Turn the ``complexity`` warnings into ``FunctionRecord`` objects.
3. Per file: estimate function boundaries, extract decision points, and
   total each function's breakdown.
4. Every function whose calculated total differs from the linter's score
   becomes a ``Mismatch``; the collection is a ``MismatchReport``.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from decision_scan.analyzer.base_analyzer import BaseDecisionPointParser, FunctionBoundary
from decision_scan.analyzer.complexity_breakdown import calculate_complexity_breakdown
from decision_scan.analyzer.eslint_integration import (
    DEFAULT_ESLINT_COMMAND,
    DEFAULT_OUTPUT_FILENAME,
    run_eslint_complexity_check,
)
from decision_scan.analyzer.function_boundaries import find_function_boundaries
from decision_scan.analyzer.function_extraction import (
    FunctionRecord,
    extract_functions_from_eslint_results,
)
from decision_scan.analyzer.parser_registry import ParserRegistry, get_default_registry
from decision_scan.utils.file_discovery import read_source_file, resolve_source_path

logger = logging.getLogger(__name__)

DEFAULT_TOP_MISMATCHES = 20


@dataclass(slots=True)
class Mismatch:
    """A function whose calculated complexity disagrees with the linter."""

    function_name: str
    file: str
    line: int
    actual_complexity: int
    calculated_total: int
    decision_points: list[tuple[str, int]] = field(default_factory=list)
    boundary: FunctionBoundary | None = None

    @property
    def difference(self) -> int:
        return self.calculated_total - self.actual_complexity

    def to_dict(self) -> dict[str, Any]:
        return {
            "functionName": self.function_name,
            "file": self.file,
            "line": self.line,
            "actualComplexity": self.actual_complexity,
            "calculatedTotal": self.calculated_total,
            "difference": self.difference,
            "decisionPointsFound": len(self.decision_points),
            "decisionPoints": [{"type": t, "line": n} for t, n in self.decision_points],
            "boundary": self.boundary.to_dict() if self.boundary else None,
        }


@dataclass(slots=True)
class MismatchReport:
    total_processed: int = 0
    mismatches: list[Mismatch] = field(default_factory=list)

    @property
    def total_mismatches(self) -> int:
        return len(self.mismatches)

    @property
    def accuracy(self) -> str:
        """Share of functions that matched, e.g. ``"87.50%"``."""
        if self.total_processed == 0:
            return "100.00%"
        return "%.2f%%" % ((1 - self.total_mismatches / self.total_processed) * 100)

    def sort(self) -> None:
        """Largest absolute difference first; ties keep discovery order."""
        self.mismatches.sort(key=lambda m: abs(m.difference), reverse=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "totalProcessed": self.total_processed,
                "totalMismatches": self.total_mismatches,
                "accuracy": self.accuracy,
            },
            "mismatches": [m.to_dict() for m in self.mismatches],
        }


def group_functions_by_file(functions: Iterable[FunctionRecord]) -> dict[str, list[FunctionRecord]]:
    grouped: dict[str, list[FunctionRecord]] = defaultdict(list)
    for function in functions:
        grouped[function.file].append(function)
    return dict(grouped)


def compare_file(
    file_path: str,
    source_code: str,
    functions: list[FunctionRecord],
    parser: BaseDecisionPointParser,
    report: MismatchReport,
) -> None:
    """Add every function of one file to *report*."""
    boundaries = find_function_boundaries(source_code, functions)
    points = parser.parse(source_code, boundaries, functions) or []

    for function in functions:
        report.total_processed += 1
        breakdown = calculate_complexity_breakdown(function.line, points, 1)
        if breakdown.calculated_total == function.complexity:
            continue
        report.mismatches.append(
            Mismatch(
                function_name=function.function_name,
                file=function.file,
                line=function.line,
                actual_complexity=function.complexity,
                calculated_total=breakdown.calculated_total,
                decision_points=[(dp.type, dp.line) for dp in breakdown.decision_points],
                boundary=boundaries.get(function.line),
            )
        )


def analyze_mismatches(
    project_root: str | Path,
    eslint_results: list[Mapping[str, Any]] | None = None,
    parser: BaseDecisionPointParser | None = None,
    registry: ParserRegistry | None = None,
    eslint_command: str = DEFAULT_ESLINT_COMMAND,
    eslint_output_filename: str = DEFAULT_OUTPUT_FILENAME,
) -> MismatchReport:
    """Build a ``MismatchReport`` for every linted function under *project_root*.

    Parameters:
        project_root: Directory the linter ran in; report paths are relative to it.
        eslint_results: Pre-computed linter JSON.  The linter is run when omitted.
        parser: Force one parser for every file.  By default the parser is
            chosen per file extension from *registry*.
        registry: Parser registry; the process-wide default when omitted.

    Files that cannot be read, or that no parser handles, are logged and
    skipped; their functions are not counted as processed.
    """
    root = Path(project_root)
    if eslint_results is None:
        eslint_results = run_eslint_complexity_check(root, eslint_command, eslint_output_filename)
    registry = registry or get_default_registry()

    functions = extract_functions_from_eslint_results(eslint_results, root)
    report = MismatchReport()
    for file_path, file_functions in group_functions_by_file(functions).items():
        file_parser = parser or registry.get_parser_for_file(file_path)
        if file_parser is None:
            logger.warning("No decision-point parser for %s; skipping", file_path)
            continue
        try:
            source_code = read_source_file(resolve_source_path(root, file_path))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Error processing file %s: %s", file_path, exc)
            continue
        compare_file(file_path, source_code, file_functions, file_parser, report)

    report.sort()
    logger.info(
        "Processed %d functions, %d mismatches (accuracy %s)",
        report.total_processed,
        report.total_mismatches,
        report.accuracy,
    )
    return report


def write_report(report: MismatchReport, report_path: str | Path) -> Path:
    """Write *report* as indented JSON and return the path written."""
    path = Path(report_path)
    path.write_text(json.dumps(report.to_dict(), indent=2) + "\n", encoding="utf-8")
    logger.info("Detailed report saved to %s", path)
    return path


def format_mismatch_summary(report: MismatchReport, top: int = DEFAULT_TOP_MISMATCHES) -> str:
    """Console summary listing the *top* largest mismatches."""
    processed = report.total_processed
    share = (report.total_mismatches / processed * 100) if processed else 0.0
    lines = [
        "AST PARSER MISMATCH ANALYSIS",
        "",
        f"Total Functions Processed: {processed}",
        f"Total Mismatches: {report.total_mismatches} ({share:.1f}%)",
        "",
        f"Top {top} Largest Mismatches:",
        "",
    ]
    for idx, m in enumerate(report.mismatches[:top], start=1):
        sign = "+" if m.difference > 0 else ""
        lines.append(f"{idx}. {m.function_name} ({m.file}:{m.line})")
        lines.append(
            f"   ESLint: {m.actual_complexity}, Calculated: {m.calculated_total}, "
            f"Difference: {sign}{m.difference}"
        )
        lines.append(f"   Decision Points Found: {len(m.decision_points)}")
        if m.decision_points:
            lines.append("   Types: " + ", ".join(f"{t}@{n}" for t, n in m.decision_points))
        if m.boundary is not None:
            lines.append(f"   Boundary: lines {m.boundary.start}-{m.boundary.end}")
        lines.append("")
    return "\n".join(lines)
