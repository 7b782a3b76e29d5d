"""Command-line entry point (``decision-scan``).

Subcommands:

- ``extract FILE --boundary LINE:START:END``: print decision points as JSON.
- ``mismatches``: compare extracted complexity with ESLint and write a report.
- ``serve``: run the HTTP API.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from decision_scan.analyzer.base_analyzer import FunctionBoundary
from decision_scan.analyzer.complexity_breakdown import (
    calculate_complexity_breakdown,
    format_complexity_breakdown_inline,
)
from decision_scan.analyzer.engine import extract_decision_points
from decision_scan.analyzer.eslint_integration import EslintIntegrationError, load_eslint_results
from decision_scan.analyzer.mismatch_analyzer import (
    analyze_mismatches,
    format_mismatch_summary,
    write_report,
)
from decision_scan.config import get_settings
from decision_scan.utils.file_discovery import read_source_file

logger = logging.getLogger(__name__)


def parse_boundary(text: str) -> tuple[int, FunctionBoundary]:
    """``"12:10:40"`` -> ``(12, FunctionBoundary(10, 40))``."""
    try:
        function_line, start, end = (int(part) for part in text.split(":"))
        return function_line, FunctionBoundary(start, end)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"invalid boundary {text!r}: expected LINE:START:END with START <= END"
        ) from exc


def _cmd_extract(args: argparse.Namespace) -> int:
    try:
        source_code = read_source_file(args.file)
    except OSError as exc:
        logger.error("Cannot read %s: %s", args.file, exc)
        return 1

    boundaries = dict(args.boundary)
    points = extract_decision_points(source_code, boundaries)

    functions = []
    for function_line in sorted(boundaries):
        breakdown = calculate_complexity_breakdown(function_line, points)
        functions.append(
            {
                "functionLine": function_line,
                "calculatedTotal": breakdown.calculated_total,
                "summary": format_complexity_breakdown_inline(breakdown),
            }
        )

    output = {"decisionPoints": [dp.to_dict() for dp in points], "functions": functions}
    print(json.dumps(output, indent=2))
    return 0


def _cmd_mismatches(args: argparse.Namespace) -> int:
    settings = get_settings()
    project_root = Path(args.project_root).resolve() if args.project_root else settings.PROJECT_ROOT
    output = Path(args.output) if args.output else settings.REPORT_PATH

    try:
        eslint_results = load_eslint_results(args.eslint_results) if args.eslint_results else None
        report = analyze_mismatches(
            project_root,
            eslint_results,
            eslint_command=settings.ESLINT_COMMAND,
            eslint_output_filename=settings.ESLINT_OUTPUT_FILENAME,
        )
    except EslintIntegrationError as exc:
        logger.error("%s", exc)
        return 1

    print(format_mismatch_summary(report, args.top if args.top is not None else settings.TOP_MISMATCHES))
    path = write_report(report, output)
    print(f"Detailed report saved to: {path}")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "decision_scan.main:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=settings.DEBUG,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="decision-scan",
        description="Count cyclomatic-complexity decision points in JavaScript/TypeScript.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Print the decision points of one file as JSON.")
    extract.add_argument("file", type=Path, help="Source file to scan.")
    extract.add_argument(
        "--boundary",
        type=parse_boundary,
        action="append",
        required=True,
        metavar="LINE:START:END",
        help="Function reported at LINE spanning START..END (repeatable).",
    )
    extract.set_defaults(handler=_cmd_extract)

    mismatches = sub.add_parser("mismatches", help="Compare against ESLint and write a report.")
    mismatches.add_argument("--project-root", type=str, default=None, help="Project to lint.")
    mismatches.add_argument(
        "--eslint-results",
        type=str,
        default=None,
        help="Use an existing ESLint JSON report instead of running ESLint.",
    )
    mismatches.add_argument("--output", type=str, default=None, help="Report destination.")
    mismatches.add_argument("--top", type=int, default=None, help="Mismatches to print.")
    mismatches.set_defaults(handler=_cmd_mismatches)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(handler=_cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
