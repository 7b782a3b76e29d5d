"""Turn linter complexity warnings into function records with display names.

The linter reports a line number and a node type for each function; the
name shown in reports is recovered from the source text around that line.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from decision_scan.utils.file_discovery import read_source_file

logger = logging.getLogger(__name__)

ARROW_NODE_TYPE = "ArrowFunctionExpression"
DEFAULT_NODE_TYPE = "FunctionDeclaration"

# How far above the reported line a declaration may sit.
DECLARATION_LOOKBACK = 50

COMPLEXITY_MESSAGE_RE = re.compile(r"complexity of (\d+)", re.IGNORECASE)

_NAMED_ARROW_RE = re.compile(r"const\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=\s*(?:\([^)]*\)\s*)?=>")

# functionCall(() =>, functionCall(x =>, obj.method(() =>, obj.method(x =>
_CALLBACK_HOST_PATTERNS = (
    re.compile(r"(\w+)\s*\([^)]*\)\s*=>"),
    re.compile(r"(\w+)\s*\([^)]*=>"),
    re.compile(r"\.(\w+)\s*\([^)]*\)\s*=>"),
    re.compile(r"\.(\w+)\s*\([^)]*=>"),
)

DECLARATION_PATTERNS = (
    re.compile(r"(?:export\s+)?function\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*[<(]"),
    re.compile(r"const\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=\s*(?:\([^)]*\)\s*)?(?:=>|function)"),
    re.compile(r"export\s+const\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=\s*(?:\([^)]*\)\s*)?(?:=>|function)"),
    re.compile(r"export\s+default\s+function\s+([a-zA-Z_$][a-zA-Z0-9_$]*)\s*[<(]"),
    re.compile(r"(?:export\s+default\s+|const\s+)([A-Z][a-zA-Z0-9_$]*)\s*[:=]\s*(?:\([^)]*\)\s*)?=>"),
)

_UNNAMED = ("anonymous", "unknown")


@dataclass(slots=True)
class FunctionRecord:
    """One function the linter scored."""

    file: str
    line: int
    complexity: int
    function_name: str = "anonymous"
    node_type: str = DEFAULT_NODE_TYPE
    column: int | None = None
    message: str = ""

    @property
    def is_arrow(self) -> bool:
        return self.node_type == ARROW_NODE_TYPE

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "complexity": self.complexity,
            "functionName": self.function_name,
            "nodeType": self.node_type,
        }


# ------------------------------------------------------------------
# Name resolution
# ------------------------------------------------------------------


def find_declared_name(lines: Sequence[str], line_number: int) -> str | None:
    """Name of the declaration nearest above (or on) *line_number*.

    Every declaration pattern is tried over the preceding window; the match
    that starts latest wins.
    """
    if line_number < 1:
        return None
    start = max(0, line_number - DECLARATION_LOOKBACK)
    context = "\n".join(lines[start:line_number])

    best_name: str | None = None
    best_index = -1
    for pattern in DECLARATION_PATTERNS:
        last = None
        for last in pattern.finditer(context):
            pass
        if last is not None and last.start() > best_index:
            best_name = last.group(1)
            best_index = last.start()
    return best_name


def function_name_from_lines(
    lines: Sequence[str], line_number: int, node_type: str = DEFAULT_NODE_TYPE
) -> str:
    """Display name for the function the linter reported at *line_number*."""
    if node_type != ARROW_NODE_TYPE:
        return find_declared_name(lines, line_number) or "anonymous"

    index = line_number - 1
    current = lines[index] if 0 <= index < len(lines) else ""
    previous = lines[index - 1] if 0 < index <= len(lines) else ""
    context = f"{previous} {current}".strip()

    named = _NAMED_ARROW_RE.search(context)
    if named:
        return named.group(1)

    parent = find_declared_name(lines, line_number - 1)
    for pattern in _CALLBACK_HOST_PATTERNS:
        host = pattern.search(context)
        if host:
            if parent:
                return f"{parent} ({host.group(1)} callback)"
            return f"{host.group(1)} callback"

    if parent:
        return f"{parent} (arrow function)"
    return "anonymous arrow function"


def extract_function_name(
    file_path: str,
    line_number: int,
    node_type: str = DEFAULT_NODE_TYPE,
    project_root: str | Path = ".",
) -> str:
    """Read *file_path* (relative to *project_root*) and name the function.

    Returns ``"unknown"`` when the file cannot be read.
    """
    full_path = Path(project_root) / file_path
    try:
        source = read_source_file(full_path)
    except (OSError, UnicodeDecodeError):
        logger.debug("Cannot read %s to name function at line %d", full_path, line_number)
        return "unknown"
    return function_name_from_lines(source.split("\n"), line_number, node_type)


def get_base_function_name(name: str) -> str:
    """Strip a ``" (xyz callback)"`` or ``" (arrow function)"`` suffix."""
    return re.sub(r"\s*\((?:\w+ callback|arrow function)\)", "", name, flags=re.IGNORECASE).strip()


# ------------------------------------------------------------------
# Linter results
# ------------------------------------------------------------------


def relative_file_path(file_path: str, project_root: str | Path) -> str:
    prefix = str(project_root).rstrip("/") + "/"
    return file_path.replace(prefix, "", 1) if file_path.startswith(prefix) else file_path


def extract_functions_from_eslint_results(
    eslint_results: Iterable[Mapping[str, Any]],
    project_root: str | Path,
) -> list[FunctionRecord]:
    """Collect one ``FunctionRecord`` per ``complexity`` warning.

    Records are keyed by ``file:name:line``; on collision the higher score
    is kept.  The result is sorted by descending complexity.
    """
    records: dict[str, FunctionRecord] = {}
    for file_result in eslint_results:
        messages = file_result.get("messages") or []
        file_path = relative_file_path(file_result.get("filePath", ""), project_root)
        for message in messages:
            if message.get("ruleId") != "complexity" or message.get("severity") != 1:
                continue
            found = COMPLEXITY_MESSAGE_RE.search(message.get("message", ""))
            if found is None:
                continue

            node_type = message.get("nodeType") or DEFAULT_NODE_TYPE
            line = int(message.get("line", 0))
            name = extract_function_name(file_path, line, node_type, project_root)
            complexity = int(found.group(1))

            key = f"{file_path}:{name}:{line}"
            existing = records.get(key)
            if existing is None or complexity > existing.complexity:
                records[key] = FunctionRecord(
                    file=file_path,
                    line=line,
                    complexity=complexity,
                    function_name=name,
                    node_type=node_type,
                    column=message.get("column"),
                    message=message.get("message", ""),
                )

    functions = sorted(records.values(), key=lambda r: r.complexity, reverse=True)
    logger.info("Collected %d scored functions from linter output", len(functions))
    return functions


def get_complexity_level(complexity: int | str) -> str:
    """Bucket a score: ``low`` (worst) through ``good``."""
    score = int(complexity)
    if score >= 20:
        return "low"
    if score >= 15:
        return "medium"
    if score > 10:
        return "high"
    if score > 6:
        return "acceptable"
    return "good"
