"""Shared test fixtures for decision-scan tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from decision_scan.analyzer.attribution import AttributionContext
from decision_scan.analyzer.base_analyzer import DecisionPoint


def as_tuples(points: list[DecisionPoint]) -> list[tuple[str, int, int]]:
    """``(type, line, function_line)`` for compact assertions."""
    return [(p.type, p.line, p.function_line) for p in points]


@pytest.fixture
def summarize() -> Callable[[list[DecisionPoint]], list[tuple[str, int, int]]]:
    return as_tuples


@pytest.fixture
def make_ctx() -> Callable[..., AttributionContext]:
    def _make(boundaries: dict[int, tuple[int, int]]) -> AttributionContext:
        return AttributionContext.build(boundaries)

    return _make


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A tiny project with one JavaScript file."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "app.js").write_text(
        "function check(a, b) {\n"
        "  if (a && b) {\n"
        "    return 1;\n"
        "  }\n"
        "  return 0;\n"
        "}\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def eslint_results(project_dir: Path) -> list[dict]:
    return [
        {
            "filePath": f"{project_dir}/src/app.js",
            "messages": [
                {
                    "ruleId": "complexity",
                    "severity": 1,
                    "line": 1,
                    "column": 1,
                    "message": "Function 'check' has a complexity of 3. Maximum allowed is 0.",
                    "nodeType": "FunctionDeclaration",
                },
            ],
        }
    ]


@pytest.fixture
def client() -> Iterator[TestClient]:
    from decision_scan.main import app

    with TestClient(app) as test_client:
        yield test_client
