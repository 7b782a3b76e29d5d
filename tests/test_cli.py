"""Tests for the ``decision-scan`` command line."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import pytest

from decision_scan.analyzer.base_analyzer import FunctionBoundary
from decision_scan.cli import build_parser, main, parse_boundary


def test_parse_boundary():
    assert parse_boundary("12:10:40") == (12, FunctionBoundary(10, 40))


@pytest.mark.parametrize("text", ["1:5:2", "abc", "1:2"])
def test_parse_boundary_rejects_bad_input(text):
    with pytest.raises(argparse.ArgumentTypeError):
        parse_boundary(text)


def test_boundary_is_required():
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["extract", "a.js"])
    assert exc.value.code == 2


def test_extract_prints_points_and_breakdown(tmp_path: Path, capsys):
    source = tmp_path / "a.js"
    source.write_text("function f() { if (a && b) { return 1; } }\n", encoding="utf-8")

    assert main(["extract", str(source), "--boundary", "1:1:1"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert [p["type"] for p in data["decisionPoints"]] == ["if", "&&"]
    assert data["functions"] == [
        {"functionLine": 1, "calculatedTotal": 3, "summary": "1 base +1 if +1 &&"}
    ]


def test_extract_missing_file(tmp_path: Path):
    assert main(["extract", str(tmp_path / "nope.js"), "--boundary", "1:1:1"]) == 1


def test_mismatches_with_saved_results(project_dir: Path, eslint_results, tmp_path: Path, capsys):
    results_file = tmp_path / "eslint.json"
    results_file.write_text(json.dumps(eslint_results), encoding="utf-8")
    output = tmp_path / "report.json"

    code = main(
        [
            "mismatches",
            "--project-root",
            str(project_dir),
            "--eslint-results",
            str(results_file),
            "--output",
            str(output),
        ]
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "Total Functions Processed: 1" in out
    assert json.loads(output.read_text(encoding="utf-8"))["summary"]["accuracy"] == "100.00%"


def test_mismatches_with_unreadable_results(project_dir: Path, tmp_path: Path):
    bad = tmp_path / "eslint.json"
    bad.write_text("{}", encoding="utf-8")
    assert main(["mismatches", "--project-root", str(project_dir), "--eslint-results", str(bad)]) == 1
