"""Tests for running ESLint and loading its report."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from decision_scan.analyzer import eslint_integration
from decision_scan.analyzer.eslint_integration import (
    TEMP_CONFIG_NAME,
    EslintIntegrationError,
    load_eslint_results,
    run_eslint_complexity_check,
)


def test_run_writes_and_removes_temp_config(tmp_path: Path, monkeypatch):
    seen = {}

    def fake_run(command, cwd, check):
        seen["command"] = command
        seen["config_present"] = (Path(cwd) / TEMP_CONFIG_NAME).exists()
        (Path(cwd) / "out.json").write_text(json.dumps([{"filePath": "a.js", "messages": []}]))
        return subprocess.CompletedProcess(command, 1)

    monkeypatch.setattr(eslint_integration.subprocess, "run", fake_run)

    results = run_eslint_complexity_check(tmp_path, "npx eslint", "out.json")

    assert results == [{"filePath": "a.js", "messages": []}]
    assert seen["config_present"]
    assert seen["command"][:3] == ["npx", "eslint", "."]
    assert "--output-file=out.json" in seen["command"]
    assert not (tmp_path / TEMP_CONFIG_NAME).exists()


def test_missing_executable(tmp_path: Path):
    with pytest.raises(EslintIntegrationError):
        run_eslint_complexity_check(tmp_path, "decision-scan-no-such-eslint-binary")
    assert not (tmp_path / TEMP_CONFIG_NAME).exists()


@pytest.mark.parametrize("content", ["not json", '{"filePath": "a.js"}'])
def test_load_rejects_bad_reports(tmp_path: Path, content: str):
    report = tmp_path / "report.json"
    report.write_text(content, encoding="utf-8")
    with pytest.raises(EslintIntegrationError):
        load_eslint_results(report)


def test_load_missing_report(tmp_path: Path):
    with pytest.raises(EslintIntegrationError):
        load_eslint_results(tmp_path / "nope.json")
