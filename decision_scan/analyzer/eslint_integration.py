"""Run ESLint's ``complexity`` rule over a project and read its JSON report."""

from __future__ import annotations

import json
import logging
import shlex
import subprocess
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TEMP_CONFIG_NAME = "eslint.config.temp.js"
DEFAULT_ESLINT_COMMAND = "npx eslint"
DEFAULT_OUTPUT_FILENAME = "complexity-report.json"

# ``max: 0`` makes the rule report every function, not just offenders.
TEMP_CONFIG = """\
import js from '@eslint/js'
import globals from 'globals'
import reactHooks from 'eslint-plugin-react-hooks'
import reactRefresh from 'eslint-plugin-react-refresh'
import tseslint from 'typescript-eslint'
import { defineConfig, globalIgnores } from 'eslint/config'

export default defineConfig([
  globalIgnores(['dist', 'complexity', '**/__tests__/**', '**/*.test.{ts,tsx}', '**/*.spec.{ts,tsx}']),
  {
    files: ['**/*.{ts,tsx}'],
    extends: [
      js.configs.recommended,
      tseslint.configs.recommended,
      reactHooks.configs.flat.recommended,
      reactRefresh.configs.vite,
    ],
    languageOptions: {
      ecmaVersion: 2020,
      globals: globals.browser,
    },
    rules: {
      complexity: ["warn", { max: 0, variant: "classic" }],
    },
  },
  {
    files: ['**/*.js'],
    extends: [js.configs.recommended],
    languageOptions: {
      ecmaVersion: 2020,
      globals: globals.node,
    },
    rules: {
      complexity: ["warn", { max: 0, variant: "classic" }],
    },
  },
])
"""


class EslintIntegrationError(RuntimeError):
    """ESLint could not be started or its report could not be read."""


def load_eslint_results(report_path: str | Path) -> list[dict[str, Any]]:
    """Parse an ESLint ``--format=json`` report."""
    try:
        with open(report_path, "r", encoding="utf-8") as fh:
            results = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise EslintIntegrationError(f"Cannot read ESLint report {report_path}: {exc}") from exc
    if not isinstance(results, list):
        raise EslintIntegrationError(f"ESLint report {report_path} is not a JSON array")
    return results


def run_eslint_complexity_check(
    project_root: str | Path,
    eslint_command: str = DEFAULT_ESLINT_COMMAND,
    output_filename: str = DEFAULT_OUTPUT_FILENAME,
) -> list[dict[str, Any]]:
    """Lint *project_root* with a temporary config and return the JSON results.

    ESLint exits non-zero whenever it reports warnings, which it always does
    here, so the exit status is only logged.
    """
    root = Path(project_root)
    config_path = root / TEMP_CONFIG_NAME
    config_path.write_text(TEMP_CONFIG, encoding="utf-8")

    command = [
        *shlex.split(eslint_command),
        ".",
        "--config",
        str(config_path),
        "--format=json",
        f"--output-file={output_filename}",
    ]
    logger.info("Running ESLint to collect complexity for all functions in %s", root)
    try:
        result = subprocess.run(command, cwd=root, check=False)
    except OSError as exc:
        raise EslintIntegrationError(f"Cannot run {command[0]!r}: {exc}") from exc
    finally:
        config_path.unlink(missing_ok=True)

    if result.returncode != 0:
        logger.info("ESLint exited with status %d (warnings are expected)", result.returncode)
    return load_eslint_results(root / output_filename)
