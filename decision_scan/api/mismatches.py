"""Mismatch analysis endpoint.

Compares extracted complexity with ESLint's score for every function in a
project directory.  The analysis blocks on file I/O and, unless results are
posted, on an ESLint subprocess, so it runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, status

from decision_scan.analyzer.eslint_integration import EslintIntegrationError
from decision_scan.analyzer.mismatch_analyzer import analyze_mismatches
from decision_scan.config import get_settings
from decision_scan.models.schemas import MismatchReportResponse, MismatchRequest

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/mismatches",
    response_model=MismatchReportResponse,
    summary="Compare extracted complexity against ESLint for a project",
)
async def post_mismatches(body: MismatchRequest) -> MismatchReportResponse:
    settings = get_settings()
    project_root = Path(body.project_root).resolve() if body.project_root else settings.PROJECT_ROOT
    if not project_root.is_dir():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Project root is not a directory: {project_root}",
        )

    try:
        report = await asyncio.to_thread(
            analyze_mismatches,
            project_root,
            body.eslint_results,
            eslint_command=settings.ESLINT_COMMAND,
            eslint_output_filename=settings.ESLINT_OUTPUT_FILENAME,
        )
    except EslintIntegrationError as exc:
        logger.exception("ESLint run failed for %s", project_root)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        )

    payload = report.to_dict()
    payload["mismatches"] = payload["mismatches"][: body.top]
    return MismatchReportResponse.model_validate(payload)
