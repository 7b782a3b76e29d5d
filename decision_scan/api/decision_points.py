"""Decision-point extraction endpoint.

Runs the heuristic extractor over posted source text and returns the
points plus a complexity breakdown for every function in the request.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from decision_scan.analyzer.base_analyzer import FunctionBoundary
from decision_scan.analyzer.complexity_breakdown import (
    calculate_complexity_breakdown,
    format_complexity_breakdown_inline,
)
from decision_scan.analyzer.engine import extract_decision_points
from decision_scan.models.schemas import (
    DecisionPointSchema,
    DecisionPointsRequest,
    DecisionPointsResponse,
    FunctionBreakdownSchema,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/decision-points",
    response_model=DecisionPointsResponse,
    summary="Extract decision points from JavaScript/TypeScript source",
)
async def post_decision_points(body: DecisionPointsRequest) -> DecisionPointsResponse:
    boundaries = {
        function_line: FunctionBoundary(b.start, b.end)
        for function_line, b in body.boundaries.items()
    }
    try:
        points = extract_decision_points(body.source_code, boundaries)
    except Exception:
        logger.exception("Decision-point extraction failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Decision-point extraction failed",
        )

    functions = []
    for function_line in sorted(boundaries):
        breakdown = calculate_complexity_breakdown(function_line, points)
        functions.append(
            FunctionBreakdownSchema(
                function_line=function_line,
                breakdown={"base": breakdown.base, **breakdown.counts},
                calculated_total=breakdown.calculated_total,
                summary=format_complexity_breakdown_inline(breakdown),
            )
        )

    return DecisionPointsResponse(
        decision_points=[DecisionPointSchema.model_validate(dp.to_dict()) for dp in points],
        functions=functions,
    )
