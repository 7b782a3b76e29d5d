"""Pydantic v2 request/response schemas for the decision-scan API."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from decision_scan.analyzer.base_analyzer import DECISION_POINT_NAMES


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------

class BoundarySchema(BaseModel):
    """Inclusive 1-based line range of one function."""

    start: int = Field(ge=1)
    end: int = Field(ge=1)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> BoundarySchema:
        if self.end < self.start:
            raise ValueError(f"end={self.end} is before start={self.start}")
        return self


class DecisionPointSchema(BaseModel):
    """One counted construct, keyed to its owning function."""

    model_config = ConfigDict(populate_by_name=True)

    line: int
    type: str
    name: str
    function_line: int = Field(alias="functionLine")

    @model_validator(mode="after")
    def _known_type(self) -> DecisionPointSchema:
        if self.type not in DECISION_POINT_NAMES:
            raise ValueError(f"Unknown decision point type: {self.type!r}")
        return self


# ---------------------------------------------------------------------------
# Decision points
# ---------------------------------------------------------------------------

class DecisionPointsRequest(BaseModel):
    """Source text plus the functions to attribute points to.

    ``boundaries`` is keyed by each function's reported line; JSON object
    keys arrive as strings and are coerced to ``int``.
    """

    source_code: str
    boundaries: dict[int, BoundarySchema] = Field(default_factory=dict)


class FunctionBreakdownSchema(BaseModel):
    """Counts per decision-point type for one function."""

    model_config = ConfigDict(populate_by_name=True)

    function_line: int = Field(alias="functionLine")
    breakdown: dict[str, int]
    calculated_total: int = Field(alias="calculatedTotal")
    summary: str


class DecisionPointsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    decision_points: list[DecisionPointSchema] = Field(alias="decisionPoints")
    functions: list[FunctionBreakdownSchema] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Mismatch analysis
# ---------------------------------------------------------------------------

class MismatchRequest(BaseModel):
    """Payload for running the mismatch analysis on a project directory.

    When ``eslint_results`` is given the linter is not run.
    """

    project_root: Optional[str] = None
    eslint_results: Optional[list[dict[str, Any]]] = None
    top: int = Field(default=20, ge=0)


class MismatchSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    function_name: str = Field(alias="functionName")
    file: str
    line: int
    actual_complexity: int = Field(alias="actualComplexity")
    calculated_total: int = Field(alias="calculatedTotal")
    difference: int
    decision_points_found: int = Field(alias="decisionPointsFound")
    decision_points: list[dict[str, Any]] = Field(alias="decisionPoints")
    boundary: Optional[BoundarySchema] = None


class MismatchSummarySchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_processed: int = Field(alias="totalProcessed")
    total_mismatches: int = Field(alias="totalMismatches")
    accuracy: str


class MismatchReportResponse(BaseModel):
    summary: MismatchSummarySchema
    mismatches: list[MismatchSchema]
