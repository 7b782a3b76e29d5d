"""API router aggregation for decision-scan.

Combines all endpoint sub-routers into a single ``router`` that is mounted
by the main application under the ``/api`` prefix.
"""

from __future__ import annotations

from fastapi import APIRouter

from decision_scan.api.decision_points import router as decision_points_router
from decision_scan.api.mismatches import router as mismatches_router

router = APIRouter()

router.include_router(decision_points_router, tags=["decision-points"])
router.include_router(mismatches_router, tags=["mismatches"])
