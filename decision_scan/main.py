"""HTTP service exposing decision-point extraction and mismatch analysis.

Run with ``decision-scan serve`` or ``uvicorn decision_scan.main:app``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from decision_scan.analyzer.parser_registry import get_default_registry
from decision_scan.api import router as api_router
from decision_scan.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Load the parser registry before serving requests.

    A parser module that fails to import stops startup here.
    """
    registry = get_default_registry()
    logger.info(
        "decision-scan v%s serving %s (parsers for %s)",
        _app.version,
        settings.PROJECT_ROOT,
        ", ".join(registry.get_supported_extensions()),
    )
    yield
    logger.info("decision-scan stopped")


app = FastAPI(
    title="decision-scan",
    description="Cyclomatic-complexity decision points for JavaScript/TypeScript.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=API_PREFIX)


@app.get("/", tags=["health"])
async def root() -> JSONResponse:
    """Liveness check with the version and the extensions a parser handles."""
    return JSONResponse(
        content={
            "status": "ok",
            "version": app.version,
            "extensions": get_default_registry().get_supported_extensions(),
        },
    )
