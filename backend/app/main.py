"""FastAPI application for the Encounter Compliance Risk Engine."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import compliance_router
from app.core.config import settings
from app.services.compliance_engine import get_compliance_engine

logger = logging.getLogger(__name__)

SERVICE_NAME = "encounter-compliance-engine"
VERSION = "0.1.0"


def configure_logging() -> None:
    """Set the root log level from settings."""
    logging.basicConfig(level=settings.log_level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Builds the default compliance engine at startup so the first request
    does not pay for catalog construction.
    """
    configure_logging()
    startup_start = time.perf_counter()

    engine = get_compliance_engine()
    engine_stats = engine.get_stats()

    total_startup_ms = (time.perf_counter() - startup_start) * 1000
    logger.info(f"Server ready - engine catalogs {engine_stats} loaded in {total_startup_ms:.0f}ms")

    app.state.engine_stats = engine_stats
    app.state.startup_time_ms = total_startup_ms

    yield


app = FastAPI(
    title=settings.app_name,
    description="Rule-based compliance checking, code suggestion and claim denial risk scoring for physician encounters.",
    version=VERSION,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(compliance_router, prefix=settings.api_prefix)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, Any]:
    """Health check endpoint (liveness probe)."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, Any]:
    """Readiness check endpoint.

    Confirms the compliance engine and its catalogs are loaded.
    """
    engine = get_compliance_engine()

    return {
        "status": "ready",
        "service": SERVICE_NAME,
        "version": VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
        "startup_time_ms": getattr(app.state, "startup_time_ms", 0),
        "catalogs": engine.get_stats(),
    }


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "service": "Encounter Compliance Risk Engine API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
    }
