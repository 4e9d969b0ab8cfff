"""
backend/main.py
═══════════════
FastAPI application for the circular-economy material marketplace.

Endpoints
─────────
  GET  /health        — Liveness / readiness check (directory size, oracle state)
  /api/*              — Matchmaking router (see backend/routers/match.py)

  Run with:
      uvicorn backend.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.routers.match import _service_dep, router
from backend.schemas import HealthResponse
from backend.services.discovery import DiscoveryService
from utils.logger import logger

# ─────────────────────────────────────────────────────────────────────────────
#  App initialisation
# ─────────────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="punarCYCLE — Material Matchmaking API",
    description=(
        "Pairs waste producers with raw-material consumers: compatibility "
        "scoring, ranked discovery and an AI-assisted fallback cascade."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],      # tighten in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


# ─────────────────────────────────────────────────────────────────────────────
#  Health check
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/health", response_model=HealthResponse, tags=["Meta"])
async def health_check(service: DiscoveryService = Depends(_service_dep)) -> HealthResponse:
    """
    Liveness & readiness check.
    Reports the directory size and whether the oracle is configured / tripped.
    """
    try:
        entries = await service.directory.entries()
        return HealthResponse(
            status="ok",
            directory_entries=len(entries),
            ai_enabled=service.ai.oracle is not None,
            ai_available=service.ai.available,
        )
    except Exception as exc:
        logger.exception("Health check failed")
        return HealthResponse(
            status=f"degraded: {exc}",
            directory_entries=0,
            ai_enabled=False,
            ai_available=False,
        )
