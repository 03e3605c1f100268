"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Request

from ventafacil.application.dto.responses import HealthResponse

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Basic health check.

    Point-of-sale clients call this to decide whether to sync.
    """
    pool = getattr(request.app.state, "pool", None)
    settings = request.app.state.settings
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        uptime_seconds=time.time() - _start_time,
        database="ready" if pool is not None else "unavailable",
    )
