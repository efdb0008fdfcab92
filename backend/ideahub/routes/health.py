"""
Idea Hub Backend — Health Check Route
======================================

What:  Liveness/readiness probe for load balancers and the service registry
       (whose records point at /api/health).
How:   Runs SELECT 1 through the app's DatabaseManager.

Status levels:
    - healthy:    database reachable
    - unhealthy:  database unreachable or not initialized

The response is 200 either way so probes can read the body.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from ideahub import __version__
from ideahub.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

SERVICE_NAME = "ideahub-backend"

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
@router.get("/api/health", response_model=HealthResponse, include_in_schema=False)
async def health_check(request: Request) -> HealthResponse:
    manager = getattr(request.app.state, "db", None)
    healthy = manager is not None and await manager.health_check()
    if not healthy:
        logger.warning("Health check: database unreachable")

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        service=SERVICE_NAME,
        version=__version__,
        database="connected" if healthy else "disconnected",
        timestamp=datetime.now(timezone.utc),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
