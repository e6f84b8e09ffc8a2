"""
PhotoShare Backend — Health Check Route
=========================================

What:  GET /api/health for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and reports the state of each
       optional integration without calling out to it (except a Redis PING).

Status levels:
    ok        database reachable; optional integrations may be disabled
    degraded  database unreachable (HTTP 503 so load balancers route away)
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Response
from sqlalchemy import text

from photoshare import __version__
from photoshare.config import settings
from photoshare.database import engine
from photoshare.schemas.common import HealthResponse
from photoshare.services.cache_service import cache_service
from photoshare.services.vision_service import vision_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Reports database connectivity plus cache, queue and vision status. "
        "Used by Docker health checks and load balancers."
    ),
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "ok"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "degraded"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        database=db_status,
        cache=await cache_service.ping(),
        queue="enabled" if settings.queue_enabled else "disabled",
        vision=vision_service.status,
    )
