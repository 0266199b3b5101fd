"""
Pastebin Backend: Status & Health Routes
=========================================

What:  GET / (liveness message) and GET /health (database probe).
Who:   GET / is what clients and the original frontend ping; GET /health is
       for Docker health checks, load balancers, and monitoring.

Status levels for /health:
    - healthy:   SELECT 1 succeeded
    - unhealthy: the database is unreachable or the engine is missing
"""

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text

from pastebin import __version__
from pastebin.schemas.paste import HealthResponse, StatusResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level so uptime counts from import, once per process
_start_time = time.time()


@router.get(
    "/",
    response_model=StatusResponse,
    summary="Service status message",
)
async def root() -> StatusResponse:
    return StatusResponse(message="Pastebin Backend is running")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the backend and its database. "
        "Used by Docker health checks and load balancers."
    ),
)
async def health_check(request: Request) -> HealthResponse:
    """
    Check the health of the service and the database.

    Database: Executes SELECT 1 on a pooled connection.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        engine = request.app.state.engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
