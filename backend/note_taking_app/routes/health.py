"""
Note Taking App — Health Check Route
======================================

What:  GET /health for container health checks and monitoring.
How:   Opens a short-lived connection per request (SELECT 1) and reports
       uptime and version alongside it.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 200, body says so)
"""

import logging
import time

from fastapi import APIRouter, Depends

from note_taking_app import __version__
from note_taking_app.database import DatabaseConnection
from note_taking_app.dependencies import get_database_connection
from note_taking_app.exceptions import DatabaseConnectionError
from note_taking_app.schemas.responses import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    connection: DatabaseConnection = Depends(get_database_connection),
) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        await connection.ping()
    except DatabaseConnectionError as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", e.context.get("reason", e.message))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
