"""
Note Taking App — Request Logging Middleware
==============================================

What:  One access-log line per request on the `note_taking_app.access` logger.
How:   Measures wall time around the downstream call and picks the level
       from the status code (5xx ERROR, 4xx WARNING, else INFO).
       /health is not logged.

Why:   Health checks run every few seconds and would drown real traffic.
       uvicorn.access is quieted in setup_logging(), so this is the only
       access log.

Line format:
    GET / 200 3.2ms [1f2e3d4c] from 127.0.0.1
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from note_taking_app.middleware.request_id import request_id_var

logger = logging.getLogger("note_taking_app.access")

UNLOGGED_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in UNLOGGED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
