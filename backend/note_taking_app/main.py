"""
Note Taking App — FastAPI Application Factory
===============================================

What:  Builds the FastAPI application and runs the startup query.
How:   create_app(settings) registers the view engine, mounts the routers,
       middleware and exception handlers, and attaches a lifespan that
       owns the startup DatabaseConnection.
Who:   server.run() serves the returned app with uvicorn.

Startup order:
    1. FastAPI instance + view engine (app.state.view_engine / templates)
    2. User router mounted at /
    3. DatabaseConnection built from the connection descriptor
    4. connect → query(startup_query, log_query_result) → end, none awaited
    5. Lifespan yields; uvicorn binds the port and NoteServer logs it

Shutdown:
    Pending database tasks are drained so the engine is disposed.

Why a closure lifespan:
    The startup connection belongs to one app instance. Tests build several
    apps per process, so nothing database related lives at module level.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from note_taking_app import __version__
from note_taking_app.bootstrap import run_startup_query
from note_taking_app.config import Settings, settings as default_settings
from note_taking_app.database import DatabaseConnection
from note_taking_app.exceptions import DatabaseError, NoteAppError
from note_taking_app.middleware.logging import RequestLoggingMiddleware
from note_taking_app.middleware.request_id import RequestIDMiddleware, request_id_var
from note_taking_app.routes import health, user
from note_taking_app.schemas.responses import ErrorResponse

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once per process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called by server.run() before uvicorn starts, so uvicorn's own
    loggers (run with log_config=None) propagate into the same handler.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiomysql").setLevel(logging.WARNING)
    # end() closing under the startup query logs "Error closing cursor" here;
    # log_query_result already reports that outcome.
    logging.getLogger("sqlalchemy.pool").setLevel(logging.CRITICAL)


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON error responses.

        DatabaseError        → 500, generic message (context logged only)
        NoteAppError (base)  → 500, exception message
        Exception (fallback) → 500, generic message
    """

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="database_error",
                message="An internal error occurred. Please try again later.",
                request_id=rid,
            ).model_dump(),
        )

    @app.exception_handler(NoteAppError)
    async def handle_app_error(request: Request, exc: NoteAppError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="server_error",
                message=exc.message,
                request_id=rid,
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="internal_server_error",
                message="An unexpected error occurred.",
                request_id=rid,
            ).model_dump(),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use; defaults to the module-level settings

    Returns:
        A FastAPI instance whose lifespan performs the startup query.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Note Taking App %s starting up...", __version__)

        connection = DatabaseConnection(settings.connection_descriptor)
        app.state.startup_connection = connection
        run_startup_query(connection, settings.startup_query)

        yield

        logger.info("Note Taking App shutting down...")
        await connection.drain()
        logger.info("Shutdown complete.")

    app = FastAPI(
        title="Note Taking App",
        version=__version__,
        lifespan=lifespan,
    )

    # ── View Engine ───────────────────────────────────────────────────────
    app.state.settings = settings
    app.state.view_engine = settings.view_engine
    app.state.templates = Jinja2Templates(directory=settings.templates_dir)

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(user.router)
    app.include_router(health.router)

    return app
