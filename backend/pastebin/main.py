"""
Pastebin Backend: FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn pastebin.main:app`) or the `pastebin` console script.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────┐ ┌────────────────┐ ┌─────────────┐  │
    │  │ POST /paste│ │ GET /paste/{id}│ │ GET / health│  │
    │  └────────────┘ └────────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Expired→410  │   │
    │  │ Database→500   │ unmatched route→404         │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Create the database engine (connection pool) on app.state
    3. Bootstrap the pastes table (strict or log-and-continue)

    Shutdown:
    1. Dispose the database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pastebin import __version__
from pastebin.config import settings
from pastebin.database import (
    create_engine,
    create_session_factory,
    dispose_engine,
    init_schema,
)
from pastebin.exceptions import DatabaseError, PastebinError
from pastebin.middleware.logging import RequestLoggingMiddleware
from pastebin.middleware.request_id import RequestIDMiddleware, request_id_var
from pastebin.routes import health, pastes

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    When:    Called once during app startup, before any other initialization.
    Format:  %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,  # Override any existing logging config
    )

    # Third-party loggers that log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: startup and shutdown procedures.

    The engine is the one process-wide resource. It lives on app.state so
    request dependencies and the health check can reach it, and it is
    disposed on the way out even if the app body raised.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Pastebin Backend starting up (environment=%s)...", settings.environment)

    engine = create_engine(settings)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    try:
        schema_ready = await init_schema(engine, strict=settings.schema_bootstrap_strict)
        if not schema_ready:
            logger.error("Continuing without a verified schema; paste requests will fail until it exists.")

        logger.info("Server ready at http://%s:%d", settings.host, settings.port)
        logger.info("=" * 60)

        yield  # Application runs here
    finally:
        # ── Shutdown ──────────────────────────────────────────────────────
        logger.info("Pastebin Backend shutting down...")
        await dispose_engine(engine)
        logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "request_id": request_id_var.get("")},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        PastebinError subclasses → their status_code, with their message
        DatabaseError            → 500, generic message, context logged
        RequestValidationError   → 400 "Invalid request body"
        HTTPException 404/405    → 404 "Route not found"
        Exception (fallback)     → 500, generic message, traceback logged

    Internal details (SQL, driver errors, stack traces) are logged
    server-side only.
    """

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Database error: generic message to the client, details to the log."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(500, SERVER_ERROR_MESSAGE)

    @app.exception_handler(PastebinError)
    async def handle_pastebin_error(request: Request, exc: PastebinError):
        """Validation (400), not found (404) and expired (410) errors."""
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            return _error_response(exc.status_code, SERVER_ERROR_MESSAGE)
        logger.info("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed JSON or wrongly typed fields in the request body."""
        rid = request_id_var.get("")
        logger.warning("[%s] Invalid request body: %s", rid, exc.errors())
        return _error_response(400, "Invalid request body")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unmatched paths and methods answer as one JSON 404."""
        if exc.status_code in (404, 405):
            return _error_response(404, "Route not found")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors; the traceback goes to the log only.

        Starlette's ServerErrorMiddleware re-raises after this response is
        sent, so the server (uvicorn) logs the same exception a second time.
        """
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(500, SERVER_ERROR_MESSAGE)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Pastebin API",
        description=(
            "Minimal pastebin: store text, get a link, read it back until it "
            "expires by time or by view count."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → routes

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(pastes.router)

    return app


# uvicorn expects `pastebin.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: serve the app on HOST:PORT from settings."""
    import uvicorn

    uvicorn.run(
        "pastebin.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
