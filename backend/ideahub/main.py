"""
Idea Hub Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers;
       the lifespan owns the DatabaseManager (engine + pool).
Who:   uvicorn ideahub.main:app

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Access Log → GZip → CORS      │
    │                                                          │
    │  Routers:                                                │
    │   /api/ideas  /api/comments  /api/notifications          │
    │   /api/workspace (bare)      /health  /api/health        │
    │   <functions_prefix>/...     (function envelope)         │
    │                                                          │
    │  Exception Handlers → envelope chosen from request path  │
    │   IdeaHubError → its status │ validation → 400           │
    │   405 → Method not allowed  │ anything else → 500        │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, DatabaseManager on app.state.db
              (unless one was provided, as the tests do)
    Shutdown: dispose the engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from ideahub import __version__
from ideahub.config import settings
from ideahub.database import DatabaseManager
from ideahub.envelopes import EnvelopeStyle, render_error, style_for_path
from ideahub.exceptions import IdeaHubError, MethodNotAllowedError
from ideahub.functions import build_router as build_functions_router
from ideahub.middleware.logging import RequestLoggingMiddleware
from ideahub.middleware.request_id import RequestIDMiddleware, request_id_var
from ideahub.routes import comments, health, ideas, notifications, users, workspaces

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def unexpected_error_message(exc: Exception) -> str:
    """The exception text when there is one, else GENERIC_ERROR_MESSAGE."""
    return str(exc) or GENERIC_ERROR_MESSAGE


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configures the root logger once, at startup, before anything else logs.

    Format: 2026-01-15T12:00:00 [INFO] ideahub.services.idea_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request chatter from libraries; our access log covers requests
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Idea Hub backend %s starting up (environment=%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so health checks can report; the log says what to fix
        logger.error("Configuration error: %s", str(e))

    owns_db = getattr(app.state, "db", None) is None
    if owns_db:
        app.state.db = DatabaseManager.from_settings(settings)
    logger.info("Functions mounted at %s", settings.functions_prefix)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Idea Hub backend shutting down...")
    if owns_db:
        await app.state.db.dispose()
        app.state.db = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps every failure to a status code and renders it in the envelope of the
    family the request belongs to (see ideahub.envelopes).

        IdeaHubError subclasses  → their status_code
        RequestValidationError   → 400
        HTTP 405 from routing    → 405 "Method not allowed" + Allow header
        other HTTP exceptions    → their status
        Exception (fallback)     → 500, generic message

    4xx are logged as warnings, 5xx as errors with context. Internal details
    (stack traces, SQL) never reach the response body.
    """

    def _render(request: Request, exc: IdeaHubError, headers=None):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return render_error(style_for_path(request.url.path), exc.status_code, exc.message, headers)

    @app.exception_handler(IdeaHubError)
    async def handle_ideahub_error(request: Request, exc: IdeaHubError):
        headers = None
        if isinstance(exc, MethodNotAllowedError) and exc.allowed_methods:
            headers = {"Allow": ", ".join(exc.allowed_methods)}
        if exc.status_code == 401:
            headers = {"WWW-Authenticate": "Bearer"}
        return _render(request, exc, headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"Invalid {location}: {first.get('msg')}" if location else str(first.get("msg"))
        else:
            message = "Invalid request"
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation failed: %s", rid, errors)
        return render_error(style_for_path(request.url.path), 400, message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            allow = (exc.headers or {}).get("Allow", "")
            methods = [m.strip() for m in allow.split(",") if m.strip()]
            return await handle_ideahub_error(request, MethodNotAllowedError(methods))
        style = style_for_path(request.url.path)
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404 and style is not EnvelopeStyle.BARE and message == "Not Found":
            message = "Not found"
        return render_error(style, exc.status_code, message, exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return render_error(style_for_path(request.url.path), 500, unexpected_error_message(exc))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Idea Hub API",
        description="Ideas, workspaces, comments, collaborators and notifications.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: Request ID → Access Log → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(ideas.router)
    app.include_router(comments.router)
    app.include_router(notifications.router)
    app.include_router(users.router)
    app.include_router(workspaces.router)
    app.include_router(build_functions_router(settings.functions_prefix))

    return app


app = create_app()
