"""
PhotoShare Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn photoshare.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware Chain (outermost first):                      │
    │  RequestID → Logging → GZip → CORS                        │
    │                                                           │
    │  Routes:                                                  │
    │  /api/auth  /api/photos  /api/photos/{id}/comments|ratings│
    │  /api/likes  /api/users  /api/follows  /api/notifications │
    │  /api/collections  /api/admin  /api/health                │
    │  /uploads/* (static files, local blob backend only)       │
    │                                                           │
    │  Exception Handlers:                                      │
    │  PhotoShareError → its status_code                        │
    │  RequestValidationError → 400   HTTPException → status    │
    │  Exception → 500                                          │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (logged, not fatal)
    3. Create tables and seed demo creators when enabled
    Shutdown:
    1. Close the Redis client
    2. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from photoshare import __version__
from photoshare.config import settings
from photoshare.database import async_session_factory, create_tables, dispose_engine
from photoshare.exceptions import PhotoShareError
from photoshare.middleware.logging import RequestLoggingMiddleware
from photoshare.middleware.request_id import RequestIDMiddleware, request_id_var
from photoshare.routes import (
    admin,
    auth,
    collections,
    comments,
    follows,
    health,
    likes,
    notifications,
    photos,
    ratings,
    users,
)
from photoshare.services import auth_service
from photoshare.services.cache_service import cache_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout.
    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("PhotoShare Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /api/health can report the problem
        logger.error("Configuration error: %s", str(e))

    if settings.create_tables_on_startup:
        await create_tables()

    if settings.seed_creator_accounts:
        async with async_session_factory() as session:
            created = await auth_service.seed_creators(session)
            await session.commit()
        if created:
            logger.info("Seeded %d creator accounts", created)

    logger.info(
        "cache=%s queue=%s storage=%s",
        "on" if settings.cache_enabled else "off",
        "on" if settings.queue_enabled else "off",
        settings.storage_backend,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("PhotoShare Backend shutting down...")
    await cache_service.close()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The catch-all handler runs outside RequestIDMiddleware, so fall back to request.state
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to `{"error": ..., "requestId": ...}` JSON bodies.

    Handler hierarchy:
        PhotoShareError         → exc.status_code (400/401/403/404/409/500/503)
        RequestValidationError  → 400 "Invalid request" with per-field details
        HTTPException           → its own status (unknown route, wrong method)
        Exception (fallback)    → 500 "Internal server error"

    Server-side context (exc.context) is logged, never returned.
    """

    @app.exception_handler(PhotoShareError)
    async def handle_photoshare_error(request: Request, exc: PhotoShareError):
        rid = _request_id(request)
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "requestId": rid},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = _request_id(request)
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        logger.info("[%s] Request validation failed: %s", rid, details)
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": details, "requestId": rid},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "requestId": _request_id(request)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace is logged server-side only."""
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "requestId": rid},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="PhotoShare API",
        description=(
            "Photo-sharing backend: uploads with automatic vision tags, ratings, "
            "comments, likes, follows, notifications, collections and moderation."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → GZip → CORS
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

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(photos.router)
    app.include_router(comments.router)
    app.include_router(ratings.router)
    app.include_router(likes.router)
    app.include_router(users.router)
    app.include_router(follows.router)
    app.include_router(notifications.router)
    app.include_router(collections.router)
    app.include_router(admin.router)
    app.include_router(health.router)

    # ── Static Images (local blob backend) ────────────────────────────────
    if settings.storage_backend == "local":
        storage_root = Path(settings.storage_root)
        storage_root.mkdir(parents=True, exist_ok=True)
        app.mount("/uploads", StaticFiles(directory=storage_root), name="uploads")

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
