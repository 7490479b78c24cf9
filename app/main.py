"""
Market Registry Backend — FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the engine and session factory, stores
       them on app.state, registers middleware, exception handlers and
       routes, and returns the app.
Who:   uvicorn (app.main:app) and the test suite (create_app(test_settings)).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Rate Limit → Request ID → Logging → GZip   │
    │                                                          │
    │  Routes:  /api/auth  /api/markets  /api/vendors          │
    │           /api/users /api/logs /api/stats  /health       │
    │                                                          │
    │  Exception Handlers:                                     │
    │   Validation→400  Auth→401  Permission→403  NotFound→404 │
    │   InvalidTransition→409  Database→500                    │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Sanity-check configuration (logged, never fatal)
    3. Create missing tables (retried while the database is unreachable)
    4. Seed the staff accounts when the users table is empty

    Shutdown:
    1. Dispose the engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import (
    create_engine_from_settings,
    create_session_factory,
    dispose_engine,
    init_schema,
)
from app.exceptions import (
    MarketRegistryError,
    ValidationError,
    AuthenticationError,
    PermissionDeniedError,
    NotFoundError,
    InvalidTransitionError,
    DatabaseError,
)
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.routes import auth, markets, vendors, users, stats, health
from app.services.auth_service import auth_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """Configure root logging once; stdout so containers capture it."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Market Registry backend starting up...")

    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.warning("%s", str(e))

    await init_schema(app.state.engine, attempts=config.db_connect_retries)

    if config.seed_default_users:
        async with app.state.session_factory() as session:
            await auth_service.seed_default_users(session)

    logger.info(
        "Workflow enforcement: %s",
        "on" if config.workflow_enforcement else "OFF (any caller may set any status)",
    )
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Market Registry backend shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(code: str, exc: MarketRegistryError, include_details: bool = True) -> dict:
    body = {
        "error": code,
        "message": exc.message,
        "request_id": request_id_var.get(""),
    }
    if include_details and exc.context:
        body["details"] = exc.context
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        ValidationError         → 400
        AuthenticationError     → 401
        PermissionDeniedError   → 403
        NotFoundError           → 404
        InvalidTransitionError  → 409
        DatabaseError           → 500 (fixed message, context logged only)
        MarketRegistryError     → 500
        Exception               → 500
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content=_error_body("validation_error", exc))

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body("authentication_failed", exc, include_details=False),
        )

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(request: Request, exc: PermissionDeniedError):
        logger.warning("[%s] Permission denied: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=403, content=_error_body("permission_denied", exc))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc, include_details=False),
        )

    @app.exception_handler(InvalidTransitionError)
    async def handle_invalid_transition(request: Request, exc: InvalidTransitionError):
        logger.warning("[%s] Invalid transition: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=409, content=_error_body("invalid_transition", exc))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc, include_details=False),
        )

    @app.exception_handler(MarketRegistryError)
    async def handle_application_error(request: Request, exc: MarketRegistryError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s", rid, exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc, include_details=False),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use; defaults to the environment-loaded
                  instance. Each app owns its own engine, so tests can build
                  isolated apps against throwaway databases.
    """
    config = settings or default_settings

    app = FastAPI(
        title="Market Registry API",
        description=(
            "Registration and approval of markets and vendor stalls: "
            "applicants register, staff recommend, verify and approve."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    engine = create_engine_from_settings(config)
    app.state.settings = config
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=config.rate_limit_requests,
        window_seconds=config.rate_limit_window,
    )

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(markets.router)
    app.include_router(vendors.router)
    app.include_router(users.router)
    app.include_router(stats.router)
    app.include_router(health.router)

    return app


# uvicorn app.main:app
app = create_app()
