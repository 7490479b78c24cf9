"""
Market Registry Backend — Database Session Management
=======================================================

What:  Async SQLAlchemy engine/session factory construction, the per-request
       session dependency, and the startup schema bootstrap.
How:   create_app() builds one engine and one session factory from its
       Settings and stores both on app.state. Route handlers receive a
       session through get_db_session, which reads the factory from the
       running app, so no module-level store handle exists.
Who:   Used by main.py (lifespan), route handlers, Alembic and tests.

Engine options:
    SQLite (default, aiosqlite driver): no pool sizing arguments; foreign key
    enforcement switched on per connection.
    PostgreSQL (asyncpg driver): pool_size / max_overflow / pre_ping from
    settings, connections recycled hourly.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
    before_sleep_log,
)

from app.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by create_all() at startup and by
    Alembic for migrations.
    """
    pass


# ── Engine / Session Factory ──────────────────────────────────────────────
def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Build the async engine for the configured database URL."""
    kwargs = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )

    engine = create_async_engine(settings.database_url, **kwargs)

    if settings.is_sqlite:
        # SQLite ignores REFERENCES clauses unless asked per connection
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: attributes stay readable after commit
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/markets")
        async def list_markets(db: AsyncSession = Depends(get_db_session)):
            return await market_service.list_markets(db)
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_schema(engine: AsyncEngine, attempts: int = 5) -> None:
    """
    Create all tables that do not exist yet (idempotent).

    Retries with exponential backoff while the database refuses connections,
    which happens when the app container starts before PostgreSQL.
    """
    # Model modules must be imported so their tables register on Base.metadata
    import app.models  # noqa: F401

    @retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential_jitter(initial=1, max=10),
        retry=retry_if_exception_type((OperationalError, OSError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _create_all() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    await _create_all()
    logger.info("Database schema ready (%d tables)", len(Base.metadata.tables))


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close all pooled connections; called on application shutdown."""
    await engine.dispose()
