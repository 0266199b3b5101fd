"""
Pastebin Backend: Database Engine & Session Management
=======================================================

What:  Async SQLAlchemy engine factory, schema bootstrap, and the per-request
       session dependency.
How:   The application lifespan builds ONE engine (the connection pool), keeps
       it on `app.state`, and disposes it at shutdown. Route handlers receive
       an AsyncSession through FastAPI's Depends().
Who:   main.py (lifespan), routes (get_db_session), Alembic (Base metadata).

Connection Pooling:
    PostgreSQL (asyncpg):
        pool_size / max_overflow / pool_pre_ping come from settings.
        pool_recycle=3600 recycles connections every hour.
        TLS: ENVIRONMENT=production → encrypted, certificate not verified;
             otherwise plain TCP.
    SQLite (aiosqlite, used by the test suite):
        SQLAlchemy picks the pool class; no pool or TLS arguments are passed.
"""

import logging
import ssl
from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from pastebin.config import Settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between the schema bootstrap
    (`init_schema`) and Alembic's autogenerate.
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def _tls_connect_args(settings: Settings) -> Dict[str, Any]:
    """
    asyncpg `ssl` argument for the configured environment.

    Production: TLS with certificate validation disabled, the equivalent of
    node-postgres `{rejectUnauthorized: false}`. Elsewhere: TLS off.
    """
    if not settings.is_production:
        return {"ssl": False}

    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return {"ssl": context}


def engine_options(settings: Settings) -> Dict[str, Any]:
    """Keyword arguments for create_async_engine() based on the database backend."""
    options: Dict[str, Any] = {
        # SQL echo only in DEBUG; it is very noisy otherwise
        "echo": settings.log_level == "DEBUG",
    }

    if make_url(settings.database_url).get_backend_name() == "postgresql":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
            connect_args=_tls_connect_args(settings),
        )

    return options


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Build the process-wide async engine (connection pool).

    When: Once, in the application lifespan, before traffic is accepted.
    """
    url = make_url(settings.database_url)
    logger.info(
        "Creating database engine: %s (tls=%s)",
        url.render_as_string(hide_password=True),
        settings.is_production,
    )
    return create_async_engine(settings.database_url, **engine_options(settings))


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to the engine.

    expire_on_commit=False: ORM attributes stay readable after commit; the
    read path commits the view increment and then builds its response from
    the row it already loaded.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Schema Bootstrap ──────────────────────────────────────────────────────
async def init_schema(engine: AsyncEngine, strict: bool = False) -> bool:
    """
    Idempotently create the `pastes` table.

    What:  CREATE TABLE IF NOT EXISTS for every model registered on Base
           (create_all checks for existing tables first).
    When:  Called by the lifespan before the server accepts requests.

    Failure policy:
        strict=False → log at ERROR and return False; startup continues and
                       paste requests answer 500 until the table exists.
        strict=True  → the original exception propagates and startup aborts.

    Returns:
        True if the schema is in place, False if bootstrap failed (non-strict).
    """
    # Models must be imported so they register with Base.metadata
    from pastebin.models.paste import Paste  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error("Table creation failed: %s", str(e), exc_info=True)
        if strict:
            raise
        return False

    logger.info("Database schema ready (tables: %s)", ", ".join(Base.metadata.tables))
    return True


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the factory stored on app.state by the lifespan
        2. Yields it to the route handler
        3. On error: rolls back anything left uncommitted
        4. Always: closes the session (returns the connection to the pool)

    The paste service commits each statement itself, so there is nothing to
    commit here on success.

    Example usage in a route:
        @router.get("/paste/{paste_id}")
        async def read_paste(paste_id: str, db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory

    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise  # Re-raise so the global error handler can respond
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
    logger.info("Database engine disposed")
