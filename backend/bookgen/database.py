"""Database engine and session management"""
import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from bookgen.config import settings
from bookgen.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp used for created_at/updated_at columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None
_engine_lock = asyncio.Lock()

# Session statistics (connection leak monitoring)
_session_stats = {
    "created": 0,
    "closed": 0,
    "active": 0,
    "errors": 0,
    "last_check": None,
}


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite connections get WAL and a busy timeout."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"timeout": 30, "check_same_thread": False}

    engine = create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )

    if database_url.startswith("sqlite"):
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

    return engine


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it on first use."""
    global _engine, _session_factory
    if _engine is not None:
        return _engine

    async with _engine_lock:
        if _engine is None:
            url = make_url(settings.database_url)
            if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            _engine = create_engine_for(settings.database_url, echo=settings.database_echo)
            _session_factory = make_session_factory(_engine)
            logger.info(f"Database engine created: {_engine.url.render_as_string(hide_password=True)}")
    return _engine


async def get_db():
    """FastAPI dependency yielding one session per request.

    Any transaction still open when the request ends is rolled back, so a
    cancelled or failed request never leaves partial writes visible.
    """
    await get_db_engine()
    session = _session_factory()
    session_id = id(session)

    _session_stats["created"] += 1
    _session_stats["active"] += 1
    logger.debug(f"Session opened [{session_id}] active={_session_stats['active']}")

    try:
        yield session
    except Exception as e:
        _session_stats["errors"] += 1
        logger.error(f"Session error [{session_id}]: {e}")
        if session.in_transaction():
            await session.rollback()
        raise
    finally:
        if session.in_transaction():
            await session.rollback()
        await session.close()

        _session_stats["closed"] += 1
        _session_stats["active"] -= 1
        _session_stats["last_check"] = datetime.now().isoformat()
        logger.debug(f"Session closed [{session_id}] active={_session_stats['active']}")

        if _session_stats["active"] > 100:
            logger.warning(f"🚨 Too many active sessions: {_session_stats['active']}, possible leak")


async def init_db(engine: Optional[AsyncEngine] = None):
    """Create all tables."""
    # Registers every model on Base.metadata
    import bookgen.models  # noqa: F401

    engine = engine or await get_db_engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✅ Database schema ready")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        raise


async def close_db():
    """Dispose the engine and its pooled connections."""
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Database connections closed")
