"""
Database session management for async SQLAlchemy.
PostgreSQL is used when DATABASE_URL is set, with a SQLite fallback for
local development.
"""

import logging
import os
from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from assetlib.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

_env_database_url = os.environ.get("DATABASE_URL")

if _env_database_url:
    _active_database_url = _env_database_url
    _using_sqlite_fallback = False
elif settings.USE_SQLITE_FALLBACK:
    _active_database_url = settings.SQLITE_FALLBACK_URL
    _using_sqlite_fallback = True
    logger.info("DATABASE_URL not set, using SQLite fallback: %s", _active_database_url)
else:
    _active_database_url = settings.DATABASE_URL
    _using_sqlite_fallback = False


if "sqlite" in _active_database_url:
    engine = create_async_engine(
        _active_database_url,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False},
    )

    # Versions, previews and reviews rely on ON DELETE CASCADE
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    engine = create_async_engine(
        _active_database_url,
        echo=settings.DEBUG,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


def is_using_sqlite_fallback() -> bool:
    """Check if we're using the SQLite development fallback."""
    return _using_sqlite_fallback


def get_active_database_url() -> str:
    """Get the active database URL being used."""
    return _active_database_url


AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.
    The transaction is committed when the request succeeds and rolled back
    otherwise.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
