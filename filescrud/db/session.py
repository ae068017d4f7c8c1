"""
Database session management untuk Files-CRUD Auth.
Menggunakan SQLAlchemy dengan async support, plus scoped acquisition
untuk persistence capability yang dipakai AuthService.
"""

from typing import AsyncGenerator, Callable, Optional
import logging
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.pool import NullPool
from sqlalchemy import text

from filescrud.core.config import Settings
from filescrud.db.base import Base
from filescrud.db.interface import Database

logger = logging.getLogger(__name__)

DatabaseFactory = Callable[[], Database]


def create_engine(settings: Settings, url: Optional[str] = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine dengan konfigurasi dari settings.

    Args:
        settings: Application settings
        url: Override connection URL

    Returns:
        Configured AsyncEngine
    """
    url = url or settings.DATABASE_URL
    engine_args = {
        "echo": settings.DEBUG,
        "pool_pre_ping": settings.DB_POOL_PRE_PING,
    }

    if settings.ENVIRONMENT == "test" or url.startswith("sqlite"):
        # NullPool untuk testing dan SQLite file database
        engine_args["poolclass"] = NullPool
    else:
        engine_args["pool_size"] = settings.DB_POOL_SIZE
        engine_args["max_overflow"] = settings.DB_MAX_OVERFLOW
        engine_args["pool_timeout"] = 30
        engine_args["pool_recycle"] = 3600

    return create_async_engine(url, **engine_args)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create session factory untuk engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialize database.
    - Test connection
    - Create tables
    """
    # Import models supaya metadata terisi
    import filescrud.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


async def close_db(engine: AsyncEngine) -> None:
    """
    Close database connections.
    Should be called on application shutdown.
    """
    await engine.dispose()
    logger.info("Database connections closed")


@asynccontextmanager
async def database_scope(factory: DatabaseFactory) -> AsyncGenerator[Database, None]:
    """
    Acquire persistence capability untuk satu operasi.
    close() selalu dijalankan, termasuk saat open() atau operasi gagal.

    Example:
        async with database_scope(factory) as db:
            user = await db.get_user("alice")
    """
    db = factory()
    try:
        await db.open()
        yield db
    finally:
        await db.close()
