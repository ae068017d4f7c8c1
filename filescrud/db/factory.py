"""
Pemilihan backend persistence berdasarkan konfigurasi.
"""

import logging
from typing import Awaitable, Callable, Optional

import redis.asyncio as redis

from filescrud.core.config import Settings
from filescrud.core.constants import DatabaseBackend
from filescrud.core.exceptions import ConfigurationError
from filescrud.db.interface import Database
from filescrud.db.memory import MemoryDatabase, MemoryTables
from filescrud.db.redis_store import RedisDatabase
from filescrud.db.session import DatabaseFactory, close_db, create_engine, create_session_factory, init_db
from filescrud.db.sql import SqlDatabase
from filescrud.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

Hook = Callable[[], Awaitable[None]]


class PersistenceProvider:
    """
    Factory Database capability plus lifecycle hooks backend.
    Instance callable, jadi bisa langsung dipakai sebagai DatabaseFactory.
    """

    def __init__(
        self,
        backend: str,
        factory: DatabaseFactory,
        on_startup: Optional[Hook] = None,
        on_shutdown: Optional[Hook] = None
    ):
        self.backend = backend
        self._factory = factory
        self._on_startup = on_startup
        self._on_shutdown = on_shutdown

    def __call__(self) -> Database:
        return self._factory()

    async def startup(self) -> None:
        if self._on_startup:
            await self._on_startup()
        logger.info(f"Persistence backend '{self.backend}' ready")

    async def shutdown(self) -> None:
        if self._on_shutdown:
            await self._on_shutdown()
        logger.info(f"Persistence backend '{self.backend}' closed")


def create_persistence(settings: Settings, clock: Clock = utcnow) -> PersistenceProvider:
    """
    Bangun PersistenceProvider sesuai DATABASE_BACKEND.

    Args:
        settings: Application settings
        clock: Sumber waktu untuk failed login attempts

    Returns:
        PersistenceProvider untuk backend terpilih

    Raises:
        ConfigurationError: Jika backend tidak dikenal
    """
    backend = settings.DATABASE_BACKEND

    if backend == DatabaseBackend.MEMORY:
        tables = MemoryTables()
        return PersistenceProvider(backend, lambda: MemoryDatabase(tables, clock=clock))

    if backend == DatabaseBackend.SQL:
        engine = create_engine(settings)
        session_factory = create_session_factory(engine)
        return PersistenceProvider(
            backend,
            lambda: SqlDatabase(session_factory, clock=clock),
            on_startup=lambda: init_db(engine),
            on_shutdown=lambda: close_db(engine)
        )

    if backend == DatabaseBackend.REDIS:
        pool = redis.ConnectionPool.from_url(settings.REDIS_URL, decode_responses=True)
        return PersistenceProvider(
            backend,
            lambda: RedisDatabase(
                lambda: redis.Redis(connection_pool=pool),
                clock=clock,
                attempts_ttl=settings.login_attempts_ttl_timedelta
            ),
            on_shutdown=pool.disconnect
        )

    raise ConfigurationError(f"Unknown database backend: {backend}")
