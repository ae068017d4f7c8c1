"""
Pytest configuration and fixtures for Files-CRUD Auth tests.
"""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable, Dict

import pytest
import pytest_asyncio
import fakeredis
import fakeredis.aioredis
from httpx import ASGITransport, AsyncClient

from filescrud.core.config import settings
from filescrud.core.constants import HashVersion
from filescrud.core.security import Argon2Strategy, PasswordHashingRegistry, Pbkdf2Strategy
from filescrud.db.memory import MemoryDatabase, MemoryTables
from filescrud.db.redis_store import RedisDatabase
from filescrud.db.session import DatabaseFactory, close_db, create_engine, create_session_factory, init_db
from filescrud.db.sql import SqlDatabase
from filescrud.main import create_application
from filescrud.services.auth import AuthService
from filescrud.services.lockout import LockoutGuard
from filescrud.services.token import TokenService


# Override settings for testing
settings.ENVIRONMENT = "test"
settings.DEBUG = True

TEST_PASSWORD = "TestPassword123!"
MAX_ATTEMPTS = 5
LOCKOUT_WINDOW = timedelta(minutes=30)
ATTEMPTS_TTL = timedelta(hours=24)


class FakeClock:
    """Clock yang hanya maju ketika test memanggil advance()."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock untuk lockout window, token expiry dan backends."""
    return FakeClock(datetime.now(timezone.utc))


@pytest.fixture
def registry() -> PasswordHashingRegistry:
    """Registry v1 + v2 dengan parameter murah supaya test cepat."""
    return PasswordHashingRegistry(
        strategies=[
            Pbkdf2Strategy(iterations=1000),
            Argon2Strategy(rounds=1, memory_cost=1024, parallelism=1),
        ],
        current=HashVersion.V2.value
    )


@pytest.fixture
def tables() -> MemoryTables:
    return MemoryTables()


@pytest.fixture
def memory_factory(tables: MemoryTables, clock: FakeClock) -> DatabaseFactory:
    return lambda: MemoryDatabase(tables, clock=clock)


@pytest.fixture
def lockout(clock: FakeClock) -> LockoutGuard:
    return LockoutGuard(max_attempts=MAX_ATTEMPTS, window=LOCKOUT_WINDOW, clock=clock)


@pytest.fixture
def tokens(clock: FakeClock) -> TokenService:
    return TokenService(algorithm="HS256", expires_delta=timedelta(minutes=60), key_bytes=32, clock=clock)


@pytest.fixture
def auth_service(
    memory_factory: DatabaseFactory,
    registry: PasswordHashingRegistry,
    lockout: LockoutGuard,
    tokens: TokenService
) -> AuthService:
    """AuthService di atas memory backend."""
    return AuthService(memory_factory, registry, lockout, tokens)


@pytest_asyncio.fixture
async def test_user(auth_service: AuthService) -> Dict[str, str]:
    """Registered test user."""
    result = await auth_service.register("testuser", TEST_PASSWORD, meta={"test": True})
    assert result.ok
    return {"username": "testuser", "password": TEST_PASSWORD}


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    """Satu fake Redis server yang di-share oleh semua client dalam satu test."""
    return fakeredis.FakeServer()


@pytest_asyncio.fixture(params=["memory", "sql", "redis"])
async def database_factory(
    request,
    tmp_path,
    clock: FakeClock,
    redis_server: fakeredis.FakeServer
) -> AsyncGenerator[DatabaseFactory, None]:
    """
    Parametrized persistence backend factory.
    SQL memakai SQLite file database (aiosqlite), Redis memakai fakeredis.
    """
    if request.param == "memory":
        tables = MemoryTables()
        yield lambda: MemoryDatabase(tables, clock=clock)

    elif request.param == "sql":
        engine = create_engine(settings, url=f"sqlite+aiosqlite:///{tmp_path / 'filescrud.db'}")
        await init_db(engine)
        session_factory = create_session_factory(engine)
        yield lambda: SqlDatabase(session_factory, clock=clock)
        await close_db(engine)

    else:
        def client_factory():
            return fakeredis.aioredis.FakeRedis(server=redis_server, decode_responses=True)

        yield lambda: RedisDatabase(client_factory, clock=clock, attempts_ttl=ATTEMPTS_TTL)


@pytest_asyncio.fixture
async def async_client(auth_service: AuthService) -> AsyncGenerator[AsyncClient, None]:
    """
    Async test client. ASGITransport tidak menjalankan lifespan, jadi
    AuthService dipasang langsung ke app.state.
    """
    app = create_application()
    app.state.auth_service = auth_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def auth_headers(auth_service: AuthService, test_user: Dict[str, str]) -> Dict[str, str]:
    """Authorization header untuk test user."""
    result = await auth_service.login(test_user["username"], test_user["password"])
    assert result.ok
    return {"Authorization": f"Bearer {result.token}"}


@pytest.fixture
def fail_login() -> Callable:
    """Helper untuk menghasilkan n percobaan login gagal."""
    async def _fail(service: AuthService, username: str, times: int) -> None:
        for _ in range(times):
            await service.login(username, "definitely-wrong")

    return _fail
