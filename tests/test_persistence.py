"""
Tests for the persistence backends (memory, SQL via aiosqlite, Redis via fakeredis).
Setiap test di TestDatabaseContract dijalankan untuk ketiga backend.
"""

import asyncio
from datetime import timedelta
from uuid import uuid4

import fakeredis.aioredis
import pytest
from pydantic import ValidationError as SettingsValidationError
from redis.asyncio.client import Pipeline
from redis.exceptions import ConnectionError as RedisConnectionError

from filescrud.core.config import Settings
from filescrud.core.constants import REDIS_LOGIN_ATTEMPTS_PREFIX, REDIS_USER_PREFIX, ResultCode
from filescrud.core.exceptions import ConflictError, PersistenceError
from filescrud.db.factory import create_persistence
from filescrud.db.interface import Database
from filescrud.db.memory import MemoryDatabase
from filescrud.db.redis_store import RedisDatabase
from filescrud.db.session import database_scope
from filescrud.schemas.user import User
from filescrud.services.auth import AuthService

from tests.conftest import ATTEMPTS_TTL, MAX_ATTEMPTS, TEST_PASSWORD


def make_user(username: str = "alice", **overrides) -> User:
    data = {
        "username": username,
        "hash_version": "v2",
        "salt": "c2FsdA",
        "hash": "$argon2id$fake",
        "owner_id": str(uuid4()),
        "admin": False,
        "meta": {"quota": 10, "tags": ["a", "b"]},
    }
    data.update(overrides)
    return User(**data)


@pytest.mark.asyncio
@pytest.mark.integration
class TestDatabaseContract:
    """Behaviour every Database backend must share."""

    async def test_satisfies_protocol(self, database_factory):
        async with database_scope(database_factory) as db:
            assert isinstance(db, Database)

    async def test_add_and_get_user(self, database_factory):
        user = make_user(admin=True)

        async with database_scope(database_factory) as db:
            await db.add_user(user)

        async with database_scope(database_factory) as db:
            stored = await db.get_user("alice")
            assert stored.model_dump() == user.model_dump()
            assert await db.user_exists("alice") is True
            assert await db.get_user("bob") is None
            assert await db.user_exists("bob") is False

    async def test_add_duplicate_user_conflicts(self, database_factory):
        async with database_scope(database_factory) as db:
            await db.add_user(make_user())

        async with database_scope(database_factory) as db:
            with pytest.raises(ConflictError):
                await db.add_user(make_user())

    async def test_update_hash(self, database_factory):
        user = make_user(hash_version="v1")
        async with database_scope(database_factory) as db:
            await db.add_user(user)
            await db.update_hash("alice", "v2", "new-salt", "new-hash")
            stored = await db.get_user("alice")

        assert (stored.hash_version, stored.salt, stored.hash) == ("v2", "new-salt", "new-hash")
        assert stored.owner_id == user.owner_id

    async def test_update_hash_missing_user_is_noop(self, database_factory):
        async with database_scope(database_factory) as db:
            await db.update_hash("ghost", "v2", "salt", "hash")
            assert await db.user_exists("ghost") is False

    async def test_change_username_preserves_fields(self, database_factory):
        user = make_user()
        async with database_scope(database_factory) as db:
            await db.add_user(user)
            await db.change_username("alice", "alicia")

        async with database_scope(database_factory) as db:
            assert await db.get_user("alice") is None
            renamed = await db.get_user("alicia")

        assert renamed.model_dump() == {**user.model_dump(), "username": "alicia"}

    async def test_change_username_onto_existing_conflicts(self, database_factory):
        async with database_scope(database_factory) as db:
            await db.add_user(make_user("alice"))
            await db.add_user(make_user("bob"))

        async with database_scope(database_factory) as db:
            with pytest.raises(ConflictError):
                await db.change_username("alice", "bob")

        async with database_scope(database_factory) as db:
            assert await db.user_exists("alice")
            assert await db.user_exists("bob")

    async def test_remove_user(self, database_factory):
        async with database_scope(database_factory) as db:
            await db.add_user(make_user())
            await db.remove_user("alice")
            await db.remove_user("alice")
            assert await db.get_user("alice") is None

    async def test_count_login_attempts(self, database_factory, clock):
        """Test counting stores attempts and the clock time of the last one."""
        async with database_scope(database_factory) as db:
            assert await db.get_login_attempts("alice") is None

            await db.count_login_attempt("alice")
            clock.advance(minutes=1)
            await db.count_login_attempt("alice")

            record = await db.get_login_attempts("alice")

        assert record.username == "alice"
        assert record.attempts == 2
        assert abs(record.last_attempt - clock()) < timedelta(seconds=1)

    async def test_concurrent_first_failures_are_counted(self, database_factory):
        """Test simultaneous first failures on separate connections never raise."""
        async def fail_once():
            async with database_scope(database_factory) as db:
                await db.count_login_attempt("alice")

        await asyncio.gather(*(fail_once() for _ in range(5)))

        async with database_scope(database_factory) as db:
            record = await db.get_login_attempts("alice")

        assert record.attempts == 5

    async def test_update_last_login_attempt(self, database_factory, clock):
        async with database_scope(database_factory) as db:
            await db.count_login_attempt("alice")
            clock.advance(minutes=10)
            await db.update_last_login_attempt("alice")
            record = await db.get_login_attempts("alice")

        assert record.attempts == 1
        assert abs(record.last_attempt - clock()) < timedelta(seconds=1)

    async def test_update_last_login_attempt_without_record_is_noop(self, database_factory):
        async with database_scope(database_factory) as db:
            await db.update_last_login_attempt("alice")
            assert await db.get_login_attempts("alice") is None

    async def test_remove_login_attempts(self, database_factory):
        async with database_scope(database_factory) as db:
            await db.count_login_attempt("alice")
            await db.remove_login_attempts("alice")
            assert await db.get_login_attempts("alice") is None

    async def test_jwt_keys_keep_insertion_order(self, database_factory):
        async with database_scope(database_factory) as db:
            assert await db.get_jwt_keys() == []

            await db.add_jwt_keys("k1", "k2")
            await db.add_jwt_keys("k3")
            assert await db.get_jwt_keys() == ["k1", "k2", "k3"]

            await db.remove_jwt_key("k2")
            assert await db.get_jwt_keys() == ["k1", "k3"]


@pytest.mark.asyncio
@pytest.mark.integration
class TestAuthServiceOnBackends:
    """End-to-end credential flows on every backend."""

    @pytest.fixture
    def service(self, database_factory, registry, lockout, tokens) -> AuthService:
        return AuthService(database_factory, registry, lockout, tokens)

    async def test_register_login_authorize(self, service):
        assert (await service.register("alice", TEST_PASSWORD)).ok

        result = await service.login("alice", TEST_PASSWORD)
        assert result.ok

        user = await service.authorize(result.token)
        assert user.username == "alice"

    async def test_legacy_hash_migrates(self, service, database_factory, registry):
        salt, hashed = registry.get("v1").hash_password(TEST_PASSWORD)
        async with database_scope(database_factory) as db:
            await db.add_user(make_user(hash_version="v1", salt=salt, hash=hashed))

        result = await service.login("alice", TEST_PASSWORD)

        assert result.ok
        async with database_scope(database_factory) as db:
            assert (await db.get_user("alice")).hash_version == "v2"

    async def test_lockout(self, service, fail_login):
        await service.register("alice", TEST_PASSWORD)
        await fail_login(service, "alice", MAX_ATTEMPTS)

        result = await service.login("alice", TEST_PASSWORD)

        assert result.code == "ATTEMPTS_EXCEEDED"

    async def test_rename_conflict(self, service):
        await service.register("alice", TEST_PASSWORD)
        await service.register("bob", TEST_PASSWORD)

        result = await service.change_username("alice", "bob")

        assert result.code == "USER_ALREADY_EXISTS"


@pytest.mark.asyncio
@pytest.mark.unit
class TestPersistenceFactory:
    """Test backend selection from settings."""

    async def test_memory_backend_shares_tables(self):
        provider = create_persistence(Settings(DATABASE_BACKEND="memory"))
        await provider.startup()

        first, second = provider(), provider()
        assert isinstance(first, MemoryDatabase)
        assert first.tables is second.tables

        await provider.shutdown()

    async def test_redis_backend(self):
        provider = create_persistence(Settings(DATABASE_BACKEND="redis", LOGIN_ATTEMPTS_TTL_MINUTES=90))

        assert provider.backend == "redis"
        db = provider()
        assert isinstance(db, RedisDatabase)
        assert db._attempts_ttl == timedelta(minutes=90)

        await provider.shutdown()


async def broken_execute(self, raise_on_error=True):
    """Pengganti Pipeline.execute: MULTI/EXEC gagal seolah koneksi Redis terputus."""
    raise RedisConnectionError("Connection reset by peer")


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("database_factory", ["redis"], indirect=True)
class TestRedisDatabase:
    """Atomicity and expiry behaviour specific to the Redis backend."""

    @pytest.fixture
    def raw_client(self, redis_server):
        return fakeredis.aioredis.FakeRedis(server=redis_server, decode_responses=True)

    async def test_failed_registration_leaves_no_record(self, database_factory, monkeypatch):
        monkeypatch.setattr(Pipeline, "execute", broken_execute)
        async with database_scope(database_factory) as db:
            with pytest.raises(PersistenceError):
                await db.add_user(make_user())

        monkeypatch.undo()

        async with database_scope(database_factory) as db:
            assert await db.user_exists("alice") is False
            await db.add_user(make_user())
            assert (await db.get_user("alice")).hash_version == "v2"

    async def test_failed_rename_keeps_old_record(self, database_factory, monkeypatch):
        user = make_user()
        async with database_scope(database_factory) as db:
            await db.add_user(user)

        monkeypatch.setattr(Pipeline, "execute", broken_execute)
        async with database_scope(database_factory) as db:
            with pytest.raises(PersistenceError):
                await db.change_username("alice", "alicia")
        monkeypatch.undo()

        async with database_scope(database_factory) as db:
            assert (await db.get_user("alice")).model_dump() == user.model_dump()
            assert await db.get_user("alicia") is None

    async def test_incomplete_user_record_rejected(self, database_factory, raw_client):
        await raw_client.hset(f"{REDIS_USER_PREFIX}bob", "salt", "c2FsdA")

        async with database_scope(database_factory) as db:
            with pytest.raises(PersistenceError) as exc_info:
                await db.get_user("bob")

        assert "hash_version" in exc_info.value.details["missing_fields"]

    async def test_login_during_registration(self, database_factory, registry, lockout, tokens):
        """Test logins racing a registration see either no user or the full record."""
        service = AuthService(database_factory, registry, lockout, tokens)

        results = await asyncio.gather(
            service.register("carol", TEST_PASSWORD),
            *(service.login("carol", TEST_PASSWORD) for _ in range(MAX_ATTEMPTS - 1))
        )

        assert results[0].ok
        assert all(r.code in (ResultCode.SUCCESS, ResultCode.INVALID_CREDENTIALS) for r in results[1:])
        assert (await service.login("carol", TEST_PASSWORD)).ok

    async def test_login_attempts_expire(self, database_factory, raw_client):
        async with database_scope(database_factory) as db:
            await db.count_login_attempt("alice")

        ttl = await raw_client.ttl(f"{REDIS_LOGIN_ATTEMPTS_PREFIX}alice")
        assert 0 < ttl <= ATTEMPTS_TTL.total_seconds()

    async def test_locked_user_touch_refreshes_expiry(self, database_factory, raw_client):
        key = f"{REDIS_LOGIN_ATTEMPTS_PREFIX}alice"
        async with database_scope(database_factory) as db:
            await db.count_login_attempt("alice")
            await raw_client.expire(key, 60)
            await db.update_last_login_attempt("alice")

        assert await raw_client.ttl(key) > 60


@pytest.mark.unit
def test_attempts_ttl_must_outlast_lockout():
    with pytest.raises(SettingsValidationError):
        Settings(ACCOUNT_LOCKOUT_MINUTES=30, LOGIN_ATTEMPTS_TTL_MINUTES=30)
