"""
Redis persistence backend.
User dan failed login attempts disimpan sebagai hash, signing keys sebagai list.

Username tidak disimpan di dalam hash user; nilainya diambil dari key,
sehingga rename cukup satu RENAME. Semua write ke user:<username> berjalan
dalam WATCH/MULTI transaction, jadi pembaca tidak pernah melihat record
setengah jadi.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterator, List, Optional

import redis.asyncio as redis
from redis.asyncio.client import Pipeline
from redis.exceptions import RedisError

from filescrud.core.constants import (
    REDIS_JWT_KEYS,
    REDIS_LOGIN_ATTEMPTS_PREFIX,
    REDIS_USER_PREFIX
)
from filescrud.core.exceptions import ConflictError, PersistenceError
from filescrud.schemas.user import FailedLoginAttempts, User
from filescrud.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

RedisClientFactory = Callable[[], redis.Redis]

USER_FIELDS = ("hash_version", "salt", "hash", "owner_id", "admin", "meta")


@contextmanager
def translate_errors() -> Iterator[None]:
    """Ubah RedisError menjadi PersistenceError."""
    try:
        yield
    except RedisError as e:
        logger.error(f"Redis backend error: {e}")
        raise PersistenceError(f"Redis backend error: {type(e).__name__}") from e


def _user_key(username: str) -> str:
    return f"{REDIS_USER_PREFIX}{username}"


def _attempts_key(username: str) -> str:
    return f"{REDIS_LOGIN_ATTEMPTS_PREFIX}{username}"


def _serialize_user(user: User) -> Dict[str, str]:
    return {
        "hash_version": user.hash_version,
        "salt": user.salt,
        "hash": user.hash,
        "owner_id": user.owner_id,
        "admin": "1" if user.admin else "0",
        "meta": json.dumps(user.meta),
    }


def _deserialize_user(username: str, data: Dict[str, str]) -> User:
    """
    Bangun User dari hash Redis.

    Raises:
        PersistenceError: Jika hash tidak memiliki semua field user
    """
    missing = [field for field in USER_FIELDS if field not in data]
    if missing:
        logger.error(f"Incomplete user record for '{username}': missing {missing}")
        raise PersistenceError(
            "Incomplete user record",
            details={"username": username, "missing_fields": missing}
        )
    return User(
        username=username,
        hash_version=data["hash_version"],
        salt=data["salt"],
        hash=data["hash"],
        owner_id=data["owner_id"],
        admin=data["admin"] == "1",
        meta=json.loads(data["meta"] or "{}"),
    )


class RedisDatabase:
    """
    Database capability di atas redis.asyncio.
    Client harus dibuat dengan decode_responses=True.

    Hash login_attempts:<username> diberi TTL (attempts_ttl) yang diperbarui
    setiap kali record ditulis. Counter di bawah threshold yang tidak
    tersentuh selama TTL ikut hilang; TTL harus lebih panjang dari lockout
    window supaya akun yang sedang terkunci tidak terbuka lebih awal.
    """

    def __init__(
        self,
        client_factory: RedisClientFactory,
        clock: Clock = utcnow,
        attempts_ttl: Optional[timedelta] = None
    ):
        self._client_factory = client_factory
        self._clock = clock
        self._attempts_ttl = attempts_ttl
        self._client: Optional[redis.Redis] = None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise PersistenceError("Redis connection is not open")
        return self._client

    async def open(self) -> None:
        if self._client is None:
            self._client = self._client_factory()

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    # Users

    async def get_user(self, username: str) -> Optional[User]:
        with translate_errors():
            data = await self.client.hgetall(_user_key(username))
        return _deserialize_user(username, data) if data else None

    async def add_user(self, user: User) -> None:
        key = _user_key(user.username)

        async def claim(pipe: Pipeline) -> None:
            if await pipe.exists(key):
                raise ConflictError(f"User {user.username!r} already exists")
            pipe.multi()
            pipe.hset(key, mapping=_serialize_user(user))

        with translate_errors():
            await self.client.transaction(claim, key)

    async def update_hash(self, username: str, hash_version: str, salt: str, hash: str) -> None:
        key = _user_key(username)

        async def rehash(pipe: Pipeline) -> None:
            # User yang sudah dihapus tidak boleh dibuat ulang sebagian
            if not await pipe.exists(key):
                return
            pipe.multi()
            pipe.hset(key, mapping={
                "hash_version": hash_version,
                "salt": salt,
                "hash": hash,
            })

        with translate_errors():
            await self.client.transaction(rehash, key)

    async def change_username(self, old_username: str, new_username: str) -> None:
        old_key = _user_key(old_username)
        new_key = _user_key(new_username)

        async def rename(pipe: Pipeline) -> None:
            if not await pipe.exists(old_key):
                return
            if await pipe.exists(new_key):
                raise ConflictError(f"User {new_username!r} already exists")
            pipe.multi()
            pipe.rename(old_key, new_key)

        with translate_errors():
            await self.client.transaction(rename, old_key, new_key)

    async def user_exists(self, username: str) -> bool:
        with translate_errors():
            return bool(await self.client.exists(_user_key(username)))

    async def remove_user(self, username: str) -> None:
        with translate_errors():
            await self.client.delete(_user_key(username))

    # Failed login attempts

    def _expire_attempts(self, pipe: Pipeline, key: str) -> None:
        if self._attempts_ttl is not None:
            pipe.expire(key, self._attempts_ttl)

    async def count_login_attempt(self, username: str) -> None:
        key = _attempts_key(username)
        with translate_errors():
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.hincrby(key, "attempts", 1)
                pipe.hset(key, "last_attempt", repr(self._clock().timestamp()))
                self._expire_attempts(pipe, key)
                await pipe.execute()

    async def update_last_login_attempt(self, username: str) -> None:
        key = _attempts_key(username)

        async def touch(pipe: Pipeline) -> None:
            if not await pipe.exists(key):
                return
            pipe.multi()
            pipe.hset(key, "last_attempt", repr(self._clock().timestamp()))
            self._expire_attempts(pipe, key)

        with translate_errors():
            await self.client.transaction(touch, key)

    async def get_login_attempts(self, username: str) -> Optional[FailedLoginAttempts]:
        with translate_errors():
            data = await self.client.hgetall(_attempts_key(username))
        if not data:
            return None
        last_attempt = data.get("last_attempt")
        return FailedLoginAttempts(
            username=username,
            attempts=int(data.get("attempts", 0)),
            last_attempt=(
                datetime.fromtimestamp(float(last_attempt), tz=timezone.utc)
                if last_attempt else None
            ),
        )

    async def remove_login_attempts(self, username: str) -> None:
        with translate_errors():
            await self.client.delete(_attempts_key(username))

    # JWT signing keys

    async def add_jwt_keys(self, *keys: str) -> None:
        if not keys:
            return
        with translate_errors():
            await self.client.rpush(REDIS_JWT_KEYS, *keys)

    async def get_jwt_keys(self) -> List[str]:
        with translate_errors():
            return list(await self.client.lrange(REDIS_JWT_KEYS, 0, -1))

    async def remove_jwt_key(self, key: str) -> None:
        with translate_errors():
            await self.client.lrem(REDIS_JWT_KEYS, 0, key)
