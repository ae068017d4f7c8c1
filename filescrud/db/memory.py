"""
In-memory persistence backend.
Dipakai untuk development dan testing; state hidup selama MemoryTables hidup.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from filescrud.core.exceptions import ConflictError
from filescrud.schemas.user import FailedLoginAttempts, User
from filescrud.utils.clock import Clock, utcnow


@dataclass
class MemoryTables:
    """Tabel yang di-share oleh semua MemoryDatabase dari satu factory."""
    user: Dict[str, User] = field(default_factory=dict)
    jwt_key: List[str] = field(default_factory=list)
    failed_login_attempts: Dict[str, FailedLoginAttempts] = field(default_factory=dict)


class MemoryDatabase:
    """
    Database capability di atas MemoryTables.
    Record di-copy saat masuk dan keluar supaya caller tidak bisa
    memodifikasi state tersimpan secara tidak sengaja.
    """

    def __init__(self, tables: MemoryTables, clock: Clock = utcnow):
        self.tables = tables
        self._clock = clock

    async def open(self) -> None:
        # tidak ada koneksi untuk dibuka
        pass

    async def close(self) -> None:
        pass

    async def get_user(self, username: str) -> Optional[User]:
        user = self.tables.user.get(username)
        return user.model_copy(deep=True) if user else None

    async def add_user(self, user: User) -> None:
        if user.username in self.tables.user:
            raise ConflictError(f"User {user.username!r} already exists")
        self.tables.user[user.username] = user.model_copy(deep=True)

    async def update_hash(self, username: str, hash_version: str, salt: str, hash: str) -> None:
        user = self.tables.user.get(username)
        if user is None:
            return
        self.tables.user[username] = user.model_copy(
            update={"hash_version": hash_version, "salt": salt, "hash": hash}
        )

    async def change_username(self, old_username: str, new_username: str) -> None:
        if old_username not in self.tables.user:
            return
        if new_username in self.tables.user:
            raise ConflictError(f"User {new_username!r} already exists")
        user = self.tables.user.pop(old_username)
        self.tables.user[new_username] = user.model_copy(update={"username": new_username})

    async def user_exists(self, username: str) -> bool:
        return username in self.tables.user

    async def remove_user(self, username: str) -> None:
        self.tables.user.pop(username, None)

    async def count_login_attempt(self, username: str) -> None:
        current = self.tables.failed_login_attempts.get(username)
        attempts = current.attempts if current else 0
        self.tables.failed_login_attempts[username] = FailedLoginAttempts(
            username=username,
            attempts=attempts + 1,
            last_attempt=self._clock()
        )

    async def update_last_login_attempt(self, username: str) -> None:
        current = self.tables.failed_login_attempts.get(username)
        if current is None:
            return
        self.tables.failed_login_attempts[username] = current.model_copy(
            update={"last_attempt": self._clock()}
        )

    async def get_login_attempts(self, username: str) -> Optional[FailedLoginAttempts]:
        attempts = self.tables.failed_login_attempts.get(username)
        return attempts.model_copy() if attempts else None

    async def remove_login_attempts(self, username: str) -> None:
        self.tables.failed_login_attempts.pop(username, None)

    async def add_jwt_keys(self, *keys: str) -> None:
        self.tables.jwt_key.extend(keys)

    async def get_jwt_keys(self) -> List[str]:
        return list(self.tables.jwt_key)

    async def remove_jwt_key(self, key: str) -> None:
        self.tables.jwt_key[:] = [k for k in self.tables.jwt_key if k != key]
