"""
Kontrak persistence capability untuk Files-CRUD Auth.
Semua backend (memory, sql, redis) memenuhi Protocol ini tanpa inheritance.
"""

from typing import List, Optional, Protocol, runtime_checkable

from filescrud.schemas.user import FailedLoginAttempts, User


@runtime_checkable
class Database(Protocol):
    """
    Persistence capability yang dikonsumsi AuthService.

    Satu instance dibuka di awal setiap operasi dan ditutup di akhir,
    lihat filescrud.db.session.database_scope.
    """

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    # Users
    async def get_user(self, username: str) -> Optional[User]: ...

    async def add_user(self, user: User) -> None: ...

    async def update_hash(self, username: str, hash_version: str, salt: str, hash: str) -> None: ...

    async def change_username(self, old_username: str, new_username: str) -> None: ...

    async def user_exists(self, username: str) -> bool: ...

    async def remove_user(self, username: str) -> None: ...

    # Failed login attempts
    async def count_login_attempt(self, username: str) -> None: ...

    async def update_last_login_attempt(self, username: str) -> None: ...

    async def get_login_attempts(self, username: str) -> Optional[FailedLoginAttempts]: ...

    async def remove_login_attempts(self, username: str) -> None: ...

    # JWT signing keys
    async def add_jwt_keys(self, *keys: str) -> None: ...

    async def get_jwt_keys(self) -> List[str]: ...

    async def remove_jwt_key(self, key: str) -> None: ...
