"""
SQL persistence backend (SQLAlchemy async).
PostgreSQL via asyncpg di production, SQLite via aiosqlite di testing.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

from sqlalchemy import delete, select, update, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from filescrud.core.exceptions import ConfigurationError, ConflictError, PersistenceError
from filescrud.models.jwt_key import JwtKey
from filescrud.models.login_attempt import FailedLoginAttempt
from filescrud.models.user import User as UserModel
from filescrud.schemas.user import FailedLoginAttempts, User
from filescrud.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

# Dialect yang mendukung INSERT ... ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _upsert_insert(session: AsyncSession):
    dialect = session.bind.dialect.name
    try:
        return UPSERT_INSERTS[dialect]
    except KeyError:
        raise ConfigurationError(f"SQL dialect {dialect!r} does not support upsert") from None


class SqlDatabase:
    """
    Database capability di atas satu AsyncSession.
    Session dibuat saat open() dan ditutup saat close(); setiap write di-commit langsung.
    """

    def __init__(self, session_factory: async_sessionmaker, clock: Clock = utcnow):
        self._session_factory = session_factory
        self._clock = clock
        self._session: Optional[AsyncSession] = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise PersistenceError("Database session is not open")
        return self._session

    async def open(self) -> None:
        if self._session is None:
            self._session = self._session_factory()

    async def close(self) -> None:
        if self._session is not None:
            try:
                await self._session.close()
            finally:
                self._session = None

    @asynccontextmanager
    async def _transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Jalankan statements dan commit; error driver diubah jadi PersistenceError."""
        session = self.session
        try:
            yield session
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            raise ConflictError("Constraint violation", details={"error": str(e.orig)}) from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQL backend error: {e}")
            raise PersistenceError(f"SQL backend error: {type(e).__name__}") from e

    @asynccontextmanager
    async def _query(self) -> AsyncGenerator[AsyncSession, None]:
        try:
            yield self.session
        except SQLAlchemyError as e:
            logger.error(f"SQL backend error: {e}")
            raise PersistenceError(f"SQL backend error: {type(e).__name__}") from e

    # Users

    async def get_user(self, username: str) -> Optional[User]:
        async with self._query() as session:
            result = await session.execute(
                select(UserModel).where(UserModel.u_username == username)
            )
            row = result.scalar_one_or_none()
        return row.to_record() if row else None

    async def add_user(self, user: User) -> None:
        async with self._transaction() as session:
            session.add(UserModel.from_record(user))

    async def update_hash(self, username: str, hash_version: str, salt: str, hash: str) -> None:
        async with self._transaction() as session:
            await session.execute(
                update(UserModel)
                .where(UserModel.u_username == username)
                .values(u_hash_version=hash_version, u_salt=salt, u_hash=hash)
            )

    async def change_username(self, old_username: str, new_username: str) -> None:
        async with self._transaction() as session:
            await session.execute(
                update(UserModel)
                .where(UserModel.u_username == old_username)
                .values(u_username=new_username)
            )

    async def user_exists(self, username: str) -> bool:
        async with self._query() as session:
            result = await session.execute(
                select(func.count()).select_from(UserModel).where(UserModel.u_username == username)
            )
            return result.scalar_one() > 0

    async def remove_user(self, username: str) -> None:
        async with self._transaction() as session:
            await session.execute(delete(UserModel).where(UserModel.u_username == username))

    # Failed login attempts

    async def count_login_attempt(self, username: str) -> None:
        now = self._clock()
        insert = _upsert_insert(self.session)
        statement = insert(FailedLoginAttempt).values(
            fla_username=username,
            fla_attempts=1,
            fla_last_attempt=now
        )
        statement = statement.on_conflict_do_update(
            index_elements=[FailedLoginAttempt.fla_username],
            set_={
                "fla_attempts": FailedLoginAttempt.fla_attempts + 1,
                "fla_last_attempt": now,
            }
        )
        async with self._transaction() as session:
            await session.execute(statement)

    async def update_last_login_attempt(self, username: str) -> None:
        async with self._transaction() as session:
            await session.execute(
                update(FailedLoginAttempt)
                .where(FailedLoginAttempt.fla_username == username)
                .values(fla_last_attempt=self._clock())
            )

    async def get_login_attempts(self, username: str) -> Optional[FailedLoginAttempts]:
        async with self._query() as session:
            result = await session.execute(
                select(FailedLoginAttempt).where(FailedLoginAttempt.fla_username == username)
            )
            row = result.scalar_one_or_none()
        return row.to_record() if row else None

    async def remove_login_attempts(self, username: str) -> None:
        async with self._transaction() as session:
            await session.execute(
                delete(FailedLoginAttempt).where(FailedLoginAttempt.fla_username == username)
            )

    # JWT signing keys

    async def add_jwt_keys(self, *keys: str) -> None:
        async with self._transaction() as session:
            session.add_all([JwtKey(jk_key=key) for key in keys])

    async def get_jwt_keys(self) -> List[str]:
        async with self._query() as session:
            result = await session.execute(select(JwtKey.jk_key).order_by(JwtKey.jk_id))
            return list(result.scalars().all())

    async def remove_jwt_key(self, key: str) -> None:
        async with self._transaction() as session:
            await session.execute(delete(JwtKey).where(JwtKey.jk_key == key))
