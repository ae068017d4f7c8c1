"""
Authentication service untuk Files-CRUD Auth.
Menangani business logic untuk register, login, authorize, dan perubahan credential.

Policy failures (username dipakai, password salah, akun terkunci) dikembalikan
sebagai AuthResult dengan ResultCode, bukan exception. Kegagalan infrastruktur
(persistence, konfigurasi hashing) tetap di-raise ke caller.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any
from uuid import uuid4

from filescrud.core.config import Settings
from filescrud.core.constants import ResultCode
from filescrud.core.exceptions import ConflictError, PersistenceError
from filescrud.core.security import PasswordHashingRegistry, build_registry
from filescrud.db.interface import Database
from filescrud.db.session import DatabaseFactory, database_scope
from filescrud.schemas.user import User
from filescrud.services.lockout import LockoutGuard
from filescrud.services.token import TokenService
from filescrud.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """
    Hasil operasi credential.

    Attributes:
        code: ResultCode.SUCCESS ("") atau kode kegagalan
        token: Token hasil login (hanya untuk login yang berhasil)
    """
    code: ResultCode = ResultCode.SUCCESS
    token: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.code == ResultCode.SUCCESS

    @classmethod
    def success(cls, token: Optional[str] = None) -> "AuthResult":
        return cls(ResultCode.SUCCESS, token)

    @classmethod
    def failure(cls, code: ResultCode) -> "AuthResult":
        return cls(code)


class AuthService:
    """
    Service class untuk credential operations.
    Setiap operasi publik membuka persistence capability sendiri dan
    menutupnya tanpa syarat lewat database_scope.
    """

    def __init__(
        self,
        database: DatabaseFactory,
        registry: PasswordHashingRegistry,
        lockout: LockoutGuard,
        tokens: TokenService
    ):
        """
        Initialize authentication service.

        Args:
            database: Factory yang mengembalikan Database capability baru
            registry: Password hashing registry
            lockout: Lockout guard
            tokens: Token service
        """
        self.database = database
        self.registry = registry
        self.lockout = lockout
        self.tokens = tokens

    @classmethod
    def from_settings(cls, settings: Settings, database: DatabaseFactory, clock: Clock = utcnow) -> "AuthService":
        return cls(
            database=database,
            registry=build_registry(settings),
            lockout=LockoutGuard.from_settings(settings, clock=clock),
            tokens=TokenService.from_settings(settings, clock=clock)
        )

    # Internal steps (dipanggil di dalam database_scope)

    async def _update_hash(self, db: Database, username: str, password: str) -> None:
        hash_version, salt, hashed = self.registry.hash_password(password)
        await db.update_hash(username, hash_version, salt, hashed)

    async def _migrate_hash(self, db: Database, user: User, password: str) -> None:
        """
        Re-hash password yang sudah terverifikasi dengan strategi current.
        Kegagalan persist tidak menggagalkan login, tapi di-log.
        """
        try:
            await self._update_hash(db, user.username, password)
        except PersistenceError:
            logger.exception(
                f"Failed to persist migrated password hash for user '{user.username}' "
                f"(still on {user.hash_version})"
            )
            return
        logger.info(
            f"Migrated password hash for user '{user.username}' "
            f"from {user.hash_version} to {self.registry.current.version}"
        )

    async def _authenticate(self, db: Database, username: str, password: str) -> bool:
        """
        Verifikasi username dan password.

        Proses:
        1. Ambil user; user tidak ada dihitung sebagai percobaan gagal
        2. Verifikasi password dengan strategi yang menghasilkan hash
        3. Reset failed attempts
        4. Migrasi hash jika hashVersion bukan current
        """
        user = await db.get_user(username)
        if user is None:
            await self.lockout.count_attempt(db, username)
            return False

        valid = self.registry.check_password(user.hash_version, password, user.salt, user.hash)
        if not valid:
            await self.lockout.count_attempt(db, username)
            return False

        await self.lockout.reset_attempts(db, username)
        if not self.registry.is_current(user.hash_version):
            await self._migrate_hash(db, user, password)
        return True

    async def _create_user(
        self,
        db: Database,
        username: str,
        password: str,
        admin: bool,
        meta: Optional[Dict[str, Any]]
    ) -> bool:
        if await db.user_exists(username):
            return False

        hash_version, salt, hashed = self.registry.hash_password(password)
        user = User(
            username=username,
            hash_version=hash_version,
            salt=salt,
            hash=hashed,
            owner_id=str(uuid4()),
            admin=admin,
            meta=meta or {}
        )
        try:
            await db.add_user(user)
        except ConflictError:
            # Kalah race dengan registrasi lain untuk username yang sama
            return False
        logger.info(f"User '{username}' created (admin={admin})")
        return True

    # Public operations

    async def add_user(
        self,
        username: str,
        password: str,
        admin: bool = False,
        meta: Optional[Dict[str, Any]] = None
    ) -> AuthResult:
        """
        Buat user baru, termasuk administrator.

        Returns:
            AuthResult sukses atau USER_ALREADY_EXISTS
        """
        async with database_scope(self.database) as db:
            created = await self._create_user(db, username, password, admin, meta)
        return AuthResult.success() if created else AuthResult.failure(ResultCode.USER_ALREADY_EXISTS)

    async def register(
        self,
        username: str,
        password: str,
        meta: Optional[Dict[str, Any]] = None
    ) -> AuthResult:
        """
        Self-service registration; user baru tidak pernah admin.

        Args:
            username: Username yang diminta
            password: Plain text password
            meta: Metadata aplikasi

        Returns:
            AuthResult sukses atau USER_ALREADY_EXISTS
        """
        return await self.add_user(username, password, admin=False, meta=meta)

    async def login(self, username: str, password: str) -> AuthResult:
        """
        Login dengan username dan password.

        Lockout dicek paling awal; akun terkunci tidak pernah menyentuh
        password registry, sehingga tidak membocorkan apakah password benar.

        Returns:
            AuthResult dengan token, INVALID_CREDENTIALS, atau ATTEMPTS_EXCEEDED
        """
        async with database_scope(self.database) as db:
            if await self.lockout.handle_locking(db, username):
                return AuthResult.failure(ResultCode.ATTEMPTS_EXCEEDED)

            if not await self._authenticate(db, username, password):
                return AuthResult.failure(ResultCode.INVALID_CREDENTIALS)

            token = await self.tokens.issue_token(db, username)
        return AuthResult.success(token)

    async def check_password(self, username: str, password: str) -> AuthResult:
        """
        Re-autentikasi tanpa menerbitkan token.

        Returns:
            AuthResult sukses atau INVALID_CREDENTIALS
        """
        async with database_scope(self.database) as db:
            authenticated = await self._authenticate(db, username, password)
        return AuthResult.success() if authenticated else AuthResult.failure(ResultCode.INVALID_CREDENTIALS)

    async def authorize(self, token: Optional[str]) -> Optional[User]:
        """
        Resolve token menjadi user record.

        Returns:
            User, atau None jika token tidak valid atau user sudah dihapus
        """
        async with database_scope(self.database) as db:
            if not await self.tokens.verify_token(db, token):
                return None
            username = self.tokens.extract_username(token)
            return await db.get_user(username)

    async def change_username(self, old_username: str, new_username: str) -> AuthResult:
        """
        Rename user. Semua field lain, termasuk owner_id, tetap.

        Returns:
            AuthResult sukses atau USER_ALREADY_EXISTS
        """
        async with database_scope(self.database) as db:
            if await db.user_exists(new_username):
                return AuthResult.failure(ResultCode.USER_ALREADY_EXISTS)
            try:
                await db.change_username(old_username, new_username)
            except ConflictError:
                return AuthResult.failure(ResultCode.USER_ALREADY_EXISTS)
        logger.info(f"User '{old_username}' renamed to '{new_username}'")
        return AuthResult.success()

    async def change_password(self, username: str, password: str) -> AuthResult:
        """
        Set password baru dengan strategi current, tanpa cek migrasi.
        """
        async with database_scope(self.database) as db:
            await self._update_hash(db, username, password)
        logger.info(f"Password changed for user '{username}'")
        return AuthResult.success()

    async def remove_user(self, username: str) -> AuthResult:
        """
        Hapus user beserta record failed login attempts-nya.
        """
        async with database_scope(self.database) as db:
            await db.remove_user(username)
            await db.remove_login_attempts(username)
        logger.info(f"User '{username}' removed")
        return AuthResult.success()

    # Signing key administration

    async def rotate_signing_key(self) -> str:
        """Tambahkan signing key baru untuk token berikutnya."""
        async with database_scope(self.database) as db:
            return await self.tokens.rotate_signing_key(db)

    async def purge_signing_key(self, key: str) -> None:
        """Hapus signing key dari key set."""
        async with database_scope(self.database) as db:
            await self.tokens.purge_signing_key(db, key)
