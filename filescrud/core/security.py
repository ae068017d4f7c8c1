"""
Modul password hashing untuk Files-CRUD Auth.
Menyediakan strategi hashing berversi dan registry yang memilih strategi
berdasarkan hashVersion yang tersimpan di user record.
"""

import secrets
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Protocol, Tuple

from passlib.context import CryptContext
from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from filescrud.core.config import Settings
from filescrud.core.constants import HashVersion
from filescrud.core.exceptions import ConfigurationError, UnknownHashVersionError


SALT_BYTES = 16


class HashingStrategy(Protocol):
    """Kontrak untuk satu versi algoritma hashing password."""

    version: str

    def hash_password(self, password: str) -> Tuple[str, str]:
        """Return (salt, hash) dengan salt baru."""
        ...

    def check_password(self, password: str, salt: str, hashed: str) -> bool:
        """Return True jika password cocok dengan salt dan hash."""
        ...


class Pbkdf2Strategy:
    """
    Hashing v1: PBKDF2-HMAC-SHA512.
    Salt dan hash disimpan sebagai hex string.
    """

    version = HashVersion.V1.value

    def __init__(self, iterations: int = 100000, key_length: int = 64):
        self.iterations = iterations
        self.key_length = key_length

    def _kdf(self, salt: str) -> PBKDF2HMAC:
        # PBKDF2HMAC instance hanya bisa dipakai sekali
        return PBKDF2HMAC(
            algorithm=hashes.SHA512(),
            length=self.key_length,
            salt=bytes.fromhex(salt),
            iterations=self.iterations,
        )

    def hash_password(self, password: str) -> Tuple[str, str]:
        """
        Hash password menggunakan PBKDF2 dengan salt acak.

        Args:
            password: Plain text password

        Returns:
            Tuple (salt, hash) dalam hex
        """
        salt = secrets.token_hex(SALT_BYTES)
        derived = self._kdf(salt).derive(password.encode("utf-8"))
        return salt, derived.hex()

    def check_password(self, password: str, salt: str, hashed: str) -> bool:
        """
        Verifikasi password terhadap salt dan hash.
        PBKDF2HMAC.verify melakukan perbandingan constant-time.

        Args:
            password: Plain text password
            salt: Salt tersimpan (hex)
            hashed: Hash tersimpan (hex)

        Returns:
            True jika password cocok, False jika tidak
        """
        try:
            self._kdf(salt).verify(password.encode("utf-8"), bytes.fromhex(hashed))
        except (InvalidKey, ValueError):
            return False
        return True


class Argon2Strategy:
    """
    Hashing v2: Argon2id melalui passlib.
    Salt per-record diikat ke password sebelum hashing, Argon2 sendiri
    menyimpan salt internal di dalam encoded hash.
    """

    version = HashVersion.V2.value

    def __init__(self, rounds: int = 4, memory_cost: int = 65536, parallelism: int = 2):
        self.pwd_context = CryptContext(
            schemes=["argon2"],
            deprecated="auto",
            argon2__rounds=rounds,
            argon2__memory_cost=memory_cost,
            argon2__parallelism=parallelism,
            argon2__hash_len=32,
            argon2__salt_len=16
        )

    def hash_password(self, password: str) -> Tuple[str, str]:
        """
        Hash password menggunakan Argon2.

        Args:
            password: Plain text password

        Returns:
            Tuple (salt, encoded argon2 hash)
        """
        salt = secrets.token_hex(SALT_BYTES)
        return salt, self.pwd_context.hash(salt + password)

    def check_password(self, password: str, salt: str, hashed: str) -> bool:
        """
        Verifikasi password terhadap hash Argon2.

        Args:
            password: Plain text password
            salt: Salt tersimpan
            hashed: Encoded argon2 hash

        Returns:
            True jika password cocok, False jika tidak
        """
        try:
            return self.pwd_context.verify(salt + password, hashed)
        except (ValueError, TypeError):
            return False


class PasswordHashingRegistry:
    """
    Lookup table immutable dari hashVersion ke strategi hashing,
    ditambah pointer "current" untuk semua hash baru.
    """

    def __init__(self, strategies: Iterable[HashingStrategy], current: str):
        table: Dict[str, HashingStrategy] = {}
        for strategy in strategies:
            if strategy.version in table:
                raise ConfigurationError(f"Duplicate hash version: {strategy.version}")
            table[strategy.version] = strategy

        if current not in table:
            raise ConfigurationError(
                f"Current hash version {current!r} is not registered",
                details={"registered": sorted(table)}
            )

        self._strategies: Mapping[str, HashingStrategy] = MappingProxyType(table)
        self._current = table[current]

    @property
    def versions(self) -> Mapping[str, HashingStrategy]:
        """Read-only view dari semua strategi terdaftar."""
        return self._strategies

    @property
    def current(self) -> HashingStrategy:
        return self._current

    def get(self, version: str) -> HashingStrategy:
        """
        Ambil strategi untuk hashVersion tertentu.

        Raises:
            UnknownHashVersionError: Jika versi tidak terdaftar
        """
        try:
            return self._strategies[version]
        except KeyError:
            raise UnknownHashVersionError(version) from None

    def is_current(self, version: str) -> bool:
        return version == self._current.version

    def hash_password(self, password: str) -> Tuple[str, str, str]:
        """
        Hash password dengan strategi current.

        Returns:
            Tuple (hash_version, salt, hash)
        """
        salt, hashed = self._current.hash_password(password)
        return self._current.version, salt, hashed

    def check_password(self, version: str, password: str, salt: str, hashed: str) -> bool:
        """Verifikasi password dengan strategi yang menghasilkan hash tersebut."""
        return self.get(version).check_password(password, salt, hashed)


def build_registry(settings: Settings) -> PasswordHashingRegistry:
    """
    Bangun registry production dari settings.

    Args:
        settings: Application settings

    Returns:
        PasswordHashingRegistry dengan v1 dan v2
    """
    return PasswordHashingRegistry(
        strategies=[
            Pbkdf2Strategy(iterations=settings.PBKDF2_ITERATIONS),
            Argon2Strategy(
                rounds=settings.ARGON2_ROUNDS,
                memory_cost=settings.ARGON2_MEMORY_COST,
                parallelism=settings.ARGON2_PARALLELISM
            ),
        ],
        current=settings.PASSWORD_HASH_VERSION
    )
