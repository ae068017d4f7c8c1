"""
Token service untuk Files-CRUD Auth.
Menerbitkan dan memverifikasi stateless JWT yang mengikat satu username,
dengan signing keys yang bisa di-rotate lewat persistence layer.
"""

import logging
import secrets
from datetime import timedelta
from typing import List, Optional

from jose import jwt
from jose.exceptions import JOSEError

from filescrud.core.config import Settings
from filescrud.db.interface import Database
from filescrud.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

USERNAME_CLAIM = "username"


class TokenService:
    """
    Service class untuk token operations.

    Key terakhir di key set adalah key aktif untuk signing. Verifikasi mencoba
    semua key yang masih tersimpan, sehingga token lama tetap valid sampai
    key-nya di-purge.
    Clock dipakai untuk iat/exp saat issue dan untuk cek expiry saat verify.
    """

    def __init__(
        self,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(minutes=60),
        key_bytes: int = 64,
        clock: Clock = utcnow
    ):
        self.algorithm = algorithm
        self.expires_delta = expires_delta
        self.key_bytes = key_bytes
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = utcnow) -> "TokenService":
        return cls(
            algorithm=settings.JWT_ALGORITHM,
            expires_delta=settings.access_token_expire_timedelta,
            key_bytes=settings.SIGNING_KEY_BYTES,
            clock=clock
        )

    def generate_key(self) -> str:
        """Generate key material baru."""
        return secrets.token_urlsafe(self.key_bytes)

    async def rotate_signing_key(self, db: Database) -> str:
        """
        Tambahkan signing key baru; key ini menjadi key aktif.

        Returns:
            Key yang baru ditambahkan
        """
        key = self.generate_key()
        await db.add_jwt_keys(key)
        logger.info("New JWT signing key added")
        return key

    async def purge_signing_key(self, db: Database, key: str) -> None:
        """Hapus signing key; token yang di-sign dengan key ini tidak lagi valid."""
        await db.remove_jwt_key(key)
        logger.info("JWT signing key purged")

    async def _signing_key(self, db: Database) -> str:
        keys = await db.get_jwt_keys()
        if not keys:
            return await self.rotate_signing_key(db)
        return keys[-1]

    async def issue_token(self, db: Database, username: str, expires_delta: Optional[timedelta] = None) -> str:
        """
        Membuat signed token untuk username.

        Args:
            db: Persistence capability (sumber signing key)
            username: Username yang diikat ke token
            expires_delta: Custom expiration time

        Returns:
            Encoded JWT
        """
        now = self._clock()
        claims = {
            USERNAME_CLAIM: username,
            "iat": now,
            "exp": now + (expires_delta or self.expires_delta),
        }
        key = await self._signing_key(db)
        return jwt.encode(claims, key, algorithm=self.algorithm)

    def _decode(self, token: str, keys: List[str]) -> Optional[dict]:
        for key in keys:
            try:
                # exp (wajib ada) dicek terhadap self._clock di _is_expired
                return jwt.decode(
                    token,
                    key,
                    algorithms=[self.algorithm],
                    options={"verify_exp": False}
                )
            except JOSEError:
                continue
        return None

    def _is_expired(self, claims: dict) -> bool:
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            return True
        return exp < self._clock().timestamp()

    async def verify_token(self, db: Database, token: Optional[str]) -> bool:
        """
        Verifikasi token terhadap semua signing key yang tersimpan.
        Token kosong, malformed, expired, atau signature yang tidak cocok
        semuanya menghasilkan False tanpa membedakan penyebabnya.

        Args:
            db: Persistence capability
            token: Token dari client

        Returns:
            True jika token valid
        """
        if not token or not isinstance(token, str):
            return False

        claims = self._decode(token, await db.get_jwt_keys())
        if claims is None or self._is_expired(claims):
            return False

        username = claims.get(USERNAME_CLAIM)
        return isinstance(username, str) and bool(username)

    @staticmethod
    def extract_username(token: str) -> str:
        """
        Ambil username claim dari token.
        Hanya valid dipanggil setelah verify_token mengembalikan True.
        """
        return jwt.get_unverified_claims(token)[USERNAME_CLAIM]
