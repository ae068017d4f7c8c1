"""
Lockout service untuk Files-CRUD Auth.
Melacak percobaan login gagal per username dengan sliding lockout window.
"""

import logging
from datetime import timedelta

from filescrud.core.config import Settings
from filescrud.db.interface import Database
from filescrud.utils.clock import Clock, ensure_aware, utcnow

logger = logging.getLogger(__name__)


class LockoutGuard:
    """
    State machine per username: Unlocked atau Locked.

    Locked berarti attempts >= max_attempts dan percobaan terakhir masih di
    dalam window. Selama locked, setiap percobaan memperpanjang lock tanpa
    menambah counter. Setelah window lewat, record dihapus sehingga counter
    mulai lagi dari nol.
    """

    def __init__(self, max_attempts: int = 5, window: timedelta = timedelta(minutes=30), clock: Clock = utcnow):
        """
        Initialize lockout guard.

        Args:
            max_attempts: Jumlah kegagalan sebelum akun terkunci
            window: Durasi lockout relatif terhadap percobaan terakhir
            clock: Sumber waktu
        """
        self.max_attempts = max_attempts
        self.window = window
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = utcnow) -> "LockoutGuard":
        return cls(
            max_attempts=settings.MAX_LOGIN_ATTEMPTS,
            window=settings.account_lockout_timedelta,
            clock=clock
        )

    async def count_attempt(self, db: Database, username: str) -> None:
        """Catat satu percobaan login gagal."""
        await db.count_login_attempt(username)
        logger.warning(f"Failed login attempt for user '{username}'")

    async def handle_locking(self, db: Database, username: str) -> bool:
        """
        Cek apakah username sedang terkunci.

        Args:
            db: Persistence capability
            username: Username yang dicek

        Returns:
            True jika terkunci, False jika boleh mencoba login
        """
        record = await db.get_login_attempts(username)
        if record is None or record.attempts < self.max_attempts:
            return False

        if record.last_attempt is not None:
            elapsed = self._clock() - ensure_aware(record.last_attempt)
            if elapsed < self.window:
                await db.update_last_login_attempt(username)
                logger.warning(f"Login blocked for locked user '{username}'")
                return True

        # Window sudah lewat: reset counter
        await db.remove_login_attempts(username)
        logger.info(f"Lockout expired for user '{username}'")
        return False

    async def reset_attempts(self, db: Database, username: str) -> None:
        """Hapus record percobaan gagal setelah autentikasi berhasil."""
        await db.remove_login_attempts(username)
