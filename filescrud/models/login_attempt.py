"""
Failed login attempt model untuk SQL backend.
Satu row per username; dihapus saat login berhasil.
"""

from sqlalchemy import Column, String, Integer, DateTime

from filescrud.db.base import Base
from filescrud.schemas.user import FailedLoginAttempts
from filescrud.utils.clock import ensure_aware


class FailedLoginAttempt(Base):
    """
    Failed login attempts table.

    Attributes:
        fla_username: Username (primary key)
        fla_attempts: Jumlah percobaan gagal berturut-turut
        fla_last_attempt: Timestamp percobaan terakhir
    """

    __tablename__ = "failed_login_attempts"

    fla_username = Column(String(255), primary_key=True)
    fla_attempts = Column(Integer, nullable=False, default=0)
    fla_last_attempt = Column(DateTime(timezone=True), nullable=True)

    def to_record(self) -> FailedLoginAttempts:
        return FailedLoginAttempts(
            username=self.fla_username,
            attempts=self.fla_attempts,
            last_attempt=ensure_aware(self.fla_last_attempt) if self.fla_last_attempt else None
        )
