"""
Sumber waktu untuk lockout window dan token expiry.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Waktu sekarang dalam UTC (timezone-aware)."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """
    Pastikan datetime timezone-aware.
    Beberapa driver (misal SQLite) mengembalikan datetime naive; diasumsikan UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
