"""
Konstanta yang digunakan di seluruh aplikasi Files-CRUD Auth.
"""

from enum import Enum


class ResultCode(str, Enum):
    """
    Kode hasil operasi credential.
    Nilainya stabil dan dipakai langsung sebagai sentinel string oleh client.
    """
    SUCCESS = ""
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ATTEMPTS_EXCEEDED = "ATTEMPTS_EXCEEDED"


class HashVersion(str, Enum):
    """Versi strategi hashing password yang terdaftar."""
    V1 = "v1"
    V2 = "v2"


class DatabaseBackend(str, Enum):
    """Backend persistence yang didukung."""
    MEMORY = "memory"
    SQL = "sql"
    REDIS = "redis"


class ResponseMessage(str, Enum):
    """Pesan response standar."""
    REGISTER_SUCCESS = "Registration successful"
    PASSWORD_CHANGED = "Password changed successfully"
    USERNAME_CHANGED = "Username changed successfully"
    USER_ALREADY_EXISTS = "Username is already taken"
    INVALID_CREDENTIALS = "Invalid username or password"
    ATTEMPTS_EXCEEDED = "Too many failed login attempts, account is temporarily locked"
    NOT_AUTHENTICATED = "Not authenticated"


# Redis key prefixes
REDIS_USER_PREFIX = "user:"
REDIS_LOGIN_ATTEMPTS_PREFIX = "login_attempts:"
REDIS_JWT_KEYS = "jwt_keys"
