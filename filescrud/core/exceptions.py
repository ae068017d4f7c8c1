"""
Custom exceptions untuk Files-CRUD Auth.
Semua custom exceptions harus inherit dari base exceptions ini.

Policy failures (password salah, akun terkunci, username dipakai) tidak
di-raise oleh AuthService; mereka dikembalikan sebagai ResultCode. Exceptions
di sini dipakai untuk kegagalan infrastruktur dan oleh HTTP layer.
"""

from typing import Optional, Dict, Any


class FilesCrudException(Exception):
    """Base exception untuk semua custom exceptions di Files-CRUD Auth."""

    default_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None
    ):
        """
        Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code
            details: Additional error details
            code: Machine readable error code
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.code = code or self.default_code
        super().__init__(self.message)


class AuthenticationError(FilesCrudException):
    """Exception untuk error autentikasi."""

    default_code = "NOT_AUTHENTICATED"

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None
    ):
        super().__init__(message, status_code=401, details=details, code=code)


class ValidationError(FilesCrudException):
    """Exception untuk error validasi data."""

    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None
    ):
        super().__init__(message, status_code=422, details=details, code=code)


class ConflictError(FilesCrudException):
    """Exception untuk konflik data (misal: duplicate username)."""

    default_code = "CONFLICT"

    def __init__(
        self,
        message: str = "Resource conflict",
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None
    ):
        super().__init__(message, status_code=409, details=details, code=code)


class RateLimitError(FilesCrudException):
    """Exception untuk akun yang terkunci karena terlalu banyak percobaan login."""

    default_code = "RATE_LIMITED"

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None
    ):
        super().__init__(message, status_code=429, details=details, code=code)


class ConfigurationError(FilesCrudException):
    """Exception untuk konfigurasi yang tidak valid."""

    default_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, details=details)


class UnknownHashVersionError(FilesCrudException):
    """Exception untuk hashVersion yang tidak terdaftar di registry."""

    default_code = "UNKNOWN_HASH_VERSION"

    def __init__(self, version: str):
        super().__init__(
            f"Unknown password hash version: {version}",
            status_code=500,
            details={"hash_version": version}
        )


class PersistenceError(FilesCrudException):
    """Exception untuk kegagalan backend persistence."""

    default_code = "PERSISTENCE_ERROR"

    def __init__(self, message: str = "Persistence layer unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=503, details=details)
