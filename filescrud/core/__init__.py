"""
Core module untuk Files-CRUD Auth.
Berisi komponen inti aplikasi seperti konfigurasi, password hashing, exceptions, dan konstanta.
"""

from filescrud.core.config import settings
from filescrud.core.exceptions import (
    FilesCrudException,
    AuthenticationError,
    ValidationError,
    ConflictError,
    RateLimitError,
    ConfigurationError,
    UnknownHashVersionError,
    PersistenceError
)

__all__ = [
    "settings",
    "FilesCrudException",
    "AuthenticationError",
    "ValidationError",
    "ConflictError",
    "RateLimitError",
    "ConfigurationError",
    "UnknownHashVersionError",
    "PersistenceError"
]
