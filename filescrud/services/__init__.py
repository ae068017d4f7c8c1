"""
Services module untuk Files-CRUD Auth.
Berisi business logic layer yang terpisah dari presentation dan data layers.
"""

from filescrud.services.auth import AuthService, AuthResult
from filescrud.services.lockout import LockoutGuard
from filescrud.services.token import TokenService

__all__ = [
    "AuthService",
    "AuthResult",
    "LockoutGuard",
    "TokenService"
]
