"""
Models module untuk Files-CRUD Auth.
Berisi SQLAlchemy models untuk SQL backend.
"""

from filescrud.models.user import User
from filescrud.models.login_attempt import FailedLoginAttempt
from filescrud.models.jwt_key import JwtKey

__all__ = [
    "User",
    "FailedLoginAttempt",
    "JwtKey"
]
