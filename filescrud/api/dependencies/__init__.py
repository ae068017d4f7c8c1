"""
API dependencies module.
Berisi reusable dependencies untuk FastAPI endpoints.
"""

from filescrud.api.dependencies.auth import get_auth_service, get_current_user

__all__ = [
    "get_auth_service",
    "get_current_user"
]
