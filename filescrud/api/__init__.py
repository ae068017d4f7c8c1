"""
API module untuk Files-CRUD Auth.
Berisi endpoints dan dependencies untuk API.
"""

from filescrud.api.v1 import auth, health

__all__ = ["auth", "health"]
