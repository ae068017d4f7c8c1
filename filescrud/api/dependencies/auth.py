"""
Authentication dependencies untuk FastAPI.
Menyediakan dependency injection untuk AuthService dan user yang sedang login.
"""

from typing import Optional, Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from filescrud.core.config import settings
from filescrud.core.constants import ResponseMessage
from filescrud.core.exceptions import AuthenticationError
from filescrud.schemas.user import User
from filescrud.services.auth import AuthService

# OAuth2 scheme untuk Bearer token
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    auto_error=False  # Kita handle error sendiri
)


def get_auth_service(request: Request) -> AuthService:
    """AuthService yang dibuat saat startup aplikasi."""
    return request.app.state.auth_service


async def get_current_user(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)]
) -> User:
    """
    Get current user dari Bearer token.

    Args:
        token: Token dari Authorization header
        auth_service: Authentication service

    Returns:
        User record pemilik token

    Raises:
        AuthenticationError: Jika token tidak ada, tidak valid, atau user sudah dihapus
    """
    if not token:
        raise AuthenticationError(ResponseMessage.NOT_AUTHENTICATED.value)

    user = await auth_service.authorize(token)
    if user is None:
        raise AuthenticationError("Invalid authentication credentials")

    return user
