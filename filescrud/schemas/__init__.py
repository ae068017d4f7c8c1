"""
Schemas module untuk Files-CRUD Auth.
Berisi domain records dan Pydantic schemas untuk request/response validation.
"""

from filescrud.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    ChangePasswordRequest,
    ChangeUsernameRequest
)
from filescrud.schemas.user import (
    User,
    FailedLoginAttempts,
    UserResponse
)
from filescrud.schemas.response import (
    MessageResponse,
    ErrorResponse,
    HealthCheckResponse
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "ChangePasswordRequest",
    "ChangeUsernameRequest",
    "User",
    "FailedLoginAttempts",
    "UserResponse",
    "MessageResponse",
    "ErrorResponse",
    "HealthCheckResponse"
]
