"""
Authentication schemas untuk Files-CRUD Auth.
Menangani validasi untuk register, login, dan perubahan credential.
"""

from typing import Optional, Dict, Any, Annotated

from pydantic import BaseModel, Field, field_validator


Username = Annotated[str, Field(
    min_length=3,
    max_length=50,
    pattern=r'^[a-zA-Z0-9_.-]+$',
    description="Username (alphanumeric, dot, underscore, hyphen only)"
)]

Password = Annotated[str, Field(min_length=1, description="User password")]


class RegisterRequest(BaseModel):
    """
    Register request schema.
    """
    username: Username
    password: Password
    meta: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional user metadata"
    )

    @field_validator('username')
    def strip_username(cls, v: str) -> str:
        """Trim whitespace dari username."""
        return v.strip()


class LoginRequest(BaseModel):
    """
    Login request schema.
    """
    username: str = Field(..., min_length=1, description="Username")
    password: Password


class TokenResponse(BaseModel):
    """
    Token response schema.
    """
    access_token: str = Field(..., description="Signed session token")
    token_type: str = Field("bearer", description="Token type")


class ChangePasswordRequest(BaseModel):
    """
    Change password request schema.
    """
    password: Password


class ChangeUsernameRequest(BaseModel):
    """
    Change username request schema.
    """
    username: Username
