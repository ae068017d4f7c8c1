"""
Authentication endpoints untuk API v1.
Menangani register, login, dan perubahan credential untuk user yang sedang login.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from filescrud.api.dependencies.auth import get_auth_service, get_current_user
from filescrud.core.constants import ResponseMessage, ResultCode
from filescrud.core.exceptions import (
    AuthenticationError,
    ConflictError,
    FilesCrudException,
    RateLimitError
)
from filescrud.schemas.auth import (
    ChangePasswordRequest,
    ChangeUsernameRequest,
    LoginRequest,
    RegisterRequest,
    TokenResponse
)
from filescrud.schemas.response import ErrorResponse, MessageResponse
from filescrud.schemas.user import User, UserResponse
from filescrud.services.auth import AuthResult, AuthService

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        429: {"model": ErrorResponse}
    }
)

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]


def raise_for_result(result: AuthResult) -> None:
    """
    Ubah ResultCode kegagalan menjadi exception HTTP layer.

    Raises:
        ConflictError: USER_ALREADY_EXISTS
        AuthenticationError: INVALID_CREDENTIALS
        RateLimitError: ATTEMPTS_EXCEEDED
    """
    if result.ok:
        return

    code = result.code
    if code == ResultCode.USER_ALREADY_EXISTS:
        raise ConflictError(ResponseMessage.USER_ALREADY_EXISTS.value, code=code.value)
    if code == ResultCode.INVALID_CREDENTIALS:
        raise AuthenticationError(ResponseMessage.INVALID_CREDENTIALS.value, code=code.value)
    if code == ResultCode.ATTEMPTS_EXCEEDED:
        raise RateLimitError(ResponseMessage.ATTEMPTS_EXCEEDED.value, code=code.value)
    raise FilesCrudException(f"Unhandled result code: {code}")


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, auth_service: AuthServiceDep) -> MessageResponse:
    """
    Registrasi user baru (non-admin).

    Raises:
        ConflictError: Jika username sudah dipakai
    """
    result = await auth_service.register(payload.username, payload.password, meta=payload.meta)
    raise_for_result(result)
    return MessageResponse(
        message=ResponseMessage.REGISTER_SUCCESS.value,
        details={"username": payload.username}
    )


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, auth_service: AuthServiceDep) -> TokenResponse:
    """
    Login dengan username dan password.

    Proses login:
    1. Cek lockout
    2. Verifikasi kredensial (dan migrasi hash jika perlu)
    3. Terbitkan token

    Raises:
        AuthenticationError: Kredensial salah
        RateLimitError: Akun sedang terkunci
    """
    result = await auth_service.login(payload.username, payload.password)
    raise_for_result(result)
    return TokenResponse(access_token=result.token, token_type="bearer")


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: CurrentUser) -> UserResponse:
    """Data user yang sedang login, tanpa salt dan hash."""
    return UserResponse.from_user(current_user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: CurrentUser,
    auth_service: AuthServiceDep
) -> MessageResponse:
    """Set password baru untuk user yang sedang login."""
    result = await auth_service.change_password(current_user.username, payload.password)
    raise_for_result(result)
    return MessageResponse(message=ResponseMessage.PASSWORD_CHANGED.value)


@router.post("/change-username", response_model=MessageResponse)
async def change_username(
    payload: ChangeUsernameRequest,
    current_user: CurrentUser,
    auth_service: AuthServiceDep
) -> MessageResponse:
    """
    Rename user yang sedang login.
    Token lama terikat ke username lama, jadi client perlu login ulang.

    Raises:
        ConflictError: Jika username baru sudah dipakai
    """
    result = await auth_service.change_username(current_user.username, payload.username)
    raise_for_result(result)
    return MessageResponse(
        message=ResponseMessage.USERNAME_CHANGED.value,
        details={"username": payload.username}
    )
