"""
Tests for authentication endpoints.
"""

import pytest
from fastapi import status
from httpx import AsyncClient

from filescrud.core.config import settings

from tests.conftest import MAX_ATTEMPTS, TEST_PASSWORD


AUTH = f"{settings.API_V1_STR}/auth"


@pytest.mark.asyncio
@pytest.mark.integration
class TestRegister:
    """Test register endpoint."""

    async def test_register_success(self, async_client: AsyncClient):
        response = await async_client.post(
            f"{AUTH}/register",
            json={"username": "alice", "password": TEST_PASSWORD, "meta": {"quota": 5}}
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["details"] == {"username": "alice"}

    async def test_register_duplicate(self, async_client: AsyncClient, test_user):
        response = await async_client.post(
            f"{AUTH}/register",
            json={"username": test_user["username"], "password": "Other123!"}
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        error = response.json()["error"]
        assert error["code"] == "USER_ALREADY_EXISTS"
        assert error["type"] == "ConflictError"
        assert "timestamp" in error

    @pytest.mark.parametrize("username", ["ab", "has space", "semi;colon"])
    async def test_register_invalid_username(self, async_client: AsyncClient, username):
        response = await async_client.post(
            f"{AUTH}/register",
            json={"username": username, "password": TEST_PASSWORD}
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"]["validation_errors"]


@pytest.mark.asyncio
@pytest.mark.integration
class TestLogin:
    """Test login endpoint."""

    async def test_login_success(self, async_client: AsyncClient, test_user):
        response = await async_client.post(f"{AUTH}/login", json=test_user)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["access_token"]
        assert data["token_type"] == "bearer"

    async def test_login_invalid_password(self, async_client: AsyncClient, test_user):
        response = await async_client.post(
            f"{AUTH}/login",
            json={"username": test_user["username"], "password": "WrongPassword"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"

    async def test_login_unknown_user_looks_the_same(self, async_client: AsyncClient):
        """Test a missing user is indistinguishable from a wrong password."""
        response = await async_client.post(
            f"{AUTH}/login",
            json={"username": "ghost", "password": "WrongPassword"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"

    @pytest.mark.security
    async def test_login_locked_account(self, async_client: AsyncClient, test_user):
        """Test the correct password gets 429 after too many failures."""
        for _ in range(MAX_ATTEMPTS):
            await async_client.post(
                f"{AUTH}/login",
                json={"username": test_user["username"], "password": "WrongPassword"}
            )

        response = await async_client.post(f"{AUTH}/login", json=test_user)

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.json()["error"]["code"] == "ATTEMPTS_EXCEEDED"


@pytest.mark.asyncio
@pytest.mark.integration
class TestCurrentUser:
    """Test endpoints that require a Bearer token."""

    async def test_me(self, async_client: AsyncClient, test_user, auth_headers):
        response = await async_client.get(f"{AUTH}/me", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["username"] == test_user["username"]
        assert data["admin"] is False
        assert data["meta"] == {"test": True}
        assert "salt" not in data
        assert "hash" not in data

    async def test_me_without_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{AUTH}/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["code"] == "NOT_AUTHENTICATED"

    async def test_me_with_invalid_token(self, async_client: AsyncClient):
        response = await async_client.get(
            f"{AUTH}/me",
            headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_change_password(self, async_client: AsyncClient, test_user, auth_headers):
        response = await async_client.post(
            f"{AUTH}/change-password",
            json={"password": "NewPassword456!"},
            headers=auth_headers
        )
        assert response.status_code == status.HTTP_200_OK

        old = await async_client.post(f"{AUTH}/login", json=test_user)
        new = await async_client.post(
            f"{AUTH}/login",
            json={"username": test_user["username"], "password": "NewPassword456!"}
        )
        assert old.status_code == status.HTTP_401_UNAUTHORIZED
        assert new.status_code == status.HTTP_200_OK

    async def test_change_username(self, async_client: AsyncClient, test_user, auth_headers):
        response = await async_client.post(
            f"{AUTH}/change-username",
            json={"username": "renamed"},
            headers=auth_headers
        )
        assert response.status_code == status.HTTP_200_OK

        login = await async_client.post(
            f"{AUTH}/login",
            json={"username": "renamed", "password": test_user["password"]}
        )
        assert login.status_code == status.HTTP_200_OK

    async def test_change_username_taken(self, async_client: AsyncClient, auth_service, auth_headers):
        await auth_service.register("bob", TEST_PASSWORD)

        response = await async_client.post(
            f"{AUTH}/change-username",
            json={"username": "bob"},
            headers=auth_headers
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"]["code"] == "USER_ALREADY_EXISTS"

    async def test_change_password_requires_token(self, async_client: AsyncClient):
        response = await async_client.post(
            f"{AUTH}/change-password",
            json={"password": "NewPassword456!"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
@pytest.mark.integration
class TestHealth:
    """Test health endpoints."""

    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database_backend"] == settings.DATABASE_BACKEND

    async def test_liveness(self, async_client: AsyncClient):
        response = await async_client.get("/health/live")

        assert response.status_code == status.HTTP_204_NO_CONTENT
