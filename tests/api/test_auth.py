"""
API Tests for authentication
"""
import pytest
from httpx import AsyncClient

from synexa.core.security import create_refresh_token, token_payload_for
from synexa.models.user import UserRole
from tests.conftest import create_user, TEST_PASSWORD


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, db_session):
        user = await create_user(db_session, UserRole.SECRETARIA, email="secretaria@escola.ao")

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "Secretaria@Escola.ao", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert "refresh_token" in data
        assert data["token_type"] == "bearer"
        assert data["user"]["id"] == user.id
        assert data["user"]["role"] == "SECRETARIA"

    @pytest.mark.asyncio
    async def test_login_invalid_credentials(self, client: AsyncClient, admin_user):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": admin_user.email, "password": "wrongpassword"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Email ou palavra-passe incorretos"

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "ninguem@escola.ao", "password": TEST_PASSWORD}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, client: AsyncClient, db_session):
        user = await create_user(db_session, UserRole.PROFESSOR, is_active=False)

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": user.email, "password": TEST_PASSWORD}
        )

        assert response.status_code == 403


class TestParentLogin:

    @pytest.mark.asyncio
    async def test_parent_login_success(self, client: AsyncClient, parent_user):
        response = await client.post(
            "/api/v1/auth/parent-login",
            json={"email": parent_user.email, "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "PARENT"

    @pytest.mark.asyncio
    async def test_staff_cannot_use_parent_login(self, client: AsyncClient, admin_user):
        response = await client.post(
            "/api/v1/auth/parent-login",
            json={"email": admin_user.email, "password": TEST_PASSWORD}
        )

        assert response.status_code == 401


class TestTokens:

    @pytest.mark.asyncio
    async def test_refresh_returns_new_pair(self, client: AsyncClient, admin_user):
        refresh = create_refresh_token(token_payload_for(admin_user))

        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})

        assert response.status_code == 200
        assert "access_token" in response.json()

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, client: AsyncClient, admin_headers):
        access = admin_headers["Authorization"].split(" ")[1]

        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": access})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_get_current_user(self, client: AsyncClient, admin_user, admin_headers):
        response = await client.get("/api/v1/auth/me", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["email"] == admin_user.email

    @pytest.mark.asyncio
    async def test_unauthorized_access(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code in (401, 403)  # No auth header

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Request-ID" in response.headers
