"""
API Tests for user accounts (ADMIN only)
"""
import pytest
from httpx import AsyncClient


class TestUsers:

    @pytest.mark.asyncio
    async def test_create_user(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/v1/users", headers=admin_headers, json={
            "name": "Carla Domingos",
            "email": "Carla@Escola.ao",
            "password": "segredo123",
            "role": "PROFESSOR",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "carla@escola.ao"
        assert data["is_active"] is True
        assert "hashed_password" not in data

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client: AsyncClient, admin_headers, secretaria_user):
        response = await client.post("/api/v1/users", headers=admin_headers, json={
            "name": "Outra Pessoa",
            "email": secretaria_user.email,
            "password": "segredo123",
            "role": "SECRETARIA",
        })

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_only_admin_manages_users(self, client: AsyncClient, secretaria_headers):
        response = await client.get("/api/v1/users", headers=secretaria_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_filter_by_role(self, client: AsyncClient, admin_headers, parent_user, professor_user):
        response = await client.get("/api/v1/users?role=PARENT", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == parent_user.id

    @pytest.mark.asyncio
    async def test_deactivate_blocks_access(self, client: AsyncClient, admin_headers, professor_user, professor_headers):
        response = await client.post(f"/api/v1/users/{professor_user.id}/deactivate", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["is_active"] is False

        response = await client.get("/api/v1/auth/me", headers=professor_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_user_not_found(self, client: AsyncClient, admin_headers):
        response = await client.get("/api/v1/users/00000000-0000-0000-0000-000000000000", headers=admin_headers)

        assert response.status_code == 404
