"""
PhotoShare Backend — Auth Endpoint Tests
==========================================

What we test:
    ✅ Register returns a consumer and a working token
    ✅ Missing fields → 400, duplicate email → 409
    ✅ Login with good and bad credentials
    ✅ /me with no token (401), a junk token (403) and a valid one
    ✅ Creator seeding is idempotent
"""

import pytest

from conftest import register_user
from photoshare.security import create_access_token, decode_access_token


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_creates_consumer(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"email": "new@example.com", "password": "pw123456", "displayName": "New"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "new@example.com"
        assert body["user"]["role"] == "consumer"
        assert body["user"]["displayName"] == "New"
        assert decode_access_token(body["token"]).email == "new@example.com"

    @pytest.mark.asyncio
    async def test_register_missing_field(self, client):
        response = await client.post(
            "/api/auth/register", json={"email": "a@example.com", "password": "x"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Email, password, and display name are required"

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client):
        await register_user(client, "dup@example.com")
        response = await client.post(
            "/api/auth/register",
            json={"email": "dup@example.com", "password": "pw", "displayName": "Again"},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "Email already registered"


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, client):
        await register_user(client, "login@example.com", password="right-password")
        response = await client.post(
            "/api/auth/login",
            json={"email": "login@example.com", "password": "right-password"},
        )
        assert response.status_code == 200
        assert response.json()["token"]

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client):
        await register_user(client, "login2@example.com", password="right-password")
        response = await client.post(
            "/api/auth/login",
            json={"email": "login2@example.com", "password": "wrong"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, client):
        response = await client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "x"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_missing_fields(self, client):
        response = await client.post("/api/auth/login", json={"email": "x@example.com"})
        assert response.status_code == 400
        assert response.json()["error"] == "Email and password are required"


class TestMe:

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "Authentication required"
        assert "requestId" in body

    @pytest.mark.asyncio
    async def test_me_rejects_bad_token(self, client):
        response = await client.get(
            "/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 403
        assert response.json()["error"] == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_me_returns_profile(self, client, consumer):
        response = await client.get("/api/auth/me", headers=consumer.headers)
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(consumer.id)
        assert body["email"] == "consumer@example.com"
        assert "createdAt" in body

    @pytest.mark.asyncio
    async def test_me_for_deleted_user(self, client):
        import uuid

        token = create_access_token(uuid.uuid4(), "gone@example.com", "consumer", "Gone")
        response = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "User not found"


class TestSeedCreators:

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        from photoshare.services.auth_service import seed_creators

        assert await seed_creators(db_session) == 2
        assert await seed_creators(db_session) == 0
