"""
Integration tests for registration, login and the current-user endpoints.

WHY: These tests pin the authentication contract:
1. Missing token -> 401, invalid or expired token -> 403
2. Login failures share one 401 message
3. Profiles never expose the password hash
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import DEFAULT_PASSWORD, AreaFactory, UserFactory
from ticketdesk.core.auth import TokenService


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_returns_public_profile(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        area = await AreaFactory.create(db_session, name="Support")
        manager = await UserFactory.create_manager(db_session)

        response = await client.post(
            "/register",
            json={
                "name": "Ana Perez",
                "email": "ana@example.com",
                "password": "SecurePassword123!",
                "areaId": area.id,
                "managerId": manager.id,
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Ana Perez"
        assert data["email"] == "ana@example.com"
        assert data["role"] == "USER"
        assert data["areaId"] == area.id
        assert data["managerId"] == manager.id
        assert "password" not in data
        assert "hashedPassword" not in data

    @pytest.mark.asyncio
    async def test_register_with_role(self, client: AsyncClient):
        response = await client.post(
            "/register",
            json={
                "name": "Boss",
                "email": "boss@example.com",
                "password": "SecurePassword123!",
                "role": "MANAGER",
            },
        )

        assert response.status_code == 201
        assert response.json()["role"] == "MANAGER"

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, db_session: AsyncSession):
        await UserFactory.create(db_session, email="taken@example.com")

        response = await client.post(
            "/register",
            json={"name": "Dup", "email": "taken@example.com", "password": "SecurePassword123!"},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "ResourceAlreadyExistsError"

    @pytest.mark.asyncio
    async def test_register_missing_fields(self, client: AsyncClient):
        response = await client.post("/register", json={"email": "x@example.com"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "ValidationError"
        fields = {e["field"] for e in body["details"]["errors"]}
        assert "body.name" in fields
        assert "body.password" in fields

    @pytest.mark.asyncio
    async def test_register_unknown_area(self, client: AsyncClient):
        response = await client.post(
            "/register",
            json={
                "name": "Lost",
                "email": "lost@example.com",
                "password": "SecurePassword123!",
                "areaId": 999,
            },
        )

        assert response.status_code == 400
        assert response.json()["code"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_register_unknown_manager(self, client: AsyncClient):
        response = await client.post(
            "/register",
            json={
                "name": "Lost",
                "email": "lost@example.com",
                "password": "SecurePassword123!",
                "managerId": 999,
            },
        )

        assert response.status_code == 400


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_returns_token(
        self, client: AsyncClient, db_session: AsyncSession, token_service: TokenService
    ):
        user = await UserFactory.create(db_session, email="login@example.com")

        response = await client.post(
            "/login", json={"email": "login@example.com", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["tokenType"] == "bearer"
        assert data["expiresIn"] == 8 * 60 * 60
        claims = token_service.verify_token(data["token"])
        assert claims["userId"] == user.id
        assert claims["role"] == "USER"

    @pytest.mark.asyncio
    async def test_login_email_case_insensitive(self, client: AsyncClient, db_session: AsyncSession):
        await UserFactory.create(db_session, email="case@example.com")

        response = await client.post(
            "/login", json={"email": "CASE@example.com", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_login_failures_are_indistinguishable(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        """WHY: The response must not reveal whether the email exists."""
        await UserFactory.create(db_session, email="real@example.com")

        wrong_password = await client.post(
            "/login", json={"email": "real@example.com", "password": "nope"}
        )
        unknown_email = await client.post(
            "/login", json={"email": "ghost@example.com", "password": DEFAULT_PASSWORD}
        )

        assert wrong_password.status_code == 401
        assert unknown_email.status_code == 401
        assert wrong_password.json()["error"] == unknown_email.json()["error"]


class TestMe:
    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, db_session: AsyncSession, auth_headers):
        user = await UserFactory.create(db_session, name="Me Myself")

        response = await client.get("/me", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json()["id"] == user.id
        assert response.json()["name"] == "Me Myself"

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, client: AsyncClient):
        response = await client.get("/me")

        assert response.status_code == 401
        assert response.json()["code"] == "AuthenticationError"

    @pytest.mark.asyncio
    async def test_invalid_token_is_403(self, client: AsyncClient):
        response = await client.get("/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 403
        assert response.json()["code"] == "TokenInvalidError"

    @pytest.mark.asyncio
    async def test_token_from_other_key_is_403(self, client: AsyncClient, db_session: AsyncSession):
        user = await UserFactory.create(db_session)
        token = TokenService(secret="someone-else").create_access_token(user.id, "USER")

        response = await client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_expired_token_is_403(
        self, client: AsyncClient, db_session: AsyncSession, token_service: TokenService
    ):
        user = await UserFactory.create(db_session)
        token = token_service.create_access_token(
            user.id, "USER", expires_delta=timedelta(seconds=-5)
        )

        response = await client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403
        assert response.json()["code"] == "TokenExpiredError"

    @pytest.mark.asyncio
    async def test_me_after_account_deleted_is_404(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        user = await UserFactory.create(db_session)
        headers = auth_headers(user)
        await db_session.delete(user)
        await db_session.commit()

        response = await client.get("/me", headers=headers)

        assert response.status_code == 404
        assert response.json()["code"] == "UserNotFoundError"

    @pytest.mark.asyncio
    async def test_token_for_missing_user_is_401_elsewhere(
        self, client: AsyncClient, token_service: TokenService
    ):
        token = token_service.create_access_token(9999, "USER")

        response = await client.get("/tickets", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["code"] == "AuthenticationError"

    @pytest.mark.asyncio
    async def test_bare_token_accepted(
        self, client: AsyncClient, db_session: AsyncSession, token_service: TokenService
    ):
        user = await UserFactory.create(db_session)
        token = token_service.create_access_token(user.id, user.role.value)

        me = await client.get("/me", headers={"Authorization": token})
        tickets = await client.get("/tickets", headers={"Authorization": token})

        assert me.status_code == 200
        assert me.json()["id"] == user.id
        assert tickets.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["Bearer", "Basic dXNlcjpwYXNz"])
    async def test_header_without_token_is_401(self, client: AsyncClient, header: str):
        response = await client.get("/me", headers={"Authorization": header})

        assert response.status_code == 401
        assert response.json()["code"] == "AuthenticationError"


class TestUsersAndServiceInfo:
    @pytest.mark.asyncio
    async def test_users_lists_other_user_accounts(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        me = await UserFactory.create(db_session, name="Me")
        zoe = await UserFactory.create(db_session, name="Zoe")
        bea = await UserFactory.create(db_session, name="Bea")
        await UserFactory.create_manager(db_session, name="Max")

        response = await client.get("/users", headers=auth_headers(me))

        assert response.status_code == 200
        assert [u["id"] for u in response.json()] == [bea.id, zoe.id]

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "service": "tickets-api", "version": "2.0.0"}

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_shape(self, client: AsyncClient):
        response = await client.get("/nowhere")

        assert response.status_code == 404
        assert set(response.json()) == {"error", "code", "details"}
