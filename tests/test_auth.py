"""Tests for bearer-token auth, role gating and the error envelope."""

import uuid
from datetime import timedelta

import pytest
from fastapi import HTTPException
from httpx import AsyncClient
from jose import JWTError

from invplatform.auth.dependencies import require_role
from invplatform.core.security import (
    create_access_token,
    create_oauth_state,
    decode_access_token,
    verify_oauth_state,
)
from invplatform.models.core import Investor, Startup, User
from invplatform.models.enums import UserRole
from invplatform.schemas.auth import CurrentUser
from tests.conftest import auth_headers


def _current(role: UserRole) -> CurrentUser:
    return CurrentUser(user_id=uuid.uuid4(), role=role, email="someone@example.io", name="Someone")


class TestTokens:
    def test_round_trip(self):
        user_id = str(uuid.uuid4())
        payload = decode_access_token(create_access_token({"sub": user_id, "role": "INVESTOR"}))

        assert payload["sub"] == user_id
        assert payload["role"] == "INVESTOR"

    def test_expired_token(self):
        token = create_access_token({"sub": "abc"}, expires_delta=timedelta(seconds=-5))

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_subject_required(self):
        with pytest.raises(JWTError):
            decode_access_token(create_access_token({"role": "FOUNDER"}))

    def test_oauth_state_bound_to_provider(self):
        state = create_oauth_state("user-1", "zoho")

        assert verify_oauth_state(state, "zoho") == "user-1"
        with pytest.raises(JWTError):
            verify_oauth_state(state, "xero")

    def test_access_token_is_not_an_oauth_state(self):
        with pytest.raises(JWTError):
            verify_oauth_state(create_access_token({"sub": "user-1"}), "zoho")


class TestRequireRole:
    async def test_allowed_role_passes(self):
        checker = require_role([UserRole.FOUNDER])

        result = await checker(current_user=_current(UserRole.FOUNDER))

        assert result.role == UserRole.FOUNDER

    async def test_disallowed_role_raises_403(self):
        checker = require_role([UserRole.FOUNDER])

        with pytest.raises(HTTPException) as exc:
            await checker(current_user=_current(UserRole.INVESTOR))
        assert exc.value.status_code == 403


class TestAuthOverHttp:
    async def test_invalid_token(self, client: AsyncClient):
        resp = await client.get(
            "/api/investor/deal-pipeline", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert resp.status_code == 401
        body = resp.json()
        assert body["status"] == "error"
        assert body["message"] == "Invalid or expired token"

    async def test_token_for_unknown_user(self, client: AsyncClient):
        token = create_access_token({"sub": str(uuid.uuid4()), "role": "INVESTOR"})

        resp = await client.get(
            "/api/investor/deal-pipeline", headers={"Authorization": f"Bearer {token}"}
        )

        assert resp.status_code == 401
        assert resp.json()["message"] == "User not found"

    async def test_wrong_role(self, client: AsyncClient, investor: Investor, investor_user: User):
        resp = await client.get("/api/startup/investors", headers=auth_headers(investor_user))

        assert resp.status_code == 403
        assert resp.json()["status"] == "error"

    async def test_founder_without_startup(self, client: AsyncClient, founder_user: User):
        resp = await client.get("/api/startup/investors", headers=auth_headers(founder_user))

        assert resp.status_code == 404
        assert resp.json()["message"] == "Startup not found for this founder"

    async def test_investor_without_profile(self, client: AsyncClient, investor_user: User):
        resp = await client.get("/api/investor/investments", headers=auth_headers(investor_user))

        assert resp.status_code == 404
        assert resp.json()["message"] == "Investor profile not found"

    async def test_request_id_echoed(self, client: AsyncClient, startup: Startup, founder_user: User):
        resp = await client.get(
            "/api/startup/reports",
            headers={**auth_headers(founder_user), "X-Request-ID": "req-123"},
        )

        assert resp.status_code == 200
        assert resp.headers["x-request-id"] == "req-123"

    async def test_error_envelope_carries_request_id(self, client: AsyncClient, founder_user: User):
        resp = await client.get(
            "/api/startup/investors",
            headers={**auth_headers(founder_user), "X-Request-ID": "req-456"},
        )

        assert resp.json()["request_id"] == "req-456"
