"""Tests for the Zoho Books integration: OAuth, token refresh, client and dashboard."""

import asyncio
import gc
from datetime import date, timedelta
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.errors import BadRequestError, IntegrationError, NotFoundError
from invplatform.core.security import create_oauth_state, verify_oauth_state
from invplatform.models.base import utcnow
from invplatform.models.core import Startup, User
from invplatform.models.enums import IntegrationStatus, IntegrationType
from invplatform.models.integrations import Integration
from invplatform.modules.founder_dashboard.service import get_founder_dashboard
from invplatform.modules.integrations import client, service
from invplatform.services.encryption import decrypt_token, encrypt_token

TOKENS = {"access_token": "access-1", "refresh_token": "refresh-1", "expires_in": 3600}


async def _integration(db: AsyncSession, startup: Startup, expires_in: int = 3600, **overrides) -> Integration:
    fields = {
        "startup_id": startup.id,
        "integration_type": IntegrationType.ZOHO,
        "status": IntegrationStatus.CONNECTED,
        "access_token": encrypt_token("access-1"),
        "refresh_token": encrypt_token("refresh-1"),
        "expires_at": utcnow() + timedelta(seconds=expires_in),
        "connection_config": {"organization_id": "org-1"},
    }
    fields.update(overrides)
    integration = Integration(**fields)
    db.add(integration)
    await db.flush()
    return integration


class TestAuthorizationUrl:
    def test_url_carries_signed_state(self, founder_user: User):
        url = service.get_authorization_url(founder_user.id)

        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        assert parsed.path == "/oauth/v2/auth"
        assert query["access_type"] == ["offline"]
        assert query["response_type"] == ["code"]
        assert verify_oauth_state(query["state"][0], "zoho") == str(founder_user.id)


class TestHandleCallback:
    async def test_stores_encrypted_tokens(self, db: AsyncSession, startup: Startup, founder_user: User):
        state = create_oauth_state(str(founder_user.id), "zoho")
        with (
            patch.object(client, "exchange_code", AsyncMock(return_value=TOKENS)) as exchange,
            patch.object(client, "fetch_organization_id", AsyncMock(return_value="org-1")),
        ):
            integration = await service.handle_callback(db, "auth-code", state)

        exchange.assert_awaited_once_with("auth-code")
        assert integration.startup_id == startup.id
        assert integration.status == IntegrationStatus.CONNECTED
        assert integration.access_token.startswith("enc:")
        assert decrypt_token(integration.access_token) == "access-1"
        assert decrypt_token(integration.refresh_token) == "refresh-1"
        assert integration.connection_config == {"organization_id": "org-1"}
        assert integration.expires_at > utcnow()

    async def test_reconnect_keeps_refresh_token(
        self, db: AsyncSession, startup: Startup, founder_user: User
    ):
        existing = await _integration(db, startup)
        state = create_oauth_state(str(founder_user.id), "zoho")
        with (
            patch.object(client, "exchange_code", AsyncMock(return_value={"access_token": "access-2"})),
            patch.object(client, "fetch_organization_id", AsyncMock(return_value="org-1")),
        ):
            integration = await service.handle_callback(db, "auth-code", state)

        assert integration.id == existing.id
        assert decrypt_token(integration.access_token) == "access-2"
        assert decrypt_token(integration.refresh_token) == "refresh-1"

    async def test_invalid_state(self, db: AsyncSession, startup: Startup):
        with pytest.raises(BadRequestError, match="Invalid or expired OAuth state"):
            await service.handle_callback(db, "auth-code", "not-a-token")

    async def test_state_for_other_provider(self, db: AsyncSession, founder_user: User, startup: Startup):
        state = create_oauth_state(str(founder_user.id), "quickbooks")

        with pytest.raises(BadRequestError):
            await service.handle_callback(db, "auth-code", state)

    async def test_founder_without_startup(self, db: AsyncSession, founder_user: User):
        state = create_oauth_state(str(founder_user.id), "zoho")

        with pytest.raises(NotFoundError, match="Startup not found"):
            await service.handle_callback(db, "auth-code", state)


class TestEnsureAccessToken:
    async def test_fresh_token_is_reused(self, db: AsyncSession, startup: Startup):
        integration = await _integration(db, startup)

        with patch.object(client, "refresh_access_token", AsyncMock()) as refresh:
            token = await service.ensure_access_token(db, integration)

        assert token == "access-1"
        refresh.assert_not_awaited()

    async def test_token_near_expiry_is_refreshed(self, db: AsyncSession, startup: Startup):
        integration = await _integration(db, startup, expires_in=30)
        new_tokens = {"access_token": "access-2", "expires_in": 3600}

        with patch.object(client, "refresh_access_token", AsyncMock(return_value=new_tokens)) as refresh:
            token = await service.ensure_access_token(db, integration)

        assert token == "access-2"
        refresh.assert_awaited_once_with("refresh-1")
        assert decrypt_token(integration.access_token) == "access-2"
        assert integration.expires_at > utcnow() + timedelta(minutes=30)

    async def test_concurrent_callers_refresh_once(self, db: AsyncSession, startup: Startup):
        integration = await _integration(db, startup, expires_in=-10)
        new_tokens = {"access_token": "access-2", "expires_in": 3600}

        with patch.object(client, "refresh_access_token", AsyncMock(return_value=new_tokens)) as refresh:
            tokens = await asyncio.gather(
                service.ensure_access_token(db, integration),
                service.ensure_access_token(db, integration),
            )

        assert tokens == ["access-2", "access-2"]
        assert refresh.await_count == 1

    async def test_refresh_lock_released_after_use(self, db: AsyncSession, startup: Startup):
        integration = await _integration(db, startup, expires_in=-10)
        new_tokens = {"access_token": "access-2", "expires_in": 3600}

        with patch.object(client, "refresh_access_token", AsyncMock(return_value=new_tokens)):
            await service.ensure_access_token(db, integration)
        gc.collect()

        assert integration.id not in service._refresh_locks

    async def test_missing_refresh_token(self, db: AsyncSession, startup: Startup):
        integration = await _integration(db, startup, expires_in=-10, refresh_token=None)

        with pytest.raises(BadRequestError, match="Refresh token missing"):
            await service.ensure_access_token(db, integration)

    async def test_not_connected(self, db: AsyncSession, startup: Startup):
        with pytest.raises(BadRequestError, match="not connected"):
            await service.require_connected(db, startup.id)

    async def test_missing_organization(self, db: AsyncSession, startup: Startup):
        integration = await _integration(db, startup, connection_config={})

        with pytest.raises(BadRequestError, match="organization ID not found"):
            service.organization_id(integration)


# ── HTTP client ──────────────────────────────────────────────────────────────


def _mock_http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestZohoClient:
    async def test_requests_carry_org_and_token(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"bankaccounts": [{"balance": 10}]})

        async with _mock_http(handler) as http:
            accounts = await client.ZohoBooksClient(http, "tok", "org-9").bank_accounts()

        assert accounts == [{"balance": 10}]
        assert seen[0].url.params["organization_id"] == "org-9"
        assert seen[0].headers["Authorization"] == "Zoho-oauthtoken tok"

    async def test_optional_params_omitted(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async with _mock_http(handler) as http:
            invoices = await client.ZohoBooksClient(http, "tok", "org-9").invoices()

        assert invoices == []
        assert "status" not in seen[0].url.params

    async def test_upstream_error_is_translated(self):
        async with _mock_http(lambda request: httpx.Response(500, text="boom")) as http:
            with pytest.raises(IntegrationError) as exc:
                await client.ZohoBooksClient(http, "tok", "org-9").contacts()

        assert str(exc.value) == "Zoho request failed: contacts"
        assert exc.value.provider == "zoho"
        assert "500" in exc.value.detail

    async def test_token_exchange(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/oauth/v2/token"
            assert b"grant_type=authorization_code" in request.content
            return httpx.Response(200, json=TOKENS)

        with patch.object(client, "_new_http_client", lambda: _mock_http(handler)):
            assert await client.exchange_code("auth-code") == TOKENS

    async def test_rejected_grant(self):
        handler = lambda request: httpx.Response(200, json={"error": "invalid_code"})  # noqa: E731

        with patch.object(client, "_new_http_client", lambda: _mock_http(handler)):
            with pytest.raises(IntegrationError) as exc:
                await client.exchange_code("stale-code")

        assert exc.value.detail == "invalid_code"

    async def test_first_organization(self):
        body = {"organizations": [{"organization_id": 42}, {"organization_id": 43}]}

        with patch.object(client, "_new_http_client", lambda: _mock_http(lambda r: httpx.Response(200, json=body))):
            assert await client.fetch_organization_id("tok") == "42"


# ── Founder dashboard ────────────────────────────────────────────────────────

BOOKS = {
    "salesorders": {"salesorders": [{"date": "2024-05-10", "total": 1000}, {"date": "2024-06-02", "total": 500}]},
    "expenses": {
        "expenses": [
            {"date": "2024-05-05", "total": 300, "account_name": "Marketing"},
            {"date": "2024-06-03", "total": 800, "account_name": "Rent"},
        ]
    },
    "bankaccounts": {"bankaccounts": [{"balance": 4000}]},
    "contacts": {
        "contacts": [
            {"contact_id": "c1", "contact_type": "customer", "created_time": "2024-01-10T10:00:00+0530", "status": "active"},
            {"contact_id": "c2", "contact_type": "customer", "created_time": "2024-03-01T10:00:00+0530", "status": "inactive"},
            {"contact_id": "c3", "contact_type": "customer", "created_time": "2024-05-10T10:00:00+0530", "status": "active"},
        ]
    },
    "invoices": {"invoices": [{"status": "paid", "total": 1200}, {"status": "draft", "total": 99}]},
    "profitandloss": {"profit_and_loss": [{"name": "Gross Profit", "total": 600}]},
    "employees": {"employees": [{"employee_id": "e1"}, {"employee_id": "e2"}]},
}


def _books_handler(request: httpx.Request) -> httpx.Response:
    if request.headers.get("Authorization") != "Zoho-oauthtoken access-1":
        return httpx.Response(401, json={"message": "invalid token"})
    resource = request.url.path.rstrip("/").rsplit("/", 1)[-1]
    return httpx.Response(200, json=BOOKS[resource])


class TestFounderDashboard:
    async def test_builds_kpis(self, db: AsyncSession, startup: Startup):
        integration = await _integration(db, startup)

        dashboard = await get_founder_dashboard(
            db, startup, today=date(2024, 6, 15), transport=httpx.MockTransport(_books_handler)
        )

        assert dashboard.cash_runway_months == 5
        assert [m.month for m in dashboard.revenue_growth] == ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]
        assert dashboard.revenue_growth[4].value == 1000.0
        assert dashboard.expense_trend[5].value == 800.0
        assert dashboard.burn_rate_analysis[4].value == 0.0
        assert dashboard.burn_rate_analysis[5].value == 300.0
        assert dashboard.key_performance_indicators == {"Churn": 50.0, "LTV": 600.0, "CAC": 300.0}
        assert dashboard.team_size == 2
        assert integration.last_sync_at is not None

    async def test_camel_case_payload(self, db: AsyncSession, startup: Startup):
        await _integration(db, startup)

        dashboard = await get_founder_dashboard(
            db, startup, today=date(2024, 6, 15), transport=httpx.MockTransport(_books_handler)
        )
        body = dashboard.model_dump(by_alias=True)

        assert set(body) == {
            "cashRunwayMonths",
            "revenueGrowth",
            "expenseTrend",
            "burnRateAnalysis",
            "keyPerformanceIndicators",
            "teamSize",
        }

    async def test_requires_integration(self, db: AsyncSession, startup: Startup):
        with pytest.raises(BadRequestError, match="not connected"):
            await get_founder_dashboard(db, startup, today=date(2024, 6, 15))

    async def test_upstream_failure(self, db: AsyncSession, startup: Startup):
        await _integration(db, startup)
        transport = httpx.MockTransport(lambda request: httpx.Response(503, text="maintenance"))

        with pytest.raises(IntegrationError):
            await get_founder_dashboard(db, startup, today=date(2024, 6, 15), transport=transport)
