"""End-to-end API tests through the ASGI app."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from invplatform.models.connections import StartupInvestorMapping
from invplatform.models.core import Investor, Startup, User
from invplatform.models.enums import UserRole
from invplatform.modules.integrations import client as zoho_client
from tests.conftest import INVESTOR_EMAIL, Factory, auth_headers


@pytest.fixture
def no_pdf():
    with patch("invplatform.services.pdf.render_report_pdf", return_value=b"%PDF-1.4 test"):
        yield


class TestConnectionToInvestmentFlow:
    async def test_invite_accept_pipeline_invest_remove(
        self, client: AsyncClient, startup: Startup, founder_user: User,
        investor: Investor, investor_user: User,
    ):
        founder = auth_headers(founder_user)
        investor_h = auth_headers(investor_user)

        resp = await client.post(
            "/api/startup/connections/invite",
            json={"investorEmail": INVESTOR_EMAIL, "investorRole": "LEAD_INVESTOR"},
            headers=founder,
        )
        assert resp.status_code == 201
        invited = resp.json()["data"]
        assert invited["status"] == "INVITED"
        assert invited["investorId"] is None

        resp = await client.get(
            f"/api/investor/connections/{invited['id']}/accept", headers=investor_h
        )
        assert resp.status_code == 200
        accepted = resp.json()["data"]
        assert accepted["status"] == "ACTIVE"
        assert accepted["investorId"] == str(investor.id)

        resp = await client.post(
            "/api/investor/deal-pipeline",
            json={"startupId": str(startup.id), "status": "HOT_DEAL"},
            headers=investor_h,
        )
        assert resp.status_code == 201
        entry = resp.json()["data"]
        assert entry["dealStatus"] == "HOT_DEAL"
        assert entry["startupName"] == "Acme Robotics"

        for amount, ownership in ((100, 5), (50, 7.5)):
            resp = await client.post(
                "/api/investor/investments",
                json={"startupId": str(startup.id), "amount": amount, "ownershipPercentage": ownership},
                headers=investor_h,
            )
            assert resp.status_code == 200
            assert resp.content == b""

        resp = await client.get("/api/investor/investments", headers=investor_h)
        [company] = resp.json()["data"]
        assert company["investmentAmount"] == 150.0
        assert company["investmentOwnershipPercentage"] == 7.5

        resp = await client.delete(f"/api/investor/deal-pipeline/{entry['id']}", headers=investor_h)
        assert resp.status_code == 204

        resp = await client.get("/api/investor/deal-pipeline", headers=investor_h)
        assert resp.json()["data"] == []

    async def test_request_approve_and_founder_view(
        self, client: AsyncClient, startup: Startup, founder_user: User,
        investor: Investor, investor_user: User,
    ):
        resp = await client.post(
            "/api/investor/connections/request",
            json={"startupId": str(startup.id)},
            headers=auth_headers(investor_user),
        )
        assert resp.status_code == 201
        mapping_id = resp.json()["data"]["id"]

        resp = await client.post(
            f"/api/startup/connections/{mapping_id}/approve", headers=auth_headers(founder_user)
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "ACTIVE"

        resp = await client.get("/api/startup/investors", headers=auth_headers(founder_user))
        [row] = resp.json()["data"]
        assert row["email"] == INVESTOR_EMAIL
        assert row["status"] == "ACTIVE"

        resp = await client.get("/api/investor/startups", headers=auth_headers(investor_user))
        [connected] = resp.json()["data"]
        assert connected["startupName"] == "Acme Robotics"

    async def test_duplicate_invite_is_400(
        self, client: AsyncClient, startup: Startup, founder_user: User
    ):
        body = {"investorEmail": INVESTOR_EMAIL}
        await client.post("/api/startup/connections/invite", json=body, headers=auth_headers(founder_user))

        resp = await client.post(
            "/api/startup/connections/invite", json=body, headers=auth_headers(founder_user)
        )

        assert resp.status_code == 400
        assert resp.json() == {
            "status": "error",
            "message": "An invitation has already been sent to this investor.",
            "detail": None,
            "request_id": "unknown",
        }

    async def test_pipeline_without_connection_is_400(
        self, client: AsyncClient, startup: Startup, investor: Investor, investor_user: User
    ):
        resp = await client.post(
            "/api/investor/deal-pipeline",
            json={"startupId": str(startup.id), "status": "HOT_DEAL"},
            headers=auth_headers(investor_user),
        )

        assert resp.status_code == 400
        assert resp.json()["message"] == "No connection found between investor and startup"

    async def test_validation_error_envelope(
        self, client: AsyncClient, investor: Investor, investor_user: User
    ):
        resp = await client.post(
            "/api/investor/investments",
            json={"startupId": "not-a-uuid", "amount": -1},
            headers=auth_headers(investor_user),
        )

        assert resp.status_code == 422
        body = resp.json()
        assert body["message"] == "Request validation failed"
        assert {tuple(e["loc"])[-1] for e in body["detail"]} >= {"startupId", "amount"}


class TestFounderEndpoints:
    async def test_onboarding(self, client: AsyncClient, factory: Factory):
        user = await factory.user(UserRole.FOUNDER)

        resp = await client.post(
            "/api/onboarding/founder",
            json={
                "startupName": "Nova Health",
                "sector": "HEALTHTECH",
                "stage": "Pre-seed",
                "fundingRaised": 0,
                "hqLocation": "Pune",
                "teamSize": 3,
            },
            headers=auth_headers(user),
        )

        assert resp.status_code == 201
        assert resp.json()["data"]["name"] == "Nova Health"
        assert resp.json()["data"]["founderUserId"] == str(user.id)

    async def test_publish_report(
        self, client: AsyncClient, s3, no_pdf, startup: Startup, founder_user: User,
        investor: Investor, active_mapping: StartupInvestorMapping,
    ):
        report = {"title": "Q2 Update", "draftReport": False, "investorUserIds": [str(investor.id)]}

        resp = await client.post(
            "/api/startup/reports",
            data={"report": json.dumps(report)},
            files=[("attachments", ("kpis.csv", b"month,revenue\nMay,1000\n", "text/csv"))],
            headers=auth_headers(founder_user),
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Report published"
        assert body["data"]["draftReport"] is False
        assert body["data"]["attachments"][0]["fileName"] == "kpis.csv"
        assert body["data"]["reportPdf"]["fileName"] == "Acme_Robotics_Q2_Update.pdf"

        resp = await client.get(
            f"/api/startup/{startup.id}/latest-activity", headers=auth_headers(founder_user)
        )
        assert resp.json()["data"]["message"] == "Published report: Q2 Update"

    async def test_report_payload_must_be_valid_json(
        self, client: AsyncClient, s3, no_pdf, startup: Startup, founder_user: User
    ):
        resp = await client.post(
            "/api/startup/reports",
            data={"report": "{not json"},
            headers=auth_headers(founder_user),
        )

        assert resp.status_code == 422

    async def test_draft_endpoint_without_draft(
        self, client: AsyncClient, startup: Startup, founder_user: User
    ):
        resp = await client.get("/api/startup/reports/draft", headers=auth_headers(founder_user))

        assert resp.status_code == 404
        assert resp.json()["message"] == "No draft report found."

    async def test_upload_and_list_documents(
        self, client: AsyncClient, s3, startup: Startup, founder_user: User
    ):
        resp = await client.post(
            "/api/startup/documents",
            data={"documentType": "LEGAL"},
            files={"file": ("term sheet.pdf", b"%PDF-1.4", "application/pdf")},
            headers=auth_headers(founder_user),
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["fileName"] == "term_sheet.pdf"

        resp = await client.get(
            "/api/startup/documents",
            params={"documentType": "LEGAL"},
            headers=auth_headers(founder_user),
        )
        assert [d["fileName"] for d in resp.json()["data"]] == ["term_sheet.pdf"]

    async def test_dashboard_requires_zoho(
        self, client: AsyncClient, startup: Startup, founder_user: User
    ):
        resp = await client.get("/api/startup/dashboard", headers=auth_headers(founder_user))

        assert resp.status_code == 400
        assert resp.json()["message"] == "Zoho integration not connected for this startup."

    async def test_latest_activity_hidden_from_strangers(
        self, client: AsyncClient, startup: Startup, investor: Investor, investor_user: User
    ):
        resp = await client.get(
            f"/api/startup/{startup.id}/latest-activity", headers=auth_headers(investor_user)
        )

        assert resp.status_code == 404


class TestZohoEndpoints:
    async def test_connect_returns_authorization_url(
        self, client: AsyncClient, startup: Startup, founder_user: User
    ):
        resp = await client.get("/api/integrations/zoho/connect", headers=auth_headers(founder_user))

        assert resp.status_code == 200
        assert "/oauth/v2/auth?" in resp.json()["data"]["authorizationUrl"]

    async def test_callback_with_bad_state_redirects_to_error(self, client: AsyncClient):
        resp = await client.get(
            "/api/integrations/zoho/callback", params={"code": "c", "state": "forged"}
        )

        assert resp.status_code == 302
        assert resp.headers["location"].endswith("/settings?zoho=error")

    async def test_upstream_failure_redirects_to_error(
        self, client: AsyncClient, startup: Startup, founder_user: User
    ):
        from invplatform.core.errors import IntegrationError
        from invplatform.core.security import create_oauth_state

        failing = AsyncMock(side_effect=IntegrationError("Zoho request failed", provider="zoho"))
        with patch.object(zoho_client, "exchange_code", failing):
            resp = await client.get(
                "/api/integrations/zoho/callback",
                params={"code": "c", "state": create_oauth_state(str(founder_user.id), "zoho")},
            )

        assert resp.status_code == 302
        assert resp.headers["location"].endswith("/settings?zoho=error")
