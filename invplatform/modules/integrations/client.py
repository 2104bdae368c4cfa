"""Zoho Books HTTP client.

Thin wrapper over httpx: OAuth token exchange against the Zoho accounts
server and read-only Books endpoints used by the founder dashboard. Every
call carries the ``ZOHO_HTTP_TIMEOUT`` timeout; upstream failures surface as
:class:`IntegrationError` with the raw response kept out of the message.
"""

from __future__ import annotations

from datetime import date
from typing import Any, NoReturn

import httpx
import structlog

from invplatform.core.config import settings
from invplatform.core.errors import IntegrationError

logger = structlog.get_logger()

PROVIDER = "zoho"


def _new_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.ZOHO_HTTP_TIMEOUT)


def _raise_for_upstream(exc: httpx.HTTPError, operation: str) -> NoReturn:
    if isinstance(exc, httpx.HTTPStatusError):
        detail = f"{exc.response.status_code}: {exc.response.text[:200]}"
    else:
        detail = str(exc) or type(exc).__name__
    logger.error("zoho_request_failed", operation=operation, detail=detail)
    raise IntegrationError(f"Zoho request failed: {operation}", provider=PROVIDER, detail=detail) from exc


async def _token_request(form: dict[str, str], operation: str) -> dict[str, Any]:
    url = f"{settings.ZOHO_ACCOUNTS_URL}/oauth/v2/token"
    try:
        async with _new_http_client() as http:
            resp = await http.post(url, data=form)
            resp.raise_for_status()
    except httpx.HTTPError as exc:
        _raise_for_upstream(exc, operation)

    body = resp.json()
    if not body.get("access_token"):
        # Zoho answers 200 with {"error": "invalid_code"} on a bad grant
        raise IntegrationError(
            f"Zoho request failed: {operation}", provider=PROVIDER, detail=body.get("error")
        )
    return body


async def exchange_code(code: str) -> dict[str, Any]:
    """Trade an authorization code for access and refresh tokens."""
    return await _token_request(
        {
            "code": code,
            "client_id": settings.ZOHO_CLIENT_ID,
            "client_secret": settings.ZOHO_CLIENT_SECRET,
            "redirect_uri": settings.ZOHO_REDIRECT_URI,
            "grant_type": "authorization_code",
        },
        "token_exchange",
    )


async def refresh_access_token(refresh_token: str) -> dict[str, Any]:
    return await _token_request(
        {
            "refresh_token": refresh_token,
            "client_id": settings.ZOHO_CLIENT_ID,
            "client_secret": settings.ZOHO_CLIENT_SECRET,
            "grant_type": "refresh_token",
        },
        "token_refresh",
    )


async def fetch_organization_id(access_token: str) -> str | None:
    """First organization visible to the token, or None."""
    try:
        async with _new_http_client() as http:
            resp = await http.get(
                f"{settings.ZOHO_BOOKS_URL}/organizations",
                headers={"Authorization": f"Zoho-oauthtoken {access_token}"},
            )
            resp.raise_for_status()
    except httpx.HTTPError as exc:
        _raise_for_upstream(exc, "organizations")

    organizations = resp.json().get("organizations") or []
    if not organizations:
        return None
    return str(organizations[0].get("organization_id"))


class ZohoBooksClient:
    """Read-only Books API bound to one organization and access token."""

    def __init__(self, http: httpx.AsyncClient, access_token: str, organization_id: str):
        self.http = http
        self.access_token = access_token
        self.organization_id = organization_id

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        query = {"organization_id": self.organization_id}
        query.update({k: v for k, v in (params or {}).items() if v is not None})
        try:
            resp = await self.http.get(
                f"{settings.ZOHO_API_URL}{path}",
                params=query,
                headers={
                    "Authorization": f"Zoho-oauthtoken {self.access_token}",
                    "Accept": "application/json",
                },
            )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            _raise_for_upstream(exc, path.strip("/"))
        logger.debug("zoho_fetch", path=path, status=resp.status_code)
        return resp.json()

    async def sales_orders(self, start: date, end: date) -> list[dict[str, Any]]:
        body = await self._get(
            "/salesorders", {"date_start": start.isoformat(), "date_end": end.isoformat()}
        )
        return body.get("salesorders") or []

    async def expenses(self, start: date, end: date) -> list[dict[str, Any]]:
        body = await self._get(
            "/expenses", {"date_start": start.isoformat(), "date_end": end.isoformat()}
        )
        return body.get("expenses") or []

    async def bank_accounts(self) -> list[dict[str, Any]]:
        return (await self._get("/bankaccounts")).get("bankaccounts") or []

    async def contacts(self, contact_type: str | None = None) -> list[dict[str, Any]]:
        return (await self._get("/contacts", {"contact_type": contact_type})).get("contacts") or []

    async def invoices(self, status: str | None = None) -> list[dict[str, Any]]:
        return (await self._get("/invoices", {"status": status})).get("invoices") or []

    async def profit_and_loss(self, from_date: date, to_date: date) -> list[dict[str, Any]]:
        body = await self._get(
            "/reports/profitandloss",
            {"from_date": from_date.isoformat(), "to_date": to_date.isoformat()},
        )
        return body.get("profit_and_loss") or []

    async def employees(self, page: int = 1, per_page: int = 200) -> list[dict[str, Any]]:
        body = await self._get("/employees", {"page": page, "per_page": per_page})
        return body.get("employees") or []
