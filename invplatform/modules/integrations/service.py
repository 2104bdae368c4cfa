"""Zoho Books integration lifecycle: OAuth connect, callback, token refresh."""

from __future__ import annotations

import asyncio
import uuid
import weakref
from datetime import datetime, timedelta
from urllib.parse import urlencode

import structlog
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.config import settings
from invplatform.core.errors import BadRequestError, NotFoundError
from invplatform.core.security import create_oauth_state, verify_oauth_state
from invplatform.models.base import utcnow
from invplatform.models.core import Startup
from invplatform.models.enums import IntegrationStatus, IntegrationType
from invplatform.models.integrations import Integration
from invplatform.modules.integrations import client
from invplatform.services.encryption import decrypt_token, encrypt_token

logger = structlog.get_logger()

# Refresh this long before the provider-side expiry
REFRESH_MARGIN = timedelta(seconds=60)
DEFAULT_TOKEN_TTL = 3600

# Entries disappear once no refresh is holding or waiting on the lock
_refresh_locks: weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock] = weakref.WeakValueDictionary()


def _refresh_lock(integration_id: uuid.UUID) -> asyncio.Lock:
    return _refresh_locks.setdefault(integration_id, asyncio.Lock())


def needs_refresh(integration: Integration, now: datetime) -> bool:
    return integration.expires_at is None or integration.expires_at <= now + REFRESH_MARGIN


def get_authorization_url(user_id: uuid.UUID) -> str:
    """Zoho consent URL whose signed state identifies the founder on callback."""
    params = {
        "response_type": "code",
        "client_id": settings.ZOHO_CLIENT_ID,
        "scope": settings.ZOHO_SCOPES,
        "redirect_uri": settings.ZOHO_REDIRECT_URI,
        "access_type": "offline",
        "prompt": "consent",
        "state": create_oauth_state(str(user_id), client.PROVIDER),
    }
    return f"{settings.ZOHO_ACCOUNTS_URL}/oauth/v2/auth?{urlencode(params)}"


async def get_integration(db: AsyncSession, startup_id: uuid.UUID) -> Integration | None:
    stmt = select(Integration).where(
        Integration.startup_id == startup_id,
        Integration.integration_type == IntegrationType.ZOHO,
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def handle_callback(db: AsyncSession, code: str, state: str) -> Integration:
    """Exchange the authorization code and store the connection for the founder's startup."""
    try:
        user_id = uuid.UUID(verify_oauth_state(state, client.PROVIDER))
    except (JWTError, ValueError) as exc:
        raise BadRequestError("Invalid or expired OAuth state.") from exc

    stmt = select(Startup).where(Startup.founder_user_id == user_id)
    startup = (await db.execute(stmt)).scalar_one_or_none()
    if startup is None:
        raise NotFoundError("Startup not found for this founder")

    tokens = await client.exchange_code(code)
    organization_id = await client.fetch_organization_id(tokens["access_token"])
    now = utcnow()

    integration = await get_integration(db, startup.id)
    if integration is None:
        integration = Integration(
            startup_id=startup.id,
            integration_type=IntegrationType.ZOHO,
            connection_config={},
        )
        db.add(integration)

    integration.status = IntegrationStatus.CONNECTED
    integration.access_token = encrypt_token(tokens["access_token"])
    # Zoho omits refresh_token on re-consent without prompt=consent; keep the old one
    if tokens.get("refresh_token"):
        integration.refresh_token = encrypt_token(tokens["refresh_token"])
    integration.expires_at = now + timedelta(seconds=int(tokens.get("expires_in", DEFAULT_TOKEN_TTL)))
    integration.last_sync_at = now
    if organization_id:
        integration.connection_config = {**(integration.connection_config or {}), "organization_id": organization_id}

    await db.flush()
    logger.info(
        "zoho_connected",
        startup_id=str(startup.id),
        integration_id=str(integration.id),
        has_organization=organization_id is not None,
    )
    return integration


async def require_connected(db: AsyncSession, startup_id: uuid.UUID) -> Integration:
    integration = await get_integration(db, startup_id)
    if integration is None or integration.access_token is None:
        raise BadRequestError("Zoho integration not connected for this startup.")
    return integration


def organization_id(integration: Integration) -> str:
    org_id = (integration.connection_config or {}).get("organization_id")
    if not org_id:
        raise BadRequestError("Zoho organization ID not found in integration configuration.")
    return str(org_id)


async def ensure_access_token(db: AsyncSession, integration: Integration) -> str:
    """Return a usable access token, refreshing it first when expired.

    Concurrent callers in this process serialise on a per-integration lock;
    across processes the row lock does the same. Expiry is re-read after
    both are held so only the first caller talks to Zoho.
    """
    if not needs_refresh(integration, utcnow()):
        return decrypt_token(integration.access_token)

    async with _refresh_lock(integration.id):
        stmt = (
            select(Integration)
            .where(Integration.id == integration.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        locked = (await db.execute(stmt)).scalar_one()
        if not needs_refresh(locked, utcnow()):
            return decrypt_token(locked.access_token)

        refresh_token = decrypt_token(locked.refresh_token)
        if not refresh_token:
            raise BadRequestError("Refresh token missing. Please reauthorize your Zoho integration.")

        tokens = await client.refresh_access_token(refresh_token)
        now = utcnow()
        locked.access_token = encrypt_token(tokens["access_token"])
        locked.expires_at = now + timedelta(seconds=int(tokens.get("expires_in", DEFAULT_TOKEN_TTL)))
        locked.last_sync_at = now
        await db.flush()
        logger.info("zoho_token_refreshed", integration_id=str(locked.id))
        return tokens["access_token"]
