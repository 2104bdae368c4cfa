"""Zoho Books integration API router."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.auth.dependencies import get_current_startup, get_current_user
from invplatform.core.config import settings
from invplatform.core.database import get_db
from invplatform.core.errors import BadRequestError, IntegrationError, NotFoundError
from invplatform.modules.integrations import service
from invplatform.modules.integrations.schemas import AuthorizationUrlResponse
from invplatform.schemas.auth import CurrentUser
from invplatform.schemas.common import ApiResponse

logger = structlog.get_logger()
router = APIRouter(prefix="/integrations/zoho", tags=["integrations"])


@router.get(
    "/connect",
    response_model=ApiResponse[AuthorizationUrlResponse],
    dependencies=[Depends(get_current_startup)],
)
async def connect_zoho(
    current_user: CurrentUser = Depends(get_current_user),
) -> ApiResponse[AuthorizationUrlResponse]:
    """Return the Zoho consent URL for the founder's startup."""
    url = service.get_authorization_url(current_user.user_id)
    return ApiResponse(
        message="Zoho authorization URL generated",
        data=AuthorizationUrlResponse(authorization_url=url),
    )


@router.get("/callback")
async def zoho_callback(
    code: str = Query(...),
    state: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> RedirectResponse:
    """OAuth redirect target. No auth header here; the signed state identifies the founder."""
    try:
        integration = await service.handle_callback(db, code, state)
        await db.commit()
    except (BadRequestError, NotFoundError, IntegrationError) as exc:
        await db.rollback()
        logger.warning("zoho_callback_failed", error=str(exc))
        return RedirectResponse(url=f"{settings.FRONTEND_URL}/settings?zoho=error", status_code=302)

    logger.info("zoho_callback_success", integration_id=str(integration.id))
    return RedirectResponse(url=f"{settings.FRONTEND_URL}/settings?zoho=connected", status_code=302)
