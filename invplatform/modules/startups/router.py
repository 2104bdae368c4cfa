"""Founder-facing startup views: connected investors and latest activity."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.auth.dependencies import get_current_startup, get_current_user
from invplatform.core.database import get_db
from invplatform.models.core import Startup
from invplatform.modules.activity.schemas import StartupActivityResponse
from invplatform.modules.startups import service
from invplatform.modules.startups.schemas import InvestorFullResponse
from invplatform.schemas.auth import CurrentUser
from invplatform.schemas.common import ApiResponse

router = APIRouter(prefix="/startup", tags=["startups"])


@router.get("/investors", response_model=ApiResponse[list[InvestorFullResponse]])
async def list_investors(
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[InvestorFullResponse]]:
    investors = await service.get_full_investor_data(db, startup)
    return ApiResponse(message="Investors fetched", data=investors)


@router.get("/{startup_id}/latest-activity", response_model=ApiResponse[StartupActivityResponse])
async def latest_activity(
    startup_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StartupActivityResponse]:
    activity = await service.get_latest_activity(db, startup_id, current_user)
    return ApiResponse(message="Latest activity fetched", data=activity)
