"""Investor dashboard API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.auth.dependencies import get_current_investor, get_current_user
from invplatform.core.database import get_db
from invplatform.models.core import Investor
from invplatform.modules.activity.schemas import ActivityFeedItem
from invplatform.modules.investors import service
from invplatform.modules.investors.schemas import ConnectedStartup
from invplatform.schemas.auth import CurrentUser
from invplatform.schemas.common import ApiResponse

router = APIRouter(prefix="/investor/startups", tags=["investors"])


@router.get("", response_model=ApiResponse[list[ConnectedStartup]])
async def connected_startups(
    current_user: CurrentUser = Depends(get_current_user),
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ConnectedStartup]]:
    startups = await service.get_connected_startups(db, investor, current_user.email)
    return ApiResponse(message="Connected startups fetched", data=startups)


@router.get("/latest-activities", response_model=ApiResponse[list[ActivityFeedItem]])
async def latest_activities(
    current_user: CurrentUser = Depends(get_current_user),
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[ActivityFeedItem]]:
    feed = await service.get_latest_activities(db, investor, current_user.email)
    return ApiResponse(message="Latest activities fetched", data=feed)
