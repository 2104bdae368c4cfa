"""Founder dashboard API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.auth.dependencies import get_current_startup
from invplatform.core.database import get_db
from invplatform.models.core import Startup
from invplatform.modules.founder_dashboard import service
from invplatform.modules.founder_dashboard.schemas import FounderDashboardResponse
from invplatform.schemas.common import ApiResponse

router = APIRouter(prefix="/startup/dashboard", tags=["founder-dashboard"])


@router.get("", response_model=ApiResponse[FounderDashboardResponse])
async def get_dashboard(
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[FounderDashboardResponse]:
    dashboard = await service.get_founder_dashboard(db, startup)
    return ApiResponse(message="Dashboard data fetched", data=dashboard)
