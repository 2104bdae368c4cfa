"""Onboarding API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.auth.dependencies import require_role
from invplatform.core.database import get_db
from invplatform.models.enums import UserRole
from invplatform.modules.onboarding import service
from invplatform.modules.onboarding.schemas import (
    FounderProfileRequest,
    InvestorProfileRequest,
    InvestorResponse,
    StartupResponse,
)
from invplatform.schemas.auth import CurrentUser
from invplatform.schemas.common import ApiResponse

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


@router.post("/founder", response_model=ApiResponse[StartupResponse], status_code=201)
async def onboard_founder(
    body: FounderProfileRequest,
    current_user: CurrentUser = Depends(require_role([UserRole.FOUNDER])),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StartupResponse]:
    startup = await service.create_founder_profile(db, current_user.user_id, body)
    return ApiResponse(
        message="Founder profile created",
        data=StartupResponse.model_validate(startup),
    )


@router.post("/investor", response_model=ApiResponse[InvestorResponse], status_code=201)
async def onboard_investor(
    body: InvestorProfileRequest,
    current_user: CurrentUser = Depends(require_role([UserRole.INVESTOR])),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[InvestorResponse]:
    investor = await service.create_investor_profile(db, current_user.user_id, body)
    return ApiResponse(
        message="Investor profile created",
        data=InvestorResponse.model_validate(investor),
    )
