"""Connection endpoints for both sides of a startup <-> investor link."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.auth.dependencies import get_current_investor, get_current_startup, require_role
from invplatform.core.database import get_db
from invplatform.models.core import Investor, Startup
from invplatform.models.enums import UserRole
from invplatform.modules.connections import service
from invplatform.modules.connections.schemas import (
    ConnectionRequestCreate,
    InviteInvestorRequest,
    MappingResponse,
)
from invplatform.schemas.auth import CurrentUser
from invplatform.schemas.common import ApiResponse

logger = structlog.get_logger()

investor_router = APIRouter(prefix="/investor/connections", tags=["connections"])
founder_router = APIRouter(prefix="/startup/connections", tags=["connections"])


# ── Investor side ────────────────────────────────────────────────────────────


@investor_router.post("/request", response_model=ApiResponse[MappingResponse], status_code=201)
async def request_connection(
    body: ConnectionRequestCreate,
    current_user: CurrentUser = Depends(require_role([UserRole.INVESTOR])),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[MappingResponse]:
    mapping = await service.request_connection(
        db, current_user.email, body.startup_id, body.investor_role
    )
    return ApiResponse(
        message="Connection request sent",
        data=MappingResponse.model_validate(mapping),
    )


@investor_router.get("/{mapping_id}/accept", response_model=ApiResponse[MappingResponse])
async def accept_invitation(
    mapping_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_role([UserRole.INVESTOR])),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[MappingResponse]:
    mapping = await service.accept_invitation(db, mapping_id, current_user.email)
    return ApiResponse(
        message="Invitation accepted",
        data=MappingResponse.model_validate(mapping),
    )


@investor_router.get("/{mapping_id}/reject", response_model=ApiResponse[None])
async def reject_invitation(
    mapping_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_role([UserRole.INVESTOR])),
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    await service.reject_by_investor(db, mapping_id, investor, current_user.email)
    return ApiResponse(message="Invitation rejected")


# ── Founder side ─────────────────────────────────────────────────────────────


@founder_router.post("/invite", response_model=ApiResponse[MappingResponse], status_code=201)
async def invite_investor(
    body: InviteInvestorRequest,
    current_user: CurrentUser = Depends(require_role([UserRole.FOUNDER])),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[MappingResponse]:
    mapping = await service.invite_investor(
        db, current_user.email, body.investor_email, body.investor_role
    )
    return ApiResponse(
        message="Invitation sent",
        data=MappingResponse.model_validate(mapping),
    )


@founder_router.post("/{mapping_id}/approve", response_model=ApiResponse[MappingResponse])
async def approve_connection(
    mapping_id: uuid.UUID,
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[MappingResponse]:
    mapping = await service.approve_connection(db, mapping_id, startup)
    return ApiResponse(
        message="Connection approved",
        data=MappingResponse.model_validate(mapping),
    )


@founder_router.post("/{mapping_id}/reject", response_model=ApiResponse[None])
async def reject_connection(
    mapping_id: uuid.UUID,
    startup: Startup = Depends(get_current_startup),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    await service.reject_by_founder(db, mapping_id, startup)
    return ApiResponse(message="Connection request rejected")
