"""Deal pipeline API router (investor only)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.auth.dependencies import get_current_investor
from invplatform.core.database import get_db
from invplatform.models.core import Investor
from invplatform.modules.deal_pipeline import service
from invplatform.modules.deal_pipeline.schemas import (
    DealPipelineCreate,
    DealPipelineDashboard,
    DealPipelineResponse,
    DealPipelineUpdate,
)
from invplatform.schemas.common import ApiResponse

router = APIRouter(prefix="/investor/deal-pipeline", tags=["deal-pipeline"])


@router.get("", response_model=ApiResponse[list[DealPipelineResponse]])
async def list_pipeline(
    status_filter: str | None = Query(None, alias="filter", max_length=50),
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[DealPipelineResponse]]:
    entries = await service.get_pipeline_for_investor(db, investor.id, status_filter)
    return ApiResponse(message="Deal pipeline fetched", data=entries)


@router.get("/dashboard", response_model=ApiResponse[DealPipelineDashboard])
async def pipeline_dashboard(
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[DealPipelineDashboard]:
    metrics = await service.get_dashboard_metrics(db, investor.id)
    return ApiResponse(message="Deal pipeline dashboard fetched", data=metrics)


@router.post("", response_model=ApiResponse[DealPipelineResponse], status_code=201)
async def add_to_pipeline(
    body: DealPipelineCreate,
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[DealPipelineResponse]:
    entry = await service.add_to_pipeline(db, body.startup_id, investor.id, body.status)
    return ApiResponse(message="Startup added to deal pipeline", data=entry)


@router.put("/{entry_id}", response_model=ApiResponse[DealPipelineResponse])
async def update_pipeline(
    entry_id: uuid.UUID,
    body: DealPipelineUpdate,
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[DealPipelineResponse]:
    entry = await service.update_pipeline(db, entry_id, investor.id, body.status)
    return ApiResponse(message="Deal pipeline updated", data=entry)


@router.delete("/{entry_id}", status_code=204)
async def remove_from_pipeline(
    entry_id: uuid.UUID,
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await service.remove_from_pipeline(db, entry_id, investor.id)
    return Response(status_code=204)
