"""Investments API router (investor only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.auth.dependencies import get_current_investor
from invplatform.core.database import get_db
from invplatform.models.core import Investor
from invplatform.modules.investments import service
from invplatform.modules.investments.schemas import (
    InvestmentCreate,
    PortfolioCompany,
    PortfolioDashboard,
)
from invplatform.schemas.common import ApiResponse

router = APIRouter(prefix="/investor/investments", tags=["investments"])


@router.post("", status_code=200)
async def add_investment(
    body: InvestmentCreate,
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await service.add_investment(db, investor.id, body)
    return Response(status_code=200)


@router.get("", response_model=ApiResponse[list[PortfolioCompany]])
async def get_portfolio(
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[PortfolioCompany]]:
    portfolio = await service.get_portfolio(db, investor.id)
    return ApiResponse(message="Portfolio fetched", data=portfolio)


@router.get("/dashboard", response_model=ApiResponse[PortfolioDashboard])
async def portfolio_dashboard(
    investor: Investor = Depends(get_current_investor),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[PortfolioDashboard]:
    metrics = await service.get_dashboard_metrics(db, investor.id)
    return ApiResponse(message="Portfolio dashboard fetched", data=metrics)
