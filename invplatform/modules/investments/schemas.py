"""Investment and portfolio schemas."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from pydantic import Field

from invplatform.schemas.common import CamelModel


class InvestmentCreate(CamelModel):
    startup_id: uuid.UUID
    amount: Decimal = Field(..., gt=0)
    ownership_percentage: Decimal | None = Field(None, ge=0, le=100)
    currency: str | None = Field(None, max_length=10)
    stage: str | None = Field(None, max_length=50)
    investment_date: date | None = None
    valuation_at_investment: Decimal | None = Field(None, ge=0)
    notes: str | None = None
    is_active: bool = True


class PortfolioCompany(CamelModel):
    startup_id: uuid.UUID
    startup_name: str
    startup_industry: str
    startup_team_size: int | None
    startup_founded_year: str
    startup_mrr: float
    startup_growth_percentage: float
    investment_amount: float
    investment_ownership_percentage: float | None
    investment_currency: str | None
    investment_stage: str | None
    investment_date: date | None
    valuation_at_investment: float | None
    investment_notes: str | None
    investment_last_update: str
    is_active: bool


class PortfolioDashboard(CamelModel):
    total_companies: int
    total_invested: float
    portfolio_value: float
    avg_growth: float
