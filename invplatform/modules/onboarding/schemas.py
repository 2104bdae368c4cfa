"""Onboarding payloads: founder (startup) and investor profiles."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import Field

from invplatform.models.enums import InvestorType, Sector
from invplatform.schemas.common import CamelModel


class FounderProfileRequest(CamelModel):
    startup_name: str = Field(..., min_length=1, max_length=255)
    sector: Sector
    stage: str = Field(..., min_length=1, max_length=50)
    funding_raised: Decimal = Field(..., ge=0)
    hq_location: str = Field(..., min_length=1, max_length=255)
    team_size: int = Field(..., ge=0)
    website: str | None = Field(None, max_length=500)
    valuation: Decimal | None = Field(None, ge=0)


class InvestorProfileRequest(CamelModel):
    investor_type: InvestorType
    firm_name: str | None = Field(None, max_length=255)
    ticket_size: str | None = Field(None, max_length=100)
    sector_focus: list[Sector] = []
    aum: Decimal | None = Field(None, ge=0)


class StartupResponse(CamelModel):
    id: uuid.UUID
    founder_user_id: uuid.UUID
    name: str
    sector: Sector | None
    stage: str | None
    funding_raised: Decimal | None
    valuation: Decimal | None
    team_size: int | None
    hq_location: str | None
    website: str | None
    created_at: datetime


class InvestorResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    firm_name: str | None
    investor_type: InvestorType | None
    ticket_size: str | None
    sector_focus: list[str]
    aum: Decimal | None
