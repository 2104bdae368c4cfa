"""Investor-side views of connected startups."""

from __future__ import annotations

import uuid
from decimal import Decimal

from invplatform.models.enums import InvestorRole, MappingStatus, Sector
from invplatform.schemas.common import CamelModel


class ConnectedStartup(CamelModel):
    startup_id: uuid.UUID
    startup_name: str
    sector: Sector | None
    stage: str | None
    funding_raised: Decimal | None
    hq_location: str | None
    team_size: int | None
    website: str | None
    valuation: Decimal | None
    mapping_id: uuid.UUID
    status: MappingStatus
    investor_role: InvestorRole | None
