"""Founder-side views of connected investors."""

from __future__ import annotations

import uuid
from decimal import Decimal

from invplatform.models.enums import InvestorRole, InvestorType, MappingStatus
from invplatform.schemas.common import CamelModel


class InvestorFullResponse(CamelModel):
    # user
    user_id: uuid.UUID
    name: str
    email: str
    phone: str | None
    # investor profile
    investor_id: uuid.UUID
    firm_name: str | None
    investor_type: InvestorType | None
    ticket_size: str | None
    sector_focus: list[str]
    aum: Decimal | None
    # mapping
    mapping_id: uuid.UUID
    investor_role: InvestorRole | None
    status: MappingStatus
    # investment
    ownership_percentage: Decimal
    total_invested_amount: Decimal
    invested_at: str | None
