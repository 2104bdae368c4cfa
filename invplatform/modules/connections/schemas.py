"""Connection request / invitation schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import EmailStr

from invplatform.models.enums import InvestorRole, MappingStatus
from invplatform.schemas.common import CamelModel


class InviteInvestorRequest(CamelModel):
    investor_email: EmailStr
    investor_role: InvestorRole | None = None


class ConnectionRequestCreate(CamelModel):
    startup_id: uuid.UUID
    investor_role: InvestorRole | None = None


class MappingResponse(CamelModel):
    id: uuid.UUID
    startup_id: uuid.UUID
    investor_id: uuid.UUID | None
    investor_email: str | None
    investor_role: InvestorRole | None
    status: MappingStatus
    created_at: datetime
    updated_at: datetime
