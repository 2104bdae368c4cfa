"""Timely (periodic investor update) report schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import Field

from invplatform.schemas.common import CamelModel


class TimelyReportPayload(CamelModel):
    """JSON part of the multipart create/update request."""

    title: str | None = Field(None, max_length=255)
    reporting_period: str | None = Field(None, max_length=100)
    monthly_revenue: Decimal | None = None
    monthly_burn: Decimal | None = None
    cash_runway: Decimal | None = None
    team_size: int | None = Field(None, ge=0)
    key_metrics: str | None = None
    key_achievements: str | None = None
    challenges_and_learnings: str | None = None
    other_key_metrics: str | None = None
    asks_from_investors: str | None = None
    is_draft: bool = Field(False, alias="draftReport")
    investor_ids: list[uuid.UUID] = Field(default_factory=list, alias="investorUserIds")


class ReportFile(CamelModel):
    file_name: str
    file_key: str


class TimelyReportResponse(CamelModel):
    id: uuid.UUID
    startup_id: uuid.UUID
    founder_user_id: uuid.UUID
    title: str
    reporting_period: str | None
    monthly_revenue: Decimal | None
    monthly_burn: Decimal | None
    cash_runway: Decimal | None
    team_size: int | None
    key_metrics: str | None
    key_achievements: str | None
    challenges_and_learnings: str | None
    other_key_metrics: str | None
    asks_from_investors: str | None
    is_draft: bool = Field(alias="draftReport")
    investor_ids: list[uuid.UUID] = Field(alias="investorUserIds")
    attachments: list[ReportFile]
    report_pdf: ReportFile | None
    created_at: datetime
    updated_at: datetime
