"""Deal pipeline schemas."""

from __future__ import annotations

import uuid

from pydantic import Field

from invplatform.schemas.common import CamelModel


class DealPipelineCreate(CamelModel):
    startup_id: uuid.UUID
    status: str = Field(..., min_length=1, max_length=50)


class DealPipelineUpdate(CamelModel):
    status: str = Field(..., min_length=1, max_length=50)


class DealPipelineResponse(CamelModel):
    id: uuid.UUID
    startup_id: uuid.UUID
    investor_id: uuid.UUID
    startup_name: str
    industry: str
    stage: str | None
    valuation: str
    funding: str
    deal_status: str
    last_activity: str


class DealPipelineDashboard(CamelModel):
    total_pipeline: int
    starred_deals: int
    hot_deals: int
    total_value: str
