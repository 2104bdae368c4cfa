"""Investor-side deal tracking: DealPipeline entries and Investments."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from invplatform.models.base import BaseModel

HOT_DEAL = "HOT_DEAL"
STARRED_DEAL = "STARRED_DEAL"


class DealPipeline(BaseModel):
    __tablename__ = "deal_pipelines"
    __table_args__ = (
        UniqueConstraint("investor_id", "startup_id", name="uq_deal_pipeline_investor_startup"),
    )

    investor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("investors.id"), nullable=False, index=True
    )
    # No FK: pipeline rows outlive deleted startups and render as placeholders
    startup_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False)  # free-form, e.g. HOT_DEAL


class Investment(BaseModel):
    """Cumulative investment of one investor in one startup."""

    __tablename__ = "investments"
    __table_args__ = (
        UniqueConstraint("investor_id", "startup_id", name="uq_investment_investor_startup"),
    )

    investor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("investors.id"), nullable=False, index=True
    )
    startup_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    total_invested_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    ownership_percentage: Mapped[Decimal | None]
    currency: Mapped[str | None] = mapped_column(String(10))
    stage: Mapped[str | None] = mapped_column(String(50))
    investment_date: Mapped[date | None]
    valuation_at_investment: Mapped[Decimal | None]
    notes: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
