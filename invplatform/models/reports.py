"""Founder-side content: periodic reports, latest activity, and documents."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from invplatform.core.database import Base
from invplatform.models.base import BaseModel, JSONType, ModelMixin, TimestampedModel, utcnow
from invplatform.models.enums import DocumentType


class TimelyReport(BaseModel):
    """Periodic investor update. At most one draft per startup."""

    __tablename__ = "timely_reports"

    startup_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("startups.id"), nullable=False, index=True
    )
    founder_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    reporting_period: Mapped[str | None] = mapped_column(String(100))
    monthly_revenue: Mapped[Decimal | None]
    monthly_burn: Mapped[Decimal | None]
    cash_runway: Mapped[Decimal | None]
    team_size: Mapped[int | None] = mapped_column(Integer)
    key_metrics: Mapped[str | None] = mapped_column(Text)
    key_achievements: Mapped[str | None] = mapped_column(Text)
    challenges_and_learnings: Mapped[str | None] = mapped_column(Text)
    other_key_metrics: Mapped[str | None] = mapped_column(Text)
    asks_from_investors: Mapped[str | None] = mapped_column(Text)
    is_draft: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Investor ids (as strings) the report is distributed to
    investor_ids: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    # [{"file_name": ..., "file_key": ...}]
    attachments: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    report_pdf: Mapped[dict[str, Any] | None] = mapped_column(JSONType)


class StartupActivity(Base, ModelMixin):
    """Single latest-activity message per startup, replaced on every update."""

    __tablename__ = "startup_activities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    startup_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, unique=True, index=True)
    startup_name: Mapped[str | None] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)


class StartupDocument(TimestampedModel):
    __tablename__ = "startup_documents"

    startup_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("startups.id"), nullable=False, index=True
    )
    document_type: Mapped[DocumentType] = mapped_column(
        Enum(DocumentType, name="document_type"), nullable=False
    )
    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    file_key: Mapped[str] = mapped_column(String(1000), nullable=False, unique=True)
    content_type: Mapped[str | None] = mapped_column(String(255))
    file_size: Mapped[int | None] = mapped_column(Integer)
    uploaded_by: Mapped[uuid.UUID | None] = mapped_column(Uuid)
