"""Third-party integrations (Zoho Books) and the notification outbox."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from invplatform.models.base import BaseModel, JSONType, utcnow
from invplatform.models.enums import IntegrationStatus, IntegrationType, OutboxStatus


class Integration(BaseModel):
    """OAuth credentials for a startup's external data source."""

    __tablename__ = "integrations"
    __table_args__ = (
        UniqueConstraint("startup_id", "integration_type", name="uq_integration_startup_type"),
    )

    startup_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("startups.id"), nullable=False, index=True
    )
    integration_type: Mapped[IntegrationType] = mapped_column(
        Enum(IntegrationType, name="integration_type"), nullable=False
    )
    status: Mapped[IntegrationStatus] = mapped_column(
        Enum(IntegrationStatus, name="integration_status"), nullable=False
    )

    # Encrypted at application layer (services.encryption) before storing
    access_token: Mapped[str | None] = mapped_column(Text)
    refresh_token: Mapped[str | None] = mapped_column(Text)
    expires_at: Mapped[datetime | None]

    connection_config: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    last_sync_at: Mapped[datetime | None]


class NotificationOutbox(BaseModel):
    """Email queued in the same transaction as the state change that caused it."""

    __tablename__ = "notification_outbox"
    __table_args__ = (
        Index("ix_notification_outbox_status_next", "status", "next_attempt_at"),
    )

    template: Mapped[str] = mapped_column(String(100), nullable=False)
    recipient_email: Mapped[str] = mapped_column(String(320), nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    context: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    attachment_key: Mapped[str | None] = mapped_column(String(1000))
    attachment_name: Mapped[str | None] = mapped_column(String(500))

    status: Mapped[OutboxStatus] = mapped_column(
        Enum(OutboxStatus, name="outbox_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OutboxStatus.PENDING,
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_attempt_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    last_error: Mapped[str | None] = mapped_column(Text)
    sent_at: Mapped[datetime | None]
