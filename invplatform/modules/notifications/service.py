"""Notification outbox: enqueue in the caller's transaction, deliver from Celery."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import structlog
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.models.base import utcnow
from invplatform.models.enums import OutboxStatus
from invplatform.models.integrations import NotificationOutbox
from invplatform.services import mailer, storage

logger = structlog.get_logger()

# Exponential retry: 1m, 5m, 15m, 1h, 4h
RETRY_DELAYS = [60, 300, 900, 3600, 14400]


async def enqueue(
    db: AsyncSession,
    template: str,
    recipient: str,
    subject: str,
    context: dict[str, Any] | None = None,
    attachment_key: str | None = None,
    attachment_name: str | None = None,
) -> NotificationOutbox:
    """Queue an email. Committed (or rolled back) together with the caller's change."""
    entry = NotificationOutbox(
        template=template,
        recipient_email=recipient,
        subject=subject,
        context=context or {},
        attachment_key=attachment_key,
        attachment_name=attachment_name,
        status=OutboxStatus.PENDING,
        attempts=0,
        next_attempt_at=utcnow(),
    )
    db.add(entry)
    await db.flush()
    logger.info("notification_enqueued", outbox_id=str(entry.id), template=template)
    return entry


def _deliver(entry: NotificationOutbox) -> bool:
    attachment = None
    if entry.attachment_key:
        attachment = (
            entry.attachment_name or "attachment.pdf",
            storage.download_bytes(entry.attachment_key),
        )
    return mailer.send_email(
        recipient=entry.recipient_email,
        subject=entry.subject,
        template=entry.template,
        context=entry.context,
        attachment=attachment,
    )


async def dispatch_pending(db: AsyncSession, limit: int = 50) -> dict[str, int]:
    """Send every due outbox row. Each failure is logged and rescheduled.

    Rows stay pending, with no attempt counted, while email is not configured.
    """
    now = utcnow()
    stmt = (
        select(NotificationOutbox)
        .where(
            or_(
                NotificationOutbox.status == OutboxStatus.PENDING,
                NotificationOutbox.status == OutboxStatus.RETRYING,
            ),
            NotificationOutbox.next_attempt_at <= now,
        )
        .order_by(NotificationOutbox.next_attempt_at)
        .limit(limit)
        .with_for_update(skip_locked=True)
    )
    entries = (await db.execute(stmt)).scalars().all()

    sent = failed = skipped = 0
    for entry in entries:
        try:
            delivered = _deliver(entry)
        except Exception as exc:
            entry.attempts += 1
            entry.last_error = str(exc)[:500]
            if entry.attempts <= len(RETRY_DELAYS):
                entry.status = OutboxStatus.RETRYING
                entry.next_attempt_at = utcnow() + timedelta(
                    seconds=RETRY_DELAYS[entry.attempts - 1]
                )
            else:
                entry.status = OutboxStatus.FAILED
            failed += 1
            logger.warning(
                "notification_delivery_failed",
                outbox_id=str(entry.id),
                attempts=entry.attempts,
                error=str(exc)[:200],
            )
            continue

        if not delivered:
            skipped += 1
            continue

        entry.attempts += 1
        entry.status = OutboxStatus.SENT
        entry.sent_at = utcnow()
        entry.last_error = None
        sent += 1

    if skipped:
        logger.warning("notification_delivery_skipped", count=skipped)
    await db.commit()
    return {"sent": sent, "failed": failed}
