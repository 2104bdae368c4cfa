"""Celery beat task draining the notification outbox."""

from __future__ import annotations

import asyncio

import structlog
from celery import shared_task

logger = structlog.get_logger()


@shared_task(name="tasks.dispatch_notifications")
def dispatch_notifications() -> dict:
    """Beat task: deliver pending and due-for-retry outbox emails."""

    async def _run() -> dict[str, int]:
        from invplatform.core.config import settings
        from invplatform.core.database import async_session_factory
        from invplatform.modules.notifications.service import dispatch_pending

        async with async_session_factory() as db:
            return await dispatch_pending(db, limit=settings.NOTIFICATION_BATCH_SIZE)

    result = asyncio.run(_run())
    logger.info("notification_dispatch_done", **result)
    return result
