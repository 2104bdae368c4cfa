"""Latest-activity message per startup."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.models.base import utcnow
from invplatform.models.reports import StartupActivity

logger = structlog.get_logger()


async def upsert_activity(
    db: AsyncSession, startup_id: uuid.UUID, startup_name: str | None, message: str
) -> StartupActivity:
    """Replace the startup's activity message, creating the row on first use."""
    stmt = select(StartupActivity).where(StartupActivity.startup_id == startup_id)
    activity = (await db.execute(stmt)).scalar_one_or_none()
    if activity is None:
        activity = StartupActivity(startup_id=startup_id)
        db.add(activity)
    activity.startup_name = startup_name
    activity.message = message
    activity.updated_at = utcnow()
    await db.flush()
    logger.info("startup_activity_updated", startup_id=str(startup_id))
    return activity


async def get_activity(db: AsyncSession, startup_id: uuid.UUID) -> StartupActivity | None:
    stmt = select(StartupActivity).where(StartupActivity.startup_id == startup_id)
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_activities(
    db: AsyncSession, startup_ids: list[uuid.UUID]
) -> list[StartupActivity]:
    if not startup_ids:
        return []
    stmt = (
        select(StartupActivity)
        .where(StartupActivity.startup_id.in_(startup_ids))
        .order_by(StartupActivity.updated_at.desc())
    )
    return list((await db.execute(stmt)).scalars().all())
