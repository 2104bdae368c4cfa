"""Investor dashboard views: connected startups and their activity feed."""

from __future__ import annotations

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.formatting import format_time_ago
from invplatform.models.base import utcnow
from invplatform.models.connections import StartupInvestorMapping
from invplatform.models.core import Investor, Startup
from invplatform.models.enums import MappingStatus
from invplatform.modules.activity import service as activity_service
from invplatform.modules.activity.schemas import ActivityFeedItem
from invplatform.modules.connections.service import normalize_email
from invplatform.modules.investors.schemas import ConnectedStartup

logger = structlog.get_logger()


async def get_connected_startups(
    db: AsyncSession, investor: Investor, investor_email: str
) -> list[ConnectedStartup]:
    """Every startup linked to the investor, by id or by a still-unresolved invitation email.

    Includes INVITED and PENDING links; callers filter on ``status`` as needed.
    """
    stmt = (
        select(StartupInvestorMapping, Startup)
        .join(Startup, Startup.id == StartupInvestorMapping.startup_id)
        .where(
            or_(
                StartupInvestorMapping.investor_id == investor.id,
                func.lower(StartupInvestorMapping.investor_email) == normalize_email(investor_email),
            )
        )
        .order_by(StartupInvestorMapping.created_at.desc())
    )
    seen = set()
    result: list[ConnectedStartup] = []
    for mapping, startup in (await db.execute(stmt)).all():
        if mapping.id in seen:
            continue
        seen.add(mapping.id)
        result.append(
            ConnectedStartup(
                startup_id=startup.id,
                startup_name=startup.name,
                sector=startup.sector,
                stage=startup.stage,
                funding_raised=startup.funding_raised,
                hq_location=startup.hq_location,
                team_size=startup.team_size,
                website=startup.website,
                valuation=startup.valuation,
                mapping_id=mapping.id,
                status=mapping.status,
                investor_role=mapping.investor_role,
            )
        )
    return result


async def get_latest_activities(
    db: AsyncSession, investor: Investor, investor_email: str
) -> list[ActivityFeedItem]:
    """Latest activity of ACTIVE connections only, matching the single-startup view."""
    connected = await get_connected_startups(db, investor, investor_email)
    names = {
        c.startup_id: c.startup_name for c in connected if c.status == MappingStatus.ACTIVE
    }
    activities = await activity_service.get_activities(db, list(names))

    now = utcnow()
    return [
        ActivityFeedItem(
            startup_id=a.startup_id,
            startup_name=names.get(a.startup_id) or a.startup_name or "Unknown Startup",
            message=a.message,
            time_ago=format_time_ago(a.updated_at, now),
        )
        for a in activities
    ]
