"""Founder dashboard views: active investors and startup activity."""

from __future__ import annotations

import uuid
from decimal import Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.errors import NotFoundError
from invplatform.core.formatting import format_date, format_time_ago
from invplatform.models.base import utcnow
from invplatform.models.connections import StartupInvestorMapping
from invplatform.models.core import Investor, Startup, User
from invplatform.models.deals import Investment
from invplatform.models.enums import MappingStatus, UserRole
from invplatform.modules.activity import service as activity_service
from invplatform.modules.activity.schemas import StartupActivityResponse
from invplatform.modules.connections.service import get_investor_for_user, get_mapping
from invplatform.modules.startups.schemas import InvestorFullResponse
from invplatform.schemas.auth import CurrentUser

logger = structlog.get_logger()


async def get_full_investor_data(db: AsyncSession, startup: Startup) -> list[InvestorFullResponse]:
    """Active investors of the startup with profile, contact and investment totals."""
    stmt = (
        select(StartupInvestorMapping, Investor, User)
        .join(Investor, Investor.id == StartupInvestorMapping.investor_id)
        .join(User, User.id == Investor.user_id)
        .where(
            StartupInvestorMapping.startup_id == startup.id,
            StartupInvestorMapping.status == MappingStatus.ACTIVE,
        )
        .order_by(StartupInvestorMapping.created_at)
    )
    rows = (await db.execute(stmt)).all()
    if not rows:
        raise NotFoundError("No active investors found for this startup.")

    investor_ids = [investor.id for _, investor, _ in rows]
    investments = {
        inv.investor_id: inv
        for inv in (
            await db.execute(
                select(Investment).where(
                    Investment.startup_id == startup.id,
                    Investment.investor_id.in_(investor_ids),
                )
            )
        ).scalars()
    }

    result = []
    for mapping, investor, user in rows:
        investment = investments.get(investor.id)
        result.append(
            InvestorFullResponse(
                user_id=user.id,
                name=user.name,
                email=user.email,
                phone=user.phone,
                investor_id=investor.id,
                firm_name=investor.firm_name,
                investor_type=investor.investor_type,
                ticket_size=investor.ticket_size,
                sector_focus=list(investor.sector_focus or []),
                aum=investor.aum,
                mapping_id=mapping.id,
                investor_role=mapping.investor_role,
                status=mapping.status,
                ownership_percentage=(
                    investment.ownership_percentage if investment and investment.ownership_percentage is not None
                    else Decimal("0")
                ),
                total_invested_amount=investment.total_invested_amount if investment else Decimal("0"),
                invested_at=format_date(investment.created_at) if investment else None,
            )
        )
    return result


async def get_latest_activity(
    db: AsyncSession, startup_id: uuid.UUID, viewer: CurrentUser
) -> StartupActivityResponse | None:
    """Visible to the owning founder and to investors with an active connection."""
    startup = await db.get(Startup, startup_id)
    if startup is None:
        raise NotFoundError("Startup not found.")

    if viewer.role == UserRole.FOUNDER:
        allowed = startup.founder_user_id == viewer.user_id
    else:
        investor = await get_investor_for_user(db, viewer.user_id)
        mapping = await get_mapping(db, startup_id, investor.id) if investor else None
        allowed = mapping is not None and mapping.status == MappingStatus.ACTIVE
    if not allowed:
        raise NotFoundError("Startup not found.")

    activity = await activity_service.get_activity(db, startup_id)
    if activity is None:
        return None
    return StartupActivityResponse(
        startup_id=activity.startup_id,
        startup_name=activity.startup_name,
        message=activity.message,
        updated_at=activity.updated_at,
        time_ago=format_time_ago(activity.updated_at, utcnow()),
    )
