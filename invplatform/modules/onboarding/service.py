"""Onboarding: create the founder's startup or the investor's profile, once."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.errors import BadRequestError, NotFoundError
from invplatform.models.core import Investor, Startup, User
from invplatform.modules.onboarding.schemas import FounderProfileRequest, InvestorProfileRequest

logger = structlog.get_logger()


async def _get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found.")
    return user


async def create_founder_profile(
    db: AsyncSession, user_id: uuid.UUID, body: FounderProfileRequest
) -> Startup:
    user = await _get_user(db, user_id)
    existing = (
        await db.execute(select(Startup.id).where(Startup.founder_user_id == user.id))
    ).scalar_one_or_none()
    if existing is not None:
        raise BadRequestError("Founder profile already exists for this user.")

    startup = Startup(
        founder_user_id=user.id,
        name=body.startup_name,
        sector=body.sector,
        stage=body.stage,
        funding_raised=body.funding_raised,
        hq_location=body.hq_location,
        team_size=body.team_size,
        website=body.website,
        valuation=body.valuation,
    )
    db.add(startup)
    user.is_onboarded = True
    try:
        await db.flush()
    except IntegrityError as exc:
        raise BadRequestError("Founder profile already exists for this user.") from exc

    logger.info("founder_onboarded", user_id=str(user.id), startup_id=str(startup.id))
    return startup


async def create_investor_profile(
    db: AsyncSession, user_id: uuid.UUID, body: InvestorProfileRequest
) -> Investor:
    user = await _get_user(db, user_id)
    existing = (
        await db.execute(select(Investor.id).where(Investor.user_id == user.id))
    ).scalar_one_or_none()
    if existing is not None:
        raise BadRequestError("Investor profile already exists for this user.")

    investor = Investor(
        user_id=user.id,
        investor_type=body.investor_type,
        firm_name=body.firm_name,
        ticket_size=body.ticket_size,
        sector_focus=[s.value for s in body.sector_focus],
        aum=body.aum,
    )
    db.add(investor)
    user.is_onboarded = True
    try:
        await db.flush()
    except IntegrityError as exc:
        raise BadRequestError("Investor profile already exists for this user.") from exc

    logger.info("investor_onboarded", user_id=str(user.id), investor_id=str(investor.id))
    return investor
