"""Investments and the investor portfolio view."""

from __future__ import annotations

import uuid
from decimal import Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.errors import BadRequestError, NotFoundError
from invplatform.core.formatting import format_date, round2
from invplatform.models.core import Startup
from invplatform.models.deals import Investment
from invplatform.models.reports import TimelyReport
from invplatform.modules.connections.service import require_active_connection
from invplatform.modules.investments.schemas import (
    InvestmentCreate,
    PortfolioCompany,
    PortfolioDashboard,
)

logger = structlog.get_logger()


def compute_growth(current: Decimal | float | None, previous: Decimal | float | None) -> float:
    """Month-over-month revenue growth in percent; 0 without a positive baseline."""
    if current is None or previous is None:
        return 0.0
    current_f, previous_f = float(current), float(previous)
    if previous_f <= 0:
        return 0.0
    return (current_f - previous_f) / previous_f * 100


def compute_portfolio_value(holdings: list[PortfolioCompany]) -> float:
    """Sum of valuation at investment x ownership share."""
    return sum(
        (h.valuation_at_investment or 0.0) * ((h.investment_ownership_percentage or 0.0) / 100)
        for h in holdings
    )


async def add_investment(db: AsyncSession, investor_id: uuid.UUID, body: InvestmentCreate) -> Investment:
    """Record money put into a connected startup.

    Repeated calls accumulate the amount; ownership and the descriptive fields
    are overwritten by the latest call.
    """
    if await db.get(Startup, body.startup_id) is None:
        raise NotFoundError("Startup not found")
    await require_active_connection(db, body.startup_id, investor_id)

    stmt = (
        select(Investment)
        .where(Investment.investor_id == investor_id, Investment.startup_id == body.startup_id)
        .with_for_update()
    )
    investment = (await db.execute(stmt)).scalar_one_or_none()

    if investment is None:
        investment = Investment(
            investor_id=investor_id,
            startup_id=body.startup_id,
            total_invested_amount=body.amount,
        )
        db.add(investment)
    else:
        investment.total_invested_amount = (investment.total_invested_amount or Decimal("0")) + body.amount

    investment.ownership_percentage = body.ownership_percentage
    investment.currency = body.currency
    investment.stage = body.stage
    investment.investment_date = body.investment_date
    investment.valuation_at_investment = body.valuation_at_investment
    investment.notes = body.notes
    investment.is_active = body.is_active

    try:
        await db.flush()
    except IntegrityError as exc:
        raise BadRequestError("Investment was recorded concurrently, please retry") from exc

    logger.info(
        "investment_recorded",
        investment_id=str(investment.id),
        investor_id=str(investor_id),
        startup_id=str(body.startup_id),
    )
    return investment


async def _recent_revenues(db: AsyncSession, startup_id: uuid.UUID) -> list[Decimal | None]:
    stmt = (
        select(TimelyReport.monthly_revenue)
        .where(TimelyReport.startup_id == startup_id)
        .where(TimelyReport.is_draft.is_(False))
        .order_by(TimelyReport.created_at.desc())
        .limit(2)
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_portfolio(db: AsyncSession, investor_id: uuid.UUID) -> list[PortfolioCompany]:
    investments = (
        await db.execute(
            select(Investment)
            .where(Investment.investor_id == investor_id)
            .order_by(Investment.created_at)
        )
    ).scalars().all()

    portfolio: list[PortfolioCompany] = []
    for investment in investments:
        startup = await db.get(Startup, investment.startup_id)
        if startup is None:
            continue

        revenues = await _recent_revenues(db, startup.id)
        current_mrr = float(revenues[0] or 0) if revenues else 0.0
        growth = 0.0
        if len(revenues) >= 2:
            growth = compute_growth(current_mrr, revenues[1] or 0)

        portfolio.append(
            PortfolioCompany(
                startup_id=startup.id,
                startup_name=startup.name,
                startup_industry=startup.sector.value if startup.sector else "Unknown",
                startup_team_size=startup.team_size,
                startup_founded_year=str(startup.created_at.year) if startup.created_at else "N/A",
                startup_mrr=round2(current_mrr),
                startup_growth_percentage=round2(growth),
                investment_amount=round2(investment.total_invested_amount) or 0.0,
                investment_ownership_percentage=round2(investment.ownership_percentage),
                investment_currency=investment.currency,
                investment_stage=investment.stage,
                investment_date=investment.investment_date,
                valuation_at_investment=round2(investment.valuation_at_investment),
                investment_notes=investment.notes,
                investment_last_update=format_date(investment.updated_at or investment.created_at) or "N/A",
                is_active=investment.is_active,
            )
        )
    return portfolio


async def get_dashboard_metrics(db: AsyncSession, investor_id: uuid.UUID) -> PortfolioDashboard:
    portfolio = await get_portfolio(db, investor_id)
    avg_growth = (
        sum(p.startup_growth_percentage for p in portfolio) / len(portfolio) if portfolio else 0.0
    )
    return PortfolioDashboard(
        total_companies=len(portfolio),
        total_invested=round2(sum(p.investment_amount for p in portfolio)) or 0.0,
        portfolio_value=round2(compute_portfolio_value(portfolio)) or 0.0,
        avg_growth=round2(avg_growth) or 0.0,
    )
