"""Deal pipeline: an investor's shortlist of connected startups."""

from __future__ import annotations

import uuid
from datetime import datetime

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.errors import BadRequestError, NotFoundError
from invplatform.core.formatting import format_money, format_relative_time
from invplatform.models.base import utcnow
from invplatform.models.core import Startup
from invplatform.models.deals import HOT_DEAL, STARRED_DEAL, DealPipeline
from invplatform.models.reports import TimelyReport
from invplatform.modules.connections.service import require_active_connection
from invplatform.modules.deal_pipeline.schemas import DealPipelineDashboard, DealPipelineResponse

logger = structlog.get_logger()


# ── Enrichment ───────────────────────────────────────────────────────────────


async def _latest_report_times(
    db: AsyncSession, startup_ids: list[uuid.UUID]
) -> dict[uuid.UUID, datetime]:
    if not startup_ids:
        return {}
    stmt = (
        select(TimelyReport.startup_id, func.max(TimelyReport.created_at))
        .where(TimelyReport.startup_id.in_(startup_ids))
        .where(TimelyReport.is_draft.is_(False))
        .group_by(TimelyReport.startup_id)
    )
    return {row[0]: row[1] for row in (await db.execute(stmt)).all()}


def _to_response(
    entry: DealPipeline,
    startup: Startup | None,
    last_report_at: datetime | None,
    now: datetime,
) -> DealPipelineResponse:
    if startup is None:
        return DealPipelineResponse(
            id=entry.id,
            startup_id=entry.startup_id,
            investor_id=entry.investor_id,
            startup_name="Unknown Startup",
            industry="Unknown",
            stage="Seed",
            valuation="N/A",
            funding=format_money(None),
            deal_status=entry.status,
            last_activity="N/A",
        )

    # Latest report wins; startup creation time is the fallback
    last_activity_at = last_report_at or startup.created_at
    return DealPipelineResponse(
        id=entry.id,
        startup_id=entry.startup_id,
        investor_id=entry.investor_id,
        startup_name=startup.name,
        industry=startup.sector.value if startup.sector else "Unknown",
        stage=startup.stage,
        valuation=format_money(startup.valuation, default="N/A"),
        funding=format_money(startup.funding_raised),
        deal_status=entry.status,
        last_activity=format_relative_time(last_activity_at, now),
    )


async def _enrich(db: AsyncSession, entries: list[DealPipeline]) -> list[DealPipelineResponse]:
    startup_ids = list({e.startup_id for e in entries})
    startups: dict[uuid.UUID, Startup] = {}
    if startup_ids:
        rows = (await db.execute(select(Startup).where(Startup.id.in_(startup_ids)))).scalars()
        startups = {s.id: s for s in rows}
    report_times = await _latest_report_times(db, list(startups))
    now = utcnow()
    return [
        _to_response(e, startups.get(e.startup_id), report_times.get(e.startup_id), now)
        for e in entries
    ]


async def _get_owned_entry(
    db: AsyncSession, entry_id: uuid.UUID, investor_id: uuid.UUID
) -> DealPipeline:
    entry = await db.get(DealPipeline, entry_id)
    if entry is None or entry.investor_id != investor_id:
        raise NotFoundError("Deal Pipeline not found")
    return entry


# ── Operations ───────────────────────────────────────────────────────────────


async def add_to_pipeline(
    db: AsyncSession, startup_id: uuid.UUID, investor_id: uuid.UUID, status: str
) -> DealPipelineResponse:
    if await db.get(Startup, startup_id) is None:
        raise NotFoundError("Startup not found")

    existing = (
        await db.execute(
            select(DealPipeline.id).where(
                DealPipeline.investor_id == investor_id,
                DealPipeline.startup_id == startup_id,
            )
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise BadRequestError("Startup already in deal pipeline")

    await require_active_connection(db, startup_id, investor_id)

    entry = DealPipeline(investor_id=investor_id, startup_id=startup_id, status=status)
    db.add(entry)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise BadRequestError("Startup already in deal pipeline") from exc

    logger.info(
        "deal_pipeline_entry_added",
        entry_id=str(entry.id),
        investor_id=str(investor_id),
        status=status,
    )
    return (await _enrich(db, [entry]))[0]


async def update_pipeline(
    db: AsyncSession, entry_id: uuid.UUID, investor_id: uuid.UUID, status: str
) -> DealPipelineResponse:
    entry = await _get_owned_entry(db, entry_id, investor_id)
    await require_active_connection(db, entry.startup_id, entry.investor_id)

    entry.status = status
    await db.flush()
    logger.info("deal_pipeline_entry_updated", entry_id=str(entry.id), status=status)
    return (await _enrich(db, [entry]))[0]


async def remove_from_pipeline(
    db: AsyncSession, entry_id: uuid.UUID, investor_id: uuid.UUID
) -> None:
    """Idempotent: removing an unknown entry is a no-op."""
    entry = await db.get(DealPipeline, entry_id)
    if entry is None or entry.investor_id != investor_id:
        return
    await db.delete(entry)
    await db.flush()
    logger.info("deal_pipeline_entry_removed", entry_id=str(entry_id))


async def get_pipeline_for_investor(
    db: AsyncSession, investor_id: uuid.UUID, status_filter: str | None = None
) -> list[DealPipelineResponse]:
    stmt = (
        select(DealPipeline)
        .where(DealPipeline.investor_id == investor_id)
        .order_by(DealPipeline.created_at.desc())
    )
    if status_filter:
        stmt = stmt.where(DealPipeline.status == status_filter)
    entries = list((await db.execute(stmt)).scalars().all())
    return await _enrich(db, entries)


async def get_dashboard_metrics(db: AsyncSession, investor_id: uuid.UUID) -> DealPipelineDashboard:
    entries = list(
        (await db.execute(select(DealPipeline).where(DealPipeline.investor_id == investor_id)))
        .scalars()
        .all()
    )
    startup_ids = list({e.startup_id for e in entries})
    total_funding = 0
    if startup_ids:
        total_funding = (
            await db.execute(
                select(func.coalesce(func.sum(Startup.funding_raised), 0)).where(
                    Startup.id.in_(startup_ids)
                )
            )
        ).scalar_one()

    return DealPipelineDashboard(
        total_pipeline=len(entries),
        starred_deals=sum(1 for e in entries if e.status == STARRED_DEAL),
        hot_deals=sum(1 for e in entries if e.status == HOT_DEAL),
        total_value=format_money(total_funding),
    )
