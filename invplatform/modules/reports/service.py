"""Founder reports: drafts, PDF rendering, and distribution to investors."""

from __future__ import annotations

import uuid
from typing import NamedTuple

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.errors import BadRequestError, NotFoundError
from invplatform.models.core import Investor, Startup, User
from invplatform.models.enums import MappingStatus
from invplatform.models.reports import TimelyReport
from invplatform.modules.activity.service import upsert_activity
from invplatform.modules.connections.service import get_mapping
from invplatform.modules.notifications.service import enqueue
from invplatform.modules.reports.schemas import TimelyReportPayload
from invplatform.services import pdf, storage

logger = structlog.get_logger()

_DRAFT_EXISTS = "A draft report already exists. Please update or delete it before creating a new one."


class UploadedFile(NamedTuple):
    file_name: str | None
    content: bytes
    content_type: str | None


# ── Helpers ──────────────────────────────────────────────────────────────────


async def _find_draft(db: AsyncSession, startup_id: uuid.UUID) -> TimelyReport | None:
    stmt = (
        select(TimelyReport)
        .where(TimelyReport.startup_id == startup_id, TimelyReport.is_draft.is_(True))
        .limit(1)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


def _save_attachments(startup_id: uuid.UUID, files: list[UploadedFile]) -> list[dict[str, str]]:
    saved = []
    for f in files:
        name = storage.sanitize_filename(f.file_name or "attachment")
        key = storage.build_key(f"startups/{startup_id}/reports/attachments", name)
        storage.upload_bytes(key, f.content, f.content_type)
        saved.append({"file_name": name, "file_key": key})
    return saved


def _render_and_store_pdf(startup: Startup, report: TimelyReport) -> dict[str, str]:
    pdf_bytes = pdf.render_report_pdf(startup.name, report)
    name = storage.sanitize_filename(f"{startup.name}_{report.title}.pdf")
    key = storage.build_key(f"startups/{startup.id}/reports/pdf", name)
    storage.upload_bytes(key, pdf_bytes, "application/pdf")
    return {"file_name": name, "file_key": key}


def _file_keys(report: TimelyReport) -> list[str]:
    keys = [a["file_key"] for a in report.attachments or []]
    if report.report_pdf:
        keys.append(report.report_pdf["file_key"])
    return keys


def _apply_payload(report: TimelyReport, payload: TimelyReportPayload) -> None:
    report.title = (payload.title or "").strip()
    report.reporting_period = payload.reporting_period
    report.monthly_revenue = payload.monthly_revenue
    report.monthly_burn = payload.monthly_burn
    report.cash_runway = payload.cash_runway
    report.team_size = payload.team_size
    report.key_metrics = payload.key_metrics
    report.key_achievements = payload.key_achievements
    report.challenges_and_learnings = payload.challenges_and_learnings
    report.other_key_metrics = payload.other_key_metrics
    report.asks_from_investors = payload.asks_from_investors
    report.is_draft = payload.is_draft
    report.investor_ids = [str(i) for i in dict.fromkeys(payload.investor_ids)]


def _require_title(payload: TimelyReportPayload) -> None:
    if not payload.title or not payload.title.strip():
        raise BadRequestError("Report title cannot be empty")


async def _distribute(db: AsyncSession, startup: Startup, report: TimelyReport) -> int:
    """Queue the report email for each investor on the distribution list.

    Each recipient is resolved independently; unknown or unconnected investors
    are logged and skipped.
    """
    queued = 0
    for raw_id in report.investor_ids or []:
        investor_id = uuid.UUID(raw_id)
        investor = await db.get(Investor, investor_id)
        user = await db.get(User, investor.user_id) if investor else None
        if investor is None or user is None:
            logger.warning("report_recipient_not_found", report_id=str(report.id), investor_id=raw_id)
            continue
        mapping = await get_mapping(db, startup.id, investor_id)
        if mapping is None or mapping.status != MappingStatus.ACTIVE:
            logger.warning("report_recipient_not_connected", report_id=str(report.id), investor_id=raw_id)
            continue

        await enqueue(
            db,
            template="timely_report",
            recipient=user.email,
            subject=f"{startup.name}: {report.title}",
            context={
                "startup_name": startup.name,
                "investor_name": user.name,
                "report_title": report.title,
                "reporting_period": report.reporting_period,
                "asks_from_investors": report.asks_from_investors,
            },
            attachment_key=report.report_pdf["file_key"] if report.report_pdf else None,
            attachment_name=report.report_pdf["file_name"] if report.report_pdf else None,
        )
        queued += 1

    logger.info("report_distributed", report_id=str(report.id), recipients=queued)
    return queued


async def _after_save(db: AsyncSession, startup: Startup, report: TimelyReport) -> None:
    if report.is_draft:
        return
    await _distribute(db, startup, report)
    await upsert_activity(db, startup.id, startup.name, f"Published report: {report.title}")


# ── Operations ───────────────────────────────────────────────────────────────


async def create_report(
    db: AsyncSession,
    startup: Startup,
    founder_user_id: uuid.UUID,
    payload: TimelyReportPayload,
    attachments: list[UploadedFile] | None = None,
) -> TimelyReport:
    _require_title(payload)
    if payload.is_draft and await _find_draft(db, startup.id) is not None:
        raise BadRequestError(_DRAFT_EXISTS)

    report = TimelyReport(startup_id=startup.id, founder_user_id=founder_user_id)
    _apply_payload(report, payload)
    report.attachments = _save_attachments(startup.id, attachments or [])
    report.report_pdf = _render_and_store_pdf(startup, report)
    db.add(report)
    await db.flush()
    logger.info("report_created", report_id=str(report.id), draft=report.is_draft)

    await _after_save(db, startup, report)
    return report


async def update_report(
    db: AsyncSession,
    startup: Startup,
    founder_user_id: uuid.UUID,
    report_id: uuid.UUID,
    payload: TimelyReportPayload,
    attachments: list[UploadedFile] | None = None,
) -> TimelyReport:
    report = await db.get(TimelyReport, report_id)
    if report is None:
        raise NotFoundError("Timely report not found")
    if report.founder_user_id != founder_user_id:
        raise BadRequestError("You are not authorized to update this report.")
    _require_title(payload)
    if payload.is_draft:
        draft = await _find_draft(db, startup.id)
        if draft is not None and draft.id != report.id:
            raise BadRequestError(_DRAFT_EXISTS)

    old_keys = _file_keys(report)
    _apply_payload(report, payload)
    report.attachments = _save_attachments(startup.id, attachments or [])
    report.report_pdf = _render_and_store_pdf(startup, report)
    await db.flush()
    storage.delete_after_commit(db, old_keys)
    logger.info("report_updated", report_id=str(report.id), draft=report.is_draft)

    await _after_save(db, startup, report)
    return report


async def get_draft_report(db: AsyncSession, startup: Startup) -> TimelyReport:
    draft = await _find_draft(db, startup.id)
    if draft is None:
        raise NotFoundError("No draft report found.")
    return draft


async def list_reports(db: AsyncSession, founder_user_id: uuid.UUID) -> list[TimelyReport]:
    stmt = (
        select(TimelyReport)
        .where(TimelyReport.founder_user_id == founder_user_id)
        .order_by(TimelyReport.created_at.desc())
    )
    return list((await db.execute(stmt)).scalars().all())
