"""Tests for founder reports: drafts, PDF storage and distribution."""

import uuid
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.errors import BadRequestError, NotFoundError
from invplatform.models.connections import StartupInvestorMapping
from invplatform.models.core import Investor, Startup, User
from invplatform.models.enums import MappingStatus
from invplatform.models.integrations import NotificationOutbox
from invplatform.models.reports import TimelyReport
from invplatform.modules.activity.service import get_activity
from invplatform.modules.reports import service
from invplatform.modules.reports.schemas import TimelyReportPayload
from invplatform.services.pdf import render_report_pdf
from tests.conftest import INVESTOR_EMAIL, Factory


@pytest.fixture
def rendered_pdf():
    with patch("invplatform.services.pdf.render_report_pdf", return_value=b"%PDF-1.4 test") as render:
        yield render


def _payload(title: str = "Q2 Update", draft: bool = False, investors=()) -> TimelyReportPayload:
    return TimelyReportPayload(
        title=title,
        reporting_period="Apr-Jun 2024",
        monthly_revenue=Decimal("120000"),
        monthly_burn=Decimal("80000"),
        is_draft=draft,
        investor_ids=list(investors),
    )


async def _report_emails(db: AsyncSession) -> list[NotificationOutbox]:
    stmt = select(NotificationOutbox).where(NotificationOutbox.template == "timely_report")
    return list((await db.execute(stmt)).scalars().all())


class TestCreateReport:
    async def test_draft_is_stored_but_not_sent(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User,
        investor: Investor, active_mapping: StartupInvestorMapping,
    ):
        report = await service.create_report(
            db, startup, founder_user.id, _payload(draft=True, investors=[investor.id])
        )

        assert report.is_draft is True
        assert report.report_pdf["file_name"] == "Acme_Robotics_Q2_Update.pdf"
        assert report.report_pdf["file_key"].startswith(f"startups/{startup.id}/reports/pdf/")
        assert await _report_emails(db) == []
        assert await get_activity(db, startup.id) is None

    async def test_only_one_draft_per_startup(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        await service.create_report(db, startup, founder_user.id, _payload(draft=True))

        with pytest.raises(BadRequestError, match="draft report already exists"):
            await service.create_report(db, startup, founder_user.id, _payload("Another", draft=True))

    async def test_published_report_allowed_alongside_draft(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        await service.create_report(db, startup, founder_user.id, _payload(draft=True))

        published = await service.create_report(db, startup, founder_user.id, _payload("Final"))

        assert published.is_draft is False

    async def test_title_required(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        with pytest.raises(BadRequestError, match="title cannot be empty"):
            await service.create_report(db, startup, founder_user.id, _payload("   "))

    async def test_publish_emails_connected_investors_with_pdf(
        self, db: AsyncSession, s3, rendered_pdf, factory: Factory, startup: Startup,
        founder_user: User, investor: Investor, active_mapping: StartupInvestorMapping,
    ):
        pending_investor = await factory.investor()
        await factory.mapping(startup, pending_investor, MappingStatus.PENDING)
        stranger = await factory.investor()

        report = await service.create_report(
            db,
            startup,
            founder_user.id,
            _payload(investors=[investor.id, investor.id, pending_investor.id, stranger.id, uuid.uuid4()]),
        )

        emails = await _report_emails(db)
        assert [e.recipient_email for e in emails] == [INVESTOR_EMAIL]
        assert emails[0].attachment_key == report.report_pdf["file_key"]
        assert emails[0].attachment_name == "Acme_Robotics_Q2_Update.pdf"
        assert emails[0].subject == "Acme Robotics: Q2 Update"
        assert len(report.investor_ids) == 4

    async def test_publish_updates_latest_activity(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        await service.create_report(db, startup, founder_user.id, _payload())

        activity = await get_activity(db, startup.id)
        assert activity.message == "Published report: Q2 Update"
        assert activity.startup_name == "Acme Robotics"

    async def test_attachments_uploaded(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        report = await service.create_report(
            db,
            startup,
            founder_user.id,
            _payload(draft=True),
            [service.UploadedFile("cap table.xlsx", b"data", "application/vnd.ms-excel")],
        )

        [attachment] = report.attachments
        assert attachment["file_name"] == "cap_table.xlsx"
        assert attachment["file_key"].startswith(f"startups/{startup.id}/reports/attachments/")
        # one attachment plus the rendered PDF
        assert s3.put_object.call_count == 2
        rendered_pdf.assert_called_once()


class TestUpdateReport:
    async def test_publishing_a_draft_distributes_it(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User,
        investor: Investor, active_mapping: StartupInvestorMapping,
    ):
        draft = await service.create_report(
            db, startup, founder_user.id, _payload(draft=True, investors=[investor.id])
        )
        old_pdf_key = draft.report_pdf["file_key"]

        updated = await service.update_report(
            db, startup, founder_user.id, draft.id, _payload("Q2 Final", investors=[investor.id])
        )

        assert updated.id == draft.id
        assert updated.is_draft is False
        assert updated.title == "Q2 Final"
        assert updated.report_pdf["file_key"] != old_pdf_key
        s3.delete_object.assert_not_called()

        await db.commit()

        deleted_keys = [c.kwargs["Key"] for c in s3.delete_object.call_args_list]
        assert old_pdf_key in deleted_keys
        assert [e.recipient_email for e in await _report_emails(db)] == [INVESTOR_EMAIL]

    async def test_failed_update_keeps_old_files(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        draft = await service.create_report(db, startup, founder_user.id, _payload(draft=True))
        await db.commit()
        s3.put_object.side_effect = RuntimeError("S3 unavailable")

        with pytest.raises(RuntimeError):
            await service.update_report(db, startup, founder_user.id, draft.id, _payload("Q2 Final"))
        await db.rollback()
        await db.commit()

        s3.delete_object.assert_not_called()

    async def test_unknown_report(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        with pytest.raises(NotFoundError, match="Timely report not found"):
            await service.update_report(db, startup, founder_user.id, uuid.uuid4(), _payload())

    async def test_only_author_can_update(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        report = await service.create_report(db, startup, founder_user.id, _payload())

        with pytest.raises(BadRequestError, match="not authorized"):
            await service.update_report(db, startup, uuid.uuid4(), report.id, _payload())

    async def test_cannot_turn_second_report_into_draft(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        await service.create_report(db, startup, founder_user.id, _payload(draft=True))
        published = await service.create_report(db, startup, founder_user.id, _payload("Final"))

        with pytest.raises(BadRequestError, match="draft report already exists"):
            await service.update_report(
                db, startup, founder_user.id, published.id, _payload("Final", draft=True)
            )

    async def test_draft_can_be_saved_again(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        draft = await service.create_report(db, startup, founder_user.id, _payload(draft=True))

        again = await service.update_report(
            db, startup, founder_user.id, draft.id, _payload("Renamed", draft=True)
        )

        assert again.is_draft is True
        assert again.title == "Renamed"


class TestQueries:
    async def test_get_draft(
        self, db: AsyncSession, s3, rendered_pdf, startup: Startup, founder_user: User
    ):
        draft = await service.create_report(db, startup, founder_user.id, _payload(draft=True))

        assert (await service.get_draft_report(db, startup)).id == draft.id

    async def test_no_draft(self, db: AsyncSession, startup: Startup):
        with pytest.raises(NotFoundError, match="No draft report found"):
            await service.get_draft_report(db, startup)

    async def test_list_reports_for_founder(
        self, db: AsyncSession, s3, rendered_pdf, factory: Factory, startup: Startup,
        founder_user: User,
    ):
        await service.create_report(db, startup, founder_user.id, _payload("One"))
        await service.create_report(db, startup, founder_user.id, _payload("Two"))
        other = await factory.startup(name="Other Co")
        await service.create_report(db, other, other.founder_user_id, _payload("Elsewhere"))

        reports = await service.list_reports(db, founder_user.id)

        assert sorted(r.title for r in reports) == ["One", "Two"]


class TestRenderPdf:
    def test_renders_pdf_bytes(self):
        report = TimelyReport(
            title="Q2 <Update>",
            reporting_period="Apr-Jun 2024",
            monthly_revenue=Decimal("120000"),
            team_size=12,
            key_achievements="Closed seed round\nShipped v2",
            asks_from_investors="Intros to fintech partners",
        )

        content = render_report_pdf("Acme & Co", report)

        assert content.startswith(b"%PDF")
