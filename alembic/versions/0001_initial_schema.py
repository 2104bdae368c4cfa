"""initial_schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

_MONEY = sa.Numeric(19, 4)

user_role = postgresql.ENUM("FOUNDER", "INVESTOR", name="user_role", create_type=False)
sector = postgresql.ENUM(
    "FINTECH", "HEALTHTECH", "EDTECH", "SAAS", "ECOMMERCE", "AI_ML",
    "CLEANTECH", "AGRITECH", "DEEPTECH", "CONSUMER", "OTHER",
    name="sector", create_type=False,
)
investor_type = postgresql.ENUM(
    "ANGEL", "VC", "PRIVATE_EQUITY", "FAMILY_OFFICE", "CORPORATE", "ACCELERATOR",
    name="investor_type", create_type=False,
)
mapping_status = postgresql.ENUM("INVITED", "PENDING", "ACTIVE", name="mapping_status", create_type=False)
investor_role = postgresql.ENUM(
    "LEAD_INVESTOR", "CO_INVESTOR", "ADVISOR", "BOARD_MEMBER", "OBSERVER",
    name="investor_role", create_type=False,
)
document_type = postgresql.ENUM("FINANCIAL", "LEGAL", "PITCH", "OTHER", name="document_type", create_type=False)
integration_type = postgresql.ENUM("ZOHO", name="integration_type", create_type=False)
integration_status = postgresql.ENUM("CONNECTED", "DISCONNECTED", name="integration_status", create_type=False)
outbox_status = postgresql.ENUM("pending", "retrying", "sent", "failed", name="outbox_status", create_type=False)

_ENUMS = (
    user_role, sector, investor_type, mapping_status, investor_role,
    document_type, integration_type, integration_status, outbox_status,
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in _ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("is_onboarded", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "startups",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("founder_user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sector", sector, nullable=True),
        sa.Column("stage", sa.String(50), nullable=True),
        sa.Column("funding_raised", _MONEY, nullable=True),
        sa.Column("valuation", _MONEY, nullable=True),
        sa.Column("team_size", sa.Integer(), nullable=True),
        sa.Column("hq_location", sa.String(255), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_startups_founder_user_id", "startups", ["founder_user_id"], unique=True)

    op.create_table(
        "investors",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("firm_name", sa.String(255), nullable=True),
        sa.Column("investor_type", investor_type, nullable=True),
        sa.Column("ticket_size", sa.String(100), nullable=True),
        sa.Column("sector_focus", postgresql.JSONB(), nullable=False),
        sa.Column("aum", _MONEY, nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_investors_user_id", "investors", ["user_id"], unique=True)

    op.create_table(
        "startup_investor_mappings",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("startup_id", sa.Uuid(), sa.ForeignKey("startups.id"), nullable=False),
        sa.Column("investor_id", sa.Uuid(), sa.ForeignKey("investors.id"), nullable=True),
        sa.Column("investor_email", sa.String(320), nullable=True),
        sa.Column("investor_role", investor_role, nullable=True),
        sa.Column("status", mapping_status, nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("startup_id", "investor_id", name="uq_mapping_startup_investor"),
        sa.UniqueConstraint("startup_id", "investor_email", name="uq_mapping_startup_email"),
    )
    op.create_index("ix_startup_investor_mappings_startup_id", "startup_investor_mappings", ["startup_id"])
    op.create_index("ix_startup_investor_mappings_investor_id", "startup_investor_mappings", ["investor_id"])
    op.create_index("ix_startup_investor_mappings_investor_email", "startup_investor_mappings", ["investor_email"])

    op.create_table(
        "deal_pipelines",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("investor_id", sa.Uuid(), sa.ForeignKey("investors.id"), nullable=False),
        sa.Column("startup_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("investor_id", "startup_id", name="uq_deal_pipeline_investor_startup"),
    )
    op.create_index("ix_deal_pipelines_investor_id", "deal_pipelines", ["investor_id"])
    op.create_index("ix_deal_pipelines_startup_id", "deal_pipelines", ["startup_id"])

    op.create_table(
        "investments",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("investor_id", sa.Uuid(), sa.ForeignKey("investors.id"), nullable=False),
        sa.Column("startup_id", sa.Uuid(), nullable=False),
        sa.Column("total_invested_amount", _MONEY, nullable=False),
        sa.Column("ownership_percentage", _MONEY, nullable=True),
        sa.Column("currency", sa.String(10), nullable=True),
        sa.Column("stage", sa.String(50), nullable=True),
        sa.Column("investment_date", sa.Date(), nullable=True),
        sa.Column("valuation_at_investment", _MONEY, nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("investor_id", "startup_id", name="uq_investment_investor_startup"),
    )
    op.create_index("ix_investments_investor_id", "investments", ["investor_id"])
    op.create_index("ix_investments_startup_id", "investments", ["startup_id"])

    op.create_table(
        "timely_reports",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("startup_id", sa.Uuid(), sa.ForeignKey("startups.id"), nullable=False),
        sa.Column("founder_user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("reporting_period", sa.String(100), nullable=True),
        sa.Column("monthly_revenue", _MONEY, nullable=True),
        sa.Column("monthly_burn", _MONEY, nullable=True),
        sa.Column("cash_runway", _MONEY, nullable=True),
        sa.Column("team_size", sa.Integer(), nullable=True),
        sa.Column("key_metrics", sa.Text(), nullable=True),
        sa.Column("key_achievements", sa.Text(), nullable=True),
        sa.Column("challenges_and_learnings", sa.Text(), nullable=True),
        sa.Column("other_key_metrics", sa.Text(), nullable=True),
        sa.Column("asks_from_investors", sa.Text(), nullable=True),
        sa.Column("is_draft", sa.Boolean(), nullable=False),
        sa.Column("investor_ids", postgresql.JSONB(), nullable=False),
        sa.Column("attachments", postgresql.JSONB(), nullable=False),
        sa.Column("report_pdf", postgresql.JSONB(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_timely_reports_startup_id", "timely_reports", ["startup_id"])

    op.create_table(
        "startup_activities",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("startup_id", sa.Uuid(), nullable=False),
        sa.Column("startup_name", sa.String(255), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_startup_activities_startup_id", "startup_activities", ["startup_id"], unique=True)

    op.create_table(
        "startup_documents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("startup_id", sa.Uuid(), sa.ForeignKey("startups.id"), nullable=False),
        sa.Column("document_type", document_type, nullable=False),
        sa.Column("file_name", sa.String(500), nullable=False),
        sa.Column("file_key", sa.String(1000), nullable=False),
        sa.Column("content_type", sa.String(255), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("uploaded_by", sa.Uuid(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("file_key"),
    )
    op.create_index("ix_startup_documents_startup_id", "startup_documents", ["startup_id"])

    op.create_table(
        "integrations",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("startup_id", sa.Uuid(), sa.ForeignKey("startups.id"), nullable=False),
        sa.Column("integration_type", integration_type, nullable=False),
        sa.Column("status", integration_status, nullable=False),
        sa.Column("access_token", sa.Text(), nullable=True),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("connection_config", postgresql.JSONB(), nullable=False),
        sa.Column("last_sync_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("startup_id", "integration_type", name="uq_integration_startup_type"),
    )
    op.create_index("ix_integrations_startup_id", "integrations", ["startup_id"])

    op.create_table(
        "notification_outbox",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("template", sa.String(100), nullable=False),
        sa.Column("recipient_email", sa.String(320), nullable=False),
        sa.Column("subject", sa.String(500), nullable=False),
        sa.Column("context", postgresql.JSONB(), nullable=False),
        sa.Column("attachment_key", sa.String(1000), nullable=True),
        sa.Column("attachment_name", sa.String(500), nullable=True),
        sa.Column("status", outbox_status, nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False),
        sa.Column("next_attempt_at", sa.DateTime(), nullable=False),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_notification_outbox_status_next", "notification_outbox", ["status", "next_attempt_at"]
    )


def downgrade() -> None:
    op.drop_table("notification_outbox")
    op.drop_table("integrations")
    op.drop_table("startup_documents")
    op.drop_table("startup_activities")
    op.drop_table("timely_reports")
    op.drop_table("investments")
    op.drop_table("deal_pipelines")
    op.drop_table("startup_investor_mappings")
    op.drop_table("investors")
    op.drop_table("startups")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in reversed(_ENUMS):
        enum_type.drop(bind, checkfirst=True)
