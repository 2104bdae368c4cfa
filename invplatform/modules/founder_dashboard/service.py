"""Founder dashboard assembled from the startup's Zoho Books data."""

from __future__ import annotations

from datetime import date

import httpx
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from invplatform.core.config import settings
from invplatform.core.formatting import round2
from invplatform.models.base import utcnow
from invplatform.models.core import Startup
from invplatform.modules.founder_dashboard import kpis
from invplatform.modules.founder_dashboard.schemas import FounderDashboardResponse, MonthlyMetric
from invplatform.modules.integrations import service as integrations
from invplatform.modules.integrations.client import ZohoBooksClient

logger = structlog.get_logger()


async def get_founder_dashboard(
    db: AsyncSession,
    startup: Startup,
    today: date | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FounderDashboardResponse:
    integration = await integrations.require_connected(db, startup.id)
    org_id = integrations.organization_id(integration)
    access_token = await integrations.ensure_access_token(db, integration)

    today = today or utcnow().date()
    window_start = kpis.last_six_months(today)[0]
    window_end = kpis.month_end(today)
    prev_start, prev_end = kpis.previous_month(today)

    async with httpx.AsyncClient(timeout=settings.ZOHO_HTTP_TIMEOUT, transport=transport) as http:
        zoho = ZohoBooksClient(http, access_token, org_id)
        sales_orders = await zoho.sales_orders(window_start, window_end)
        expenses = await zoho.expenses(window_start, window_end)
        bank_accounts = await zoho.bank_accounts()
        contacts = await zoho.contacts(contact_type="customer")
        invoices = await zoho.invoices()
        pnl = await zoho.profit_and_loss(window_start, window_end)
        employees = await zoho.employees()

    revenue, expense, burn = kpis.monthly_series(
        today, kpis.group_by_month(sales_orders), kpis.group_by_month(expenses)
    )
    latest_expense = expense[-1]["value"] if expense else 0.0
    runway = kpis.cash_runway_months(kpis.total_bank_balance(bank_accounts), latest_expense)

    lifespan = kpis.average_customer_lifespan(contacts, today)
    kpi = {
        "Churn": round2(kpis.churn_rate(contacts, prev_start, prev_end)),
        "LTV": round2(kpis.lifetime_value(invoices, pnl, contacts, lifespan)),
        "CAC": round2(kpis.customer_acquisition_cost(expenses, contacts, prev_start, prev_end)),
    }

    integration.last_sync_at = utcnow()
    await db.flush()
    logger.info(
        "founder_dashboard_built",
        startup_id=str(startup.id),
        sales_orders=len(sales_orders),
        expenses=len(expenses),
    )

    return FounderDashboardResponse(
        cash_runway_months=runway,
        revenue_growth=[MonthlyMetric(**m) for m in revenue],
        expense_trend=[MonthlyMetric(**m) for m in expense],
        burn_rate_analysis=[MonthlyMetric(**m) for m in burn],
        key_performance_indicators=kpi,
        team_size=len(employees),
    )
