from __future__ import annotations

from invplatform.schemas.common import CamelModel


class MonthlyMetric(CamelModel):
    month: str
    value: float


class FounderDashboardResponse(CamelModel):
    cash_runway_months: int
    revenue_growth: list[MonthlyMetric]
    expense_trend: list[MonthlyMetric]
    burn_rate_analysis: list[MonthlyMetric]
    key_performance_indicators: dict[str, float]
    team_size: int
