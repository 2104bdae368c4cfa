"""Pure KPI arithmetic over Zoho Books records.

Inputs are the raw record dicts returned by the Books API (sales orders,
expenses, contacts, invoices, bank accounts, P&L sections). Nothing here
does I/O, so every figure on the founder dashboard can be checked with
plain fixtures.
"""

from __future__ import annotations

import math
from collections import defaultdict
from datetime import date
from typing import Any, Iterable

Record = dict[str, Any]

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
MARKETING_ACCOUNTS = frozenset({"Marketing"})


# ── Calendar helpers ─────────────────────────────────────────────────────────


def month_key(d: date) -> str:
    return MONTH_ABBR[d.month - 1]


def shift_month(d: date, months: int) -> date:
    """First day of the month ``months`` away from ``d``'s month."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_end(d: date) -> date:
    return date.fromordinal(shift_month(d, 1).toordinal() - 1)


def last_six_months(today: date) -> list[date]:
    """Month starts from five months ago up to the current month, oldest first."""
    return [shift_month(today, offset) for offset in range(-5, 1)]


def previous_month(today: date) -> tuple[date, date]:
    start = shift_month(today, -1)
    return start, month_end(start)


def months_between(start: date, end: date) -> int:
    """Whole calendar months elapsed from ``start`` to ``end`` (never negative)."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


def _parse_date(raw: Any) -> date | None:
    """Leading ``YYYY-MM-DD`` of a Zoho date or timestamp string."""
    if not raw:
        return None
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        return None


def _amount(record: Record, key: str = "total") -> float:
    try:
        return float(record.get(key) or 0)
    except (TypeError, ValueError):
        return 0.0


# ── Series ───────────────────────────────────────────────────────────────────


def group_by_month(records: Iterable[Record], amount_key: str = "total") -> dict[str, float]:
    """Sum ``amount_key`` per short month name of each record's ``date``.

    Records without a parsable date are skipped.
    """
    totals: dict[str, float] = defaultdict(float)
    for record in records:
        when = _parse_date(record.get("date"))
        if when is None or amount_key not in record:
            continue
        totals[month_key(when)] += _amount(record, amount_key)
    return dict(totals)


def monthly_series(
    today: date, revenue: dict[str, float], expenses: dict[str, float]
) -> tuple[list[dict[str, Any]], list[dict[str, Any]], list[dict[str, Any]]]:
    """Revenue, expense and burn series for the six-month window ending this month."""
    revenue_data, expense_data, burn_data = [], [], []
    for start in last_six_months(today):
        key = month_key(start)
        month_revenue = revenue.get(key, 0.0)
        month_expense = expenses.get(key, 0.0)
        revenue_data.append({"month": key, "value": month_revenue})
        expense_data.append({"month": key, "value": month_expense})
        burn_data.append({"month": key, "value": max(month_expense - month_revenue, 0.0)})
    return revenue_data, expense_data, burn_data


# ── Scalars ──────────────────────────────────────────────────────────────────


def total_bank_balance(accounts: Iterable[Record]) -> float:
    return sum(_amount(a, "balance") for a in accounts)


def cash_runway_months(balance: float, latest_month_expense: float) -> int:
    if latest_month_expense <= 0:
        return 0
    return math.floor(balance / latest_month_expense)


def _customers(contacts: Iterable[Record]) -> list[Record]:
    return [c for c in contacts if str(c.get("contact_type", "")).lower() == "customer"]


def churn_rate(contacts: Iterable[Record], start: date, end: date) -> float:
    """Percent of customers present at ``start`` that are inactive by ``end``.

    Zoho only exposes the current contact status, so every customer created
    on or before ``start`` is taken as active then, and counts as lost when
    its status is now inactive.
    """
    present_at_start: set[str] = set()
    inactive_at_end: set[str] = set()
    for contact in _customers(contacts):
        created = _parse_date(contact.get("created_time"))
        if created is None:
            continue
        contact_id = str(contact.get("contact_id"))
        status = str(contact.get("status") or "active").lower()
        if created <= start:
            present_at_start.add(contact_id)
        if created <= end and status == "inactive":
            inactive_at_end.add(contact_id)

    if not present_at_start:
        return 0.0
    lost = present_at_start & inactive_at_end
    return len(lost) * 100.0 / len(present_at_start)


def average_customer_lifespan(contacts: Iterable[Record], today: date) -> float:
    """Mean age in whole months of customer contacts."""
    ages = [
        months_between(created, today)
        for created in (_parse_date(c.get("created_time")) for c in _customers(contacts))
        if created is not None
    ]
    if not ages:
        return 0.0
    return sum(ages) / len(ages)


def gross_profit(pnl_sections: Iterable[Record]) -> float:
    for section in pnl_sections:
        if str(section.get("name", "")).lower() == "gross profit":
            return _amount(section)
    return 0.0


def lifetime_value(
    invoices: Iterable[Record],
    pnl_sections: Iterable[Record],
    contacts: Iterable[Record],
    average_lifespan: float,
) -> float:
    """(paid revenue / customers) x gross margin x average lifespan in months."""
    revenue = sum(
        _amount(inv) for inv in invoices if str(inv.get("status", "")).lower() == "paid"
    )
    if revenue <= 0:
        return 0.0
    profit = gross_profit(pnl_sections)
    if profit <= 0:
        return 0.0
    customer_count = len(_customers(contacts))
    if customer_count == 0:
        return 0.0
    margin = profit / revenue
    return (revenue / customer_count) * margin * average_lifespan


def customer_acquisition_cost(
    expenses: Iterable[Record], contacts: Iterable[Record], start: date, end: date
) -> float:
    """Marketing spend in [start, end] per customer created in the same period."""
    spend = 0.0
    for expense in expenses:
        if expense.get("account_name") not in MARKETING_ACCOUNTS:
            continue
        when = _parse_date(expense.get("date"))
        if when is not None and start <= when <= end:
            spend += _amount(expense)

    new_customers = 0
    for contact in _customers(contacts):
        created = _parse_date(contact.get("created_time"))
        if created is not None and start <= created <= end:
            new_customers += 1

    if new_customers == 0:
        return 0.0
    return spend / new_customers
