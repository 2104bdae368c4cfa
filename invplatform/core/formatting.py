"""Display formatting shared by the investor-facing aggregators."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_FLOOR, Decimal

from invplatform.core.config import settings

_MINUTE = 60
_HOUR = 3600
_DAY = 86400
_WEEK = 604800
_MONTH = 2592000  # 30 days
_YEAR = 31536000  # 365 days


def format_money(amount: Decimal | float | int | None, default: str | None = None) -> str:
    """``₹1234.50``. ``default`` is returned for a missing amount when given."""
    if amount is None:
        if default is not None:
            return default
        amount = 0
    return f"{settings.CURRENCY_SYMBOL}{Decimal(str(amount)):.2f}"


def round2(value: Decimal | float | int | None) -> float | None:
    """Round half up to two decimals: floor(value * 100 + 0.5) / 100."""
    if value is None:
        return None
    scaled = (Decimal(str(value)) * 100 + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR)
    return float(scaled / 100)


def format_date(value: date | datetime | None) -> str | None:
    """dd-MM-yyyy."""
    if value is None:
        return None
    return value.strftime("%d-%m-%Y")


def _unit(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_relative_time(then: datetime | None, now: datetime) -> str:
    """Human relative time for deal pipeline entries ("3 weeks ago")."""
    if then is None:
        return "N/A"
    seconds = int((now - then).total_seconds())
    if seconds < _MINUTE:
        return "Just now"
    if seconds < _HOUR:
        return _unit(seconds // _MINUTE, "minute")
    if seconds < _DAY:
        return _unit(seconds // _HOUR, "hour")
    if seconds < _WEEK:
        return _unit(seconds // _DAY, "day")
    if seconds < _MONTH:
        return _unit(seconds // _WEEK, "week")
    if seconds < _YEAR:
        return _unit(seconds // _MONTH, "month")
    return _unit(seconds // _YEAR, "year")


def format_time_ago(then: datetime | None, now: datetime) -> str:
    """Coarser activity-feed variant: always plural, no weeks."""
    if then is None:
        return "Unknown"
    seconds = int((now - then).total_seconds())
    minutes = seconds // _MINUTE
    hours = seconds // _HOUR
    days = seconds // _DAY
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} minutes ago"
    if hours < 24:
        return f"{hours} hours ago"
    if days < 30:
        return f"{days} days ago"
    months = days // 30
    if months < 12:
        return f"{months} months ago"
    return f"{months // 12} years ago"
