"""Calendar helpers shared by models and services.

All month filtering uses the half-open interval ``[month_start, next_month_start)``.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def month_start(value: DateLike) -> date:
    """First day of the month containing ``value``."""

    return _as_date(value).replace(day=1)


def month_range(value: DateLike) -> tuple[datetime, datetime]:
    """Return ``(start, end)`` datetimes bounding the month, end exclusive."""

    first = month_start(value)
    start = datetime(first.year, first.month, 1)
    return start, start + relativedelta(months=1)


def in_month(value: DateLike, month: DateLike) -> bool:
    """True when ``value`` falls inside the month containing ``month``."""

    start, end = month_range(month)
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    # Aware datetimes are compared on their wall-clock value
    value = value.replace(tzinfo=None)
    return start <= value < end


def add_months(value: DateLike, months: int) -> DateLike:
    """Shift by whole months, clamping the day to the target month's length."""

    return value + relativedelta(months=months)


def months_between(start: DateLike, end: DateLike) -> int:
    """Whole calendar months elapsed from ``start`` to ``end`` (negative if reversed)."""

    delta = relativedelta(_as_date(end), _as_date(start))
    return delta.years * 12 + delta.months


def is_weekend(value: DateLike) -> bool:
    return _as_date(value).weekday() >= 5


def next_business_day(value: date) -> date:
    """``value`` itself, or the following Monday when it falls on a weekend."""

    while is_weekend(value):
        value = value + timedelta(days=1)
    return value


def previous_business_day(value: date) -> date:
    """``value`` itself, or the preceding Friday when it falls on a weekend."""

    while is_weekend(value):
        value = value - timedelta(days=1)
    return value


def last_day_of_month(value: DateLike) -> date:
    return month_start(value) + relativedelta(months=1, days=-1)
