"""Recurring bill occurrences and income payment schedules."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Optional

from ..dates import add_months, month_range, months_between
from ..domain.repositories.bill import BillRepository
from ..logging_config import get_logger
from ..models.bill import Bill, BillRecurrence
from ..models.income import Income, IncomeFrequency

logger = get_logger(__name__)

_BILL_MONTH_STEPS = {
    BillRecurrence.MONTHLY: 1,
    BillRecurrence.QUARTERLY: 3,
    BillRecurrence.YEARLY: 12,
}
_INCOME_MONTH_STEPS = {
    IncomeFrequency.MONTHLY: 1,
    IncomeFrequency.QUARTERLY: 3,
    IncomeFrequency.YEARLY: 12,
}
_INCOME_DAY_STEPS = {
    IncomeFrequency.WEEKLY: 7,
    IncomeFrequency.BIWEEKLY: 14,
}

# Upper bound on generated occurrences per series in one pass
MAX_STEPS = 1000


def _bill_due_dates(template: Bill) -> Iterator[datetime]:
    """Due dates after the template's own, each computed from the anchor.

    Stepping from the anchor rather than from the previous date keeps a bill
    due on the 31st from drifting to the 28th after February.
    """
    anchor = template.first_installment
    recurrence = BillRecurrence(template.recurrence)
    months = _BILL_MONTH_STEPS.get(recurrence)
    for n in range(1, MAX_STEPS + 1):
        if months is not None:
            yield add_months(anchor, months * n)
        elif template.custom_recurrence_days:
            yield anchor + timedelta(days=template.custom_recurrence_days * n)
        else:
            return


def _series_key(bill: Bill) -> tuple[str, str, str]:
    name, issuer, category, _month = bill.occurrence_key
    return name, issuer, category


def plan_recurring_occurrences(bills: Iterable[Bill], until: date) -> list[Bill]:
    """Propose the occurrence rows missing up to the end of ``until``'s month.

    Each series (rows sharing name, issuer and category) is extended from its
    latest stored row. Nothing is proposed whose (name, issuer, category,
    month) identity already exists among stored or already-proposed rows.
    """
    stored = list(bills)
    _, horizon = month_range(until)
    seen = {bill.occurrence_key for bill in stored}

    latest: dict[tuple[str, str, str], Bill] = {}
    for bill in stored:
        key = _series_key(bill)
        current = latest.get(key)
        if current is None or (bill.first_installment, bill.id or 0) > (
            current.first_installment,
            current.id or 0,
        ):
            latest[key] = bill

    proposed: list[Bill] = []
    for template in latest.values():
        for due in _bill_due_dates(template):
            if due.replace(tzinfo=None) >= horizon:
                break
            occurrence = Bill(
                user_id=template.user_id,
                name=template.name,
                amount=template.amount,
                category=template.category,
                issuer=template.issuer,
                first_installment=due,
                recurrence=template.recurrence,
                custom_recurrence_days=template.custom_recurrence_days,
                is_shared=template.is_shared,
                number_of_shares=template.number_of_shares,
            )
            if occurrence.occurrence_key in seen:
                continue
            seen.add(occurrence.occurrence_key)
            proposed.append(occurrence)
    return proposed


def reconcile_recurring_bills(
    bill_repo: BillRepository, *, user_id: int, until: Optional[date] = None
) -> list[Bill]:
    """Persist the missing occurrences for a user; running it again adds nothing."""
    until = until or date.today()
    existing = bill_repo.list_all(user_id=user_id)
    plan = plan_recurring_occurrences(existing, until)
    created = bill_repo.create_many(plan, user_id=user_id) if plan else []
    logger.info(
        "Recurring bills reconciled",
        extra={"user_id": user_id, "until": until.isoformat(), "created": len(created)},
    )
    return created


def _first_income_step(
    anchor: date, start: date, *, months: Optional[int], days: Optional[int]
) -> int:
    """Index of the last scheduled date at least one period before ``start``."""
    if start <= anchor:
        return 0
    if days is not None:
        elapsed = (start - anchor).days // days
    else:
        elapsed = months_between(anchor, start) // months
    return max(0, elapsed - 1)


def _income_scheduled_dates(income: Income, start: date) -> Iterator[date]:
    """Scheduled dates from about one period before ``start`` onwards."""
    anchor = income.first_payment
    frequency = IncomeFrequency(income.frequency)
    months = _INCOME_MONTH_STEPS.get(frequency)
    days = _INCOME_DAY_STEPS.get(frequency)
    if months is None and days is None:
        # Custom schedules do not advance
        yield anchor
        return
    first = _first_income_step(anchor, start, months=months, days=days)
    for n in range(first, first + MAX_STEPS + 1):
        if months is not None:
            yield add_months(anchor, months * n)
        else:
            yield anchor + timedelta(days=days * n)


def income_payment_dates(income: Income, start: date, end: date) -> list[date]:
    """Timing-adjusted payment dates in ``[start, end)``."""
    dates: list[date] = []
    for scheduled in _income_scheduled_dates(income, start):
        payment = income.adjust_payment_date(scheduled)
        # Timing keeps a payment inside its scheduled month, so this bound is safe
        if scheduled >= end and payment >= end:
            break
        if start <= payment < end:
            dates.append(payment)
    return dates


__all__ = [
    "MAX_STEPS",
    "income_payment_dates",
    "plan_recurring_occurrences",
    "reconcile_recurring_bills",
]
