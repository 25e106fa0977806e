"""Category spending against budget limits, and bill budget status."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional, Sequence

from ..constants.categories import BillCategory, TransactionCategory
from ..models.budget import BillBudget, TransactionBudget
from ..models.transaction import Transaction
from ..money import round_money


@dataclass(frozen=True)
class BudgetUsage:
    """Spending in one category over the budget period containing a day."""

    budget: TransactionBudget
    period_start: date
    period_end: date
    spent: float

    @property
    def limit(self) -> Optional[float]:
        return self.budget.limit if self.budget.has_limit else None

    @property
    def delta(self) -> float:
        """Spent minus limit; positive when over budget."""
        return round_money(self.spent - (self.limit or 0.0))

    @property
    def remaining(self) -> float:
        return round_money(max((self.limit or 0.0) - self.spent, 0.0))

    @property
    def progress(self) -> float:
        if self.limit is None:
            return 0.0
        return min(self.spent / self.limit, 1.0)

    @property
    def over_limit(self) -> bool:
        return self.limit is not None and self.spent > self.limit


def _as_date(value: datetime) -> date:
    return value.replace(tzinfo=None).date()


def _spent_between(
    transactions: Iterable[Transaction], category: TransactionCategory, start: date, end: date
) -> float:
    total = 0.0
    slug = TransactionCategory.parse(category).value
    for txn in transactions:
        if TransactionCategory.parse(txn.category).value != slug:
            continue
        if start <= _as_date(txn.occurred_at) < end:
            total = round_money(total + txn.spent)
    return total


def budget_usage(
    budget: TransactionBudget, transactions: Iterable[Transaction], today: date
) -> BudgetUsage:
    start, end = budget.period_window(today)
    return BudgetUsage(
        budget=budget,
        period_start=start,
        period_end=end,
        spent=_spent_between(transactions, budget.category, start, end),
    )


def budget_report(
    budgets: Sequence[TransactionBudget],
    transactions: Sequence[Transaction],
    today: Optional[date] = None,
) -> list[BudgetUsage]:
    """Usage of every active budget for the period containing ``today``.

    Budgets without a limit are listed only when something was spent in
    their period.
    """
    today = today or date.today()
    report: list[BudgetUsage] = []
    for budget in budgets:
        if not budget.is_active:
            continue
        usage = budget_usage(budget, transactions, today)
        if budget.has_limit or usage.spent > 0:
            report.append(usage)
    return report


class BillBudgetStatus(str, Enum):
    PAID = "paid"
    DUE = "due"
    OVERDUE = "overdue"


def bill_budget_status(budget: BillBudget, today: Optional[date] = None) -> BillBudgetStatus:
    if budget.is_paid:
        return BillBudgetStatus.PAID
    if _as_date(budget.due_date) < (today or date.today()):
        return BillBudgetStatus.OVERDUE
    return BillBudgetStatus.DUE


def unpaid_bill_budget_totals(budgets: Iterable[BillBudget]) -> dict[str, float]:
    """Outstanding bill budget amounts per bill category slug."""
    totals: dict[str, float] = {}
    for budget in budgets:
        if budget.is_paid:
            continue
        slug = BillCategory.parse(budget.category).value
        totals[slug] = round_money(totals.get(slug, 0.0) + budget.amount)
    return totals


__all__ = [
    "BillBudgetStatus",
    "BudgetUsage",
    "bill_budget_status",
    "budget_report",
    "budget_usage",
    "unpaid_bill_budget_totals",
]
