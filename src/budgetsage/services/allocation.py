"""Budget allocation engine.

Pure functions over in-memory rows: no database access, no I/O. Amounts are
rounded to cents after every accumulation step, and every ratio guards its
divisor so callers never see NaN or infinity.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Sequence

from ..constants.budgeting import (
    FALLBACK_NEEDS_SHARE,
    FALLBACK_WANTS_SHARE,
    NEEDS_BUCKET,
    WANTS_BUCKET,
    ExpenseType,
)
from ..dates import add_months, month_start, months_between
from ..models.bill import Bill
from ..models.goal import FinancialGoal
from ..models.income import Income
from ..models.transaction import Transaction
from ..money import round_money
from .aggregation import bills_in_month, category_totals, transactions_in_month
from .classification import ClassificationContext, classify
from .recurrence import income_payment_dates

SAVINGS_BUCKET = "Savings"


@dataclass(frozen=True)
class SpendingBreakdown:
    needs: float = 0.0
    wants: float = 0.0
    not_accounted: float = 0.0

    @property
    def total(self) -> float:
        return round_money(self.needs + self.wants + self.not_accounted)


@dataclass(frozen=True)
class BucketTargets:
    """Target amounts for one month of income."""

    needs: float
    wants: float
    savings: float


class SavingsStatus(str, Enum):
    ACHIEVED = "achieved"
    PARTIAL = "partial"
    NOT_CALCULATED = "not_calculated"

    @property
    def description(self) -> str:
        return {
            SavingsStatus.ACHIEVED: "Goal Achieved",
            SavingsStatus.PARTIAL: "Partial Progress",
            SavingsStatus.NOT_CALCULATED: "Not Calculated",
        }[self]


@dataclass(frozen=True)
class MonthReport:
    """Everything a consumer needs to render one month of a goal."""

    month: date
    income: float
    spending: SpendingBreakdown
    targets: BucketTargets
    savings: float
    required_savings: Optional[float]
    progress: float
    needs_progress: float
    wants_progress: float
    status: SavingsStatus
    is_frozen: bool = False
    category_totals: dict[str, float] = field(default_factory=dict)


def _add(bucket: dict[ExpenseType, float], expense_type: ExpenseType, amount: float) -> None:
    bucket[expense_type] = round_money(bucket[expense_type] + amount)


def _classified_totals(
    month: date,
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
    goal: FinancialGoal,
    *,
    include_transactions: bool = True,
) -> dict[ExpenseType, float]:
    totals = {expense_type: 0.0 for expense_type in ExpenseType}
    for bill in bills_in_month(bills, month):
        _add(totals, classify(goal, bill.category, ClassificationContext.BILL), bill.effective_cost)
    if include_transactions:
        for txn in transactions_in_month(transactions, month):
            _add(
                totals,
                classify(goal, txn.category, ClassificationContext.TRANSACTION),
                txn.spent,
            )
    return totals


def compute_spending(
    month: date,
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
    goal: FinancialGoal,
) -> SpendingBreakdown:
    """Split a month's spending into needs, wants and everything else.

    Bills are classified with the goal's bill map at their effective cost;
    transactions with the transaction map at their absolute amount.
    """
    totals = _classified_totals(month, transactions, bills, goal)
    return SpendingBreakdown(
        needs=totals[ExpenseType.NEED],
        wants=totals[ExpenseType.WANT],
        not_accounted=totals[ExpenseType.OTHER],
    )


def required_monthly_savings(goal: FinancialGoal) -> Optional[float]:
    """Amount to save each month to reach the target on time, or ``None``."""
    if goal.target_amount is None or goal.start_date is None or goal.target_date is None:
        return None
    if goal.target_date <= goal.start_date:
        return None
    months = months_between(goal.start_date, goal.target_date)
    if months <= 0:
        return None
    return round_money((goal.target_amount - (goal.current_amount or 0.0)) / months)


def monthly_income(incomes: Sequence[Income], month: date) -> float:
    """Income whose payments count toward ``month``.

    Each payment of each income is attributed to its effective month; an
    end-of-month payment in the previous month therefore counts here.
    """
    target = month_start(month)
    # Look one month back for end-of-month payments attributed forward
    window_start = add_months(target, -1)
    window_end = add_months(target, 1)
    total = 0.0
    for income in incomes:
        for payment in income_payment_dates(income, window_start, window_end):
            if income.effective_month_of(payment) == target:
                total = round_money(total + income.amount)
    return total


def _bucket_shares(goal: FinancialGoal) -> tuple[float, float, float]:
    percentages = goal.percentages
    needs = percentages.get(NEEDS_BUCKET, FALLBACK_NEEDS_SHARE)
    wants = percentages.get(WANTS_BUCKET, FALLBACK_WANTS_SHARE)
    savings = percentages.get(SAVINGS_BUCKET, max(0.0, 1.0 - needs - wants))
    return needs, wants, savings


def target_allocation(goal: FinancialGoal, monthly_income: float) -> BucketTargets:
    """Needs/wants/savings amounts the goal's method prescribes for an income.

    Methods without a Needs or Wants bucket fall back to 50% and 30%.
    """
    needs, wants, savings = _bucket_shares(goal)
    return BucketTargets(
        needs=round_money(monthly_income * needs),
        wants=round_money(monthly_income * wants),
        savings=round_money(monthly_income * savings),
    )


def potential_savings(
    monthly_income: float,
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
    goal: FinancialGoal,
    *,
    month: Optional[date] = None,
) -> float:
    """Non-negative headroom left by fixed bills under the method's targets.

    Only bills count against the targets; transactions are adjustable
    spending and leave the headroom unchanged.
    """
    month = month or date.today()
    targets = target_allocation(goal, monthly_income)
    fixed = _classified_totals(month, transactions, bills, goal, include_transactions=False)
    needs_gap = targets.needs - fixed[ExpenseType.NEED]
    wants_gap = targets.wants - fixed[ExpenseType.WANT]
    return max(0.0, round_money(needs_gap + wants_gap))


def monthly_savings(
    month: date,
    incomes: Sequence[Income],
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
    goal: FinancialGoal,
) -> float:
    """Income minus every classified outflow for the month; may be negative."""
    spending = compute_spending(month, transactions, bills, goal)
    return round_money(monthly_income(incomes, month) - spending.total)


def _ratio(numerator: float, denominator: Optional[float]) -> float:
    if denominator is None or denominator <= 0:
        return 0.0
    value = numerator / denominator
    if not math.isfinite(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def monthly_savings_progress(
    month: date,
    goal: FinancialGoal,
    incomes: Sequence[Income],
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
) -> float:
    """Share of the required monthly savings actually saved, within [0, 1]."""
    actual = monthly_savings(month, incomes, transactions, bills, goal)
    return _ratio(actual, required_monthly_savings(goal))


def bucket_progress(spent: float, target: float) -> float:
    return _ratio(spent, target)


def savings_status(
    month: date,
    goal: FinancialGoal,
    incomes: Sequence[Income],
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
    *,
    today: Optional[date] = None,
) -> tuple[SavingsStatus, float]:
    """Status and savings amount for a month; future months are not calculated."""
    today = today or date.today()
    if month_start(month) > month_start(today):
        return SavingsStatus.NOT_CALCULATED, 0.0
    saved = monthly_savings(month, incomes, transactions, bills, goal)
    return _status_for(saved, required_monthly_savings(goal)), saved


def _status_for(saved: float, required: Optional[float]) -> SavingsStatus:
    if saved >= (required or 0.0):
        return SavingsStatus.ACHIEVED
    if saved > 0:
        return SavingsStatus.PARTIAL
    return SavingsStatus.NOT_CALCULATED


def is_feasible_with_income(goal: FinancialGoal, monthly_income: float) -> bool:
    required = required_monthly_savings(goal)
    if required is None:
        return False
    return required <= monthly_income


def adjust_target_date_for_income(goal: FinancialGoal, monthly_savings: float) -> Optional[date]:
    """Earliest date the target is reachable saving ``monthly_savings`` a month."""
    if goal.target_amount is None or goal.start_date is None:
        return None
    if monthly_savings <= 0:
        return None
    remaining = goal.target_amount - (goal.current_amount or 0.0)
    if remaining <= 0:
        return goal.start_date
    return add_months(goal.start_date, math.ceil(remaining / monthly_savings))


def month_report(
    month: date,
    goal: FinancialGoal,
    incomes: Sequence[Income],
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
    *,
    today: Optional[date] = None,
) -> MonthReport:
    """Bundle the engine's outputs for one month.

    A month logged as complete reports its frozen savings figures instead of
    recomputing them from live rows.
    """
    today = today or date.today()
    first = month_start(month)
    income = monthly_income(incomes, first)
    spending = compute_spending(first, transactions, bills, goal)
    targets = target_allocation(goal, income)
    required = required_monthly_savings(goal)
    snapshot = goal.snapshot_for(first)
    frozen = snapshot is not None and snapshot.is_month_complete

    if frozen and snapshot.actual_savings is not None:
        saved = snapshot.actual_savings
        if snapshot.target_savings is not None:
            required = snapshot.target_savings
        status = _status_for(saved, required)
    elif first > month_start(today):
        saved = 0.0
        status = SavingsStatus.NOT_CALCULATED
    else:
        saved = round_money(income - spending.total)
        status = _status_for(saved, required)

    totals = (
        dict(snapshot.category_spending)
        if frozen
        else category_totals(first, transactions, bills)
    )
    return MonthReport(
        month=first,
        income=income,
        spending=spending,
        targets=targets,
        savings=saved,
        required_savings=required,
        progress=_ratio(saved, required),
        needs_progress=bucket_progress(spending.needs, targets.needs),
        wants_progress=bucket_progress(spending.wants, targets.wants),
        status=status,
        is_frozen=frozen,
        category_totals=totals,
    )


__all__ = [
    "BucketTargets",
    "MonthReport",
    "SavingsStatus",
    "SpendingBreakdown",
    "adjust_target_date_for_income",
    "bucket_progress",
    "compute_spending",
    "is_feasible_with_income",
    "month_report",
    "monthly_income",
    "monthly_savings",
    "monthly_savings_progress",
    "potential_savings",
    "required_monthly_savings",
    "savings_status",
    "target_allocation",
]
