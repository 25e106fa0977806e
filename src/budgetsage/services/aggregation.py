"""Monthly aggregation of bills and transactions.

Every date filter here uses the half-open interval
``[month start, next month start)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence

from ..constants.categories import BillCategory, TransactionCategory
from ..dates import in_month, month_start
from ..models.bill import Bill
from ..models.transaction import Transaction
from ..money import round_money


@dataclass(frozen=True)
class MonthlyAggregate:
    """Filtered rows and per-category totals for one month."""

    month: date
    bills: list[Bill] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    category_totals: dict[str, float] = field(default_factory=dict)

    @property
    def total(self) -> float:
        return round_money(sum(self.category_totals.values()))


def _bill_sort_key(bill: Bill):
    return (bill.first_installment.replace(tzinfo=None), bill.id or 0)


def bills_in_month(bills: Iterable[Bill], month: date) -> list[Bill]:
    """Bills dated in the month, one per (name, category).

    Recurring obligations may be stored as several rows; when two rows share a
    name and category in the same month the latest-dated one is kept (ties
    broken by the higher id).
    """
    chosen: dict[tuple[str, str], Bill] = {}
    for bill in bills:
        if not in_month(bill.first_installment, month):
            continue
        key = bill.dedupe_key
        current = chosen.get(key)
        if current is None or _bill_sort_key(bill) > _bill_sort_key(current):
            chosen[key] = bill
    return sorted(chosen.values(), key=_bill_sort_key)


def transactions_in_month(transactions: Iterable[Transaction], month: date) -> list[Transaction]:
    return [txn for txn in transactions if in_month(txn.occurred_at, month)]


def _accumulate(totals: dict[str, float], key: str, amount: float) -> None:
    totals[key] = round_money(totals.get(key, 0.0) + amount)


def category_totals(
    month: date,
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
) -> dict[str, float]:
    """Category slug to amount spent, combining bill shares and transactions."""
    totals: dict[str, float] = {}
    for bill in bills_in_month(bills, month):
        _accumulate(totals, BillCategory.parse(bill.category).value, bill.effective_cost)
    for txn in transactions_in_month(transactions, month):
        _accumulate(totals, TransactionCategory.parse(txn.category).value, txn.spent)
    return totals


def aggregate_month(
    month: date,
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
) -> MonthlyAggregate:
    return MonthlyAggregate(
        month=month_start(month),
        bills=bills_in_month(bills, month),
        transactions=transactions_in_month(transactions, month),
        category_totals=category_totals(month, transactions, bills),
    )


__all__ = [
    "MonthlyAggregate",
    "aggregate_month",
    "bills_in_month",
    "category_totals",
    "transactions_in_month",
]
