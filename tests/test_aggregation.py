"""Tests for monthly aggregation of bills and transactions."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from budgetsage.constants.categories import BillCategory, TransactionCategory
from budgetsage.models import Bill, Transaction
from budgetsage.services.aggregation import (
    aggregate_month,
    bills_in_month,
    category_totals,
    transactions_in_month,
)

MARCH = date(2024, 3, 1)


def _bill(bill_id: int, when: datetime, **kw) -> Bill:
    fields = dict(
        id=bill_id,
        user_id=1,
        name="Rent",
        amount=1500.0,
        category=BillCategory.HOUSING,
        first_installment=when,
    )
    fields.update(kw)
    return Bill(**fields)


def test_month_boundaries_are_half_open():
    txns = [
        Transaction(id=1, user_id=1, amount=1, occurred_at=datetime(2024, 2, 29, 23, 59)),
        Transaction(id=2, user_id=1, amount=2, occurred_at=datetime(2024, 3, 1, 0, 0)),
        Transaction(id=3, user_id=1, amount=3, occurred_at=datetime(2024, 3, 31, 23, 59)),
        Transaction(id=4, user_id=1, amount=4, occurred_at=datetime(2024, 4, 1, 0, 0)),
    ]
    assert [t.id for t in transactions_in_month(txns, MARCH)] == [2, 3]


def test_aware_datetimes_compare_on_wall_clock():
    txn = Transaction(
        id=1, user_id=1, amount=5, occurred_at=datetime(2024, 3, 31, 23, 0, tzinfo=timezone.utc)
    )
    assert transactions_in_month([txn], MARCH) == [txn]


def test_same_name_and_category_counted_once_latest_wins():
    early = _bill(7, datetime(2024, 3, 1), amount=1400.0)
    late = _bill(3, datetime(2024, 3, 15), amount=1500.0)
    chosen = bills_in_month([early, late], MARCH)
    assert chosen == [late]


def test_same_date_tie_breaks_on_higher_id():
    first = _bill(1, datetime(2024, 3, 1), amount=10.0)
    second = _bill(2, datetime(2024, 3, 1), amount=20.0)
    assert bills_in_month([second, first], MARCH) == [second]


def test_different_categories_are_separate_obligations():
    rent = _bill(1, datetime(2024, 3, 1))
    storage = _bill(2, datetime(2024, 3, 1), category=BillCategory.OTHER)
    assert len(bills_in_month([rent, storage], MARCH)) == 2


def test_category_totals_use_slugs_and_effective_cost():
    bills = [
        _bill(1, datetime(2024, 3, 1)),
        _bill(
            2,
            datetime(2024, 3, 3),
            name="Internet",
            amount=80.0,
            category=BillCategory.INTERNET,
            is_shared=True,
            number_of_shares=2,
        ),
    ]
    txns = [
        Transaction(id=1, user_id=1, amount=30.1, category=TransactionCategory.GROCERIES,
                    occurred_at=datetime(2024, 3, 5)),
        Transaction(id=2, user_id=1, amount=19.9, category=TransactionCategory.GROCERIES,
                    occurred_at=datetime(2024, 3, 6)),
    ]
    totals = category_totals(MARCH, txns, bills)
    assert totals == {"housing": 1500.0, "internet": 40.0, "groceries": 50.0}


def test_aggregate_month_bundles_everything():
    aggregate = aggregate_month(date(2024, 3, 17), [], [_bill(1, datetime(2024, 3, 1))])
    assert aggregate.month == MARCH
    assert aggregate.total == 1500.0
    assert len(aggregate.bills) == 1
    assert aggregate.transactions == []


def test_empty_month():
    assert category_totals(MARCH, [], []) == {}


@pytest.mark.parametrize("amount", [100.00, 99.99, 0.01])
@pytest.mark.parametrize("shares", [2, 3, 7])
def test_shared_bill_costs_add_back_to_amount(amount, shares):
    bill = _bill(1, datetime(2024, 3, 5), amount=amount, is_shared=True, number_of_shares=shares)
    total = bill.effective_cost * shares
    assert abs(total - amount) <= 0.01 * shares


def test_unshared_bill_ignores_share_count():
    bill = _bill(1, datetime(2024, 3, 5), amount=99.99, is_shared=False, number_of_shares=3)
    assert bill.effective_cost == 99.99
