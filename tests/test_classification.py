"""Tests for per-goal category classification."""

from __future__ import annotations

from budgetsage.constants.budgeting import ExpenseType
from budgetsage.constants.categories import BillCategory, TransactionCategory
from budgetsage.services.classification import (
    ClassificationContext,
    auto_classify,
    categories_of_type,
    classify,
    migrate_legacy_keys,
    set_classification,
)

from tests.conftest import make_goal


def test_unmapped_category_is_other():
    goal = make_goal()
    assert classify(goal, BillCategory.HOUSING, ClassificationContext.BILL) is ExpenseType.OTHER


def test_unknown_category_text_is_other():
    goal = make_goal()
    assert classify(goal, "not a category", ClassificationContext.TRANSACTION) is ExpenseType.OTHER


def test_contexts_are_independent():
    goal = make_goal()
    set_classification(goal, "Groceries", ClassificationContext.BILL, "need")
    set_classification(goal, "groceries", ClassificationContext.TRANSACTION, ExpenseType.WANT)

    assert classify(goal, BillCategory.GROCERIES, ClassificationContext.BILL) is ExpenseType.NEED
    assert (
        classify(goal, TransactionCategory.GROCERIES, ClassificationContext.TRANSACTION)
        is ExpenseType.WANT
    )
    assert goal.bill_category_types == {"groceries": "need"}


def test_legacy_label_lookup_resolves_to_slug():
    goal = make_goal(bill_category_types={"housing": "need"})
    assert classify(goal, "🏡 Housing", ClassificationContext.BILL) is ExpenseType.NEED


def test_legacy_expense_values_map_to_other():
    goal = make_goal(bill_category_types={"savings": "Savings", "housing": "Need"})
    assert classify(goal, BillCategory.SAVINGS, ClassificationContext.BILL) is ExpenseType.OTHER
    assert classify(goal, BillCategory.HOUSING, ClassificationContext.BILL) is ExpenseType.NEED


def test_auto_classify_overwrites_existing_entries():
    goal = make_goal(
        bill_category_types={"housing": "want"},
        transaction_category_types={"dining_out": "need"},
    )
    auto_classify(goal)

    assert goal.bill_category_types["housing"] == "need"
    assert goal.bill_category_types["entertainment"] == "want"
    assert goal.bill_category_types["pets"] == "other"
    assert goal.transaction_category_types["dining_out"] == "want"
    assert goal.transaction_category_types["hobbies"] == "want"
    assert set(goal.bill_category_types) == {c.value for c in BillCategory}
    assert set(goal.transaction_category_types) == {c.value for c in TransactionCategory}


def test_categories_of_type():
    goal = make_goal(
        bill_category_types={"housing": "need", "utilities": "need", "travel": "want"},
        transaction_category_types={"pharmacy": "need"},
    )
    needs = categories_of_type(goal, ExpenseType.NEED)
    assert needs == [
        (ClassificationContext.BILL, BillCategory.HOUSING),
        (ClassificationContext.BILL, BillCategory.UTILITIES),
        (ClassificationContext.TRANSACTION, TransactionCategory.PHARMACY),
    ]


def test_migrate_legacy_keys():
    goal = make_goal(
        bill_category_types={"🏡 Housing": "Need", "utilities": "need"},
        transaction_category_types={"☕ Coffee": "Want"},
    )
    changed = migrate_legacy_keys(goal)

    assert changed == 2
    assert goal.bill_category_types == {"housing": "need", "utilities": "need"}
    assert goal.transaction_category_types == {"coffee": "want"}
    assert migrate_legacy_keys(goal) == 0


def test_migration_keeps_slug_entry_when_label_collides():
    goal = make_goal(
        bill_category_types={"housing": "want", "🏡 Housing": "need"},
        transaction_category_types={"coffee": "want"},
    )

    assert migrate_legacy_keys(goal) == 1
    assert goal.bill_category_types == {"housing": "want"}
    assert goal.transaction_category_types == {"coffee": "want"}


def test_migration_counts_each_map_separately():
    goal = make_goal(
        bill_category_types={"🏡 Housing": "need"},
        transaction_category_types={"coffee": "Want", "mystery": "other"},
    )

    assert migrate_legacy_keys(goal) == 1
    # Maps without legacy keys are left exactly as stored
    assert goal.transaction_category_types == {"coffee": "Want", "mystery": "other"}


def test_lookups_do_not_create_missing_maps():
    goal = make_goal(bill_category_types=None, transaction_category_types=None)

    assert classify(goal, BillCategory.HOUSING, ClassificationContext.BILL) is ExpenseType.OTHER
    assert categories_of_type(goal, ExpenseType.NEED) == []
    assert migrate_legacy_keys(goal) == 0
    assert goal.bill_category_types is None
    assert goal.transaction_category_types is None

    set_classification(goal, BillCategory.HOUSING, ClassificationContext.BILL, ExpenseType.NEED)
    assert goal.bill_category_types == {"housing": "need"}
    assert goal.transaction_category_types is None
