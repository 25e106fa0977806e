"""Tests for the category and budgeting method catalogs."""

from __future__ import annotations

import pytest

from budgetsage.constants.budgeting import BudgetingMethod, ExpenseType
from budgetsage.constants.categories import BillCategory, IncomeCategory, TransactionCategory


def test_labels_and_display_names():
    assert BillCategory.HOUSING.value == "housing"
    assert BillCategory.HOUSING.label == "🏡 Housing"
    assert BillCategory.HOUSING.display_name == "Housing"
    assert BillCategory.UNCATEGORIZED.display_name == "Uncategorized"
    assert str(TransactionCategory.DINING_OUT) == "dining_out"


@pytest.mark.parametrize("raw", ["housing", "HOUSING", "🏡 Housing", "Housing", BillCategory.HOUSING])
def test_parse_accepts_legacy_forms(raw):
    assert BillCategory.parse(raw) is BillCategory.HOUSING


def test_parse_rejects_unknown():
    with pytest.raises(ValueError):
        IncomeCategory.parse("lottery")


def test_slugs_are_unique():
    for catalog in (BillCategory, TransactionCategory, IncomeCategory):
        values = [member.value for member in catalog]
        assert len(values) == len(set(values))


def test_nine_budgeting_methods():
    assert len(BudgetingMethod) == 9


@pytest.mark.parametrize("method", list(BudgetingMethod))
def test_default_percentages_are_fractions(method):
    shares = method.default_percentages
    assert all(0.0 <= share <= 1.0 for share in shares.values())
    if shares:
        assert sum(shares.values()) == pytest.approx(1.0)
    assert method.description


def test_methods_requiring_custom_percentages():
    needing = {m for m in BudgetingMethod if m.requires_custom_percentages}
    assert needing == {BudgetingMethod.ZERO_BASED, BudgetingMethod.ENVELOPE}


def test_default_percentages_are_copies():
    shares = BudgetingMethod.FIFTY_THIRTY_TWENTY.default_percentages
    shares["Needs"] = 0.9
    assert BudgetingMethod.FIFTY_THIRTY_TWENTY.default_percentages["Needs"] == 0.5


def test_expense_type_parse():
    assert ExpenseType.parse("Need") is ExpenseType.NEED
    assert ExpenseType.parse(" want ") is ExpenseType.WANT
    assert ExpenseType.parse("Savings") is ExpenseType.OTHER
    assert ExpenseType.parse(None) is ExpenseType.OTHER
