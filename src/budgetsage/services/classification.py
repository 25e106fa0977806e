"""Per-goal mapping of spending categories to need/want/other."""

from __future__ import annotations

from enum import Enum
from typing import Union

from ..constants.budgeting import ExpenseType
from ..constants.categories import (
    AUTO_NEED_NAMES,
    AUTO_WANT_NAMES,
    BillCategory,
    LabeledEnum,
    TransactionCategory,
)
from ..models.goal import FinancialGoal


class ClassificationContext(str, Enum):
    """Which of the goal's two maps a category is looked up in."""

    BILL = "bill"
    TRANSACTION = "transaction"

    @property
    def catalog(self) -> type[LabeledEnum]:
        return BillCategory if self is ClassificationContext.BILL else TransactionCategory


CategoryLike = Union[str, LabeledEnum]


def _map_for(goal: FinancialGoal, context: ClassificationContext) -> dict[str, str]:
    """Read-only view of one map; a missing map reads as empty."""
    if ClassificationContext(context) is ClassificationContext.BILL:
        return goal.bill_category_types or {}
    return goal.transaction_category_types or {}


def _writable_map(goal: FinancialGoal, context: ClassificationContext) -> dict[str, str]:
    if ClassificationContext(context) is ClassificationContext.BILL:
        if goal.bill_category_types is None:
            goal.bill_category_types = {}
        return goal.bill_category_types
    if goal.transaction_category_types is None:
        goal.transaction_category_types = {}
    return goal.transaction_category_types


def _slug(category: CategoryLike, context: ClassificationContext) -> str:
    return ClassificationContext(context).catalog.parse(category).value


def classify(
    goal: FinancialGoal, category: CategoryLike, context: ClassificationContext
) -> ExpenseType:
    """Expense type of ``category``; anything unmapped is ``other``."""
    try:
        slug = _slug(category, context)
    except ValueError:
        return ExpenseType.OTHER
    mapping = _map_for(goal, context)
    return ExpenseType.parse(mapping.get(slug))


def set_classification(
    goal: FinancialGoal,
    category: CategoryLike,
    context: ClassificationContext,
    expense_type: ExpenseType | str,
) -> None:
    mapping = _writable_map(goal, context)
    mapping[_slug(category, context)] = ExpenseType.parse(expense_type).value


def _auto_type(category: LabeledEnum) -> ExpenseType:
    if category.display_name in AUTO_NEED_NAMES:
        return ExpenseType.NEED
    if category.display_name in AUTO_WANT_NAMES:
        return ExpenseType.WANT
    return ExpenseType.OTHER


def auto_classify(goal: FinancialGoal) -> None:
    """Seed both maps for every catalog category from the built-in name sets.

    Existing entries are overwritten.
    """
    goal.bill_category_types = {cat.value: _auto_type(cat).value for cat in BillCategory}
    goal.transaction_category_types = {
        cat.value: _auto_type(cat).value for cat in TransactionCategory
    }


def categories_of_type(
    goal: FinancialGoal, expense_type: ExpenseType | str
) -> list[tuple[ClassificationContext, LabeledEnum]]:
    wanted = ExpenseType.parse(expense_type)
    found: list[tuple[ClassificationContext, LabeledEnum]] = []
    for context in ClassificationContext:
        for slug, value in sorted(_map_for(goal, context).items()):
            if ExpenseType.parse(value) is not wanted:
                continue
            try:
                found.append((context, context.catalog.parse(slug)))
            except ValueError:
                continue
    return found


def migrate_legacy_keys(goal: FinancialGoal) -> int:
    """Rewrite map keys stored as emoji labels to category slugs.

    Returns the number of legacy keys replaced. When a label and its slug are
    both present the slug entry is kept. Unknown keys are left in place.
    """
    changed = 0
    for context in ClassificationContext:
        mapping = _map_for(goal, context)
        rewritten: dict[str, str] = {}
        legacy: dict[str, str] = {}
        for key, value in mapping.items():
            try:
                slug = context.catalog.parse(key).value
            except ValueError:
                slug = key
            if slug == key:
                rewritten[slug] = ExpenseType.parse(value).value
            else:
                legacy[slug] = ExpenseType.parse(value).value
                changed += 1
        if not legacy:
            continue
        for slug, value in legacy.items():
            rewritten.setdefault(slug, value)
        writable = _writable_map(goal, context)
        writable.clear()
        writable.update(rewritten)
    return changed


__all__ = [
    "ClassificationContext",
    "auto_classify",
    "categories_of_type",
    "classify",
    "migrate_legacy_keys",
    "set_classification",
]
