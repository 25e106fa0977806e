"""Budgeting method catalog and expense buckets."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from .categories import LabeledEnum


class ExpenseType(str, Enum):
    """Bucket a spending category is classified into."""

    NEED = "need"
    WANT = "want"
    OTHER = "other"  # savings, debt, charity and anything unclassified

    @classmethod
    def parse(cls, raw: "str | ExpenseType | None") -> "ExpenseType":
        """Map stored or legacy values ("Need", "Want", "Savings", ...) to a bucket."""

        if isinstance(raw, cls):
            return raw
        if raw is None:
            return cls.OTHER
        folded = str(raw).strip().casefold()
        if folded == cls.NEED.value:
            return cls.NEED
        if folded == cls.WANT.value:
            return cls.WANT
        return cls.OTHER


class BudgetingMethod(LabeledEnum):
    """Named percentage-allocation templates."""

    FIFTY_THIRTY_TWENTY = ("fifty_thirty_twenty", "50/30/20 Rule")
    SEVENTY_TWENTY_TEN = ("seventy_twenty_ten", "70/20/10 Rule")
    SIXTY_TWENTY_TWENTY = ("sixty_twenty_twenty", "60/20/20 Rule")
    THIRTY_THIRTY_THIRTY_TEN = ("thirty_thirty_thirty_ten", "30/30/30/10 Rule")
    ZERO_BASED = ("zero_based", "Zero-Based Budgeting")
    AGGRESSIVE_SAVING = ("aggressive_saving", "Aggressive Saving")
    EIGHTY_TWENTY = ("eighty_twenty", "80/20 Rule")
    ENVELOPE = ("envelope", "Envelope Method")
    PAY_YOURSELF_FIRST = ("pay_yourself_first", "Pay Yourself First")

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def best_for(self) -> tuple[str, ...]:
        return _BEST_FOR.get(self, ())

    @property
    def default_percentages(self) -> dict[str, float]:
        # Copy so callers cannot mutate the catalog
        return dict(_DEFAULT_PERCENTAGES[self])

    @property
    def requires_custom_percentages(self) -> bool:
        return not _DEFAULT_PERCENTAGES[self]


_DESCRIPTIONS = {
    BudgetingMethod.FIFTY_THIRTY_TWENTY: (
        "Allocate 50% of your income to needs, 30% to wants, and 20% to savings and debt repayment."
    ),
    BudgetingMethod.SEVENTY_TWENTY_TEN: (
        "Spend 70% of your income on living expenses, save 20%, and use 10% for debt repayment "
        "or investments."
    ),
    BudgetingMethod.SIXTY_TWENTY_TWENTY: "60% Needs, 20% Wants, 20% Savings",
    BudgetingMethod.THIRTY_THIRTY_THIRTY_TEN: (
        "30% Housing, 30% Daily Expenses, 30% Financial Goals, 10% Personal Development"
    ),
    BudgetingMethod.ZERO_BASED: (
        "Give every dollar a job. Your income minus expenses should equal zero at the end of "
        "each month."
    ),
    BudgetingMethod.AGGRESSIVE_SAVING: "50-70% Savings, 20-40% Needs, 0-10% Wants",
    BudgetingMethod.EIGHTY_TWENTY: "20% Savings, 80% Everything else",
    BudgetingMethod.ENVELOPE: (
        "Divide your income into physical or digital envelopes for different spending categories."
    ),
    BudgetingMethod.PAY_YOURSELF_FIRST: (
        "Prioritize saving by automatically setting aside a portion of your income before "
        "spending anything."
    ),
}

_BEST_FOR = {
    BudgetingMethod.FIFTY_THIRTY_TWENTY: (
        "Beginners looking for a simple budgeting framework",
        "People with stable income",
        "Those who want a balanced approach to spending and saving",
    ),
    BudgetingMethod.SEVENTY_TWENTY_TEN: (
        "People with high living expenses",
        "Those focusing on debt repayment",
        "Individuals who want to maintain a good savings rate",
    ),
    BudgetingMethod.ZERO_BASED: (
        "Detail-oriented planners",
        "People who want maximum control over their money",
        "Those who need to track every dollar",
    ),
    BudgetingMethod.ENVELOPE: (
        "People who struggle with overspending",
        "Those who prefer visual budgeting",
        "Individuals who want to limit spending in specific categories",
    ),
    BudgetingMethod.PAY_YOURSELF_FIRST: (
        "People who want to prioritize saving",
        "Those with irregular income",
        "Individuals who struggle to save consistently",
    ),
}

_DEFAULT_PERCENTAGES = MappingProxyType(
    {
        BudgetingMethod.FIFTY_THIRTY_TWENTY: {"Needs": 0.5, "Wants": 0.3, "Savings": 0.2},
        BudgetingMethod.SEVENTY_TWENTY_TEN: {
            "Living Expenses": 0.7,
            "Savings": 0.2,
            "Debt/Investments": 0.1,
        },
        BudgetingMethod.SIXTY_TWENTY_TWENTY: {"Needs": 0.6, "Wants": 0.2, "Savings": 0.2},
        BudgetingMethod.THIRTY_THIRTY_THIRTY_TEN: {
            "Housing": 0.3,
            "Daily Expenses": 0.3,
            "Financial Goals": 0.3,
            "Personal Development": 0.1,
        },
        BudgetingMethod.ZERO_BASED: {},
        BudgetingMethod.AGGRESSIVE_SAVING: {"Savings": 0.6, "Needs": 0.3, "Wants": 0.1},
        BudgetingMethod.EIGHTY_TWENTY: {"Savings": 0.2, "Everything Else": 0.8},
        BudgetingMethod.ENVELOPE: {},
        BudgetingMethod.PAY_YOURSELF_FIRST: {"Savings": 0.2, "Expenses": 0.8},
    }
)

NEEDS_BUCKET = "Needs"
WANTS_BUCKET = "Wants"
# Used when a method carries no Needs/Wants bucket (e.g. 70/20/10)
FALLBACK_NEEDS_SHARE = 0.5
FALLBACK_WANTS_SHARE = 0.3
