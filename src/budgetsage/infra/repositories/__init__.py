"""Concrete repository implementations using SQLModel."""

from .bill import SQLModelBillRepository
from .budget import SQLModelBudgetRepository
from .goal import SQLModelGoalRepository
from .income import SQLModelIncomeRepository
from .secure_item import SQLModelSecureItemRepository
from .settings import SQLModelSettingsRepository
from .transaction import SQLModelTransactionRepository
from .user import SQLModelUserRepository

__all__ = [
    "SQLModelBillRepository",
    "SQLModelBudgetRepository",
    "SQLModelGoalRepository",
    "SQLModelIncomeRepository",
    "SQLModelSecureItemRepository",
    "SQLModelSettingsRepository",
    "SQLModelTransactionRepository",
    "SQLModelUserRepository",
]
