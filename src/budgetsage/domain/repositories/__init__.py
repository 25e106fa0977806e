"""Repository protocol definitions for domain layer."""

from .bill import BillRepository
from .budget import BudgetRepository
from .goal import GoalRepository
from .income import IncomeRepository
from .secure_item import SecureItemRepository
from .settings import SettingsRepository
from .transaction import TransactionRepository
from .user import UserRepository

__all__ = [
    "BillRepository",
    "BudgetRepository",
    "GoalRepository",
    "IncomeRepository",
    "SecureItemRepository",
    "SettingsRepository",
    "TransactionRepository",
    "UserRepository",
]
