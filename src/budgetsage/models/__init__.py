"""SQLModel table exports."""

from .bill import Bill, BillRecurrence
from .budget import BillBudget, BudgetPeriod, TransactionBudget
from .goal import FinancialGoal, MonthlySpending
from .income import Income, IncomeFrequency, PaymentTiming
from .secure_item import SecureItem
from .settings import AppSetting
from .transaction import Transaction
from .user import User

__all__ = [
    "AppSetting",
    "Bill",
    "BillBudget",
    "BillRecurrence",
    "BudgetPeriod",
    "FinancialGoal",
    "Income",
    "IncomeFrequency",
    "MonthlySpending",
    "PaymentTiming",
    "SecureItem",
    "Transaction",
    "TransactionBudget",
    "User",
]
