"""Budget repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.budget import BillBudget, TransactionBudget


class BudgetRepository(Protocol):
    """Repository for bill budgets and transaction spending limits."""

    def get_bill_budget(self, budget_id: int, *, user_id: int) -> Optional[BillBudget]:
        ...

    def list_bill_budgets(self, *, user_id: int, month: Optional[date] = None) -> list[BillBudget]:
        """Bill budgets by due date; ``month`` restricts to those due in it."""
        ...

    def create_bill_budget(self, budget: BillBudget, *, user_id: int) -> BillBudget:
        ...

    def update_bill_budget(self, budget: BillBudget, *, user_id: int) -> BillBudget:
        ...

    def delete_bill_budget(self, budget_id: int, *, user_id: int) -> None:
        ...

    def get_transaction_budget(
        self, budget_id: int, *, user_id: int
    ) -> Optional[TransactionBudget]:
        ...

    def list_transaction_budgets(
        self, *, user_id: int, active_only: bool = False
    ) -> list[TransactionBudget]:
        ...

    def create_transaction_budget(
        self, budget: TransactionBudget, *, user_id: int
    ) -> TransactionBudget:
        ...

    def update_transaction_budget(
        self, budget: TransactionBudget, *, user_id: int
    ) -> TransactionBudget:
        ...

    def delete_transaction_budget(self, budget_id: int, *, user_id: int) -> None:
        ...
