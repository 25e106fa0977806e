"""SQLModel implementation of the budget repository."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional, TypeVar, Union

from sqlmodel import Session, select

from ...dates import month_range
from ...models.budget import BillBudget, TransactionBudget

BudgetModel = TypeVar("BudgetModel", bound=Union[BillBudget, TransactionBudget])


class SQLModelBudgetRepository:
    """Both budget tables behind one repository, scoped by user."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _get(self, model: type[BudgetModel], budget_id: int, user_id: int) -> Optional[BudgetModel]:
        with self.session_factory() as session:
            obj = session.exec(
                select(model).where(model.id == budget_id).where(model.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def _create(self, budget: BudgetModel, user_id: int) -> BudgetModel:
        with self.session_factory() as session:
            budget.user_id = user_id
            session.add(budget)
            session.commit()
            session.refresh(budget)
            session.expunge(budget)
            return budget

    def _update(self, budget: BudgetModel, user_id: int) -> BudgetModel:
        with self.session_factory() as session:
            budget.user_id = user_id
            budget = session.merge(budget)
            session.commit()
            session.refresh(budget)
            session.expunge(budget)
            return budget

    def _delete(self, model: type[BudgetModel], budget_id: int, user_id: int) -> None:
        with self.session_factory() as session:
            obj = session.exec(
                select(model).where(model.id == budget_id, model.user_id == user_id)
            ).first()
            if obj:
                session.delete(obj)
                session.commit()

    def get_bill_budget(self, budget_id: int, *, user_id: int) -> Optional[BillBudget]:
        return self._get(BillBudget, budget_id, user_id)

    def list_bill_budgets(self, *, user_id: int, month: Optional[date] = None) -> list[BillBudget]:
        """Bill budgets ordered by due date, optionally only those due in ``month``."""
        with self.session_factory() as session:
            statement = select(BillBudget).where(BillBudget.user_id == user_id)
            if month is not None:
                start, end = month_range(month)
                statement = statement.where(BillBudget.due_date >= start).where(
                    BillBudget.due_date < end
                )
            statement = statement.order_by(BillBudget.due_date, BillBudget.id)  # type: ignore
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create_bill_budget(self, budget: BillBudget, *, user_id: int) -> BillBudget:
        return self._create(budget, user_id)

    def update_bill_budget(self, budget: BillBudget, *, user_id: int) -> BillBudget:
        return self._update(budget, user_id)

    def delete_bill_budget(self, budget_id: int, *, user_id: int) -> None:
        self._delete(BillBudget, budget_id, user_id)

    def get_transaction_budget(
        self, budget_id: int, *, user_id: int
    ) -> Optional[TransactionBudget]:
        return self._get(TransactionBudget, budget_id, user_id)

    def list_transaction_budgets(
        self, *, user_id: int, active_only: bool = False
    ) -> list[TransactionBudget]:
        with self.session_factory() as session:
            statement = select(TransactionBudget).where(TransactionBudget.user_id == user_id)
            if active_only:
                statement = statement.where(TransactionBudget.is_active == True)  # noqa: E712
            statement = statement.order_by(TransactionBudget.id)  # type: ignore
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create_transaction_budget(
        self, budget: TransactionBudget, *, user_id: int
    ) -> TransactionBudget:
        return self._create(budget, user_id)

    def update_transaction_budget(
        self, budget: TransactionBudget, *, user_id: int
    ) -> TransactionBudget:
        return self._update(budget, user_id)

    def delete_transaction_budget(self, budget_id: int, *, user_id: int) -> None:
        self._delete(TransactionBudget, budget_id, user_id)


__all__ = ["SQLModelBudgetRepository"]
