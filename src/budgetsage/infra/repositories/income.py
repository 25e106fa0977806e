"""SQLModel implementation of Income repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.income import Income


class SQLModelIncomeRepository:
    """SQLModel-based income repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_id(self, income_id: int, *, user_id: int) -> Optional[Income]:
        with self.session_factory() as session:
            income = session.exec(
                select(Income).where(Income.id == income_id).where(Income.user_id == user_id)
            ).first()
            if income:
                session.expunge(income)
            return income

    def list_all(self, *, user_id: int) -> list[Income]:
        with self.session_factory() as session:
            statement = (
                select(Income).where(Income.user_id == user_id).order_by(Income.first_payment)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, income: Income, *, user_id: int) -> Income:
        with self.session_factory() as session:
            income.user_id = user_id
            session.add(income)
            session.commit()
            session.refresh(income)
            session.expunge(income)
            return income

    def update(self, income: Income, *, user_id: int) -> Income:
        with self.session_factory() as session:
            income.user_id = user_id
            income = session.merge(income)
            session.commit()
            session.refresh(income)
            session.expunge(income)
            return income

    def delete(self, income_id: int, *, user_id: int) -> None:
        with self.session_factory() as session:
            income = session.exec(
                select(Income).where(Income.id == income_id, Income.user_id == user_id)
            ).first()
            if income:
                session.delete(income)
                session.commit()


__all__ = ["SQLModelIncomeRepository"]
