"""SQLModel implementation of Bill repository."""

from __future__ import annotations

from datetime import date
from typing import Callable, Iterable, Optional

from sqlmodel import Session, select

from ...dates import month_range
from ...models.bill import Bill


class SQLModelBillRepository:
    """SQLModel-based bill repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_id(self, bill_id: int, *, user_id: int) -> Optional[Bill]:
        with self.session_factory() as session:
            bill = session.exec(
                select(Bill).where(Bill.id == bill_id).where(Bill.user_id == user_id)
            ).first()
            if bill:
                session.expunge(bill)
            return bill

    def list_all(self, *, user_id: int) -> list[Bill]:
        with self.session_factory() as session:
            statement = (
                select(Bill)
                .where(Bill.user_id == user_id)
                .order_by(Bill.first_installment, Bill.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_for_month(self, month: date, *, user_id: int) -> list[Bill]:
        start, end = month_range(month)
        with self.session_factory() as session:
            statement = (
                select(Bill)
                .where(Bill.user_id == user_id)
                .where(Bill.first_installment >= start)
                .where(Bill.first_installment < end)
                .order_by(Bill.first_installment, Bill.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, bill: Bill, *, user_id: int) -> Bill:
        with self.session_factory() as session:
            bill.user_id = user_id
            session.add(bill)
            session.commit()
            session.refresh(bill)
            session.expunge(bill)
            return bill

    def create_many(self, bills: Iterable[Bill], *, user_id: int) -> list[Bill]:
        """Insert all rows in one transaction; nothing is written if any fails."""
        rows = list(bills)
        if not rows:
            return []
        with self.session_factory() as session:
            for bill in rows:
                bill.user_id = user_id
                session.add(bill)
            session.commit()
            for bill in rows:
                session.refresh(bill)
            session.expunge_all()
            return rows

    def update(self, bill: Bill, *, user_id: int) -> Bill:
        with self.session_factory() as session:
            bill.user_id = user_id
            bill = session.merge(bill)
            session.commit()
            session.refresh(bill)
            session.expunge(bill)
            return bill

    def delete(self, bill_id: int, *, user_id: int) -> None:
        with self.session_factory() as session:
            bill = session.exec(
                select(Bill).where(Bill.id == bill_id, Bill.user_id == user_id)
            ).first()
            if bill:
                session.delete(bill)
                session.commit()


__all__ = ["SQLModelBillRepository"]
