"""SQLModel implementation of FinancialGoal repository."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from ...dates import month_start
from ...models.goal import FinancialGoal, MonthlySpending


class SQLModelGoalRepository:
    """SQLModel-based goal repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, goal_id: int, *, user_id: int) -> Optional[FinancialGoal]:
        """Retrieve a goal with its snapshots loaded."""
        with self.session_factory() as session:
            statement = (
                select(FinancialGoal)
                .options(selectinload(FinancialGoal.monthly_spending))
                .where(FinancialGoal.id == goal_id)
                .where(FinancialGoal.user_id == user_id)
            )
            goal = session.exec(statement).first()
            if goal:
                session.expunge(goal)
            return goal

    def list_all(self, *, user_id: int, active_only: bool = False) -> list[FinancialGoal]:
        """List goals, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(FinancialGoal)
                .options(selectinload(FinancialGoal.monthly_spending))
                .where(FinancialGoal.user_id == user_id)
                .order_by(FinancialGoal.created_at, FinancialGoal.id)  # type: ignore
            )
            if active_only:
                statement = statement.where(FinancialGoal.is_active == True)  # noqa: E712
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, goal: FinancialGoal, *, user_id: int) -> FinancialGoal:
        """Create a new goal."""
        with self.session_factory() as session:
            goal.user_id = user_id
            session.add(goal)
            session.commit()
            session.refresh(goal)
            goal.monthly_spending  # load snapshots before detaching
            session.expunge(goal)
            return goal

    def update(self, goal: FinancialGoal, *, user_id: int) -> FinancialGoal:
        """Persist goal fields; attached snapshots are merged with it."""
        with self.session_factory() as session:
            goal.user_id = user_id
            for snapshot in goal.monthly_spending:
                snapshot.goal_id = goal.id
            merged = session.merge(goal)
            session.commit()
            session.refresh(merged)
            merged.monthly_spending  # load snapshots before detaching
            session.expunge(merged)
            return merged

    def delete(self, goal_id: int, *, user_id: int) -> None:
        """Delete a goal; its snapshots go with it."""
        with self.session_factory() as session:
            goal = session.exec(
                select(FinancialGoal).where(
                    FinancialGoal.id == goal_id, FinancialGoal.user_id == user_id
                )
            ).first()
            if goal:
                session.delete(goal)
                session.commit()

    # Snapshot operations
    def get_snapshot(self, goal_id: int, month: date) -> Optional[MonthlySpending]:
        """Snapshot of a goal for the month containing ``month``."""
        with self.session_factory() as session:
            snapshot = session.exec(
                select(MonthlySpending)
                .where(MonthlySpending.goal_id == goal_id)
                .where(MonthlySpending.month == month_start(month))
            ).first()
            if snapshot:
                session.expunge(snapshot)
            return snapshot

    def list_snapshots(self, goal_id: int) -> list[MonthlySpending]:
        """All snapshots of a goal, oldest month first."""
        with self.session_factory() as session:
            statement = (
                select(MonthlySpending)
                .where(MonthlySpending.goal_id == goal_id)
                .order_by(MonthlySpending.month)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def save_snapshot(self, snapshot: MonthlySpending) -> MonthlySpending:
        """Insert or update the row keyed by (goal, month)."""
        month = month_start(snapshot.month)
        with self.session_factory() as session:
            existing = session.exec(
                select(MonthlySpending)
                .where(MonthlySpending.goal_id == snapshot.goal_id)
                .where(MonthlySpending.month == month)
            ).first()
            if existing:
                existing.category_spending = dict(snapshot.category_spending)
                existing.actual_savings = snapshot.actual_savings
                existing.target_savings = snapshot.target_savings
                existing.is_month_complete = snapshot.is_month_complete
                target = existing
            else:
                target = MonthlySpending(
                    goal_id=snapshot.goal_id,
                    month=month,
                    category_spending=dict(snapshot.category_spending),
                    actual_savings=snapshot.actual_savings,
                    target_savings=snapshot.target_savings,
                    is_month_complete=snapshot.is_month_complete,
                )
                session.add(target)
            session.commit()
            session.refresh(target)
            session.expunge(target)
            return target


__all__ = ["SQLModelGoalRepository"]
