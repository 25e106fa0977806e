"""Budgeting tables: planned bill amounts and per-category spending limits."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..constants.categories import BillCategory, TransactionCategory
from ..dates import add_months, months_between

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    def step(self, anchor: date, periods: int) -> date:
        """``anchor`` moved by whole periods, always computed from the anchor."""
        if self is BudgetPeriod.WEEKLY:
            return anchor + timedelta(weeks=periods)
        if self is BudgetPeriod.MONTHLY:
            return add_months(anchor, periods)
        return add_months(anchor, 12 * periods)

    def next_period_date(self, value: date) -> date:
        return self.step(value, 1)

    def _estimate(self, anchor: date, value: date) -> int:
        if self is BudgetPeriod.WEEKLY:
            return (value - anchor).days // 7
        months = months_between(anchor, value)
        return months if self is BudgetPeriod.MONTHLY else months // 12

    def window(self, anchor: date, value: date) -> tuple[date, date]:
        """Half-open ``[start, end)`` period containing ``value``.

        Periods repeat from ``anchor``; a date before the anchor maps to the
        first period.
        """
        if value < anchor:
            return anchor, self.step(anchor, 1)
        n = max(0, self._estimate(anchor, value))
        # Month-end clamping can leave the estimate one period off
        while n > 0 and self.step(anchor, n) > value:
            n -= 1
        while self.step(anchor, n + 1) <= value:
            n += 1
        return self.step(anchor, n), self.step(anchor, n + 1)


class BillBudget(SQLModel, table=True):
    """An amount set aside for a bill category, due on a date."""

    __tablename__: ClassVar[str] = "bill_budget"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    category: BillCategory = Field(default=BillCategory.UNCATEGORIZED, nullable=False, index=True)
    amount: float = Field(nullable=False)
    is_paid: bool = Field(default=False, nullable=False)
    due_date: datetime = Field(nullable=False, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(
        sa_relationship=relationship("User", back_populates="bill_budgets")
    )


class TransactionBudget(SQLModel, table=True):
    """A recurring spending limit for one transaction category."""

    __tablename__: ClassVar[str] = "transaction_budget"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    category: TransactionCategory = Field(
        default=TransactionCategory.UNCATEGORIZED, nullable=False, index=True
    )
    limit: Optional[float] = Field(default=None, description="Spending cap per period")
    period: BudgetPeriod = Field(default=BudgetPeriod.MONTHLY, nullable=False)
    start_date: date = Field(default_factory=date.today, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(
        sa_relationship=relationship("User", back_populates="transaction_budgets")
    )

    @property
    def has_limit(self) -> bool:
        return self.limit is not None and self.limit > 0

    def period_window(self, today: date) -> tuple[date, date]:
        return BudgetPeriod(self.period).window(self.start_date, today)
