"""Financial goals and their per-month spending snapshots."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..constants.budgeting import BudgetingMethod

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class FinancialGoal(SQLModel, table=True):
    """A savings target planned against a budgeting method.

    ``bill_category_types`` and ``transaction_category_types`` map category
    slugs to :class:`ExpenseType` values and are kept apart because the same
    category can be a need as a bill and a want as a one-off purchase.
    """

    __tablename__: ClassVar[str] = "financial_goal"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    method: Optional[BudgetingMethod] = Field(default=None)
    custom_percentages: Optional[dict[str, float]] = Field(
        default=None, sa_column=Column(MutableDict.as_mutable(JSON), nullable=True)
    )
    target_amount: Optional[float] = Field(default=None)
    current_amount: float = Field(default=0.0, nullable=False)
    start_date: date = Field(default_factory=date.today, nullable=False)
    target_date: Optional[date] = Field(default=None)
    is_active: bool = Field(default=True, nullable=False)
    bill_category_types: dict[str, str] = Field(
        default_factory=dict, sa_column=Column(MutableDict.as_mutable(JSON), nullable=False)
    )
    transaction_category_types: dict[str, str] = Field(
        default_factory=dict, sa_column=Column(MutableDict.as_mutable(JSON), nullable=False)
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="goals"))
    monthly_spending: list["MonthlySpending"] = Relationship(
        back_populates="goal",
        sa_relationship=relationship(
            "MonthlySpending",
            back_populates="goal",
            cascade="all, delete-orphan",
            lazy="selectin",
            order_by="MonthlySpending.month",
        ),
    )

    @property
    def percentages(self) -> dict[str, float]:
        """Bucket shares in effect: the custom override, else the method defaults."""
        if self.custom_percentages:
            return dict(self.custom_percentages)
        if self.method is None:
            return {}
        return BudgetingMethod.parse(self.method).default_percentages

    def snapshot_for(self, month: date) -> Optional["MonthlySpending"]:
        for snapshot in self.monthly_spending:
            if snapshot.month == month:
                return snapshot
        return None


class MonthlySpending(SQLModel, table=True):
    """Category totals for one month of a goal, frozen once marked complete."""

    __tablename__: ClassVar[str] = "monthly_spending"
    __table_args__ = (UniqueConstraint("goal_id", "month", name="uq_monthly_spending_goal_month"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    goal_id: int = Field(foreign_key="financial_goal.id", nullable=False, index=True)
    month: date = Field(nullable=False, index=True)
    category_spending: dict[str, float] = Field(
        default_factory=dict, sa_column=Column(MutableDict.as_mutable(JSON), nullable=False)
    )
    actual_savings: Optional[float] = Field(default=None)
    target_savings: Optional[float] = Field(default=None)
    is_month_complete: bool = Field(default=False, nullable=False)

    goal: "FinancialGoal" = Relationship(
        back_populates="monthly_spending",
        sa_relationship=relationship("FinancialGoal", back_populates="monthly_spending"),
    )

    @property
    def total_spent(self) -> float:
        return sum(self.category_spending.values())
