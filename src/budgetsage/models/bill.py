"""Recurring and one-time bills."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..constants.categories import BillCategory
from ..dates import add_months, month_start
from ..money import round_money

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class BillRecurrence(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"

    def next_due_date(self, value: datetime, *, custom_days: int | None = None) -> datetime:
        """Due date one period after ``value``.

        Custom recurrences advance by ``custom_days``; without it the date is
        returned unchanged so callers can detect a stalled series.
        """
        if self is BillRecurrence.MONTHLY:
            return add_months(value, 1)
        if self is BillRecurrence.QUARTERLY:
            return add_months(value, 3)
        if self is BillRecurrence.YEARLY:
            return add_months(value, 12)
        if custom_days:
            return value + timedelta(days=custom_days)
        return value


class Bill(SQLModel, table=True):
    """An obligation; recurring bills are stored as one row per occurrence."""

    __tablename__: ClassVar[str] = "bill"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128, index=True)
    amount: float = Field(nullable=False, description="Full bill cost before sharing")
    category: BillCategory = Field(default=BillCategory.UNCATEGORIZED, nullable=False, index=True)
    issuer: str = Field(default="", max_length=128)
    first_installment: datetime = Field(nullable=False, index=True)
    recurrence: BillRecurrence = Field(default=BillRecurrence.MONTHLY, nullable=False)
    custom_recurrence_days: Optional[int] = Field(default=None, ge=1)
    is_shared: bool = Field(default=False, nullable=False)
    number_of_shares: int = Field(default=1, ge=1, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="bills"))

    @property
    def effective_cost(self) -> float:
        """The user's share of the bill, rounded to cents."""
        amount = round_money(self.amount)
        if self.is_shared and self.number_of_shares > 1:
            return round_money(amount / self.number_of_shares)
        return amount

    @property
    def dedupe_key(self) -> tuple[str, str]:
        """Identity used to count one row per obligation within a month."""
        return (self.name, BillCategory.parse(self.category).value)

    @property
    def occurrence_key(self) -> tuple[str, str, str, object]:
        """Identity of a stored occurrence: (name, issuer, category, period month)."""
        return (
            self.name,
            self.issuer,
            BillCategory.parse(self.category).value,
            month_start(self.first_installment),
        )
