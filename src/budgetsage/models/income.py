"""Recurring income sources."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..constants.categories import IncomeCategory
from ..dates import (
    add_months,
    last_day_of_month,
    month_start,
    next_business_day,
    previous_business_day,
)

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class IncomeFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"

    @property
    def is_monthly_or_longer(self) -> bool:
        return self in (IncomeFrequency.MONTHLY, IncomeFrequency.QUARTERLY, IncomeFrequency.YEARLY)

    def next_due_date(self, value: date) -> date:
        """One period after ``value``; custom schedules do not advance."""
        if self is IncomeFrequency.WEEKLY:
            return value + timedelta(days=7)
        if self is IncomeFrequency.BIWEEKLY:
            return value + timedelta(days=14)
        if self is IncomeFrequency.MONTHLY:
            return add_months(value, 1)
        if self is IncomeFrequency.QUARTERLY:
            return add_months(value, 3)
        if self is IncomeFrequency.YEARLY:
            return add_months(value, 12)
        return value


class PaymentTiming(str, Enum):
    BEGINNING_OF_MONTH = "beginning_of_month"
    END_OF_MONTH = "end_of_month"

    def payment_date(self, value: date) -> date:
        """Business-day-adjusted payment date within the month of ``value``."""
        if self is PaymentTiming.BEGINNING_OF_MONTH:
            return next_business_day(month_start(value))
        return previous_business_day(last_day_of_month(value))


class Income(SQLModel, table=True):
    """A source of money coming in on a schedule."""

    __tablename__: ClassVar[str] = "income"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    amount: float = Field(nullable=False)
    category: IncomeCategory = Field(default=IncomeCategory.OTHER, nullable=False)
    issuer: str = Field(default="", max_length=128)
    first_payment: date = Field(nullable=False, index=True)
    frequency: IncomeFrequency = Field(default=IncomeFrequency.MONTHLY, nullable=False)
    payment_timing: Optional[PaymentTiming] = Field(default=None)
    notes: Optional[str] = Field(default=None, max_length=512)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="incomes"))

    def adjust_payment_date(self, value: date) -> date:
        """Apply payment timing to a scheduled date.

        Timing only applies to schedules paid once a month or less often.
        """
        frequency = IncomeFrequency(self.frequency)
        if self.payment_timing is None or not frequency.is_monthly_or_longer:
            return value
        return PaymentTiming(self.payment_timing).payment_date(value)

    def effective_month_of(self, payment: date) -> date:
        """Month a payment on ``payment`` counts toward."""
        first = month_start(payment)
        if self.payment_timing is None or not IncomeFrequency(self.frequency).is_monthly_or_longer:
            return first
        if PaymentTiming(self.payment_timing) is PaymentTiming.END_OF_MONTH:
            return add_months(first, 1)
        return first

    @property
    def next_payment_date(self) -> date:
        step = IncomeFrequency(self.frequency).next_due_date(self.first_payment)
        return self.adjust_payment_date(step)

    @property
    def effective_month(self) -> date:
        return self.effective_month_of(self.first_payment)
