"""User model owning every other record."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


class User(SQLModel, table=True):
    """Single account per installation; deleting it cascades to all its data."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(nullable=False, unique=True, index=True, max_length=64)
    display_name: str = Field(default="", max_length=128)
    email: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    last_login: Optional[datetime] = Field(default=None)

    transactions = Relationship(
        back_populates="user",
        sa_relationship=relationship(
            "Transaction", back_populates="user", cascade="all, delete-orphan"
        ),
    )
    bills = Relationship(
        back_populates="user",
        sa_relationship=relationship("Bill", back_populates="user", cascade="all, delete-orphan"),
    )
    incomes = Relationship(
        back_populates="user",
        sa_relationship=relationship("Income", back_populates="user", cascade="all, delete-orphan"),
    )
    goals = Relationship(
        back_populates="user",
        sa_relationship=relationship(
            "FinancialGoal", back_populates="user", cascade="all, delete-orphan"
        ),
    )
    bill_budgets = Relationship(
        back_populates="user",
        sa_relationship=relationship(
            "BillBudget", back_populates="user", cascade="all, delete-orphan"
        ),
    )
    transaction_budgets = Relationship(
        back_populates="user",
        sa_relationship=relationship(
            "TransactionBudget", back_populates="user", cascade="all, delete-orphan"
        ),
    )
