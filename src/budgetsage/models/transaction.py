"""SQLModel definitions for one-off spending transactions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..constants.categories import TransactionCategory

if TYPE_CHECKING:  # pragma: no cover - import guard for circular dependency
    from .user import User


class Transaction(SQLModel, table=True):
    """A single discrete expense entered by the user."""

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(default="", max_length=128)
    amount: float = Field(
        nullable=False, description="Non-negative spending magnitude in account currency"
    )
    category: TransactionCategory = Field(
        default=TransactionCategory.UNCATEGORIZED, nullable=False, index=True
    )
    occurred_at: datetime = Field(nullable=False, index=True)
    notes: Optional[str] = Field(default=None, max_length=512)
    is_shared: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="transactions"))

    @property
    def spent(self) -> float:
        """Magnitude counted toward spending; legacy negative rows count by absolute value."""
        return abs(float(self.amount))
