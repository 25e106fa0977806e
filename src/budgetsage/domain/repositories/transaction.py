"""Transaction repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.transaction import Transaction


class TransactionRepository(Protocol):
    """Repository for managing transaction entities."""

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[Transaction]:
        """List every transaction of a user, newest first."""
        ...

    def list_for_month(self, month: date, *, user_id: int) -> list[Transaction]:
        """Transactions inside the half-open month interval."""
        ...

    def create(self, transaction: Transaction, *, user_id: int) -> Transaction:
        """Create a new transaction."""
        ...

    def update(self, transaction: Transaction, *, user_id: int) -> Transaction:
        """Update an existing transaction."""
        ...

    def delete(self, transaction_id: int, *, user_id: int) -> None:
        """Delete a transaction by ID."""
        ...
