"""Bill repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol

from ...models.bill import Bill


class BillRepository(Protocol):
    """Repository for managing bills and their stored occurrences."""

    def get_by_id(self, bill_id: int, *, user_id: int) -> Optional[Bill]:
        """Retrieve a bill by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[Bill]:
        """List every stored bill row of a user."""
        ...

    def list_for_month(self, month: date, *, user_id: int) -> list[Bill]:
        """Bill rows whose first installment falls in the month."""
        ...

    def create(self, bill: Bill, *, user_id: int) -> Bill:
        """Create a new bill."""
        ...

    def create_many(self, bills: Iterable[Bill], *, user_id: int) -> list[Bill]:
        """Insert several rows in one transaction."""
        ...

    def update(self, bill: Bill, *, user_id: int) -> Bill:
        """Update an existing bill."""
        ...

    def delete(self, bill_id: int, *, user_id: int) -> None:
        """Delete a bill by ID."""
        ...
