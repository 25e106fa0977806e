"""Income repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.income import Income


class IncomeRepository(Protocol):
    """Repository for managing income sources."""

    def get_by_id(self, income_id: int, *, user_id: int) -> Optional[Income]:
        ...

    def list_all(self, *, user_id: int) -> list[Income]:
        ...

    def create(self, income: Income, *, user_id: int) -> Income:
        ...

    def update(self, income: Income, *, user_id: int) -> Income:
        ...

    def delete(self, income_id: int, *, user_id: int) -> None:
        ...
