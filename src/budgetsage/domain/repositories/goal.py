"""Financial goal repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.goal import FinancialGoal, MonthlySpending


class GoalRepository(Protocol):
    """Repository for goals and their monthly snapshots."""

    def get_by_id(self, goal_id: int, *, user_id: int) -> Optional[FinancialGoal]:
        """Retrieve a goal with its snapshots loaded."""
        ...

    def list_all(self, *, user_id: int, active_only: bool = False) -> list[FinancialGoal]:
        """List goals of a user."""
        ...

    def create(self, goal: FinancialGoal, *, user_id: int) -> FinancialGoal:
        """Create a new goal."""
        ...

    def update(self, goal: FinancialGoal, *, user_id: int) -> FinancialGoal:
        """Persist goal fields and any attached snapshots."""
        ...

    def delete(self, goal_id: int, *, user_id: int) -> None:
        """Delete a goal and its snapshots."""
        ...

    # Snapshot operations
    def get_snapshot(self, goal_id: int, month: date) -> Optional[MonthlySpending]:
        """Snapshot of a goal for the month starting at ``month``."""
        ...

    def list_snapshots(self, goal_id: int) -> list[MonthlySpending]:
        """All snapshots of a goal, oldest month first."""
        ...

    def save_snapshot(self, snapshot: MonthlySpending) -> MonthlySpending:
        """Insert or update the snapshot keyed by (goal, month)."""
        ...
