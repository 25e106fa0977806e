"""Goal lifecycle: validation, CRUD, monthly snapshots and the backfill pass."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterator, Mapping, Optional, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError

from ..constants.budgeting import BudgetingMethod, ExpenseType
from ..dates import month_start
from ..domain.repositories.bill import BillRepository
from ..domain.repositories.goal import GoalRepository
from ..domain.repositories.income import IncomeRepository
from ..domain.repositories.transaction import TransactionRepository
from ..errors import InputValidationError, PersistenceError, RecordNotFoundError
from ..logging_config import get_logger
from ..models.bill import Bill
from ..models.goal import FinancialGoal, MonthlySpending
from ..models.transaction import Transaction
from ..money import DEFAULT_FORMAT, MoneyFormat, parse_number, round_money
from .aggregation import category_totals
from .allocation import MonthReport, month_report, required_monthly_savings
from .classification import (
    CategoryLike,
    ClassificationContext,
    auto_classify,
    set_classification,
)

logger = get_logger(__name__)

AmountInput = Union[str, float, int, None]

# Tolerance when checking that custom shares do not exceed the whole income
_SHARE_EPSILON = 1e-9


@dataclass
class GoalInput:
    """Raw goal fields as entered by a user."""

    name: str
    method: Union[BudgetingMethod, str, None] = None
    custom_percentages: Optional[Mapping[str, Any]] = None
    target_amount: AmountInput = None
    current_amount: AmountInput = 0.0
    start_date: date = field(default_factory=date.today)
    target_date: Optional[date] = None
    is_active: bool = True


@dataclass(frozen=True)
class ValidGoal:
    """Goal fields after validation, ready to apply to a model."""

    name: str
    method: Optional[BudgetingMethod]
    custom_percentages: Optional[dict[str, float]]
    target_amount: Optional[float]
    current_amount: float
    start_date: date
    target_date: Optional[date]
    is_active: bool

    def apply(self, goal: FinancialGoal) -> FinancialGoal:
        goal.name = self.name
        goal.method = self.method
        goal.custom_percentages = dict(self.custom_percentages) if self.custom_percentages else None
        goal.target_amount = self.target_amount
        goal.current_amount = self.current_amount
        goal.start_date = self.start_date
        goal.target_date = self.target_date
        goal.is_active = self.is_active
        return goal


def _parse_amount(
    raw: AmountInput,
    field_name: str,
    *,
    required: bool,
    fmt: MoneyFormat,
    allow_negative: bool = False,
) -> Optional[float]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            raise InputValidationError(f"{field_name} is required.", field=field_name)
        return None
    if isinstance(raw, bool):
        raise InputValidationError(f"{field_name} must be a number.", field=field_name)
    value = float(raw) if isinstance(raw, (int, float)) else parse_number(raw, fmt)
    if value is None or value != value or value in (float("inf"), float("-inf")):
        raise InputValidationError(f"{field_name} must be a number.", field=field_name)
    if value < 0 and not allow_negative:
        raise InputValidationError(f"{field_name} cannot be negative.", field=field_name)
    return round_money(value)


def _parse_percentages(raw: Optional[Mapping[str, Any]]) -> Optional[dict[str, float]]:
    if not raw:
        return None
    shares: dict[str, float] = {}
    for bucket, value in raw.items():
        bucket_name = str(bucket).strip()
        if not bucket_name:
            raise InputValidationError("Bucket names cannot be empty.", field="custom_percentages")
        try:
            share = float(value)
        except (TypeError, ValueError) as exc:
            raise InputValidationError(
                f"Share for {bucket_name} must be a number.", field="custom_percentages"
            ) from exc
        if not 0.0 <= share <= 1.0:
            raise InputValidationError(
                f"Share for {bucket_name} must be between 0 and 1.", field="custom_percentages"
            )
        shares[bucket_name] = share
    if sum(shares.values()) > 1.0 + _SHARE_EPSILON:
        raise InputValidationError(
            "Custom percentages cannot add up to more than 100%.", field="custom_percentages"
        )
    return shares


def validate_goal_input(data: GoalInput, *, fmt: MoneyFormat = DEFAULT_FORMAT) -> ValidGoal:
    """Check user-entered goal fields; raises :class:`InputValidationError`."""
    name = (data.name or "").strip()
    if not name:
        raise InputValidationError("Goal name is required.", field="name")

    method: Optional[BudgetingMethod] = None
    if data.method not in (None, ""):
        try:
            method = BudgetingMethod.parse(data.method)
        except ValueError as exc:
            raise InputValidationError(str(exc), field="method") from exc

    custom = _parse_percentages(data.custom_percentages)
    if method is None and custom is None:
        raise InputValidationError(
            "Choose a budgeting method or supply custom percentages.", field="method"
        )
    if method is not None and method.requires_custom_percentages and custom is None:
        raise InputValidationError(
            f"{method.label} needs custom percentages.", field="custom_percentages"
        )

    target_amount = _parse_amount(data.target_amount, "target_amount", required=False, fmt=fmt)
    current_amount = _parse_amount(data.current_amount, "current_amount", required=False, fmt=fmt)

    if data.start_date is None:
        raise InputValidationError("Start date is required.", field="start_date")
    if data.target_date is not None and data.target_date <= data.start_date:
        raise InputValidationError("Target date must be after the start date.", field="target_date")

    return ValidGoal(
        name=name,
        method=method,
        custom_percentages=custom,
        target_amount=target_amount,
        current_amount=current_amount or 0.0,
        start_date=data.start_date,
        target_date=data.target_date,
        is_active=bool(data.is_active),
    )


def create_goal(
    goal_repo: GoalRepository,
    data: GoalInput,
    *,
    user_id: int,
    fmt: MoneyFormat = DEFAULT_FORMAT,
) -> FinancialGoal:
    """Validate and persist a new goal with empty classification maps."""
    valid = validate_goal_input(data, fmt=fmt)
    goal = valid.apply(FinancialGoal(user_id=user_id, name=valid.name))
    goal.bill_category_types = {}
    goal.transaction_category_types = {}
    created = goal_repo.create(goal, user_id=user_id)
    logger.info("Goal created", extra={"goal_id": created.id, "user_id": user_id})
    return created


def _require_goal(goal_repo: GoalRepository, goal_id: int, *, user_id: int) -> FinancialGoal:
    goal = goal_repo.get_by_id(goal_id, user_id=user_id)
    if goal is None:
        raise RecordNotFoundError(f"Goal {goal_id} not found")
    return goal


def update_goal(
    goal_repo: GoalRepository,
    goal_id: int,
    data: GoalInput,
    *,
    user_id: int,
    fmt: MoneyFormat = DEFAULT_FORMAT,
) -> FinancialGoal:
    """Re-validate and apply edited fields; classification maps are kept."""
    valid = validate_goal_input(data, fmt=fmt)
    goal = valid.apply(_require_goal(goal_repo, goal_id, user_id=user_id))
    return goal_repo.update(goal, user_id=user_id)


def delete_goal(goal_repo: GoalRepository, goal_id: int, *, user_id: int) -> None:
    goal_repo.delete(goal_id, user_id=user_id)
    logger.info("Goal deleted", extra={"goal_id": goal_id, "user_id": user_id})


def _snapshot(goal: FinancialGoal, month: date) -> tuple[MonthlySpending, bool]:
    first = month_start(month)
    existing = goal.snapshot_for(first)
    if existing is not None:
        return existing, False
    snapshot = MonthlySpending(goal_id=goal.id, month=first, category_spending={})
    goal.monthly_spending.append(snapshot)
    return snapshot, True


def log_actual_savings(
    goal: FinancialGoal,
    month: date,
    amount: float,
    *,
    transactions: Sequence[Transaction] = (),
    bills: Sequence[Bill] = (),
) -> MonthlySpending:
    """Mark ``month`` complete, freezing its actual and target savings.

    Historical months only get a snapshot through this call. Category totals
    are captured from the supplied rows when the snapshot is new or still live.
    """
    snapshot, created = _snapshot(goal, month)
    if created or not snapshot.is_month_complete:
        snapshot.category_spending = category_totals(snapshot.month, transactions, bills)
    snapshot.actual_savings = round_money(amount)
    snapshot.target_savings = required_monthly_savings(goal)
    snapshot.is_month_complete = True
    return snapshot


def refresh_month_snapshot(
    goal: FinancialGoal,
    month: date,
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
) -> MonthlySpending:
    """Create or recompute the live snapshot of ``month``.

    Completed months are returned untouched.
    """
    snapshot, _created = _snapshot(goal, month)
    if snapshot.is_month_complete:
        return snapshot
    snapshot.category_spending = category_totals(snapshot.month, transactions, bills)
    return snapshot


def backfill_current_month(
    goal_repo: GoalRepository,
    transaction_repo: TransactionRepository,
    bill_repo: BillRepository,
    *,
    user_id: int,
    today: Optional[date] = None,
) -> list[MonthlySpending]:
    """Refresh the current month's snapshot for every goal of a user.

    Running it repeatedly over the same rows yields the same totals and never
    adds a second snapshot for the month.
    """
    today = today or date.today()
    transactions = transaction_repo.list_for_month(today, user_id=user_id)
    bills = bill_repo.list_for_month(today, user_id=user_id)
    saved: list[MonthlySpending] = []
    for goal in goal_repo.list_all(user_id=user_id):
        snapshot = refresh_month_snapshot(goal, today, transactions, bills)
        saved.append(goal_repo.save_snapshot(snapshot))
    logger.info(
        "Current month backfilled",
        extra={"user_id": user_id, "month": month_start(today).isoformat(), "goals": len(saved)},
    )
    return saved


class GoalService:
    """Goal operations bound to repositories for one user.

    Database failures surface as :class:`PersistenceError` so callers can
    retry instead of continuing with stale data.
    """

    def __init__(
        self,
        goal_repo: GoalRepository,
        transaction_repo: TransactionRepository,
        bill_repo: BillRepository,
        income_repo: IncomeRepository,
        *,
        user_id: int,
        fmt: MoneyFormat = DEFAULT_FORMAT,
    ) -> None:
        self.goal_repo = goal_repo
        self.transaction_repo = transaction_repo
        self.bill_repo = bill_repo
        self.income_repo = income_repo
        self.user_id = user_id
        self.fmt = fmt

    @contextmanager
    def _persisting(self, action: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception(
                "Goal persistence failed",
                extra={"action": action, "user_id": self.user_id, **context},
            )
            raise PersistenceError(f"Could not {action}: {exc}") from exc

    def list_goals(self, *, active_only: bool = False) -> list[FinancialGoal]:
        with self._persisting("list goals"):
            return self.goal_repo.list_all(user_id=self.user_id, active_only=active_only)

    def get(self, goal_id: int) -> FinancialGoal:
        with self._persisting("load goal", goal_id=goal_id):
            return _require_goal(self.goal_repo, goal_id, user_id=self.user_id)

    def create(self, data: GoalInput) -> FinancialGoal:
        with self._persisting("create goal"):
            return create_goal(self.goal_repo, data, user_id=self.user_id, fmt=self.fmt)

    def update(self, goal_id: int, data: GoalInput) -> FinancialGoal:
        with self._persisting("update goal", goal_id=goal_id):
            return update_goal(self.goal_repo, goal_id, data, user_id=self.user_id, fmt=self.fmt)

    def delete(self, goal_id: int) -> None:
        with self._persisting("delete goal", goal_id=goal_id):
            delete_goal(self.goal_repo, goal_id, user_id=self.user_id)

    def classify(
        self,
        goal_id: int,
        category: CategoryLike,
        context: ClassificationContext,
        expense_type: ExpenseType | str,
    ) -> FinancialGoal:
        with self._persisting("classify category", goal_id=goal_id):
            goal = _require_goal(self.goal_repo, goal_id, user_id=self.user_id)
            try:
                set_classification(goal, category, context, expense_type)
            except ValueError as exc:
                raise InputValidationError(str(exc), field="category") from exc
            return self.goal_repo.update(goal, user_id=self.user_id)

    def auto_classify(self, goal_id: int) -> FinancialGoal:
        with self._persisting("auto-classify goal", goal_id=goal_id):
            goal = _require_goal(self.goal_repo, goal_id, user_id=self.user_id)
            auto_classify(goal)
            return self.goal_repo.update(goal, user_id=self.user_id)

    def log_actual_savings(self, goal_id: int, month: date, amount: AmountInput) -> MonthlySpending:
        value = _parse_amount(amount, "amount", required=True, fmt=self.fmt, allow_negative=True)
        with self._persisting("log savings", goal_id=goal_id):
            goal = _require_goal(self.goal_repo, goal_id, user_id=self.user_id)
            snapshot = log_actual_savings(
                goal,
                month,
                value,
                transactions=self.transaction_repo.list_for_month(month, user_id=self.user_id),
                bills=self.bill_repo.list_for_month(month, user_id=self.user_id),
            )
            saved = self.goal_repo.save_snapshot(snapshot)
        logger.info(
            "Savings logged",
            extra={"goal_id": goal_id, "month": saved.month.isoformat(), "amount": value},
        )
        return saved

    def refresh_month(self, goal_id: int, month: date) -> MonthlySpending:
        with self._persisting("refresh month", goal_id=goal_id):
            goal = _require_goal(self.goal_repo, goal_id, user_id=self.user_id)
            snapshot = refresh_month_snapshot(
                goal,
                month,
                self.transaction_repo.list_for_month(month, user_id=self.user_id),
                self.bill_repo.list_for_month(month, user_id=self.user_id),
            )
            return self.goal_repo.save_snapshot(snapshot)

    def backfill_current_month(self, today: Optional[date] = None) -> list[MonthlySpending]:
        with self._persisting("backfill current month"):
            return backfill_current_month(
                self.goal_repo,
                self.transaction_repo,
                self.bill_repo,
                user_id=self.user_id,
                today=today,
            )

    def report(self, goal_id: int, month: date, *, today: Optional[date] = None) -> MonthReport:
        with self._persisting("build month report", goal_id=goal_id):
            goal = _require_goal(self.goal_repo, goal_id, user_id=self.user_id)
            incomes = self.income_repo.list_all(user_id=self.user_id)
            transactions = self.transaction_repo.list_for_month(month, user_id=self.user_id)
            bills = self.bill_repo.list_for_month(month, user_id=self.user_id)
        return month_report(month, goal, incomes, transactions, bills, today=today)


__all__ = [
    "GoalInput",
    "GoalService",
    "ValidGoal",
    "backfill_current_month",
    "create_goal",
    "delete_goal",
    "log_actual_savings",
    "refresh_month_snapshot",
    "update_goal",
    "validate_goal_input",
]
