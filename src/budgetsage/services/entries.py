"""Validated construction of transactions, bills and incomes from user input."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from ..constants.categories import BillCategory, IncomeCategory, LabeledEnum, TransactionCategory
from ..errors import InputValidationError
from ..models.bill import Bill, BillRecurrence
from ..models.budget import BillBudget, BudgetPeriod, TransactionBudget
from ..models.income import Income, IncomeFrequency, PaymentTiming
from ..models.transaction import Transaction
from ..money import DEFAULT_FORMAT, MoneyFormat, parse_currency, round_money

AmountText = Union[str, float, int]


def parse_amount(
    raw: AmountText,
    *,
    field: str = "amount",
    fmt: MoneyFormat = DEFAULT_FORMAT,
    positive: bool = False,
) -> float:
    """Money amount from text or a number; negative values are rejected."""
    if isinstance(raw, bool):
        raise InputValidationError(f"{field} must be a number.", field=field)
    value = float(raw) if isinstance(raw, (int, float)) else parse_currency(raw, fmt)
    if value is None or value != value or abs(value) == float("inf"):
        raise InputValidationError(f"{field} must be a number.", field=field)
    if value < 0 or (positive and value == 0):
        qualifier = "greater than zero" if positive else "zero or more"
        raise InputValidationError(f"{field} must be {qualifier}.", field=field)
    return round_money(value)


def _required_name(raw: str, field: str = "name") -> str:
    name = (raw or "").strip()
    if not name:
        raise InputValidationError(f"{field} is required.", field=field)
    return name


def _category(catalog: type[LabeledEnum], raw, default: LabeledEnum) -> LabeledEnum:
    if raw in (None, ""):
        return default
    try:
        return catalog.parse(raw)
    except ValueError as exc:
        raise InputValidationError(str(exc), field="category") from exc


def _enum(enum_cls, raw, field: str):
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_cls)
        raise InputValidationError(f"{field} must be one of: {choices}.", field=field) from exc


def new_transaction(
    *,
    name: str,
    amount: AmountText,
    occurred_at: datetime,
    category=None,
    notes: Optional[str] = None,
    is_shared: bool = False,
    fmt: MoneyFormat = DEFAULT_FORMAT,
) -> Transaction:
    """Spending is stored as a non-negative magnitude."""
    return Transaction(
        name=_required_name(name),
        amount=parse_amount(amount, fmt=fmt),
        category=_category(TransactionCategory, category, TransactionCategory.UNCATEGORIZED),
        occurred_at=occurred_at,
        notes=(notes or None),
        is_shared=is_shared,
    )


def new_bill(
    *,
    name: str,
    amount: AmountText,
    first_installment: datetime,
    category=None,
    issuer: str = "",
    recurrence: Union[BillRecurrence, str] = BillRecurrence.MONTHLY,
    custom_recurrence_days: Optional[int] = None,
    is_shared: bool = False,
    number_of_shares: int = 1,
    fmt: MoneyFormat = DEFAULT_FORMAT,
) -> Bill:
    rule = _enum(BillRecurrence, recurrence, "recurrence")
    if rule is BillRecurrence.CUSTOM and not (custom_recurrence_days and custom_recurrence_days > 0):
        raise InputValidationError(
            "Custom recurrence needs a positive number of days.", field="custom_recurrence_days"
        )
    if number_of_shares is None or int(number_of_shares) < 1:
        raise InputValidationError("number_of_shares must be at least 1.", field="number_of_shares")
    return Bill(
        name=_required_name(name),
        amount=parse_amount(amount, fmt=fmt, positive=True),
        category=_category(BillCategory, category, BillCategory.UNCATEGORIZED),
        issuer=(issuer or "").strip(),
        first_installment=first_installment,
        recurrence=rule,
        custom_recurrence_days=custom_recurrence_days if rule is BillRecurrence.CUSTOM else None,
        is_shared=is_shared,
        number_of_shares=int(number_of_shares) if is_shared else 1,
    )


def new_income(
    *,
    name: str,
    amount: AmountText,
    first_payment: date,
    category=None,
    issuer: str = "",
    frequency: Union[IncomeFrequency, str] = IncomeFrequency.MONTHLY,
    payment_timing: Union[PaymentTiming, str, None] = None,
    notes: Optional[str] = None,
    fmt: MoneyFormat = DEFAULT_FORMAT,
) -> Income:
    timing = None
    if payment_timing not in (None, ""):
        timing = _enum(PaymentTiming, payment_timing, "payment_timing")
    if isinstance(first_payment, datetime):
        first_payment = first_payment.date()
    return Income(
        name=_required_name(name),
        amount=parse_amount(amount, fmt=fmt),
        category=_category(IncomeCategory, category, IncomeCategory.OTHER),
        issuer=(issuer or "").strip(),
        first_payment=first_payment,
        frequency=_enum(IncomeFrequency, frequency, "frequency"),
        payment_timing=timing,
        notes=(notes or None),
    )


def new_bill_budget(
    *,
    category,
    amount: AmountText,
    due_date: datetime,
    fmt: MoneyFormat = DEFAULT_FORMAT,
) -> BillBudget:
    if category in (None, ""):
        raise InputValidationError("category is required.", field="category")
    return BillBudget(
        category=_category(BillCategory, category, BillCategory.UNCATEGORIZED),
        amount=parse_amount(amount, fmt=fmt, positive=True),
        due_date=due_date,
    )


def new_transaction_budget(
    *,
    category,
    limit: Optional[AmountText] = None,
    period: Union[BudgetPeriod, str] = BudgetPeriod.MONTHLY,
    start_date: Optional[date] = None,
    fmt: MoneyFormat = DEFAULT_FORMAT,
) -> TransactionBudget:
    """A limit left empty tracks spending without a cap."""
    if category in (None, ""):
        raise InputValidationError("category is required.", field="category")
    if isinstance(start_date, datetime):
        start_date = start_date.date()
    cap = None
    if limit not in (None, ""):
        cap = parse_amount(limit, field="limit", fmt=fmt, positive=True)
    return TransactionBudget(
        category=_category(TransactionCategory, category, TransactionCategory.UNCATEGORIZED),
        limit=cap,
        period=_enum(BudgetPeriod, period, "period"),
        start_date=start_date or date.today(),
    )


__all__ = [
    "new_bill",
    "new_bill_budget",
    "new_income",
    "new_transaction",
    "new_transaction_budget",
    "parse_amount",
]
