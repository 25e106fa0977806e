"""Pytest configuration and shared fixtures for BudgetSage tests.

Database fixtures build a throwaway SQLite file per test under ``tmp_path``;
factories create persisted rows scoped to the default test user.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from budgetsage.config import TestConfig
from budgetsage.constants.budgeting import BudgetingMethod
from budgetsage.constants.categories import BillCategory, IncomeCategory, TransactionCategory
from budgetsage.infra.database import create_db_engine, create_session_factory, init_database
from budgetsage.infra.repositories import (
    SQLModelBillRepository,
    SQLModelBudgetRepository,
    SQLModelGoalRepository,
    SQLModelIncomeRepository,
    SQLModelSecureItemRepository,
    SQLModelSettingsRepository,
    SQLModelTransactionRepository,
    SQLModelUserRepository,
)
from budgetsage.models import (
    Bill,
    BillRecurrence,
    FinancialGoal,
    Income,
    IncomeFrequency,
    Transaction,
    User,
)

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Test configuration rooted in a per-test data directory."""
    monkeypatch.delenv("BUDGETSAGE_DATABASE_URL", raising=False)
    return TestConfig(tmp_path / "data")


@pytest.fixture
def db_engine(config):
    """Engine with every table created; disposed after the test."""
    engine = create_db_engine(config)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Transactional session factory, as repositories expect it."""
    return create_session_factory(db_engine)


@pytest.fixture
def user_repo(session_factory):
    return SQLModelUserRepository(session_factory)


@pytest.fixture
def transaction_repo(session_factory):
    return SQLModelTransactionRepository(session_factory)


@pytest.fixture
def bill_repo(session_factory):
    return SQLModelBillRepository(session_factory)


@pytest.fixture
def income_repo(session_factory):
    return SQLModelIncomeRepository(session_factory)


@pytest.fixture
def goal_repo(session_factory):
    return SQLModelGoalRepository(session_factory)


@pytest.fixture
def budget_repo(session_factory):
    return SQLModelBudgetRepository(session_factory)


@pytest.fixture
def settings_repo(session_factory):
    return SQLModelSettingsRepository(session_factory)


@pytest.fixture
def secure_item_repo(session_factory):
    return SQLModelSecureItemRepository(session_factory)


@pytest.fixture
def user(user_repo) -> User:
    """Default user that owns test data."""
    return user_repo.get_or_create("tester")


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def transaction_factory(transaction_repo, user):
    """Factory for persisted transactions."""

    def _create_transaction(
        amount: float,
        *,
        name: str = "Test transaction",
        category: TransactionCategory = TransactionCategory.GROCERIES,
        occurred_at: datetime | None = None,
    ) -> Transaction:
        return transaction_repo.create(
            Transaction(
                name=name,
                amount=amount,
                category=category,
                occurred_at=occurred_at or datetime.now(),
            ),
            user_id=user.id,
        )

    return _create_transaction


@pytest.fixture
def bill_factory(bill_repo, user):
    """Factory for persisted bills."""

    def _create_bill(
        amount: float,
        *,
        name: str = "Rent",
        category: BillCategory = BillCategory.HOUSING,
        issuer: str = "",
        first_installment: datetime | None = None,
        recurrence: BillRecurrence = BillRecurrence.MONTHLY,
        custom_recurrence_days: int | None = None,
        is_shared: bool = False,
        number_of_shares: int = 1,
    ) -> Bill:
        return bill_repo.create(
            Bill(
                name=name,
                amount=amount,
                category=category,
                issuer=issuer,
                first_installment=first_installment or datetime.now(),
                recurrence=recurrence,
                custom_recurrence_days=custom_recurrence_days,
                is_shared=is_shared,
                number_of_shares=number_of_shares,
            ),
            user_id=user.id,
        )

    return _create_bill


@pytest.fixture
def income_factory(income_repo, user):
    """Factory for persisted incomes."""

    def _create_income(
        amount: float,
        *,
        name: str = "Salary",
        first_payment: date | None = None,
        frequency: IncomeFrequency = IncomeFrequency.MONTHLY,
        payment_timing=None,
    ) -> Income:
        return income_repo.create(
            Income(
                name=name,
                amount=amount,
                category=IncomeCategory.SALARY,
                first_payment=first_payment or date.today(),
                frequency=frequency,
                payment_timing=payment_timing,
            ),
            user_id=user.id,
        )

    return _create_income


@pytest.fixture
def goal_factory(goal_repo, user):
    """Factory for persisted goals; defaults to a 50/30/20 goal."""

    def _create_goal(**overrides) -> FinancialGoal:
        return goal_repo.create(make_goal(**overrides), user_id=user.id)

    return _create_goal


# =============================================================================
# Helpers
# =============================================================================


def make_goal(**overrides) -> FinancialGoal:
    """Unsaved goal with sensible defaults for engine tests."""
    fields = {
        "user_id": 1,
        "name": "Emergency Fund",
        "method": BudgetingMethod.FIFTY_THIRTY_TWENTY,
        "target_amount": 1200.0,
        "current_amount": 0.0,
        "start_date": date(2024, 1, 1),
        "target_date": date(2025, 1, 1),
        "bill_category_types": {},
        "transaction_category_types": {},
    }
    fields.update(overrides)
    goal = FinancialGoal(**fields)
    goal.monthly_spending = []
    return goal


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two money amounts agree to within a cent."""
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (difference: {abs(actual - expected)})"
