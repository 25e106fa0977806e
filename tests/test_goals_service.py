"""Tests for goal validation, persistence and monthly snapshots."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from budgetsage.constants.budgeting import BudgetingMethod, ExpenseType
from budgetsage.constants.categories import BillCategory, TransactionCategory
from budgetsage.errors import InputValidationError, PersistenceError, RecordNotFoundError
from budgetsage.services.allocation import SavingsStatus
from budgetsage.services.classification import ClassificationContext
from budgetsage.services.goals import (
    GoalInput,
    GoalService,
    backfill_current_month,
    log_actual_savings,
    refresh_month_snapshot,
    validate_goal_input,
)

from tests.conftest import make_goal

TODAY = date(2024, 3, 20)


@pytest.fixture
def service(goal_repo, transaction_repo, bill_repo, income_repo, user):
    return GoalService(goal_repo, transaction_repo, bill_repo, income_repo, user_id=user.id)


def _input(**kw) -> GoalInput:
    fields = dict(
        name="Emergency Fund",
        method="fifty_thirty_twenty",
        target_amount="1,200.00",
        start_date=date(2024, 1, 1),
        target_date=date(2025, 1, 1),
    )
    fields.update(kw)
    return GoalInput(**fields)


class TestValidation:
    def test_valid_input(self):
        valid = validate_goal_input(_input())
        assert valid.method is BudgetingMethod.FIFTY_THIRTY_TWENTY
        assert valid.target_amount == 1200.0
        assert valid.current_amount == 0.0

    def test_method_accepts_label(self):
        assert validate_goal_input(_input(method="50/30/20 Rule")).method is BudgetingMethod.FIFTY_THIRTY_TWENTY

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"name": "  "}, "name"),
            ({"method": "magic"}, "method"),
            ({"method": None}, "method"),
            ({"method": "zero_based"}, "custom_percentages"),
            ({"target_amount": "lots"}, "target_amount"),
            ({"target_amount": "-5"}, "target_amount"),
            ({"current_amount": "abc"}, "current_amount"),
            ({"target_date": date(2023, 12, 1)}, "target_date"),
            ({"custom_percentages": {"Needs": 1.5}}, "custom_percentages"),
            ({"custom_percentages": {"Needs": 0.7, "Wants": 0.4}}, "custom_percentages"),
            ({"custom_percentages": {"Needs": "half"}}, "custom_percentages"),
        ],
    )
    def test_rejected_input_names_the_field(self, overrides, field):
        with pytest.raises(InputValidationError) as excinfo:
            validate_goal_input(_input(**overrides))
        assert excinfo.value.field == field

    def test_custom_percentages_without_method(self):
        valid = validate_goal_input(
            _input(method=None, custom_percentages={"Needs": "0.6", "Wants": 0.3, "Savings": 0.1})
        )
        assert valid.method is None
        assert valid.custom_percentages == {"Needs": 0.6, "Wants": 0.3, "Savings": 0.1}

    def test_target_fields_are_optional(self):
        valid = validate_goal_input(_input(target_amount=None, target_date=None))
        assert valid.target_amount is None
        assert valid.target_date is None


class TestSnapshots:
    def test_log_savings_freezes_month(self):
        goal = make_goal(id=1)
        snapshot = log_actual_savings(goal, date(2024, 2, 10), 150.456)

        assert snapshot.month == date(2024, 2, 1)
        assert snapshot.actual_savings == 150.46
        assert snapshot.target_savings == 100.0
        assert snapshot.is_month_complete
        assert goal.snapshot_for(date(2024, 2, 1)) is snapshot

    def test_refresh_leaves_completed_month_untouched(self):
        goal = make_goal(id=1)
        log_actual_savings(goal, date(2024, 2, 1), 50.0)
        snapshot = refresh_month_snapshot(goal, date(2024, 2, 1), [], [])
        assert snapshot.actual_savings == 50.0
        assert len(goal.monthly_spending) == 1

    def test_relogging_keeps_one_snapshot(self):
        goal = make_goal(id=1)
        log_actual_savings(goal, date(2024, 2, 1), 50.0)
        log_actual_savings(goal, date(2024, 2, 15), 75.0)
        assert len(goal.monthly_spending) == 1
        assert goal.monthly_spending[0].actual_savings == 75.0


class TestGoalService:
    def test_create_and_get(self, service):
        goal = service.create(_input())
        loaded = service.get(goal.id)
        assert loaded.name == "Emergency Fund"
        assert loaded.bill_category_types == {}
        assert loaded.monthly_spending == []

    def test_get_missing_goal(self, service):
        with pytest.raises(RecordNotFoundError):
            service.get(999)

    def test_update_keeps_classification(self, service):
        goal = service.create(_input())
        service.classify(goal.id, BillCategory.HOUSING, ClassificationContext.BILL, ExpenseType.NEED)
        updated = service.update(goal.id, _input(name="Rainy Day"))
        assert updated.name == "Rainy Day"
        assert updated.bill_category_types == {"housing": "need"}

    def test_classify_rejects_unknown_category(self, service):
        goal = service.create(_input())
        with pytest.raises(InputValidationError):
            service.classify(goal.id, "spaceships", ClassificationContext.BILL, "need")

    def test_auto_classify_persists(self, service):
        goal = service.create(_input())
        service.auto_classify(goal.id)
        assert service.get(goal.id).transaction_category_types["dining_out"] == "want"

    def test_list_active_only(self, service):
        service.create(_input(name="Active"))
        service.create(_input(name="Paused", is_active=False))
        assert [g.name for g in service.list_goals(active_only=True)] == ["Active"]
        assert len(service.list_goals()) == 2

    def test_delete_removes_snapshots(self, service, goal_repo):
        goal = service.create(_input())
        service.log_actual_savings(goal.id, date(2024, 2, 1), "100")
        service.delete(goal.id)
        assert goal_repo.get_by_id(goal.id, user_id=goal.user_id) is None
        assert goal_repo.list_snapshots(goal.id) == []

    def test_log_actual_savings_persists_frozen_totals(self, service, goal_repo, transaction_factory):
        goal = service.create(_input())
        transaction_factory(42.0, category=TransactionCategory.COFFEE, occurred_at=datetime(2024, 2, 3))
        snapshot = service.log_actual_savings(goal.id, date(2024, 2, 1), "-25")

        assert snapshot.actual_savings == -25.0
        assert snapshot.category_spending == {"coffee": 42.0}
        stored = goal_repo.get_snapshot(goal.id, date(2024, 2, 28))
        assert stored.is_month_complete

    def test_log_actual_savings_rejects_text(self, service):
        goal = service.create(_input())
        with pytest.raises(InputValidationError):
            service.log_actual_savings(goal.id, date(2024, 2, 1), "a lot")

    def test_report_reflects_live_rows(self, service, income_factory, bill_factory):
        goal = service.create(_input())
        service.auto_classify(goal.id)
        income_factory(5000.0, first_payment=date(2024, 1, 15))
        bill_factory(1500.0, first_installment=datetime(2024, 3, 1))

        report = service.report(goal.id, date(2024, 3, 1), today=TODAY)
        assert report.income == 5000.0
        assert report.spending.needs == 1500.0
        assert report.savings == 3500.0
        assert report.status is SavingsStatus.ACHIEVED

    def test_persistence_failure_is_surfaced(self, service, db_engine):
        db_engine.dispose()
        with db_engine.begin() as conn:
            conn.exec_driver_sql("DROP TABLE monthly_spending")
            conn.exec_driver_sql("DROP TABLE financial_goal")
        with pytest.raises(PersistenceError):
            service.list_goals()


class TestBackfill:
    def test_backfill_is_idempotent(self, service, goal_repo, transaction_repo, bill_repo, user,
                                    transaction_factory, bill_factory):
        goal = service.create(_input())
        transaction_factory(12.5, occurred_at=datetime(2024, 3, 2))
        bill_factory(1500.0, first_installment=datetime(2024, 3, 1))

        first = backfill_current_month(goal_repo, transaction_repo, bill_repo, user_id=user.id, today=TODAY)
        second = backfill_current_month(goal_repo, transaction_repo, bill_repo, user_id=user.id, today=TODAY)

        assert first[0].category_spending == second[0].category_spending == {
            "housing": 1500.0,
            "groceries": 12.5,
        }
        assert len(goal_repo.list_snapshots(goal.id)) == 1

    def test_backfill_skips_completed_month(self, service, goal_repo, transaction_factory):
        goal = service.create(_input())
        service.log_actual_savings(goal.id, TODAY, "300")
        transaction_factory(99.0, occurred_at=datetime(2024, 3, 5))

        service.backfill_current_month(today=TODAY)

        stored = goal_repo.get_snapshot(goal.id, TODAY)
        assert stored.category_spending == {}
        assert stored.actual_savings == 300.0
