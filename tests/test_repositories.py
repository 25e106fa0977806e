"""Unit tests for repository implementations."""

from __future__ import annotations

from datetime import date, datetime

from budgetsage.constants.categories import BillCategory, TransactionCategory
from budgetsage.models import (
    Bill,
    BillBudget,
    FinancialGoal,
    MonthlySpending,
    Transaction,
    TransactionBudget,
)
from budgetsage.constants.budgeting import BudgetingMethod


class TestUserRepository:
    def test_get_or_create_is_stable(self, user_repo):
        first = user_repo.get_or_create("alex")
        second = user_repo.get_or_create("alex")
        assert first.id == second.id
        assert first.display_name == "alex"

    def test_delete_cascades_to_all_rows(
        self, user_repo, user, goal_factory, goal_repo, transaction_factory, bill_factory,
        income_factory, transaction_repo, bill_repo, income_repo, budget_repo,
    ):
        goal = goal_factory()
        goal_repo.save_snapshot(MonthlySpending(goal_id=goal.id, month=date(2024, 1, 1)))
        transaction_factory(10.0)
        bill_factory(20.0)
        income_factory(30.0)
        budget_repo.create_bill_budget(
            BillBudget(category=BillCategory.HOUSING, amount=900.0, due_date=datetime(2024, 1, 1)),
            user_id=user.id,
        )
        budget_repo.create_transaction_budget(
            TransactionBudget(category=TransactionCategory.GROCERIES, limit=300.0),
            user_id=user.id,
        )

        user_repo.delete(user.id)

        assert user_repo.get_by_id(user.id) is None
        assert transaction_repo.list_all(user_id=user.id) == []
        assert bill_repo.list_all(user_id=user.id) == []
        assert income_repo.list_all(user_id=user.id) == []
        assert goal_repo.list_snapshots(goal.id) == []
        assert budget_repo.list_bill_budgets(user_id=user.id) == []
        assert budget_repo.list_transaction_budgets(user_id=user.id) == []


class TestTransactionRepository:
    def test_list_for_month_is_half_open(self, transaction_repo, transaction_factory, user):
        transaction_factory(1.0, occurred_at=datetime(2024, 2, 29, 23, 59))
        inside = transaction_factory(2.0, occurred_at=datetime(2024, 3, 1))
        transaction_factory(3.0, occurred_at=datetime(2024, 4, 1))

        rows = transaction_repo.list_for_month(date(2024, 3, 15), user_id=user.id)
        assert [r.id for r in rows] == [inside.id]

    def test_rows_are_scoped_by_user(self, transaction_repo, transaction_factory, user_repo):
        other = user_repo.get_or_create("someone-else")
        txn = transaction_factory(5.0)
        assert transaction_repo.get_by_id(txn.id, user_id=other.id) is None
        assert transaction_repo.list_all(user_id=other.id) == []

    def test_update_and_delete(self, transaction_repo, transaction_factory, user):
        txn = transaction_factory(5.0, name="Coffee")
        txn.amount = 6.5
        updated = transaction_repo.update(txn, user_id=user.id)
        assert transaction_repo.get_by_id(updated.id, user_id=user.id).amount == 6.5

        transaction_repo.delete(txn.id, user_id=user.id)
        assert transaction_repo.get_by_id(txn.id, user_id=user.id) is None

    def test_category_round_trips_as_enum(self, transaction_repo, user):
        created = transaction_repo.create(
            Transaction(name="Snack", amount=2.0, occurred_at=datetime(2024, 1, 1)),
            user_id=user.id,
        )
        loaded = transaction_repo.get_by_id(created.id, user_id=user.id)
        assert loaded.category.value == "uncategorized"


class TestBillRepository:
    def test_create_many_assigns_ids(self, bill_repo, user):
        rows = bill_repo.create_many(
            [
                Bill(name="Water", amount=30.0, category=BillCategory.UTILITIES,
                     first_installment=datetime(2024, 1, 5)),
                Bill(name="Water", amount=30.0, category=BillCategory.UTILITIES,
                     first_installment=datetime(2024, 2, 5)),
            ],
            user_id=user.id,
        )
        assert all(r.id is not None for r in rows)
        assert len(bill_repo.list_for_month(date(2024, 2, 1), user_id=user.id)) == 1

    def test_create_many_empty(self, bill_repo, user):
        assert bill_repo.create_many([], user_id=user.id) == []


class TestGoalRepository:
    def test_json_columns_round_trip(self, goal_repo, user):
        goal = FinancialGoal(
            name="Trip",
            method=BudgetingMethod.ENVELOPE,
            custom_percentages={"Needs": 0.5, "Wants": 0.5},
            bill_category_types={"housing": "need"},
            transaction_category_types={},
        )
        created = goal_repo.create(goal, user_id=user.id)
        loaded = goal_repo.get_by_id(created.id, user_id=user.id)
        assert loaded.custom_percentages == {"Needs": 0.5, "Wants": 0.5}
        assert loaded.bill_category_types == {"housing": "need"}
        assert loaded.method is BudgetingMethod.ENVELOPE

    def test_save_snapshot_upserts_by_month(self, goal_repo, goal_factory):
        goal = goal_factory()
        goal_repo.save_snapshot(
            MonthlySpending(goal_id=goal.id, month=date(2024, 3, 1), category_spending={"a": 1.0})
        )
        goal_repo.save_snapshot(
            MonthlySpending(goal_id=goal.id, month=date(2024, 3, 9), category_spending={"a": 2.0})
        )
        snapshots = goal_repo.list_snapshots(goal.id)
        assert len(snapshots) == 1
        assert snapshots[0].month == date(2024, 3, 1)
        assert snapshots[0].category_spending == {"a": 2.0}

    def test_goal_loads_snapshots(self, goal_repo, goal_factory, user):
        goal = goal_factory()
        goal_repo.save_snapshot(MonthlySpending(goal_id=goal.id, month=date(2024, 2, 1)))
        goal_repo.save_snapshot(MonthlySpending(goal_id=goal.id, month=date(2024, 1, 1)))
        loaded = goal_repo.get_by_id(goal.id, user_id=user.id)
        assert [s.month for s in loaded.monthly_spending] == [date(2024, 1, 1), date(2024, 2, 1)]


class TestSettingsRepository:
    def test_set_get_bool(self, settings_repo):
        assert settings_repo.get_bool("backfill_enabled", default=True) is True
        settings_repo.set("backfill_enabled", "false")
        assert settings_repo.get_bool("backfill_enabled", default=True) is False
        settings_repo.set("backfill_enabled", "Yes", description="Nightly backfill")
        assert settings_repo.get("backfill_enabled").description == "Nightly backfill"
        assert settings_repo.get_bool("backfill_enabled") is True
        settings_repo.delete("backfill_enabled")
        assert settings_repo.get("backfill_enabled") is None


class TestSecureItemRepository:
    def test_put_overwrites(self, secure_item_repo):
        secure_item_repo.put("bill_1", b"one")
        secure_item_repo.put("bill_1", b"two")
        secure_item_repo.put("income_3", b"three")
        assert secure_item_repo.get("bill_1").ciphertext == b"two"
        assert secure_item_repo.list_keys() == ["bill_1", "income_3"]
        assert secure_item_repo.delete("bill_1") is True
        assert secure_item_repo.delete("bill_1") is False


class TestBudgetRepository:
    def test_bill_budgets_filter_by_due_month(self, budget_repo, user):
        march = budget_repo.create_bill_budget(
            BillBudget(category=BillCategory.UTILITIES, amount=80.0, due_date=datetime(2024, 3, 31)),
            user_id=user.id,
        )
        budget_repo.create_bill_budget(
            BillBudget(category=BillCategory.HOUSING, amount=900.0, due_date=datetime(2024, 4, 1)),
            user_id=user.id,
        )

        rows = budget_repo.list_bill_budgets(user_id=user.id, month=date(2024, 3, 1))
        assert [r.id for r in rows] == [march.id]
        assert len(budget_repo.list_bill_budgets(user_id=user.id)) == 2

    def test_update_and_delete_bill_budget(self, budget_repo, user):
        budget = budget_repo.create_bill_budget(
            BillBudget(category=BillCategory.HOUSING, amount=900.0, due_date=datetime(2024, 4, 1)),
            user_id=user.id,
        )
        budget.is_paid = True
        budget_repo.update_bill_budget(budget, user_id=user.id)
        assert budget_repo.get_bill_budget(budget.id, user_id=user.id).is_paid is True

        budget_repo.delete_bill_budget(budget.id, user_id=user.id)
        assert budget_repo.get_bill_budget(budget.id, user_id=user.id) is None

    def test_active_only_transaction_budgets(self, budget_repo, user, user_repo):
        active = budget_repo.create_transaction_budget(
            TransactionBudget(category=TransactionCategory.GROCERIES, limit=300.0),
            user_id=user.id,
        )
        budget_repo.create_transaction_budget(
            TransactionBudget(category=TransactionCategory.COFFEE, limit=40.0, is_active=False),
            user_id=user.id,
        )
        other = user_repo.get_or_create("someone-else")

        rows = budget_repo.list_transaction_budgets(user_id=user.id, active_only=True)
        assert [r.id for r in rows] == [active.id]
        assert budget_repo.get_transaction_budget(active.id, user_id=other.id) is None
