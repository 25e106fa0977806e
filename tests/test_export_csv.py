"""Tests for CSV export of monthly spending snapshots."""

from __future__ import annotations

import csv
from datetime import date

from budgetsage.models import MonthlySpending
from budgetsage.services import export_csv

from tests.conftest import make_goal


def _read(path):
    with path.open(newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


def test_export_writes_one_row_per_category(tmp_path):
    goal = make_goal(id=7)
    goal.monthly_spending.append(
        MonthlySpending(
            goal_id=7,
            month=date(2024, 2, 1),
            category_spending={"housing": 1500.0, "coffee": 4.5},
            actual_savings=250.0,
            target_savings=100.0,
            is_month_complete=True,
        )
    )
    goal.monthly_spending.append(MonthlySpending(goal_id=7, month=date(2024, 1, 1)))

    output_path = export_csv.export_monthly_spending_csv(goal, tmp_path / "out" / "spending.csv")

    assert output_path.exists(), "export should create the file and its directory"
    rows = _read(output_path)
    assert list(rows[0].keys()) == [
        "goal_id",
        "month",
        "category",
        "amount",
        "actual_savings",
        "target_savings",
        "is_month_complete",
    ]
    assert rows[0] == {
        "goal_id": "7",
        "month": "2024-01-01",
        "category": "",
        "amount": "",
        "actual_savings": "",
        "target_savings": "",
        "is_month_complete": "false",
    }
    assert [(r["category"], r["amount"]) for r in rows[1:]] == [
        ("coffee", "4.50"),
        ("housing", "1500.00"),
    ]
    assert rows[1]["is_month_complete"] == "true"
    assert rows[1]["actual_savings"] == "250.0"


def test_export_goal_without_snapshots_has_header_only(tmp_path):
    path = export_csv.export_monthly_spending_csv(make_goal(id=1), tmp_path / "empty.csv")
    assert _read(path) == []
    assert path.read_text(encoding="utf-8").startswith("goal_id,month,category")
