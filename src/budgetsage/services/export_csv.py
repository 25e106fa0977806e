"""CSV export helpers for BudgetSage."""

from __future__ import annotations

import csv
from datetime import date, datetime
from pathlib import Path

from ..models.goal import FinancialGoal


def _serialize_value(value):
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def export_monthly_spending_csv(goal: FinancialGoal, output_path: Path) -> Path:
    """Write one row per (month, category) of a goal's snapshots.

    Columns are deterministic: goal_id, month, category, amount, actual_savings,
    target_savings, is_month_complete. A month without category totals still
    gets one row with an empty category. Returns the path written.
    """

    headers = [
        "goal_id",
        "month",
        "category",
        "amount",
        "actual_savings",
        "target_savings",
        "is_month_complete",
    ]
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(
            fh, fieldnames=headers, extrasaction="ignore", quoting=csv.QUOTE_MINIMAL
        )
        writer.writeheader()
        for snapshot in sorted(goal.monthly_spending, key=lambda s: s.month):
            base = {
                "goal_id": _serialize_value(goal.id),
                "month": _serialize_value(snapshot.month),
                "actual_savings": _serialize_value(snapshot.actual_savings),
                "target_savings": _serialize_value(snapshot.target_savings),
                "is_month_complete": _serialize_value(snapshot.is_month_complete),
            }
            items = sorted(snapshot.category_spending.items())
            if not items:
                writer.writerow({**base, "category": "", "amount": ""})
                continue
            for category, amount in items:
                writer.writerow({**base, "category": category, "amount": f"{amount:.2f}"})

    return output_path
