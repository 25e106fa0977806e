"""Text summaries and savings charts for goals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from ..constants.categories import BillCategory, TransactionCategory
from ..models.bill import Bill
from ..models.goal import FinancialGoal
from ..models.income import Income
from ..models.transaction import Transaction
from ..money import DEFAULT_FORMAT, MoneyFormat, format_currency
from .allocation import month_report


class ReportRenderer(Protocol):
    """Protocol describing renderer behavior."""

    def render(self, figure: Figure, *, output_path: Path) -> None:  # pragma: no cover - interface
        ...


def category_label(slug: str) -> str:
    """Display label for a category slug from either catalog."""
    for catalog in (BillCategory, TransactionCategory):
        try:
            return catalog.parse(slug).label
        except ValueError:
            continue
    return slug


def month_summary_lines(
    goal: FinancialGoal,
    month: date,
    incomes: Sequence[Income],
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
    *,
    fmt: MoneyFormat = DEFAULT_FORMAT,
    today: Optional[date] = None,
) -> list[str]:
    """Human-readable breakdown of one month, largest categories first."""
    report = month_report(month, goal, incomes, transactions, bills, today=today)
    money = lambda value: format_currency(value, fmt)  # noqa: E731

    lines = [
        f"{goal.name}: {report.month.strftime('%B %Y')}",
        f"Income: {money(report.income)}",
        f"Needs: {money(report.spending.needs)} of {money(report.targets.needs)}",
        f"Wants: {money(report.spending.wants)} of {money(report.targets.wants)}",
        f"Not Accounted: {money(report.spending.not_accounted)}",
        f"Savings: {money(report.savings)} ({report.status.description})",
    ]
    if report.required_savings is not None:
        lines.append(
            f"Required: {money(report.required_savings)} ({report.progress:.0%} reached)"
        )
    if report.is_frozen:
        lines.append("Month logged as complete")

    if report.category_totals:
        lines.append("")
        lines.append("Category Breakdown:")
        ranked = sorted(report.category_totals.items(), key=lambda item: (-item[1], item[0]))
        for slug, amount in ranked:
            lines.append(f"  {category_label(slug)}: {money(amount)}")
    return lines


@dataclass(frozen=True)
class GoalHistoryRow:
    month: date
    total_spent: float
    actual_savings: Optional[float]
    target_savings: Optional[float]
    is_month_complete: bool


def goal_history_rows(goal: FinancialGoal) -> list[GoalHistoryRow]:
    """One row per stored snapshot, oldest month first."""
    return [
        GoalHistoryRow(
            month=snapshot.month,
            total_spent=round(snapshot.total_spent, 2),
            actual_savings=snapshot.actual_savings,
            target_savings=snapshot.target_savings,
            is_month_complete=snapshot.is_month_complete,
        )
        for snapshot in sorted(goal.monthly_spending, key=lambda s: s.month)
    ]


def build_savings_chart(rows: Iterable[GoalHistoryRow], *, title: str = "Savings by Month") -> Figure:
    """Grouped bars of actual vs target savings for each logged month.

    Months without logged figures are drawn as zero-height bars.
    """
    data = list(rows)
    fig, ax = plt.subplots(figsize=(10, 5))

    if not data:
        ax.text(0.5, 0.5, "No savings logged", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")
        return fig

    labels = [row.month.strftime("%b %Y") for row in data]
    actual = [row.actual_savings or 0.0 for row in data]
    target = [row.target_savings or 0.0 for row in data]
    positions = range(len(data))
    width = 0.4

    ax.bar([p - width / 2 for p in positions], actual, width, label="Actual", color="#10B981")
    ax.bar([p + width / 2 for p in positions], target, width, label="Target", color="#9CA3AF")
    ax.axhline(0, color="#374151", linewidth=0.8)
    ax.set_xticks(list(positions))
    ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_ylabel("Amount")
    ax.set_title(title, fontsize=16, fontweight="bold", pad=20)
    ax.legend()
    ax.grid(axis="y", alpha=0.3)
    plt.tight_layout()
    return fig


def export_savings_png(
    *,
    goal: FinancialGoal,
    output_path: Path,
    renderer: ReportRenderer | None = None,
) -> Path:
    """Render a goal's savings history to PNG and return the path."""

    fig = build_savings_chart(goal_history_rows(goal), title=f"{goal.name}: Savings by Month")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if renderer is not None:
        renderer.render(fig, output_path=output_path)
    else:
        fig.savefig(output_path, bbox_inches="tight", dpi=120)
    plt.close(fig)
    return output_path


__all__ = [
    "GoalHistoryRow",
    "build_savings_chart",
    "category_label",
    "export_savings_png",
    "goal_history_rows",
    "month_summary_lines",
]
