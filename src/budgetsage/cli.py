"""Command line interface for BudgetSage."""

from __future__ import annotations

import functools
from datetime import date, datetime
from pathlib import Path

import click

from .config import BaseConfig
from .constants.budgeting import BudgetingMethod, ExpenseType
from .constants.categories import BillCategory, TransactionCategory
from .errors import BudgetSageError, RecordNotFoundError
from .logging_config import setup_logging
from .models.bill import BillRecurrence
from .models.budget import BudgetPeriod
from .models.income import IncomeFrequency, PaymentTiming
from .money import format_currency
from .services.budgets import bill_budget_status, budget_report
from .services.classification import ClassificationContext
from .services.entries import (
    new_bill,
    new_bill_budget,
    new_income,
    new_transaction,
    new_transaction_budget,
)
from .services.export_csv import export_monthly_spending_csv
from .services.goals import GoalInput
from .services.recurrence import reconcile_recurring_bills
from .services.reports import export_savings_png, month_summary_lines


def _app(ctx: click.Context):
    """Build the application context on first use."""
    obj = ctx.ensure_object(dict)
    if "app" not in obj:
        from .context import create_app_context

        obj["app"] = create_app_context(obj["config"])
    return obj["app"]


def _handle_errors(func):
    """Report application errors as click errors with a non-zero exit."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BudgetSageError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _parse_month(value: str | None) -> date:
    if not value:
        return date.today().replace(day=1)
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError as exc:
        raise click.BadParameter("expected YYYY-MM", param_hint="--month") from exc


def _parse_shares(shares: tuple[str, ...]) -> dict[str, str] | None:
    custom: dict[str, str] = {}
    for raw in shares:
        bucket, sep, value = raw.partition("=")
        if not sep:
            raise click.BadParameter(f"expected BUCKET=FRACTION, got {raw!r}", param_hint="--share")
        custom[bucket] = value
    return custom or None


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="BUDGETSAGE_DATA_DIR",
    default=None,
    help="Directory holding the database, logs and key salt.",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None) -> None:
    """BudgetSage: goal-based budgeting from the terminal."""
    config = BaseConfig(data_dir)
    setup_logging(config)
    ctx.ensure_object(dict)["config"] = config


@cli.command("init-db")
@click.pass_context
@_handle_errors
def init_db(ctx: click.Context) -> None:
    """Create the database schema and the local user."""
    app = _app(ctx)
    click.echo(f"Database ready: {app.config.DATABASE_URL}")


@cli.command("methods")
def methods() -> None:
    """List the budgeting methods and their default shares."""
    for method in BudgetingMethod:
        shares = method.default_percentages
        detail = ", ".join(f"{bucket} {share:.0%}" for bucket, share in shares.items())
        click.echo(f"{method.value}: {method.label}")
        click.echo(f"    {detail or 'custom percentages required'}")


@cli.group()
def goals() -> None:
    """Manage financial goals."""


@goals.command("list")
@click.option("--active-only", is_flag=True, default=False)
@click.pass_context
@_handle_errors
def list_goals(ctx: click.Context, active_only: bool) -> None:
    app = _app(ctx)
    rows = app.goal_service.list_goals(active_only=active_only)
    if not rows:
        click.echo("No goals yet.")
        return
    for goal in rows:
        method = BudgetingMethod.parse(goal.method).label if goal.method else "Custom"
        target = (
            format_currency(goal.target_amount, app.money_format)
            if goal.target_amount is not None
            else "-"
        )
        click.echo(f"{goal.id}\t{goal.name}\t{method}\t{target}")


@goals.command("create")
@click.argument("name")
@click.option("--method", default=None, help="Budgeting method slug or label.")
@click.option(
    "--share",
    "shares",
    multiple=True,
    metavar="BUCKET=FRACTION",
    help="Custom bucket share, e.g. Needs=0.5 (repeatable).",
)
@click.option("--target", "target_amount", default=None, help="Target amount.")
@click.option("--current", "current_amount", default="0", show_default=True)
@click.option("--start", "start_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--target-date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.pass_context
@_handle_errors
def create_goal(
    ctx: click.Context,
    name: str,
    method: str | None,
    shares: tuple[str, ...],
    target_amount: str | None,
    current_amount: str,
    start_date: datetime | None,
    target_date: datetime | None,
) -> None:
    """Create a goal."""
    data = GoalInput(
        name=name,
        method=method,
        custom_percentages=_parse_shares(shares),
        target_amount=target_amount,
        current_amount=current_amount,
        start_date=start_date.date() if start_date else date.today(),
        target_date=target_date.date() if target_date else None,
    )
    app = _app(ctx)
    goal = app.goal_service.create(data)
    app.store_record(goal)
    click.echo(f"Created goal {goal.id}: {goal.name}")


@goals.command("edit")
@click.argument("goal_id", type=int)
@click.option("--name", default=None)
@click.option("--method", default=None, help="Budgeting method slug or label.")
@click.option("--share", "shares", multiple=True, metavar="BUCKET=FRACTION")
@click.option("--target", "target_amount", default=None)
@click.option("--current", "current_amount", default=None)
@click.option("--start", "start_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--target-date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--active/--inactive", "is_active", default=None)
@click.pass_context
@_handle_errors
def edit_goal(
    ctx: click.Context,
    goal_id: int,
    name: str | None,
    method: str | None,
    shares: tuple[str, ...],
    target_amount: str | None,
    current_amount: str | None,
    start_date: datetime | None,
    target_date: datetime | None,
    is_active: bool | None,
) -> None:
    """Change some fields of a goal; omitted options keep their value.

    A new --method without --share clears any custom shares.
    """
    app = _app(ctx)
    goal = app.goal_service.get(goal_id)
    custom = _parse_shares(shares)
    if custom is None and method is None:
        custom = goal.custom_percentages
    data = GoalInput(
        name=name if name is not None else goal.name,
        method=method if method is not None else goal.method,
        custom_percentages=custom,
        target_amount=target_amount if target_amount is not None else goal.target_amount,
        current_amount=current_amount if current_amount is not None else goal.current_amount,
        start_date=start_date.date() if start_date else goal.start_date,
        target_date=target_date.date() if target_date else goal.target_date,
        is_active=is_active if is_active is not None else goal.is_active,
    )
    goal = app.goal_service.update(goal_id, data)
    app.store_record(goal)
    click.echo(f"Updated goal {goal.id}: {goal.name}")


@goals.command("delete")
@click.argument("goal_id", type=int)
@click.option("--yes", is_flag=True, default=False, help="Skip the confirmation prompt.")
@click.pass_context
@_handle_errors
def delete_goal(ctx: click.Context, goal_id: int, yes: bool) -> None:
    """Delete a goal and its monthly history."""
    app = _app(ctx)
    goal = app.goal_service.get(goal_id)
    if not yes:
        click.confirm(f"Delete goal {goal.id} ({goal.name}) and its history?", abort=True)
    app.goal_service.delete(goal_id)
    app.forget_record(goal)
    click.echo(f"Deleted goal {goal_id}.")


@goals.command("classify")
@click.argument("goal_id", type=int)
@click.option("--auto", "auto", is_flag=True, default=False, help="Apply default need/want mapping.")
@click.option("--category", default=None)
@click.option(
    "--context",
    "context",
    type=click.Choice([c.value for c in ClassificationContext]),
    default=ClassificationContext.TRANSACTION.value,
    show_default=True,
)
@click.option("--type", "expense_type", type=click.Choice([t.value for t in ExpenseType]), default=None)
@click.pass_context
@_handle_errors
def classify_goal(
    ctx: click.Context,
    goal_id: int,
    auto: bool,
    category: str | None,
    context: str,
    expense_type: str | None,
) -> None:
    """Classify a category as need, want or other for a goal."""
    app = _app(ctx)
    service = app.goal_service
    if auto:
        goal = service.auto_classify(goal_id)
        app.store_record(goal)
        click.echo(
            f"Auto-classified {len(goal.bill_category_types)} bill and "
            f"{len(goal.transaction_category_types)} transaction categories."
        )
        return
    if not category or not expense_type:
        raise click.UsageError("Pass --auto, or both --category and --type.")
    goal = service.classify(goal_id, category, ClassificationContext(context), expense_type)
    app.store_record(goal)
    click.echo(f"{category} ({context}) is now {expense_type}.")


@goals.command("progress")
@click.argument("goal_id", type=int)
@click.option("--month", default=None, help="Month as YYYY-MM; defaults to the current month.")
@click.pass_context
@_handle_errors
def goal_progress(ctx: click.Context, goal_id: int, month: str | None) -> None:
    """Print the month breakdown for a goal."""
    app = _app(ctx)
    target_month = _parse_month(month)
    goal = app.goal_service.get(goal_id)
    uid = app.require_user_id()
    lines = month_summary_lines(
        goal,
        target_month,
        app.income_repo.list_all(user_id=uid),
        app.transaction_repo.list_for_month(target_month, user_id=uid),
        app.bill_repo.list_for_month(target_month, user_id=uid),
        fmt=app.money_format,
    )
    for line in lines:
        click.echo(line)


@goals.command("log-savings")
@click.argument("goal_id", type=int)
@click.argument("amount")
@click.option("--month", default=None, help="Month as YYYY-MM; defaults to the current month.")
@click.pass_context
@_handle_errors
def log_savings(ctx: click.Context, goal_id: int, amount: str, month: str | None) -> None:
    """Mark a month complete with the amount actually saved."""
    app = _app(ctx)
    snapshot = app.goal_service.log_actual_savings(goal_id, _parse_month(month), amount)
    click.echo(
        f"Logged {format_currency(snapshot.actual_savings, app.money_format)} "
        f"for {snapshot.month.strftime('%B %Y')}."
    )


@cli.group()
def budgets() -> None:
    """Manage category spending limits and bill budgets."""


@budgets.command("add-limit")
@click.argument("category")
@click.option("--limit", "limit", default=None, help="Cap per period; omit to only track spending.")
@click.option(
    "--period",
    type=click.Choice([p.value for p in BudgetPeriod]),
    default=BudgetPeriod.MONTHLY.value,
    show_default=True,
)
@click.option("--start", "start_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.pass_context
@_handle_errors
def add_limit(
    ctx: click.Context,
    category: str,
    limit: str | None,
    period: str,
    start_date: datetime | None,
) -> None:
    """Set a spending limit for a transaction category."""
    app = _app(ctx)
    budget = new_transaction_budget(
        category=category,
        limit=limit,
        period=period,
        start_date=start_date,
        fmt=app.money_format,
    )
    budget = app.budget_repo.create_transaction_budget(budget, user_id=app.require_user_id())
    app.store_record(budget)
    click.echo(f"Added budget {budget.id}: {TransactionCategory.parse(budget.category).display_name}")


@budgets.command("add-bill")
@click.argument("category")
@click.argument("amount")
@click.option("--due", type=click.DateTime(formats=["%Y-%m-%d"]), required=True)
@click.pass_context
@_handle_errors
def add_bill_budget(ctx: click.Context, category: str, amount: str, due: datetime) -> None:
    """Set aside an amount for a bill category."""
    app = _app(ctx)
    budget = new_bill_budget(category=category, amount=amount, due_date=due, fmt=app.money_format)
    budget = app.budget_repo.create_bill_budget(budget, user_id=app.require_user_id())
    app.store_record(budget)
    click.echo(
        f"Added bill budget {budget.id}: {BillCategory.parse(budget.category).display_name} "
        f"{format_currency(budget.amount, app.money_format)}"
    )


@budgets.command("mark-paid")
@click.argument("budget_id", type=int)
@click.pass_context
@_handle_errors
def mark_paid(ctx: click.Context, budget_id: int) -> None:
    app = _app(ctx)
    uid = app.require_user_id()
    budget = app.budget_repo.get_bill_budget(budget_id, user_id=uid)
    if budget is None:
        raise RecordNotFoundError(f"Bill budget {budget_id} not found")
    budget.is_paid = True
    budget = app.budget_repo.update_bill_budget(budget, user_id=uid)
    app.store_record(budget)
    click.echo(f"Bill budget {budget_id} marked paid.")


@budgets.command("delete")
@click.argument("budget_id", type=int)
@click.option("--bill", "is_bill", is_flag=True, default=False, help="Delete a bill budget.")
@click.pass_context
@_handle_errors
def delete_budget(ctx: click.Context, budget_id: int, is_bill: bool) -> None:
    """Delete a spending limit, or a bill budget with --bill."""
    app = _app(ctx)
    uid = app.require_user_id()
    if is_bill:
        budget = app.budget_repo.get_bill_budget(budget_id, user_id=uid)
    else:
        budget = app.budget_repo.get_transaction_budget(budget_id, user_id=uid)
    if budget is None:
        raise RecordNotFoundError(f"Budget {budget_id} not found")
    if is_bill:
        app.budget_repo.delete_bill_budget(budget_id, user_id=uid)
    else:
        app.budget_repo.delete_transaction_budget(budget_id, user_id=uid)
    app.forget_record(budget)
    click.echo(f"Deleted budget {budget_id}.")


@budgets.command("status")
@click.option("--date", "on", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.pass_context
@_handle_errors
def budget_status(ctx: click.Context, on: datetime | None) -> None:
    """Show spending against each limit and the bill budgets due this month."""
    app = _app(ctx)
    uid = app.require_user_id()
    today = on.date() if on else date.today()
    fmt = app.money_format
    usages = budget_report(
        app.budget_repo.list_transaction_budgets(user_id=uid, active_only=True),
        app.transaction_repo.list_all(user_id=uid),
        today,
    )
    bill_budgets = app.budget_repo.list_bill_budgets(user_id=uid, month=today)
    if not usages and not bill_budgets:
        click.echo("No budgets yet.")
        return
    for usage in usages:
        name = TransactionCategory.parse(usage.budget.category).display_name
        spent = format_currency(usage.spent, fmt)
        if usage.limit is None:
            click.echo(f"{name}: {spent} spent")
            continue
        line = f"{name}: {spent} of {format_currency(usage.limit, fmt)}"
        if usage.over_limit:
            click.echo(f"{line}, over by {format_currency(usage.delta, fmt)}")
        else:
            click.echo(f"{line}, {format_currency(usage.remaining, fmt)} left")
    for budget in bill_budgets:
        name = BillCategory.parse(budget.category).display_name
        status = bill_budget_status(budget, today)
        click.echo(
            f"{name}: {format_currency(budget.amount, fmt)} due "
            f"{budget.due_date:%Y-%m-%d} ({status.value})"
        )


@cli.command("backfill")
@click.pass_context
@_handle_errors
def backfill(ctx: click.Context) -> None:
    """Refresh the current month's snapshot for every goal."""
    snapshots = _app(ctx).goal_service.backfill_current_month()
    click.echo(f"Backfilled {len(snapshots)} goal(s).")


@cli.command("reconcile-bills")
@click.option("--until", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.pass_context
@_handle_errors
def reconcile_bills(ctx: click.Context, until: datetime | None) -> None:
    """Create missing occurrences of recurring bills."""
    app = _app(ctx)
    created = reconcile_recurring_bills(
        app.bill_repo,
        user_id=app.require_user_id(),
        until=until.date() if until else None,
    )
    for bill in created:
        app.store_record(bill)
    click.echo(f"Created {len(created)} bill occurrence(s).")


@cli.command("export")
@click.argument("goal_id", type=int)
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
@click.pass_context
@_handle_errors
def export(ctx: click.Context, goal_id: int, output_dir: Path) -> None:
    """Write a goal's monthly spending CSV and savings chart."""
    goal = _app(ctx).goal_service.get(goal_id)
    csv_path = export_monthly_spending_csv(goal, output_dir / f"goal_{goal_id}_monthly_spending.csv")
    png_path = export_savings_png(goal=goal, output_path=output_dir / f"goal_{goal_id}_savings.png")
    click.echo(f"Export written: {csv_path}")
    click.echo(f"Export written: {png_path}")


@cli.command("add-transaction")
@click.argument("name")
@click.argument("amount")
@click.option("--category", default=None)
@click.option("--date", "occurred_at", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--notes", default=None)
@click.option("--shared", is_flag=True, default=False)
@click.pass_context
@_handle_errors
def add_transaction(
    ctx: click.Context,
    name: str,
    amount: str,
    category: str | None,
    occurred_at: datetime | None,
    notes: str | None,
    shared: bool,
) -> None:
    """Record a one-off purchase."""
    app = _app(ctx)
    txn = new_transaction(
        name=name,
        amount=amount,
        occurred_at=occurred_at or datetime.now(),
        category=category,
        notes=notes,
        is_shared=shared,
        fmt=app.money_format,
    )
    txn = app.transaction_repo.create(txn, user_id=app.require_user_id())
    app.store_record(txn)
    click.echo(f"Added transaction {txn.id}: {txn.name} {format_currency(txn.amount, app.money_format)}")


@cli.command("add-bill")
@click.argument("name")
@click.argument("amount")
@click.option("--category", default=None)
@click.option("--issuer", default="")
@click.option("--due", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option(
    "--recurrence",
    type=click.Choice([r.value for r in BillRecurrence]),
    default=BillRecurrence.MONTHLY.value,
    show_default=True,
)
@click.option("--custom-days", type=int, default=None)
@click.option("--shares", "number_of_shares", type=int, default=1, show_default=True)
@click.pass_context
@_handle_errors
def add_bill(
    ctx: click.Context,
    name: str,
    amount: str,
    category: str | None,
    issuer: str,
    due: datetime | None,
    recurrence: str,
    custom_days: int | None,
    number_of_shares: int,
) -> None:
    """Record a bill; ``--shares`` above 1 splits it."""
    app = _app(ctx)
    bill = new_bill(
        name=name,
        amount=amount,
        first_installment=due or datetime.now(),
        category=category,
        issuer=issuer,
        recurrence=recurrence,
        custom_recurrence_days=custom_days,
        is_shared=number_of_shares > 1,
        number_of_shares=number_of_shares,
        fmt=app.money_format,
    )
    bill = app.bill_repo.create(bill, user_id=app.require_user_id())
    app.store_record(bill)
    click.echo(f"Added bill {bill.id}: {bill.name} {format_currency(bill.amount, app.money_format)}")


@cli.command("add-income")
@click.argument("name")
@click.argument("amount")
@click.option("--category", default=None)
@click.option("--issuer", default="")
@click.option("--first-payment", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in IncomeFrequency]),
    default=IncomeFrequency.MONTHLY.value,
    show_default=True,
)
@click.option("--timing", type=click.Choice([t.value for t in PaymentTiming]), default=None)
@click.pass_context
@_handle_errors
def add_income(
    ctx: click.Context,
    name: str,
    amount: str,
    category: str | None,
    issuer: str,
    first_payment: datetime | None,
    frequency: str,
    timing: str | None,
) -> None:
    """Record an income source."""
    app = _app(ctx)
    income = new_income(
        name=name,
        amount=amount,
        first_payment=first_payment.date() if first_payment else date.today(),
        category=category,
        issuer=issuer,
        frequency=frequency,
        payment_timing=timing,
        fmt=app.money_format,
    )
    income = app.income_repo.create(income, user_id=app.require_user_id())
    app.store_record(income)
    click.echo(f"Added income {income.id}: {income.name} {format_currency(income.amount, app.money_format)}")


def main() -> None:  # pragma: no cover - console entry point
    cli(obj={})


__all__ = ["cli", "main"]
