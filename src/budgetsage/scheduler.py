"""Background task scheduler for periodic maintenance of budget data."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Callable

from apscheduler.schedulers.background import BackgroundScheduler as APScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger
from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import SQLAlchemyError

from .errors import BudgetSageError
from .logging_config import get_logger
from .services.recurrence import reconcile_recurring_bills

if TYPE_CHECKING:
    from .context import AppContext

logger = get_logger("scheduler")

BACKFILL_SETTING = "backfill_enabled"
RECONCILE_SETTING = "reconcile_bills_enabled"

# Months of recurring bill occurrences kept materialized ahead of today
RECONCILE_HORIZON_MONTHS = 3

_TRIGGERS = {
    "cron": CronTrigger,
    "interval": IntervalTrigger,
    "date": DateTrigger,
}


class BackgroundScheduler:
    """Runs the nightly snapshot backfill and recurring bill reconciliation."""

    def __init__(self, ctx: AppContext):
        """Initialize the scheduler with app context.

        Args:
            ctx: Application context with repositories and config
        """
        self.ctx = ctx
        self.scheduler: APScheduler | None = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = APScheduler()

        if self._is_enabled(BACKFILL_SETTING, default=True):
            self.scheduler.add_job(
                func=self.run_backfill,
                trigger=CronTrigger(hour=2, minute=0),
                id="nightly_backfill",
                name="Nightly Monthly Spending Backfill",
                replace_existing=True,
            )
            logger.info("Scheduled nightly backfill at 2:00 AM")

        if self._is_enabled(RECONCILE_SETTING, default=True):
            self.scheduler.add_job(
                func=self.run_reconcile_bills,
                trigger=CronTrigger(hour=1, minute=0),
                id="reconcile_bills",
                name="Recurring Bill Reconciliation",
                replace_existing=True,
            )
            logger.info("Scheduled bill reconciliation at 1:00 AM")

        self.scheduler.start()
        logger.info("Background scheduler started")

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Background scheduler stopped")

    def job_ids(self) -> list[str]:
        if self.scheduler is None:
            return []
        return [job.id for job in self.scheduler.get_jobs()]

    def _is_enabled(self, key: str, *, default: bool) -> bool:
        return self.ctx.settings_repo.get_bool(key, default=default)

    def run_backfill(self) -> int:
        """Refresh current-month snapshots; returns the number of goals touched."""
        try:
            snapshots = self.ctx.goal_service.backfill_current_month()
        except (BudgetSageError, SQLAlchemyError) as exc:
            logger.error(f"Scheduled backfill failed: {exc}", exc_info=True)
            return 0
        logger.info("Scheduled backfill completed", extra={"goals": len(snapshots)})
        return len(snapshots)

    def run_reconcile_bills(self, today: date | None = None) -> int:
        """Materialize recurring bill occurrences a few months ahead."""
        until = (today or date.today()) + relativedelta(months=RECONCILE_HORIZON_MONTHS)
        try:
            created = reconcile_recurring_bills(
                self.ctx.bill_repo,
                user_id=self.ctx.require_user_id(),
                until=until,
            )
            for bill in created:
                self.ctx.store_record(bill)
        except (BudgetSageError, SQLAlchemyError) as exc:
            logger.error(f"Scheduled bill reconciliation failed: {exc}", exc_info=True)
            return 0
        logger.info("Scheduled bill reconciliation completed", extra={"created": len(created)})
        return len(created)

    def add_job(
        self,
        func: Callable,
        trigger: str,
        *,
        job_id: str,
        name: str | None = None,
        **trigger_args,
    ) -> None:
        """Add a custom job to the scheduler.

        Args:
            func: Function to execute
            trigger: Trigger type ('cron', 'interval', 'date')
            job_id: Unique job identifier
            name: Human-readable job name
            **trigger_args: Additional trigger arguments
        """
        if self.scheduler is None:
            logger.warning(f"Cannot add job {job_id}: scheduler not started")
            return

        trigger_cls = _TRIGGERS.get(trigger)
        if trigger_cls is None:
            raise ValueError(f"Unknown trigger type: {trigger}")

        self.scheduler.add_job(
            func=func,
            trigger=trigger_cls(**trigger_args),
            id=job_id,
            name=name or job_id,
            replace_existing=True,
        )
        logger.info(f"Added job: {job_id}")

    def remove_job(self, job_id: str) -> None:
        if self.scheduler is not None:
            self.scheduler.remove_job(job_id)
            logger.info(f"Removed job: {job_id}")


def create_scheduler(ctx: AppContext, *, auto_start: bool = False) -> BackgroundScheduler:
    """Create and optionally start a background scheduler."""
    scheduler = BackgroundScheduler(ctx)
    if auto_start:
        scheduler.start()
    return scheduler


__all__ = ["BackgroundScheduler", "create_scheduler"]
