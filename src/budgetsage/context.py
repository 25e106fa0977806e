"""Application context for dependency injection."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .errors import RemoteStoreError
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import (
    SQLModelBillRepository,
    SQLModelBudgetRepository,
    SQLModelGoalRepository,
    SQLModelIncomeRepository,
    SQLModelSecureItemRepository,
    SQLModelSettingsRepository,
    SQLModelTransactionRepository,
    SQLModelUserRepository,
)
from .logging_config import get_logger
from .models.user import User
from .money import MoneyFormat
from .services.goals import GoalService
from .services.secure_storage import (
    LocalSecureStore,
    RecordModel,
    RemoteRecordStore,
    SecureStorageService,
    StorageCipher,
    record_key,
    serialize_record,
)
from .services.sync import SyncService

logger = get_logger(__name__)

DEFAULT_USERNAME = "local"


@dataclass
class AppContext:
    """Configuration, repositories and explicitly constructed services."""

    config: BaseConfig
    session_factory: Callable[[], Session]

    user_repo: SQLModelUserRepository
    transaction_repo: SQLModelTransactionRepository
    bill_repo: SQLModelBillRepository
    income_repo: SQLModelIncomeRepository
    goal_repo: SQLModelGoalRepository
    budget_repo: SQLModelBudgetRepository
    settings_repo: SQLModelSettingsRepository
    secure_item_repo: SQLModelSecureItemRepository

    money_format: MoneyFormat
    goal_service: GoalService
    secure_storage: SecureStorageService
    sync_service: Optional[SyncService] = None

    current_user: Optional[User] = None

    def require_user_id(self) -> int:
        """Return the current user id or raise if not set."""

        if self.current_user is None or self.current_user.id is None:
            raise RuntimeError("No current user")
        return self.current_user.id

    def store_record(self, entity: RecordModel) -> str:
        """Mirror a saved row into encrypted storage; returns its key.

        A mirror failure is logged and the local copy is kept for the next
        sync.
        """
        key = record_key(entity)
        try:
            asyncio.run(self.secure_storage.save(key, serialize_record(entity)))
        except RemoteStoreError as exc:
            logger.warning("Remote mirror failed", extra={"key": key, "error": str(exc)})
        return key

    def forget_record(self, entity: RecordModel) -> None:
        """Remove a deleted row from encrypted storage."""
        key = record_key(entity)
        try:
            asyncio.run(self.secure_storage.delete(key))
        except RemoteStoreError as exc:
            logger.warning("Remote delete failed", extra={"key": key, "error": str(exc)})


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    username: str = DEFAULT_USERNAME,
    remote: Optional[RemoteRecordStore] = None,
) -> AppContext:
    """Create the database, repositories and services for one local user."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    user_repo = SQLModelUserRepository(session_factory)
    transaction_repo = SQLModelTransactionRepository(session_factory)
    bill_repo = SQLModelBillRepository(session_factory)
    income_repo = SQLModelIncomeRepository(session_factory)
    goal_repo = SQLModelGoalRepository(session_factory)
    budget_repo = SQLModelBudgetRepository(session_factory)
    settings_repo = SQLModelSettingsRepository(session_factory)
    secure_item_repo = SQLModelSecureItemRepository(session_factory)

    # Single account per installation
    user = user_repo.get_or_create(username)
    money_format = MoneyFormat.from_config(config)

    goal_service = GoalService(
        goal_repo,
        transaction_repo,
        bill_repo,
        income_repo,
        user_id=user.id,
        fmt=money_format,
    )
    secure_storage = SecureStorageService(
        LocalSecureStore(secure_item_repo, StorageCipher.from_config(config)),
        remote=remote,
    )
    sync_service = SyncService(remote, secure_storage) if remote is not None else None

    ctx = AppContext(
        config=config,
        session_factory=session_factory,
        user_repo=user_repo,
        transaction_repo=transaction_repo,
        bill_repo=bill_repo,
        income_repo=income_repo,
        goal_repo=goal_repo,
        budget_repo=budget_repo,
        settings_repo=settings_repo,
        secure_item_repo=secure_item_repo,
        money_format=money_format,
        goal_service=goal_service,
        secure_storage=secure_storage,
        sync_service=sync_service,
        current_user=user,
    )

    if config.BACKFILL_ON_START:
        goal_service.backfill_current_month()

    return ctx
