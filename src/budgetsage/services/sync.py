"""Background reconciliation between the local secure store and the remote mirror."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from ..errors import RemoteStoreError, SecureStorageError
from ..logging_config import get_logger
from .secure_storage import AccountStatus, RemoteRecordStore, SecureStorageService

logger = get_logger(__name__)

SUBSCRIPTION_ID = "record-changes"

Listener = Callable[[], Any]


class SyncState(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    SYNCED = "synced"
    FAILED = "failed"


class SyncService:
    """Runs at most one sync at a time; a new request supersedes the running one."""

    def __init__(self, remote: RemoteRecordStore, storage: SecureStorageService):
        self.remote = remote
        self.storage = storage
        self.state = SyncState.IDLE
        self.last_error: Optional[BaseException] = None
        self.last_synced_at: Optional[datetime] = None
        self.is_subscribed = False
        self._task: Optional[asyncio.Task] = None
        self._listeners: list[Listener] = []

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_change(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after each successful sync; returns an unsubscribe hook."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def request_sync(self) -> asyncio.Task:
        """Start a sync, cancelling any attempt still running.

        Must be called from a running event loop.
        """
        if self.in_flight:
            logger.info("Superseding in-flight sync")
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def wait(self) -> SyncState:
        """Wait for the latest requested sync to settle."""
        while self._task is not None:
            task = self._task
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
            if task is self._task:
                break
        return self.state

    async def setup_subscriptions(self) -> bool:
        """Register for remote change notifications once; ``True`` when newly registered."""
        if self.is_subscribed:
            return False
        await self.remote.subscribe(SUBSCRIPTION_ID)
        self.is_subscribed = True
        logger.info("Subscribed to remote changes", extra={"subscription_id": SUBSCRIPTION_ID})
        return True

    def handle_notification(self, payload: Mapping[str, Any]) -> Optional[asyncio.Task]:
        """Trigger a sync for record-change notifications; ignore anything else."""
        if payload.get("subscription_id") != SUBSCRIPTION_ID or payload.get("kind") != "query":
            logger.debug("Ignoring notification", extra={"payload_kind": payload.get("kind")})
            return None
        logger.info("Remote change received", extra={"record": payload.get("record_name")})
        return self.request_sync()

    async def _run(self) -> None:
        self.state = SyncState.SYNCING
        try:
            await self._sync_once()
        except asyncio.CancelledError:
            logger.debug("Sync cancelled")
            raise
        except (RemoteStoreError, SecureStorageError) as exc:
            self.state = SyncState.FAILED
            self.last_error = exc
            logger.warning("Sync failed", extra={"error": str(exc)})
            return
        self.state = SyncState.SYNCED
        self.last_error = None
        self.last_synced_at = datetime.now(timezone.utc)
        for listener in list(self._listeners):
            listener()

    async def _sync_once(self) -> None:
        status = await self.remote.account_status()
        if status is not AccountStatus.AVAILABLE:
            raise RemoteStoreError(f"Remote account unavailable: {status.value}")
        remote_keys = set(await self.remote.list_keys())
        local_keys = set(self.storage.local.keys())
        for key in sorted(remote_keys - local_keys):
            await self.storage.pull(key)
        for key in sorted(local_keys - remote_keys):
            await self.storage.push(key)
        logger.info(
            "Sync complete",
            extra={
                "pulled": len(remote_keys - local_keys),
                "pushed": len(local_keys - remote_keys),
            },
        )


__all__ = ["SUBSCRIPTION_ID", "SyncService", "SyncState"]
