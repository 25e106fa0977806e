"""Tests for the remote sync coordinator."""

from __future__ import annotations

import asyncio

import pytest

from budgetsage.services.secure_storage import (
    AccountStatus,
    LocalSecureStore,
    SecureStorageService,
    StorageCipher,
)
from budgetsage.services.sync import SUBSCRIPTION_ID, SyncService, SyncState

from tests.fakes import FakeRemoteStore


@pytest.fixture
def remote():
    return FakeRemoteStore()


@pytest.fixture
def storage(secure_item_repo, config, remote):
    cipher = StorageCipher.from_config(config, iterations=1_000)
    return SecureStorageService(LocalSecureStore(secure_item_repo, cipher), remote)


@pytest.fixture
def sync(remote, storage):
    return SyncService(remote, storage)


@pytest.mark.asyncio
async def test_sync_pulls_and_pushes_missing_keys(sync, storage, remote):
    storage.local.save("bill_1", {"name": "Rent"})
    remote.records["income_2"] = storage.local.cipher.encrypt({"name": "Salary"})
    changes = []
    sync.on_change(lambda: changes.append(sync.state))

    sync.request_sync()
    state = await sync.wait()

    assert state is SyncState.SYNCED
    assert storage.local.load("income_2") == {"name": "Salary"}
    assert "bill_1" in remote.records
    assert changes == [SyncState.SYNCED]
    assert sync.last_synced_at is not None


@pytest.mark.asyncio
async def test_unavailable_account_marks_failure(sync, remote):
    remote.status = AccountStatus.NO_ACCOUNT
    sync.request_sync()
    assert await sync.wait() is SyncState.FAILED
    assert "no_account" in str(sync.last_error)


@pytest.mark.asyncio
async def test_remote_errors_do_not_escape(sync, remote):
    remote.fail = True
    sync.request_sync()
    assert await sync.wait() is SyncState.FAILED


@pytest.mark.asyncio
async def test_new_request_supersedes_in_flight_sync(sync, remote):
    remote.delay = 0.05
    first = sync.request_sync()
    await asyncio.sleep(0)
    second = sync.request_sync()

    assert await sync.wait() is SyncState.SYNCED
    assert first.cancelled()
    assert second.done() and not second.cancelled()
    assert not sync.in_flight


@pytest.mark.asyncio
async def test_unsubscribed_listener_is_not_called(sync):
    calls = []
    unsubscribe = sync.on_change(lambda: calls.append(1))
    unsubscribe()
    sync.request_sync()
    await sync.wait()
    assert calls == []


@pytest.mark.asyncio
async def test_setup_subscriptions_once(sync, remote):
    assert await sync.setup_subscriptions() is True
    assert await sync.setup_subscriptions() is False
    assert remote.subscriptions == [SUBSCRIPTION_ID]


@pytest.mark.asyncio
async def test_handle_notification_filters_payloads(sync):
    assert sync.handle_notification({"subscription_id": "other", "kind": "query"}) is None
    assert sync.handle_notification({"subscription_id": SUBSCRIPTION_ID, "kind": "zone"}) is None

    task = sync.handle_notification(
        {"subscription_id": SUBSCRIPTION_ID, "kind": "query", "record_name": "bill_1"}
    )
    assert task is not None
    assert await sync.wait() is SyncState.SYNCED


@pytest.mark.asyncio
async def test_wait_without_request_is_idle(sync):
    assert await sync.wait() is SyncState.IDLE
