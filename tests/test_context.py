"""Tests for application context wiring."""

from __future__ import annotations

import logging
from datetime import date

import pytest

from budgetsage.config import TestConfig
from budgetsage.context import create_app_context
from budgetsage.services.goals import GoalInput

from tests.fakes import FakeRemoteStore


@pytest.fixture
def test_config(tmp_path, monkeypatch):
    monkeypatch.delenv("BUDGETSAGE_DATABASE_URL", raising=False)
    monkeypatch.setenv("BUDGETSAGE_KDF_ITERATIONS", "1000")
    return TestConfig(tmp_path)


def test_context_creates_single_local_user(test_config):
    first = create_app_context(test_config)
    second = create_app_context(test_config)
    assert first.require_user_id() == second.require_user_id()
    assert first.sync_service is None
    assert first.goal_service.user_id == first.require_user_id()


def test_context_with_remote_builds_sync(test_config):
    ctx = create_app_context(test_config, remote=FakeRemoteStore())
    assert ctx.sync_service is not None
    assert ctx.secure_storage.remote is ctx.sync_service.remote


def test_backfill_on_start(test_config):
    ctx = create_app_context(test_config)
    goal = ctx.goal_service.create(GoalInput(name="Fund", method="fifty_thirty_twenty"))

    test_config.BACKFILL_ON_START = True
    create_app_context(test_config)

    snapshot = ctx.goal_repo.get_snapshot(goal.id, date.today())
    assert snapshot is not None
    assert snapshot.is_month_complete is False


def test_require_user_id_without_user(test_config):
    ctx = create_app_context(test_config)
    ctx.current_user = None
    with pytest.raises(RuntimeError):
        ctx.require_user_id()


def test_store_record_writes_local_and_remote(test_config):
    remote = FakeRemoteStore()
    ctx = create_app_context(test_config, remote=remote)
    goal = ctx.goal_service.create(GoalInput(name="Fund", method="fifty_thirty_twenty"))

    key = ctx.store_record(goal)

    assert key == f"financial_goal_{goal.id}"
    assert ctx.secure_storage.local.load(key)["name"] == "Fund"
    assert key in remote.records


def test_store_record_keeps_local_copy_when_remote_fails(test_config, caplog):
    remote = FakeRemoteStore()
    remote.fail = True
    ctx = create_app_context(test_config, remote=remote)
    goal = ctx.goal_service.create(GoalInput(name="Fund", method="fifty_thirty_twenty"))

    with caplog.at_level(logging.WARNING, logger="budgetsage.context"):
        key = ctx.store_record(goal)

    assert ctx.secure_storage.local.keys() == [key]
    assert remote.records == {}
    assert "Remote mirror failed" in caplog.text


def test_forget_record_removes_both_copies(test_config):
    remote = FakeRemoteStore()
    ctx = create_app_context(test_config, remote=remote)
    goal = ctx.goal_service.create(GoalInput(name="Fund", method="fifty_thirty_twenty"))
    key = ctx.store_record(goal)

    ctx.goal_service.delete(goal.id)
    ctx.forget_record(goal)

    assert ctx.secure_storage.local.keys() == []
    assert key not in remote.records
