"""Tests for configuration loading."""

from __future__ import annotations

import pytest

from budgetsage.config import BaseConfig, TestConfig


def test_data_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("BUDGETSAGE_DATA_DIR", str(tmp_path / "env-data"))
    monkeypatch.delenv("BUDGETSAGE_DATABASE_URL", raising=False)
    config = BaseConfig()
    assert config.DATA_DIR == (tmp_path / "env-data").resolve()
    assert config.DATABASE_URL.endswith("budgetsage.db")
    assert config.key_salt_path.name == ".key_salt"


def test_test_config_ignores_database_url(tmp_path, monkeypatch):
    monkeypatch.setenv("BUDGETSAGE_DATABASE_URL", "sqlite:////somewhere/else.db")
    config = TestConfig(tmp_path)
    assert str(tmp_path) in config.DATABASE_URL
    assert config.BACKFILL_ON_START is False


def test_production_requires_secret(tmp_path, monkeypatch):
    monkeypatch.setenv("BUDGETSAGE_DEV_MODE", "false")
    monkeypatch.delenv("BUDGETSAGE_SECRET_KEY", raising=False)
    with pytest.raises(ValueError):
        BaseConfig(tmp_path)


def test_separators_must_differ(tmp_path, monkeypatch):
    monkeypatch.setenv("BUDGETSAGE_THOUSANDS_SEP", ".")
    with pytest.raises(ValueError):
        BaseConfig(tmp_path)


@pytest.mark.parametrize("raw, expected", [("1", True), ("yes", True), ("off", False), ("", False)])
def test_boolean_environment_values(tmp_path, monkeypatch, raw, expected):
    monkeypatch.setenv("BUDGETSAGE_BACKFILL_ON_START", raw)
    assert BaseConfig(tmp_path).BACKFILL_ON_START is expected


def test_sqlite_pragmas_applied(db_engine):
    with db_engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
        assert conn.exec_driver_sql("PRAGMA journal_mode").scalar() == "wal"
