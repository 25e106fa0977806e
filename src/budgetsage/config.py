"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "BudgetSage"
    DB_FILENAME = "budgetsage.db"
    KEY_SALT_FILENAME = ".key_salt"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self.SECRET_KEY = os.getenv("BUDGETSAGE_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir(data_dir)
        self.DEV_MODE = _env_bool("BUDGETSAGE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("BUDGETSAGE_DATABASE_URL", self._build_sqlite_url())
        self.BACKFILL_ON_START = _env_bool("BUDGETSAGE_BACKFILL_ON_START", default=True)
        self.CURRENCY_SYMBOL = os.getenv("BUDGETSAGE_CURRENCY_SYMBOL", "$")
        self.THOUSANDS_SEP = os.getenv("BUDGETSAGE_THOUSANDS_SEP", ",")
        self.DECIMAL_SEP = os.getenv("BUDGETSAGE_DECIMAL_SEP", ".")
        self.KDF_ITERATIONS = int(os.getenv("BUDGETSAGE_KDF_ITERATIONS", "480000"))
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("BUDGETSAGE_SECRET_KEY must be set in non-dev mode.")
        if self.THOUSANDS_SEP == self.DECIMAL_SEP:
            raise ValueError("Thousands and decimal separators must differ.")

    def _resolve_data_dir(self, data_dir: Path | str | None = None) -> Path:
        """Return the directory where the SQLite file, logs and key salt live."""

        data_root = data_dir or os.getenv("BUDGETSAGE_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations fall back to per-user storage.
            fallback_path = Path.home() / f".{self.APP_NAME.lower()}"
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    @property
    def key_salt_path(self) -> Path:
        """Location of the per-install salt used to derive the storage key."""

        return Path(self.DATA_DIR) / self.KEY_SALT_FILENAME

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration for test runs; everything lives under ``data_dir``."""

    DEBUG = False
    TESTING = True

    def __init__(self, data_dir: Path | str) -> None:
        super().__init__(data_dir)
        self.DATABASE_URL = self._build_sqlite_url()
        self.BACKFILL_ON_START = False
