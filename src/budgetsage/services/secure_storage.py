"""Encrypted record storage with a remote mirror.

Reads fall back from the local encrypted store to the remote mirror and
finally to the last value seen in memory, logging each failure on the way.
"""

from __future__ import annotations

import base64
import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from ..config import BaseConfig
from ..domain.repositories.secure_item import SecureItemRepository
from ..errors import RemoteStoreError, SecureStorageError
from ..logging_config import get_logger
from ..models.bill import Bill
from ..models.budget import BillBudget, TransactionBudget
from ..models.goal import FinancialGoal
from ..models.income import Income
from ..models.transaction import Transaction

logger = get_logger(__name__)

KDF_ITERATIONS = 480_000
SALT_BYTES = 16

Payload = dict[str, Any]


def _read_or_create_salt(salt_path: Path) -> bytes:
    if salt_path.exists():
        return salt_path.read_bytes()
    salt = os.urandom(SALT_BYTES)
    salt_path.parent.mkdir(parents=True, exist_ok=True)
    salt_path.write_bytes(salt)
    salt_path.chmod(0o600)
    return salt


def derive_key(secret: str, salt_path: Path, *, iterations: int = KDF_ITERATIONS) -> bytes:
    """Fernet key derived from the configured secret and the per-install salt."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_read_or_create_salt(salt_path),
        iterations=iterations,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))


class StorageCipher:
    """Fernet wrapper that reports bad tokens as :class:`SecureStorageError`."""

    def __init__(self, key: bytes):
        self._fernet = Fernet(key)

    @classmethod
    def from_config(cls, config: BaseConfig, *, iterations: Optional[int] = None) -> "StorageCipher":
        rounds = iterations or config.KDF_ITERATIONS
        return cls(derive_key(config.SECRET_KEY, config.key_salt_path, iterations=rounds))

    def encrypt(self, payload: Payload) -> bytes:
        return self._fernet.encrypt(json.dumps(payload, sort_keys=True).encode("utf-8"))

    def decrypt(self, token: bytes) -> Payload:
        try:
            raw = self._fernet.decrypt(token)
        except InvalidToken as exc:
            raise SecureStorageError("Stored payload could not be decrypted") from exc
        return json.loads(raw.decode("utf-8"))


class LocalSecureStore:
    """Encrypted key-value entries kept in the ``secure_item`` table."""

    def __init__(self, repository: SecureItemRepository, cipher: StorageCipher):
        self.repository = repository
        self.cipher = cipher

    def save(self, key: str, payload: Payload) -> bytes:
        """Encrypt and store ``payload``; returns the ciphertext written."""
        token = self.cipher.encrypt(payload)
        self.save_token(key, token)
        return token

    def save_token(self, key: str, token: bytes) -> None:
        try:
            self.repository.put(key, token)
        except SQLAlchemyError as exc:
            raise SecureStorageError(f"Could not save {key}") from exc

    def load_token(self, key: str) -> bytes:
        try:
            item = self.repository.get(key)
        except SQLAlchemyError as exc:
            raise SecureStorageError(f"Could not read {key}") from exc
        if item is None:
            raise SecureStorageError(f"No local entry for {key}")
        return item.ciphertext

    def load(self, key: str) -> Payload:
        return self.cipher.decrypt(self.load_token(key))

    def delete(self, key: str) -> bool:
        try:
            return self.repository.delete(key)
        except SQLAlchemyError as exc:
            raise SecureStorageError(f"Could not delete {key}") from exc

    def keys(self) -> list[str]:
        try:
            return self.repository.list_keys()
        except SQLAlchemyError as exc:
            raise SecureStorageError("Could not list local entries") from exc


class AccountStatus(str, Enum):
    AVAILABLE = "available"
    NO_ACCOUNT = "no_account"
    RESTRICTED = "restricted"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"
    COULD_NOT_DETERMINE = "could_not_determine"


class RemoteRecordStore(Protocol):
    """Cloud mirror of encrypted records.

    Implementations raise :class:`RemoteStoreError` for any failure, including
    a missing record on ``load``.
    """

    async def account_status(self) -> AccountStatus:
        ...

    async def save(self, key: str, data: bytes) -> None:
        ...

    async def load(self, key: str) -> bytes:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def list_keys(self) -> list[str]:
        ...

    async def subscribe(self, subscription_id: str) -> None:
        ...


class SecureStorageService:
    """Local-first encrypted storage mirrored to an optional remote store."""

    def __init__(self, local: LocalSecureStore, remote: Optional[RemoteRecordStore] = None):
        self.local = local
        self.remote = remote
        self._last_known: dict[str, Payload] = {}

    async def save(self, key: str, payload: Payload) -> None:
        """Write locally, then mirror the same ciphertext remotely."""
        token = self.local.save(key, payload)
        self._last_known[key] = dict(payload)
        if self.remote is not None:
            await self.remote.save(key, token)
        logger.debug("Secure record saved", extra={"key": key, "mirrored": self.remote is not None})

    async def load(self, key: str, *, last_known: Optional[Payload] = None) -> Optional[Payload]:
        """Read ``key`` from local, then remote, then the last value seen.

        A remote hit is written back to the local store.
        """
        try:
            payload = self.local.load(key)
            self._last_known[key] = payload
            return payload
        except SecureStorageError as exc:
            logger.warning("Local secure read failed", extra={"key": key, "error": str(exc)})

        if self.remote is not None:
            try:
                token = await self.remote.load(key)
                payload = self.local.cipher.decrypt(token)
            except (RemoteStoreError, SecureStorageError) as exc:
                logger.warning("Remote secure read failed", extra={"key": key, "error": str(exc)})
            else:
                self._last_known[key] = payload
                try:
                    self.local.save_token(key, token)
                except SecureStorageError as exc:
                    logger.warning("Could not cache remote record", extra={"key": key, "error": str(exc)})
                return payload

        fallback = last_known if last_known is not None else self._last_known.get(key)
        if fallback is None:
            logger.error("Secure record unavailable", extra={"key": key})
        return fallback

    async def delete(self, key: str) -> None:
        self.local.delete(key)
        self._last_known.pop(key, None)
        if self.remote is not None:
            await self.remote.delete(key)

    async def push(self, key: str) -> None:
        """Upload the local ciphertext of ``key`` to the mirror."""
        if self.remote is None:
            return
        await self.remote.save(key, self.local.load_token(key))

    async def pull(self, key: str) -> Payload:
        """Download ``key`` from the mirror into the local store."""
        if self.remote is None:
            raise RemoteStoreError("No remote store configured")
        token = await self.remote.load(key)
        payload = self.local.cipher.decrypt(token)
        self.local.save_token(key, token)
        self._last_known[key] = payload
        return payload


RecordModel = Union[Bill, Transaction, Income, FinancialGoal, BillBudget, TransactionBudget]

_RECORD_PREFIXES: dict[type, str] = {
    Bill: "bill",
    Transaction: "transaction",
    Income: "income",
    FinancialGoal: "financial_goal",
    BillBudget: "bill_budget",
    TransactionBudget: "transaction_budget",
}


def record_key(entity: RecordModel) -> str:
    """Storage key such as ``bill_12``; the entity must be persisted."""
    prefix = _RECORD_PREFIXES.get(type(entity))
    if prefix is None:
        raise TypeError(f"Unsupported record type: {type(entity).__name__}")
    if entity.id is None:
        raise ValueError("Record must be saved before it can be stored securely")
    return f"{prefix}_{entity.id}"


def serialize_record(entity: SQLModel) -> Payload:
    """JSON-safe column values of a model, relationships excluded."""
    return entity.model_dump(mode="json")


__all__ = [
    "AccountStatus",
    "LocalSecureStore",
    "RecordModel",
    "RemoteRecordStore",
    "SecureStorageService",
    "StorageCipher",
    "derive_key",
    "record_key",
    "serialize_record",
]
