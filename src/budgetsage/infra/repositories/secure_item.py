"""Ciphertext rows for the local secure store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.secure_item import SecureItem


class SQLModelSecureItemRepository:
    """Stores opaque ciphertext by key; never sees plaintext."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[SecureItem]:
        with self.session_factory() as session:
            item = session.exec(select(SecureItem).where(SecureItem.key == key)).first()
            if item:
                session.expunge(item)
            return item

    def put(self, key: str, ciphertext: bytes) -> SecureItem:
        with self.session_factory() as session:
            item = session.exec(select(SecureItem).where(SecureItem.key == key)).first()
            if item:
                item.ciphertext = ciphertext
                item.updated_at = datetime.now(timezone.utc)
            else:
                item = SecureItem(key=key, ciphertext=ciphertext)
                session.add(item)
            session.commit()
            session.refresh(item)
            session.expunge(item)
            return item

    def delete(self, key: str) -> bool:
        with self.session_factory() as session:
            item = session.exec(select(SecureItem).where(SecureItem.key == key)).first()
            if item is None:
                return False
            session.delete(item)
            session.commit()
            return True

    def list_keys(self) -> list[str]:
        with self.session_factory() as session:
            return list(session.exec(select(SecureItem.key).order_by(SecureItem.key)).all())


__all__ = ["SQLModelSecureItemRepository"]
