"""Encrypted key-value rows backing the local secure store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class SecureItem(SQLModel, table=True):
    """One encrypted payload; ``ciphertext`` is a Fernet token."""

    __tablename__: ClassVar[str] = "secure_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(nullable=False, unique=True, index=True, max_length=128)
    ciphertext: bytes = Field(nullable=False)
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
