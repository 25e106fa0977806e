"""Secure item repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.secure_item import SecureItem


class SecureItemRepository(Protocol):
    """Raw ciphertext rows; encryption happens above this layer."""

    def get(self, key: str) -> Optional[SecureItem]:
        ...

    def put(self, key: str, ciphertext: bytes) -> SecureItem:
        ...

    def delete(self, key: str) -> bool:
        """Remove the row; ``True`` when one existed."""
        ...

    def list_keys(self) -> list[str]:
        ...
