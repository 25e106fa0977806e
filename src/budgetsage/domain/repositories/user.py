"""User repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.user import User


class UserRepository(Protocol):
    """Repository for managing user accounts."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Retrieve a user by ID."""
        ...

    def get_by_username(self, username: str) -> Optional[User]:
        """Retrieve a user by unique username."""
        ...

    def get_or_create(self, username: str, *, display_name: str = "") -> User:
        """Return the named user, creating it on first use."""
        ...

    def list_all(self) -> list[User]:
        """List all users."""
        ...

    def create(self, user: User) -> User:
        """Create a new user."""
        ...

    def delete(self, user_id: int) -> None:
        """Delete a user together with everything it owns."""
        ...
