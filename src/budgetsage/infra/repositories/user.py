"""SQLModel implementation of User repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.user import User


class SQLModelUserRepository:
    """SQLModel-based user repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self.session_factory() as session:
            user = session.get(User, user_id)
            if user:
                session.expunge(user)
            return user

    def get_by_username(self, username: str) -> Optional[User]:
        with self.session_factory() as session:
            user = session.exec(select(User).where(User.username == username)).first()
            if user:
                session.expunge(user)
            return user

    def get_or_create(self, username: str, *, display_name: str = "") -> User:
        with self.session_factory() as session:
            user = session.exec(select(User).where(User.username == username)).first()
            if user is None:
                user = User(username=username, display_name=display_name or username)
                session.add(user)
                session.commit()
                session.refresh(user)
            session.expunge(user)
            return user

    def list_all(self) -> list[User]:
        with self.session_factory() as session:
            rows = list(session.exec(select(User).order_by(User.id)).all())
            session.expunge_all()
            return rows

    def create(self, user: User) -> User:
        with self.session_factory() as session:
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
            return user

    def delete(self, user_id: int) -> None:
        """Delete the user; ORM cascades remove its rows and goal snapshots."""
        with self.session_factory() as session:
            user = session.get(User, user_id)
            if user:
                session.delete(user)
                session.commit()


__all__ = ["SQLModelUserRepository"]
