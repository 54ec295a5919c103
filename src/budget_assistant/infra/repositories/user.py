"""SQLModel implementation of the User repository."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session, select

from ...models.user import User


@dataclass
class SQLModelUserRepository:
    """User repository bound to the caller's session."""

    session: Session

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        statement = select(User).where(User.username == username)
        return self.session.exec(statement).first()

    def get_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email)
        return self.session.exec(statement).first()

    def username_exists(self, username: str) -> bool:
        statement = select(User.id).where(User.username == username)
        return self.session.exec(statement).first() is not None

    def email_exists(self, email: str, *, exclude_user_id: str | None = None) -> bool:
        statement = select(User.id).where(User.email == email)
        if exclude_user_id is not None:
            statement = statement.where(User.id != exclude_user_id)
        return self.session.exec(statement).first() is not None

    def add(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        self.session.refresh(user)
        return user

    def save(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user
