"""User repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ...models.user import User


@runtime_checkable
class UserRepository(Protocol):
    """Repository for managing user entities."""

    def get_by_id(self, user_id: str) -> Optional[User]:
        """Retrieve a user by ID."""
        ...

    def get_by_username(self, username: str) -> Optional[User]:
        """Retrieve a user by exact username."""
        ...

    def get_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by email address."""
        ...

    def username_exists(self, username: str) -> bool:
        ...

    def email_exists(self, email: str, *, exclude_user_id: str | None = None) -> bool:
        ...

    def add(self, user: User) -> User:
        """Persist a new user."""
        ...

    def save(self, user: User) -> User:
        """Persist changes to an existing user."""
        ...
