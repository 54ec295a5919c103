"""User model supporting authentication and profile data."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .types import UTCDateTime, utcnow


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(SQLModel, table=True):
    """Application user with credentials and display profile.

    Stored in the user database; expense tables refer to ``id`` by value only.
    """

    __tablename__: ClassVar[str] = "user"

    id: str = Field(default_factory=_new_user_id, primary_key=True, max_length=36)
    username: str = Field(nullable=False, unique=True, index=True, max_length=50)
    password_hash: str = Field(nullable=False, max_length=255)
    email: Optional[str] = Field(default=None, unique=True, index=True, max_length=100)
    display_name: str = Field(default="Guest", nullable=False, max_length=100)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=UTCDateTime)
    last_login_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    is_active: bool = Field(default=True, nullable=False)
