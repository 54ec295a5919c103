"""Monthly cash budget table."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .types import UTCDateTime, utcnow


class MonthlyBudget(SQLModel, table=True):
    """Cash allocated to one user for one calendar month.

    ``remaining_amount`` tracks ``total_amount`` minus the cash expenses booked
    against the same (user_id, year, month).
    """

    __tablename__: ClassVar[str] = "monthly_budget"

    user_id: str = Field(primary_key=True, max_length=36)
    year: int = Field(primary_key=True)
    month: int = Field(primary_key=True, ge=1, le=12)
    total_amount: float = Field(nullable=False)
    remaining_amount: float = Field(nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=UTCDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
