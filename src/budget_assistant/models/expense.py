"""Expense tables: cash expenses draw down the budget, credit-card ones do not."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..constants.categories import DEFAULT_CATEGORY
from .types import UTCDateTime, utcnow


class CashExpense(SQLModel, table=True):
    """A cash payment booked against the owner's monthly budget."""

    __tablename__: ClassVar[str] = "cash_expense"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(nullable=False, index=True, max_length=36)
    year: int = Field(nullable=False, index=True)
    month: int = Field(nullable=False, index=True, ge=1, le=12)
    amount: float = Field(nullable=False, gt=0)
    description: str = Field(nullable=False, max_length=200)
    category: Optional[str] = Field(default=DEFAULT_CATEGORY, max_length=50)
    created_at: datetime = Field(
        default_factory=utcnow, nullable=False, index=True, sa_type=UTCDateTime
    )
    updated_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    # Bumped on every write; updates and deletes must present the version they read.
    version: int = Field(default=1, nullable=False)


class CreditCardExpense(SQLModel, table=True):
    """A card purchase tracked for reporting only."""

    __tablename__: ClassVar[str] = "credit_card_expense"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(nullable=False, index=True, max_length=36)
    year: int = Field(nullable=False, index=True)
    month: int = Field(nullable=False, index=True, ge=1, le=12)
    amount: float = Field(nullable=False, gt=0)
    description: str = Field(nullable=False, max_length=200)
    category: Optional[str] = Field(default=DEFAULT_CATEGORY, max_length=50)
    card_name: Optional[str] = Field(default=None, max_length=100)
    installments: int = Field(default=1, nullable=False, ge=1, le=60)
    is_online_transaction: bool = Field(default=False, nullable=False)
    merchant_name: Optional[str] = Field(default=None, max_length=200)
    authorization_code: Optional[str] = Field(default=None, max_length=50)
    card_last_four_digits: Optional[str] = Field(default=None, max_length=4)
    created_at: datetime = Field(
        default_factory=utcnow, nullable=False, index=True, sa_type=UTCDateTime
    )
    updated_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    is_billed: bool = Field(default=False, nullable=False)
    billed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    notes: Optional[str] = Field(default=None, max_length=500)
    is_recurring: bool = Field(default=False, nullable=False)

    # Foreign-currency purchases; amount above is always the converted value.
    original_amount: Optional[float] = Field(default=None)
    original_currency: Optional[str] = Field(default=None, max_length=3)
    exchange_rate: Optional[float] = Field(default=None)
