"""Expense type enumeration shared by services and routes."""

from __future__ import annotations

from enum import Enum


class ExpenseType(str, Enum):
    """How an expense was paid. Only cash draws down the monthly budget."""

    CASH = "Cash"
    CREDIT_CARD = "CreditCard"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def icon_name(self) -> str:
        """Material icon name used by the client."""
        return _ICON_NAMES[self]

    @property
    def affects_cash_budget(self) -> bool:
        return self is ExpenseType.CASH

    @classmethod
    def from_string(cls, value: str | None) -> ExpenseType:
        """Parse a client-supplied type; unknown values fall back to cash."""

        return cls.parse(value) or cls.CASH

    @classmethod
    def parse(cls, value: str | None) -> ExpenseType | None:
        """Strict variant of :meth:`from_string`; returns None for unknown values."""

        normalized = (value or "").strip().replace("_", "").replace("-", "").lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return None


_DISPLAY_NAMES = {
    ExpenseType.CASH: "現金",
    ExpenseType.CREDIT_CARD: "信用卡",
}

_ICON_NAMES = {
    ExpenseType.CASH: "payments",
    ExpenseType.CREDIT_CARD: "credit_card",
}
