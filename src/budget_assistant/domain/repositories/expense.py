"""Expense repository protocols."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ...models.expense import CashExpense, CreditCardExpense


@runtime_checkable
class CashExpenseRepository(Protocol):
    """Repository for cash expenses."""

    def get_by_id(self, expense_id: int, *, user_id: str) -> Optional[CashExpense]:
        ...

    def list_for_month(self, year: int, month: int, *, user_id: str) -> list[CashExpense]:
        """Expenses for one period, newest first."""
        ...

    def total_for_month(self, year: int, month: int, *, user_id: str) -> float:
        ...

    def add(self, expense: CashExpense) -> CashExpense:
        ...

    def update_versioned(self, expense: CashExpense, *, expected_version: int) -> CashExpense:
        """Write ``expense`` only if the stored row still has ``expected_version``."""
        ...

    def delete_versioned(self, expense_id: int, *, user_id: str, expected_version: int) -> None:
        ...

    def count(self, *, user_id: str) -> int:
        ...

    def total(self, *, user_id: str) -> float:
        ...

    def monthly_totals(self, *, user_id: str) -> dict[tuple[int, int], float]:
        ...


@runtime_checkable
class CreditCardExpenseRepository(Protocol):
    """Repository for credit-card expenses."""

    def get_by_id(self, expense_id: int, *, user_id: str) -> Optional[CreditCardExpense]:
        ...

    def list_for_month(self, year: int, month: int, *, user_id: str) -> list[CreditCardExpense]:
        ...

    def total_for_month(self, year: int, month: int, *, user_id: str) -> float:
        ...

    def add(self, expense: CreditCardExpense) -> CreditCardExpense:
        ...

    def save(self, expense: CreditCardExpense) -> CreditCardExpense:
        ...

    def delete(self, expense_id: int, *, user_id: str) -> None:
        ...

    def count(self, *, user_id: str) -> int:
        ...

    def total(self, *, user_id: str) -> float:
        ...

    def monthly_totals(self, *, user_id: str) -> dict[tuple[int, int], float]:
        ...
