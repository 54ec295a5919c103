"""Monthly budget repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ...models.budget import MonthlyBudget


@runtime_checkable
class BudgetRepository(Protocol):
    """Repository for per-user monthly cash budgets.

    Balance mutations are expressed as conditional updates so that the check
    and the write happen in one statement.
    """

    def get_for_month(self, year: int, month: int, *, user_id: str) -> Optional[MonthlyBudget]:
        """Get the budget for a specific month."""
        ...

    def list_all(self, *, user_id: str) -> list[MonthlyBudget]:
        """List all budgets, newest period first."""
        ...

    def add(self, budget: MonthlyBudget) -> MonthlyBudget:
        """Create a new budget."""
        ...

    def deduct(self, year: int, month: int, amount: float, *, user_id: str) -> Optional[float]:
        """Subtract ``amount`` if the remaining balance covers it.

        Returns the new remaining balance, or None when the balance is
        insufficient or the budget does not exist.
        """
        ...

    def restore(self, year: int, month: int, amount: float, *, user_id: str) -> Optional[float]:
        """Add ``amount`` back; returns the new balance or None without a budget."""
        ...

    def reset_total(
        self, year: int, month: int, total_amount: float, *, user_id: str
    ) -> Optional[float]:
        """Set the total and recompute the balance from the booked cash expenses."""
        ...
