"""SQLModel implementation of the monthly budget repository."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, update
from sqlmodel import Session, select

from ...models.budget import MonthlyBudget
from ...models.expense import CashExpense
from ...models.types import utcnow


@dataclass
class SQLModelBudgetRepository:
    """Budget repository bound to the caller's session.

    Balance changes are single conditional UPDATE statements, so a balance
    check can never be separated from the write it guards.
    """

    session: Session

    def _period(self, year: int, month: int, user_id: str):
        return (
            MonthlyBudget.user_id == user_id,
            MonthlyBudget.year == year,
            MonthlyBudget.month == month,
        )

    def get_for_month(self, year: int, month: int, *, user_id: str) -> Optional[MonthlyBudget]:
        """Get budget for a specific month."""
        statement = select(MonthlyBudget).where(*self._period(year, month, user_id))
        budget = self.session.exec(statement).first()
        if budget:
            self.session.expunge(budget)
        return budget

    def list_all(self, *, user_id: str) -> list[MonthlyBudget]:
        """List all budgets, newest period first."""
        statement = (
            select(MonthlyBudget)
            .where(MonthlyBudget.user_id == user_id)
            .order_by(MonthlyBudget.year.desc(), MonthlyBudget.month.desc())  # type: ignore
        )
        rows = list(self.session.exec(statement).all())
        for row in rows:
            self.session.expunge(row)
        return rows

    def add(self, budget: MonthlyBudget) -> MonthlyBudget:
        """Create a new budget."""
        self.session.add(budget)
        self.session.flush()
        self.session.expunge(budget)
        return budget

    def deduct(self, year: int, month: int, amount: float, *, user_id: str) -> Optional[float]:
        """Subtract ``amount`` when the remaining balance covers it."""
        statement = (
            update(MonthlyBudget)
            .where(*self._period(year, month, user_id))
            .where(MonthlyBudget.remaining_amount >= amount)
            .values(
                remaining_amount=func.round(MonthlyBudget.remaining_amount - amount, 2),
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]
        if result.rowcount != 1:
            return None
        return self._remaining(year, month, user_id)

    def restore(self, year: int, month: int, amount: float, *, user_id: str) -> Optional[float]:
        """Add ``amount`` back to the remaining balance."""
        statement = (
            update(MonthlyBudget)
            .where(*self._period(year, month, user_id))
            .values(
                remaining_amount=func.round(MonthlyBudget.remaining_amount + amount, 2),
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]
        if result.rowcount != 1:
            return None
        return self._remaining(year, month, user_id)

    def reset_total(
        self, year: int, month: int, total_amount: float, *, user_id: str
    ) -> Optional[float]:
        """Set the total and recompute the balance from booked cash expenses."""
        spent = (
            select(func.coalesce(func.sum(CashExpense.amount), 0.0))
            .where(CashExpense.user_id == user_id)
            .where(CashExpense.year == year)
            .where(CashExpense.month == month)
            .scalar_subquery()
        )
        statement = (
            update(MonthlyBudget)
            .where(*self._period(year, month, user_id))
            .values(
                total_amount=total_amount,
                remaining_amount=func.round(total_amount - spent, 2),
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]
        if result.rowcount != 1:
            return None
        return self._remaining(year, month, user_id)

    def _remaining(self, year: int, month: int, user_id: str) -> float:
        statement = select(MonthlyBudget.remaining_amount).where(
            *self._period(year, month, user_id)
        )
        return float(self.session.exec(statement).one())
