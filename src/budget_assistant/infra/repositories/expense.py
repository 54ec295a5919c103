"""SQLModel implementations of the expense repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import delete, func, update
from sqlmodel import Session, select

from ...exceptions import ConcurrencyConflictError
from ...models.expense import CashExpense, CreditCardExpense
from ...models.types import utcnow


@dataclass
class SQLModelCashExpenseRepository:
    """Cash expense repository bound to the caller's session.

    Rows handed out are detached; writes go through explicit versioned
    statements instead of the unit-of-work flush.
    """

    session: Session

    def get_by_id(self, expense_id: int, *, user_id: str) -> Optional[CashExpense]:
        statement = (
            select(CashExpense)
            .where(CashExpense.id == expense_id)
            .where(CashExpense.user_id == user_id)
        )
        expense = self.session.exec(statement).first()
        if expense:
            self.session.expunge(expense)
        return expense

    def list_for_month(self, year: int, month: int, *, user_id: str) -> list[CashExpense]:
        """Expenses for one period, newest first."""
        statement = (
            select(CashExpense)
            .where(CashExpense.user_id == user_id)
            .where(CashExpense.year == year)
            .where(CashExpense.month == month)
            .order_by(CashExpense.created_at.desc(), CashExpense.id.desc())  # type: ignore
        )
        rows = list(self.session.exec(statement).all())
        for row in rows:
            self.session.expunge(row)
        return rows

    def total_for_month(self, year: int, month: int, *, user_id: str) -> float:
        statement = (
            select(func.coalesce(func.sum(CashExpense.amount), 0.0))
            .where(CashExpense.user_id == user_id)
            .where(CashExpense.year == year)
            .where(CashExpense.month == month)
        )
        return round(float(self.session.exec(statement).one()), 2)

    def add(self, expense: CashExpense) -> CashExpense:
        self.session.add(expense)
        self.session.flush()
        self.session.expunge(expense)
        return expense

    def update_versioned(self, expense: CashExpense, *, expected_version: int) -> CashExpense:
        """Write ``expense`` only if the stored row still carries ``expected_version``."""
        updated_at = utcnow()
        statement = (
            update(CashExpense)
            .where(CashExpense.id == expense.id)
            .where(CashExpense.user_id == expense.user_id)
            .where(CashExpense.version == expected_version)
            .values(
                amount=expense.amount,
                description=expense.description,
                category=expense.category,
                updated_at=updated_at,
                version=expected_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]
        if result.rowcount != 1:
            raise ConcurrencyConflictError("CashExpense", expense.id)
        expense.updated_at = updated_at
        expense.version = expected_version + 1
        return expense

    def delete_versioned(self, expense_id: int, *, user_id: str, expected_version: int) -> None:
        statement = (
            delete(CashExpense)
            .where(CashExpense.id == expense_id)
            .where(CashExpense.user_id == user_id)
            .where(CashExpense.version == expected_version)
            .execution_options(synchronize_session=False)
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]
        if result.rowcount != 1:
            raise ConcurrencyConflictError("CashExpense", expense_id)

    def count(self, *, user_id: str) -> int:
        statement = select(func.count()).select_from(CashExpense).where(
            CashExpense.user_id == user_id
        )
        return int(self.session.exec(statement).one())

    def total(self, *, user_id: str) -> float:
        statement = select(func.coalesce(func.sum(CashExpense.amount), 0.0)).where(
            CashExpense.user_id == user_id
        )
        return round(float(self.session.exec(statement).one()), 2)

    def monthly_totals(self, *, user_id: str) -> dict[tuple[int, int], float]:
        """Return {(year, month): spent} for every period with cash expenses."""
        statement = (
            select(CashExpense.year, CashExpense.month, func.sum(CashExpense.amount))
            .where(CashExpense.user_id == user_id)
            .group_by(CashExpense.year, CashExpense.month)
        )
        return {
            (int(year), int(month)): round(float(total), 2)
            for year, month, total in self.session.exec(statement).all()
        }


@dataclass
class SQLModelCreditCardExpenseRepository:
    """Credit-card expense repository bound to the caller's session."""

    session: Session

    def get_by_id(self, expense_id: int, *, user_id: str) -> Optional[CreditCardExpense]:
        statement = (
            select(CreditCardExpense)
            .where(CreditCardExpense.id == expense_id)
            .where(CreditCardExpense.user_id == user_id)
        )
        expense = self.session.exec(statement).first()
        if expense:
            self.session.expunge(expense)
        return expense

    def list_for_month(self, year: int, month: int, *, user_id: str) -> list[CreditCardExpense]:
        statement = (
            select(CreditCardExpense)
            .where(CreditCardExpense.user_id == user_id)
            .where(CreditCardExpense.year == year)
            .where(CreditCardExpense.month == month)
            .order_by(CreditCardExpense.created_at.desc(), CreditCardExpense.id.desc())  # type: ignore
        )
        rows = list(self.session.exec(statement).all())
        for row in rows:
            self.session.expunge(row)
        return rows

    def total_for_month(self, year: int, month: int, *, user_id: str) -> float:
        statement = (
            select(func.coalesce(func.sum(CreditCardExpense.amount), 0.0))
            .where(CreditCardExpense.user_id == user_id)
            .where(CreditCardExpense.year == year)
            .where(CreditCardExpense.month == month)
        )
        return round(float(self.session.exec(statement).one()), 2)

    def add(self, expense: CreditCardExpense) -> CreditCardExpense:
        self.session.add(expense)
        self.session.flush()
        self.session.expunge(expense)
        return expense

    def save(self, expense: CreditCardExpense) -> CreditCardExpense:
        expense.updated_at = utcnow()
        merged = self.session.merge(expense)
        self.session.flush()
        self.session.expunge(merged)
        return merged

    def delete(self, expense_id: int, *, user_id: str) -> None:
        statement = (
            delete(CreditCardExpense)
            .where(CreditCardExpense.id == expense_id)
            .where(CreditCardExpense.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        self.session.exec(statement)  # type: ignore[call-overload]

    def count(self, *, user_id: str) -> int:
        statement = select(func.count()).select_from(CreditCardExpense).where(
            CreditCardExpense.user_id == user_id
        )
        return int(self.session.exec(statement).one())

    def total(self, *, user_id: str) -> float:
        statement = select(func.coalesce(func.sum(CreditCardExpense.amount), 0.0)).where(
            CreditCardExpense.user_id == user_id
        )
        return round(float(self.session.exec(statement).one()), 2)

    def monthly_totals(self, *, user_id: str) -> dict[tuple[int, int], float]:
        statement = (
            select(
                CreditCardExpense.year,
                CreditCardExpense.month,
                func.sum(CreditCardExpense.amount),
            )
            .where(CreditCardExpense.user_id == user_id)
            .group_by(CreditCardExpense.year, CreditCardExpense.month)
        )
        return {
            (int(year), int(month)): round(float(total), 2)
            for year, month, total in self.session.exec(statement).all()
        }
