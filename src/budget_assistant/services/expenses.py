"""Monthly budget and expense services.

Every balance change runs inside one session (one transaction) and goes
through conditional UPDATE statements, so the remaining balance of a period
always equals its total minus the cash expenses booked against it:

* adding a cash expense deducts its amount, and is refused when the balance
  does not cover it;
* editing a cash expense moves the balance by ``old - new``;
* deleting a cash expense gives its amount back;
* resetting a budget recomputes the balance from the booked expenses.

Credit-card expenses are stored for reporting and never touch the balance.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Union

from sqlalchemy.exc import IntegrityError

from ..constants import messages
from ..constants.categories import normalize_category
from ..constants.expense_types import ExpenseType
from ..domain.repositories import BudgetRepository
from ..exceptions import ConcurrencyConflictError
from ..infra.database import SessionFactory
from ..infra.repositories import (
    SQLModelBudgetRepository,
    SQLModelCashExpenseRepository,
    SQLModelCreditCardExpenseRepository,
)
from ..logging_config import get_logger
from ..models.budget import MonthlyBudget
from ..models.expense import CashExpense, CreditCardExpense
from ..models.types import as_utc, utcnow
from .results import CONFLICT, NOT_FOUND, REJECTED

logger = get_logger("services.expenses")

Clock = Callable[[], datetime]
AnyExpense = Union[CashExpense, CreditCardExpense]

DEFAULT_EDIT_WINDOW_DAYS = 30
HISTORY_DATE_FORMAT = "%Y-%m-%d %H:%M"


def month_name(year: int, month: int) -> str:
    return f"{year:04d}年{month:02d}月"


def can_edit(created_at: datetime, now: datetime, window_days: int = DEFAULT_EDIT_WINDOW_DAYS) -> bool:
    """Records stay editable for ``window_days`` after creation."""

    return (as_utc(now) - as_utc(created_at)).total_seconds() <= window_days * 86400


def can_delete(created_at: datetime, now: datetime) -> bool:
    """Only records created in the current calendar month (UTC) may be deleted."""

    created, current = as_utc(created_at), as_utc(now)
    return (created.year, created.month) == (current.year, current.month)


@dataclass
class ExpenseResult:
    """Outcome of an expense or budget mutation."""

    success: bool
    message: str
    expense_id: Optional[int] = None
    remaining_budget: float = 0.0
    kind: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "expenseId": self.expense_id,
            "remainingBudget": self.remaining_budget,
        }


def _failure(message: str, kind: str = REJECTED, remaining: float = 0.0) -> ExpenseResult:
    return ExpenseResult(False, message, remaining_budget=remaining, kind=kind)


@dataclass(frozen=True)
class MonthlyBudgetSummary:
    total_budget: float
    remaining_cash: float
    total_cash_expenses: float
    total_subscriptions: float
    total_credit_card: float
    combined_credit_total: float
    year: int
    month: int
    month_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalBudget": self.total_budget,
            "remainingCash": self.remaining_cash,
            "totalCashExpenses": self.total_cash_expenses,
            "totalSubscriptions": self.total_subscriptions,
            "totalCreditCard": self.total_credit_card,
            "combinedCreditTotal": self.combined_credit_total,
            "year": self.year,
            "month": self.month,
            "monthName": self.month_name,
        }


@dataclass(frozen=True)
class ExpenseHistoryItem:
    """One row of the period history, cash or card."""

    id: int
    amount: float
    description: str
    category: str
    date: str
    expense_type: ExpenseType
    can_edit: bool
    can_delete: bool
    year: int
    month: int
    created_at: datetime
    card_name: Optional[str] = None
    installments: Optional[int] = None
    merchant_name: Optional[str] = None
    is_online_transaction: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "description": self.description,
            "category": self.category,
            "date": self.date,
            "expenseType": self.expense_type.value,
            "cardName": self.card_name,
            "installments": self.installments,
            "merchantName": self.merchant_name,
            "isOnlineTransaction": self.is_online_transaction,
            "canEdit": self.can_edit,
            "canDelete": self.can_delete,
            "year": self.year,
            "month": self.month,
        }


@dataclass(frozen=True)
class ExpenseDetail:
    id: int
    user_id: str
    amount: float
    description: str
    category: str
    expense_type: ExpenseType
    created_at: datetime
    updated_at: Optional[datetime]
    year: int
    month: int
    can_edit: bool
    can_delete: bool
    card_name: Optional[str] = None
    installments: Optional[int] = None
    merchant_name: Optional[str] = None
    is_online_transaction: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "amount": self.amount,
            "description": self.description,
            "category": self.category,
            "expenseType": self.expense_type.value,
            "expenseTypeDisplay": self.expense_type.display_name,
            "createdDate": self.created_at.isoformat(),
            "updatedDate": self.updated_at.isoformat() if self.updated_at else None,
            "formattedDate": self.created_at.strftime(HISTORY_DATE_FORMAT),
            "year": self.year,
            "month": self.month,
            "canEdit": self.can_edit,
            "canDelete": self.can_delete,
            "cardName": self.card_name,
            "installments": self.installments,
            "merchantName": self.merchant_name,
            "isOnlineTransaction": self.is_online_transaction,
        }


def _card_fields(expense: AnyExpense) -> dict[str, Any]:
    if isinstance(expense, CreditCardExpense):
        return {
            "card_name": expense.card_name,
            "installments": expense.installments,
            "merchant_name": expense.merchant_name,
            "is_online_transaction": expense.is_online_transaction,
        }
    return {}


def _expense_type_of(expense: AnyExpense) -> ExpenseType:
    return ExpenseType.CREDIT_CARD if isinstance(expense, CreditCardExpense) else ExpenseType.CASH


def _history_item(expense: AnyExpense, now: datetime, window_days: int) -> ExpenseHistoryItem:
    return ExpenseHistoryItem(
        id=expense.id,  # type: ignore[arg-type]
        amount=expense.amount,
        description=expense.description,
        category=normalize_category(expense.category),
        date=expense.created_at.strftime(HISTORY_DATE_FORMAT),
        expense_type=_expense_type_of(expense),
        can_edit=can_edit(expense.created_at, now, window_days),
        can_delete=can_delete(expense.created_at, now),
        year=expense.year,
        month=expense.month,
        created_at=expense.created_at,
        **_card_fields(expense),
    )


def _detail(expense: AnyExpense, now: datetime, window_days: int) -> ExpenseDetail:
    return ExpenseDetail(
        id=expense.id,  # type: ignore[arg-type]
        user_id=expense.user_id,
        amount=expense.amount,
        description=expense.description,
        category=normalize_category(expense.category),
        expense_type=_expense_type_of(expense),
        created_at=expense.created_at,
        updated_at=expense.updated_at,
        year=expense.year,
        month=expense.month,
        can_edit=can_edit(expense.created_at, now, window_days),
        can_delete=can_delete(expense.created_at, now),
        **_card_fields(expense),
    )


def _remaining_for(budgets: BudgetRepository, year: int, month: int, user_id: str) -> float:
    budget = budgets.get_for_month(year, month, user_id=user_id)
    return budget.remaining_amount if budget else 0.0


def get_current_month_budget(
    user_id: str,
    *,
    session_factory: SessionFactory,
    now: Clock = utcnow,
) -> MonthlyBudgetSummary:
    """Dashboard summary for the current calendar month."""

    current = as_utc(now())
    year, month = current.year, current.month
    with session_factory() as session:
        budget = SQLModelBudgetRepository(session).get_for_month(year, month, user_id=user_id)
        cash_total = SQLModelCashExpenseRepository(session).total_for_month(
            year, month, user_id=user_id
        )
        card_total = SQLModelCreditCardExpenseRepository(session).total_for_month(
            year, month, user_id=user_id
        )

    subscriptions = 0.0
    return MonthlyBudgetSummary(
        total_budget=budget.total_amount if budget else 0.0,
        remaining_cash=budget.remaining_amount if budget else 0.0,
        total_cash_expenses=cash_total,
        total_subscriptions=subscriptions,
        total_credit_card=card_total,
        combined_credit_total=round(card_total + subscriptions, 2),
        year=year,
        month=month,
        month_name=month_name(year, month),
    )


def add_cash_expense(
    user_id: str,
    *,
    amount: float,
    description: str,
    category: Optional[str] = None,
    session_factory: SessionFactory,
    now: Clock = utcnow,
) -> ExpenseResult:
    """Book a cash expense against the current month and deduct the balance."""

    current = as_utc(now())
    year, month = current.year, current.month
    amount = round(amount, 2)

    with session_factory() as session:
        budgets = SQLModelBudgetRepository(session)
        if budgets.get_for_month(year, month, user_id=user_id) is None:
            return _failure(messages.BUDGET_REQUIRED)

        remaining = budgets.deduct(year, month, amount, user_id=user_id)
        if remaining is None:
            available = _remaining_for(budgets, year, month, user_id)
            logger.info(
                "Cash expense refused",
                extra={"user_id": user_id, "amount": amount, "remaining": available},
            )
            return _failure(messages.insufficient_balance(available), remaining=available)

        expense = SQLModelCashExpenseRepository(session).add(
            CashExpense(
                user_id=user_id,
                year=year,
                month=month,
                amount=amount,
                description=description.strip(),
                category=normalize_category(category),
                created_at=current,
            )
        )

    logger.info(
        "Cash expense added",
        extra={
            "user_id": user_id,
            "expense_id": expense.id,
            "amount": amount,
            "remaining": remaining,
        },
    )
    return ExpenseResult(
        True, messages.EXPENSE_ADDED, expense_id=expense.id, remaining_budget=remaining
    )


def add_credit_card_expense(
    user_id: str,
    *,
    amount: float,
    description: str,
    category: Optional[str] = None,
    card_name: Optional[str] = None,
    installments: int = 1,
    is_online_transaction: bool = False,
    merchant_name: Optional[str] = None,
    session_factory: SessionFactory,
    now: Clock = utcnow,
) -> ExpenseResult:
    """Record a card purchase; the cash balance is left alone."""

    current = as_utc(now())
    year, month = current.year, current.month
    with session_factory() as session:
        expense = SQLModelCreditCardExpenseRepository(session).add(
            CreditCardExpense(
                user_id=user_id,
                year=year,
                month=month,
                amount=round(amount, 2),
                description=description.strip(),
                category=normalize_category(category),
                card_name=card_name,
                installments=installments,
                is_online_transaction=is_online_transaction,
                merchant_name=merchant_name,
                created_at=current,
            )
        )
        remaining = _remaining_for(SQLModelBudgetRepository(session), year, month, user_id)

    logger.info(
        "Credit card expense added",
        extra={"user_id": user_id, "expense_id": expense.id, "amount": expense.amount},
    )
    return ExpenseResult(
        True,
        messages.CREDIT_CARD_EXPENSE_ADDED,
        expense_id=expense.id,
        remaining_budget=remaining,
    )


def set_monthly_budget(
    user_id: str,
    *,
    amount: float,
    year: int,
    month: int,
    session_factory: SessionFactory,
    now: Clock = utcnow,
) -> ExpenseResult:
    """Create the budget for a period, or reset its total.

    Either way the remaining balance becomes ``amount`` minus the cash
    expenses already booked for that period.
    """

    amount = round(amount, 2)
    try:
        with session_factory() as session:
            budgets = SQLModelBudgetRepository(session)
            if budgets.get_for_month(year, month, user_id=user_id) is not None:
                remaining = budgets.reset_total(year, month, amount, user_id=user_id)
                message = messages.BUDGET_UPDATED
            else:
                spent = SQLModelCashExpenseRepository(session).total_for_month(
                    year, month, user_id=user_id
                )
                budget = budgets.add(
                    MonthlyBudget(
                        user_id=user_id,
                        year=year,
                        month=month,
                        total_amount=amount,
                        remaining_amount=round(amount - spent, 2),
                        created_at=now(),
                    )
                )
                remaining = budget.remaining_amount
                message = messages.BUDGET_CREATED
    except IntegrityError:
        # Another request created the same period first.
        logger.warning(
            "Budget creation collided", extra={"user_id": user_id, "year": year, "month": month}
        )
        return _failure(messages.CONCURRENT_MODIFICATION, kind=CONFLICT)

    logger.info(
        "Budget saved",
        extra={
            "user_id": user_id,
            "year": year,
            "month": month,
            "total": amount,
            "remaining": remaining,
        },
    )
    return ExpenseResult(True, message, remaining_budget=remaining or 0.0)


def get_expense_history(
    user_id: str,
    year: int,
    month: int,
    *,
    session_factory: SessionFactory,
    now: Clock = utcnow,
    edit_window_days: int = DEFAULT_EDIT_WINDOW_DAYS,
) -> list[ExpenseHistoryItem]:
    """Cash and card expenses of one period, newest first."""

    current = as_utc(now())
    with session_factory() as session:
        cash = SQLModelCashExpenseRepository(session).list_for_month(year, month, user_id=user_id)
        cards = SQLModelCreditCardExpenseRepository(session).list_for_month(
            year, month, user_id=user_id
        )

    items = [_history_item(expense, current, edit_window_days) for expense in [*cash, *cards]]
    items.sort(key=lambda item: item.created_at, reverse=True)
    return items


def get_cash_expense_detail(
    user_id: str,
    expense_id: int,
    *,
    session_factory: SessionFactory,
    now: Clock = utcnow,
    edit_window_days: int = DEFAULT_EDIT_WINDOW_DAYS,
) -> Optional[ExpenseDetail]:
    return get_expense_detail(
        user_id,
        expense_id,
        ExpenseType.CASH,
        session_factory=session_factory,
        now=now,
        edit_window_days=edit_window_days,
    )


def get_expense_detail(
    user_id: str,
    expense_id: int,
    expense_type: ExpenseType,
    *,
    session_factory: SessionFactory,
    now: Clock = utcnow,
    edit_window_days: int = DEFAULT_EDIT_WINDOW_DAYS,
) -> Optional[ExpenseDetail]:
    """Detail of one of the user's expenses, or None when it is not theirs."""

    with session_factory() as session:
        if expense_type.affects_cash_budget:
            expense: Optional[AnyExpense] = SQLModelCashExpenseRepository(session).get_by_id(
                expense_id, user_id=user_id
            )
        else:
            expense = SQLModelCreditCardExpenseRepository(session).get_by_id(
                expense_id, user_id=user_id
            )
    if expense is None:
        return None
    return _detail(expense, now(), edit_window_days)


def update_cash_expense(
    user_id: str,
    expense_id: int,
    *,
    amount: float,
    description: str,
    category: Optional[str] = None,
    session_factory: SessionFactory,
    now: Clock = utcnow,
    edit_window_days: int = DEFAULT_EDIT_WINDOW_DAYS,
) -> ExpenseResult:
    """Edit a cash expense and move the balance by ``old - new``."""

    amount = round(amount, 2)
    try:
        with session_factory() as session:
            budgets = SQLModelBudgetRepository(session)
            cash = SQLModelCashExpenseRepository(session)
            expense = cash.get_by_id(expense_id, user_id=user_id)
            if expense is None:
                return _failure(messages.EXPENSE_NOT_FOUND, kind=NOT_FOUND)
            if not can_edit(expense.created_at, now(), edit_window_days):
                return _failure(messages.EDIT_WINDOW_EXPIRED)

            year, month = expense.year, expense.month
            delta = round(amount - expense.amount, 2)
            remaining = _remaining_for(budgets, year, month, user_id)
            if delta > 0:
                adjusted = budgets.deduct(year, month, delta, user_id=user_id)
                if adjusted is None and budgets.get_for_month(year, month, user_id=user_id):
                    return _failure(messages.insufficient_balance(remaining), remaining=remaining)
                remaining = adjusted if adjusted is not None else remaining
            elif delta < 0:
                adjusted = budgets.restore(year, month, -delta, user_id=user_id)
                remaining = adjusted if adjusted is not None else remaining

            previous_amount = expense.amount
            expense.amount = amount
            expense.description = description.strip()
            expense.category = normalize_category(category)
            cash.update_versioned(expense, expected_version=expense.version)
    except ConcurrencyConflictError as exc:
        logger.warning(
            "Cash expense update conflicted", extra={"user_id": user_id, "expense_id": exc.key}
        )
        return _failure(messages.CONCURRENT_MODIFICATION, kind=CONFLICT)

    logger.info(
        "Cash expense updated",
        extra={
            "user_id": user_id,
            "expense_id": expense_id,
            "old_amount": previous_amount,
            "new_amount": amount,
            "remaining": remaining,
        },
    )
    return ExpenseResult(
        True, messages.EXPENSE_UPDATED, expense_id=expense_id, remaining_budget=remaining
    )


def delete_cash_expense(
    user_id: str,
    expense_id: int,
    *,
    session_factory: SessionFactory,
    now: Clock = utcnow,
) -> ExpenseResult:
    """Remove a cash expense of the current month and give its amount back."""

    try:
        with session_factory() as session:
            budgets = SQLModelBudgetRepository(session)
            cash = SQLModelCashExpenseRepository(session)
            expense = cash.get_by_id(expense_id, user_id=user_id)
            if expense is None:
                return _failure(messages.EXPENSE_NOT_FOUND, kind=NOT_FOUND)
            if not can_delete(expense.created_at, now()):
                return _failure(messages.DELETE_WINDOW_EXPIRED)

            cash.delete_versioned(expense_id, user_id=user_id, expected_version=expense.version)
            remaining = budgets.restore(expense.year, expense.month, expense.amount, user_id=user_id)
    except ConcurrencyConflictError as exc:
        logger.warning(
            "Cash expense delete conflicted", extra={"user_id": user_id, "expense_id": exc.key}
        )
        return _failure(messages.CONCURRENT_MODIFICATION, kind=CONFLICT)

    logger.info(
        "Cash expense deleted",
        extra={
            "user_id": user_id,
            "expense_id": expense_id,
            "amount": expense.amount,
            "remaining": remaining,
        },
    )
    return ExpenseResult(
        True,
        messages.EXPENSE_DELETED,
        expense_id=expense_id,
        remaining_budget=remaining or 0.0,
    )


def update_expense(
    user_id: str,
    expense_id: int,
    expense_type: ExpenseType,
    *,
    amount: float,
    description: str,
    category: Optional[str] = None,
    card_name: Optional[str] = None,
    installments: Optional[int] = None,
    merchant_name: Optional[str] = None,
    is_online_transaction: Optional[bool] = None,
    session_factory: SessionFactory,
    now: Clock = utcnow,
    edit_window_days: int = DEFAULT_EDIT_WINDOW_DAYS,
) -> ExpenseResult:
    """Edit an expense of either type; card-only fields are ignored for cash."""

    if expense_type.affects_cash_budget:
        return update_cash_expense(
            user_id,
            expense_id,
            amount=amount,
            description=description,
            category=category,
            session_factory=session_factory,
            now=now,
            edit_window_days=edit_window_days,
        )

    with session_factory() as session:
        cards = SQLModelCreditCardExpenseRepository(session)
        expense = cards.get_by_id(expense_id, user_id=user_id)
        if expense is None:
            return _failure(messages.EXPENSE_NOT_FOUND, kind=NOT_FOUND)
        if not can_edit(expense.created_at, now(), edit_window_days):
            return _failure(messages.EDIT_WINDOW_EXPIRED)

        expense.amount = round(amount, 2)
        expense.description = description.strip()
        expense.category = normalize_category(category)
        if card_name is not None:
            expense.card_name = card_name
        if installments is not None:
            expense.installments = installments
        if merchant_name is not None:
            expense.merchant_name = merchant_name
        if is_online_transaction is not None:
            expense.is_online_transaction = is_online_transaction
        cards.save(expense)
        remaining = _remaining_for(
            SQLModelBudgetRepository(session), expense.year, expense.month, user_id
        )

    logger.info(
        "Credit card expense updated",
        extra={"user_id": user_id, "expense_id": expense_id, "amount": expense.amount},
    )
    return ExpenseResult(
        True, messages.EXPENSE_UPDATED, expense_id=expense_id, remaining_budget=remaining
    )


def delete_expense(
    user_id: str,
    expense_id: int,
    expense_type: ExpenseType,
    *,
    session_factory: SessionFactory,
    now: Clock = utcnow,
) -> ExpenseResult:
    if expense_type.affects_cash_budget:
        return delete_cash_expense(
            user_id, expense_id, session_factory=session_factory, now=now
        )

    with session_factory() as session:
        cards = SQLModelCreditCardExpenseRepository(session)
        expense = cards.get_by_id(expense_id, user_id=user_id)
        if expense is None:
            return _failure(messages.EXPENSE_NOT_FOUND, kind=NOT_FOUND)
        if not can_delete(expense.created_at, now()):
            return _failure(messages.DELETE_WINDOW_EXPIRED)
        cards.delete(expense_id, user_id=user_id)
        remaining = _remaining_for(
            SQLModelBudgetRepository(session), expense.year, expense.month, user_id
        )

    logger.info(
        "Credit card expense deleted", extra={"user_id": user_id, "expense_id": expense_id}
    )
    return ExpenseResult(
        True,
        messages.CREDIT_CARD_EXPENSE_DELETED,
        expense_id=expense_id,
        remaining_budget=remaining,
    )
