"""SQLModel table exports."""

from .budget import MonthlyBudget
from .expense import CashExpense, CreditCardExpense
from .user import User

USER_DB_MODELS = (User,)
EXPENSE_DB_MODELS = (MonthlyBudget, CashExpense, CreditCardExpense)

__all__ = [
    "CashExpense",
    "CreditCardExpense",
    "EXPENSE_DB_MODELS",
    "MonthlyBudget",
    "USER_DB_MODELS",
    "User",
]
