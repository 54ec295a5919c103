"""Concrete repository implementations using SQLModel."""

from .budget import SQLModelBudgetRepository
from .expense import SQLModelCashExpenseRepository, SQLModelCreditCardExpenseRepository
from .user import SQLModelUserRepository

__all__ = [
    "SQLModelBudgetRepository",
    "SQLModelCashExpenseRepository",
    "SQLModelCreditCardExpenseRepository",
    "SQLModelUserRepository",
]
