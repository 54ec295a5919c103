"""Repository protocol definitions for domain layer."""

from .budget import BudgetRepository
from .expense import CashExpenseRepository, CreditCardExpenseRepository
from .user import UserRepository

__all__ = [
    "BudgetRepository",
    "CashExpenseRepository",
    "CreditCardExpenseRepository",
    "UserRepository",
]
