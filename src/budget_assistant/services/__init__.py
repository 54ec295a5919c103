"""Service module exports."""

from . import auth, expenses, health, results

__all__ = [
    "auth",
    "expenses",
    "health",
    "results",
]
