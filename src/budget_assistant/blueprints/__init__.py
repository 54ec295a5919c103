"""Blueprint exports."""

from . import auth, expense, health, user

__all__ = [
    "auth",
    "expense",
    "health",
    "user",
]
