"""Domain exceptions raised below the HTTP layer."""

from __future__ import annotations


class BudgetAssistantError(Exception):
    """Base class for application errors."""


class ConcurrencyConflictError(BudgetAssistantError):
    """A conditional update matched no row because another request changed it first."""

    def __init__(self, entity: str, key: object):
        super().__init__(f"{entity} {key!r} was modified concurrently")
        self.entity = entity
        self.key = key
