"""Exceptions raised by the budget aggregator and its datastore."""

from __future__ import annotations

from typing import Optional


class BudgetError(Exception):
    """Base class for all budget planner errors."""


class AuthError(BudgetError):
    """No authenticated owner could be resolved for the current request."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ValidationError(BudgetError):
    """A required field is missing or invalid."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class StorageError(BudgetError):
    """The datastore rejected or failed an operation."""

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation


class SchemaMismatchError(StorageError):
    """A referenced column does not exist in the datastore."""

    def __init__(self, column: str, operation: Optional[str] = None) -> None:
        super().__init__(f"Column '{column}' does not exist", operation=operation)
        self.column = column
