"""
Domain-specific exceptions for expenses app.
"""


class ExpensesServiceError(Exception):
    """Base exception for all expenses service errors."""
    pass


class ExpenseNotFoundError(ExpensesServiceError):
    """Raised when an expense does not exist or is not visible to the user."""
    pass


class TripNotFoundError(ExpensesServiceError):
    """Raised when the expense's trip does not exist or is not visible."""
    pass


class InsufficientPermissionsError(ExpensesServiceError):
    """Raised when a user may not change an expense."""
    pass


class StoreUnavailableError(ExpensesServiceError):
    """Raised when the expense store cannot be reached; callers may retry."""
    pass
