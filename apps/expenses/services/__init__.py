"""
Expenses app services layer.
"""

from .exceptions import (
    ExpensesServiceError,
    ExpenseNotFoundError,
    TripNotFoundError,
    InsufficientPermissionsError,
    StoreUnavailableError,
)

from .expense_management import (
    list_expenses,
    get_expense,
    add_expense,
    update_expense,
    delete_expense,
)


__all__ = [
    # Exceptions
    'ExpensesServiceError',
    'ExpenseNotFoundError',
    'TripNotFoundError',
    'InsufficientPermissionsError',
    'StoreUnavailableError',

    # Expense Management
    'list_expenses',
    'get_expense',
    'add_expense',
    'update_expense',
    'delete_expense',
]
