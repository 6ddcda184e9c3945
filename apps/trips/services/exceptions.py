"""
Domain-specific exceptions for trips app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""

import functools
import logging

from django.db import DatabaseError

logger = logging.getLogger(__name__)


class TripsServiceError(Exception):
    """Base exception for all trips service errors."""
    pass


class TripNotFoundError(TripsServiceError):
    """Raised when a trip does not exist or is not visible to the user."""
    pass


class InsufficientPermissionsError(TripsServiceError):
    """Raised when a user lacks required permissions for an action."""
    pass


class InvalidDateRangeError(TripsServiceError):
    """Raised when a trip would end before it starts."""
    pass


class MemberNotFoundError(TripsServiceError):
    """Raised when a trip member does not exist on the trip."""
    pass


class DuplicateMemberError(TripsServiceError):
    """Raised when the same person is added to a trip twice."""
    pass


class CannotRemoveOwnerError(TripsServiceError):
    """Raised when attempting to remove the trip owner."""
    pass


class StoreUnavailableError(TripsServiceError):
    """Raised when the trip store cannot be reached; callers may retry."""
    pass


def guard_store(error_class, message):
    """
    Decorator surfacing database failures as ``error_class(message)``.

    Apply it outside ``transaction.atomic`` so a failed commit is caught too.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except DatabaseError as e:
                logger.exception("Store failure in %s", func.__name__)
                raise error_class(message) from e
        return wrapper
    return decorator
