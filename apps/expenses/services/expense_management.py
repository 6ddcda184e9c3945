"""
Expense management service.

Any member of a trip may record expenses on it. An expense can be edited
or deleted by the member who recorded it or by the trip owner.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.db import transaction, DatabaseError
from django.db.models import Q
from django.utils import timezone

from apps.accounts.models import User
from apps.analytics.records import DEFAULT_CATEGORY, DEFAULT_PAYER
from apps.expenses.models import Expense
from apps.trips.models import Trip

from .exceptions import (
    ExpenseNotFoundError,
    TripNotFoundError,
    InsufficientPermissionsError,
    StoreUnavailableError,
)
from apps.trips.services.exceptions import guard_store

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('title', 'amount', 'category', 'date', 'paid_by')


def _visible_trip_filter(user: User) -> Q:
    return Q(trip__owner=user) | Q(trip__members__user=user)


def _get_visible_trip(trip_id: UUID, user: User) -> Trip:
    trip = (
        Trip.objects
        .filter(Q(owner=user) | Q(members__user=user), id=trip_id)
        .distinct()
        .first()
    )
    if trip is None:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")
    return trip


def _can_manage(expense: Expense, user: User) -> bool:
    return expense.created_by_id == user.id or expense.trip.owner_id == user.id


def list_expenses(
    *,
    user: User,
    trip_id: Optional[UUID] = None,
    category: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None
) -> List[Expense]:
    """
    List expenses visible to the user, newest first.

    Args:
        user: Requesting user
        trip_id: Restrict to one trip (must be visible to the user)
        category: Exact category name
        date_from: Spent on or after this day
        date_to: Spent on or before this day

    Raises:
        TripNotFoundError: If trip_id is given but not visible
        StoreUnavailableError: If the database cannot be read
    """
    try:
        if trip_id is not None:
            _get_visible_trip(trip_id, user)
            queryset = Expense.objects.filter(trip_id=trip_id)
        else:
            queryset = Expense.objects.filter(_visible_trip_filter(user)).distinct()

        if category:
            queryset = queryset.filter(category=category)
        if date_from:
            queryset = queryset.filter(date__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(date__date__lte=date_to)

        return list(queryset.select_related('trip', 'created_by').order_by('-created_at'))
    except DatabaseError as e:
        logger.exception("Could not list expenses for user %s", user.id)
        raise StoreUnavailableError("Expenses are temporarily unavailable") from e


@guard_store(StoreUnavailableError, "Expenses are temporarily unavailable")
def get_expense(*, expense_id: UUID, user: User) -> Expense:
    """
    Get one expense from a trip the user is on.

    Raises:
        ExpenseNotFoundError: If it doesn't exist or is not visible
    """
    expense = (
        Expense.objects
        .filter(_visible_trip_filter(user), id=expense_id)
        .select_related('trip', 'created_by')
        .distinct()
        .first()
    )
    if expense is None:
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")
    return expense


@guard_store(StoreUnavailableError, "Expenses are temporarily unavailable")
@transaction.atomic
def add_expense(
    *,
    user: User,
    trip_id: UUID,
    title: str,
    amount: Decimal,
    category: str = DEFAULT_CATEGORY,
    date: Optional[datetime] = None,
    paid_by: Optional[str] = None
) -> Expense:
    """
    Record an expense on a trip.

    Args:
        user: Member recording the expense
        trip_id: UUID of the trip
        title: What the money was spent on
        amount: Non-negative amount
        category: Category name, 'Other' when blank
        date: When it was spent, now when omitted
        paid_by: Who paid, 'You' when blank

    Returns:
        Created Expense instance

    Raises:
        TripNotFoundError: If trip doesn't exist or the user is not on it
        StoreUnavailableError: If the expense could not be stored
    """
    trip = _get_visible_trip(trip_id, user)

    expense = Expense.objects.create(
        trip=trip,
        title=title,
        amount=amount,
        category=(category or '').strip() or DEFAULT_CATEGORY,
        date=date or timezone.now(),
        paid_by=(paid_by or '').strip() or DEFAULT_PAYER,
        created_by=user,
    )
    logger.info("Expense %s added to trip %s", expense.id, trip.id)
    return expense


@guard_store(StoreUnavailableError, "Expenses are temporarily unavailable")
@transaction.atomic
def update_expense(*, expense_id: UUID, user: User, **changes) -> Expense:
    """
    Apply a partial update to an expense.

    Raises:
        ExpenseNotFoundError: If it doesn't exist or is not visible
        InsufficientPermissionsError: If user is neither creator nor trip owner
    """
    expense = get_expense(expense_id=expense_id, user=user)

    if not _can_manage(expense, user):
        raise InsufficientPermissionsError("You can only edit expenses you recorded")

    for field in UPDATABLE_FIELDS:
        if field not in changes:
            continue
        value = changes[field]
        if field == 'category':
            value = (value or '').strip() or DEFAULT_CATEGORY
        elif field == 'paid_by':
            value = (value or '').strip() or DEFAULT_PAYER
        setattr(expense, field, value)

    expense.save()
    return expense


@guard_store(StoreUnavailableError, "Expenses are temporarily unavailable")
@transaction.atomic
def delete_expense(*, expense_id: UUID, user: User) -> Expense:
    """
    Delete an expense.

    Returns:
        The deleted expense (unsaved copy, for follow-up notifications)

    Raises:
        ExpenseNotFoundError: If it doesn't exist or is not visible
        InsufficientPermissionsError: If user is neither creator nor trip owner
    """
    expense = get_expense(expense_id=expense_id, user=user)

    if not _can_manage(expense, user):
        raise InsufficientPermissionsError("You can only delete expenses you recorded")

    expense.delete()
    logger.info("Expense %s deleted from trip %s", expense_id, expense.trip_id)
    return expense
