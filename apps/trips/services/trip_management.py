"""
Trip management service.

Handles trip CRUD operations scoped to the requesting user.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from django.db import transaction, DatabaseError
from django.db.models import Prefetch, Q

from apps.accounts.models import User
from apps.trips.models import Trip, TripMember

from .exceptions import (
    TripNotFoundError,
    InsufficientPermissionsError,
    InvalidDateRangeError,
    StoreUnavailableError,
    guard_store,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    'name',
    'description',
    'start_date',
    'end_date',
    'total_budget',
    'category_budgets',
    'cover_image',
)


def _visible_trips(user: User):
    return (
        Trip.objects
        .filter(Q(owner=user) | Q(members__user=user))
        .distinct()
        .select_related('owner')
        .prefetch_related(
            Prefetch('members', queryset=TripMember.objects.select_related('user'))
        )
    )


def _check_date_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        raise InvalidDateRangeError("End date must be on or after start date")


def _clean_category_budgets(category_budgets: Optional[Dict]) -> Dict[str, str]:
    """Drop blank allocations; store amounts as strings to keep decimals exact."""
    cleaned = {}
    for name, amount in (category_budgets or {}).items():
        if amount in (None, ''):
            continue
        amount = Decimal(str(amount))
        if amount > 0:
            cleaned[str(name).strip()] = str(amount)
    return cleaned


def list_trips(*, user: User) -> List[Trip]:
    """
    List every trip the user owns or travels on.

    Raises:
        StoreUnavailableError: If the database cannot be read
    """
    try:
        return list(_visible_trips(user))
    except DatabaseError as e:
        logger.exception("Could not list trips for user %s", user.id)
        raise StoreUnavailableError("Trips are temporarily unavailable") from e


def get_trip(*, trip_id: UUID, user: User) -> Trip:
    """
    Get a trip visible to the user, with members prefetched.

    Raises:
        TripNotFoundError: If trip doesn't exist or the user is not on it
        StoreUnavailableError: If the database cannot be read
    """
    try:
        return _visible_trips(user).get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")
    except DatabaseError as e:
        logger.exception("Could not load trip %s", trip_id)
        raise StoreUnavailableError("Trips are temporarily unavailable") from e


@guard_store(StoreUnavailableError, "Trips are temporarily unavailable")
@transaction.atomic
def create_trip(
    *,
    owner: User,
    name: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    total_budget: Optional[Decimal] = None,
    category_budgets: Optional[Dict] = None,
    description: str = '',
    cover_image: str = '',
    members: Optional[Iterable[Dict]] = None
) -> Trip:
    """
    Create a trip and register the creator as its owner member.

    When no total budget is given it is derived from the category
    allocations.

    Args:
        owner: User creating the trip
        name: Display name
        start_date: First day of the trip
        end_date: Last day of the trip
        total_budget: Overall budget (optional)
        category_budgets: Allocation per category (optional)
        description: Free text
        cover_image: URL of an already uploaded image
        members: Extra travellers as dicts with ``name``/``email``/``user``

    Returns:
        Created Trip instance

    Raises:
        InvalidDateRangeError: If end_date is before start_date
        StoreUnavailableError: If the trip could not be stored
    """
    _check_date_range(start_date, end_date)

    budgets = _clean_category_budgets(category_budgets)
    if total_budget is None:
        total_budget = sum((Decimal(amount) for amount in budgets.values()), Decimal('0.00'))

    trip = Trip.objects.create(
        owner=owner,
        name=name,
        description=description,
        start_date=start_date,
        end_date=end_date,
        total_budget=total_budget,
        category_budgets=budgets,
        cover_image=cover_image,
    )

    TripMember.objects.create(
        trip=trip,
        user=owner,
        name=owner.display_name,
        email=owner.email,
        is_owner=True,
    )

    for member in members or []:
        TripMember.objects.create(
            trip=trip,
            user=member.get('user'),
            name=member.get('name', ''),
            email=member.get('email', ''),
            is_owner=False,
        )

    logger.info("Trip %s created by %s", trip.id, owner.id)
    return trip


@guard_store(StoreUnavailableError, "Trips are temporarily unavailable")
@transaction.atomic
def update_trip(*, trip_id: UUID, user: User, **changes) -> Trip:
    """
    Apply a partial update to a trip (owner only).

    Uses select_for_update to prevent concurrent modifications. Unknown keys
    are ignored.

    Raises:
        TripNotFoundError: If trip doesn't exist
        InsufficientPermissionsError: If user is not the owner
        InvalidDateRangeError: If the resulting range ends before it starts
    """
    try:
        trip = Trip.objects.select_for_update().get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")

    if not trip.is_owner(user):
        raise InsufficientPermissionsError("Only the trip owner can edit the trip")

    update_fields = ['updated_at']
    for field in UPDATABLE_FIELDS:
        if field not in changes:
            continue
        value = changes[field]
        if field == 'category_budgets':
            value = _clean_category_budgets(value)
        setattr(trip, field, value)
        update_fields.append(field)

    _check_date_range(trip.start_date, trip.end_date)

    trip.save(update_fields=update_fields)
    return trip


@guard_store(StoreUnavailableError, "Trips are temporarily unavailable")
@transaction.atomic
def delete_trip(*, trip_id: UUID, user: User) -> None:
    """
    Delete a trip (owner only).

    Cascading deletes remove all members and expenses of the trip.

    Raises:
        TripNotFoundError: If trip doesn't exist
        InsufficientPermissionsError: If user is not the owner
    """
    try:
        trip = Trip.objects.select_for_update().get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")

    if not trip.is_owner(user):
        raise InsufficientPermissionsError("Only the trip owner can delete the trip")

    trip.delete()
    logger.info("Trip %s deleted by %s", trip_id, user.id)
