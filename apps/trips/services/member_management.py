"""
Member management service.

Handles adding and removing travellers on a trip. Only the trip owner
changes the member list.
"""

import logging
from typing import List, Optional
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.trips.models import Trip, TripMember

from .exceptions import (
    TripNotFoundError,
    MemberNotFoundError,
    DuplicateMemberError,
    CannotRemoveOwnerError,
    InsufficientPermissionsError,
    StoreUnavailableError,
    guard_store,
)

logger = logging.getLogger(__name__)


def _lock_owned_trip(trip_id: UUID, user: User) -> Trip:
    try:
        trip = Trip.objects.select_for_update().get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")

    if not trip.is_owner(user):
        raise InsufficientPermissionsError("Only the trip owner can manage members")
    return trip


@guard_store(StoreUnavailableError, "Trips are temporarily unavailable")
@transaction.atomic
def add_member(
    *,
    trip_id: UUID,
    added_by: User,
    name: str = '',
    email: str = '',
    member_user: Optional[User] = None
) -> TripMember:
    """
    Add a traveller to a trip (owner only).

    A member is identified by a registered user or by email; the same
    person cannot be added twice.

    Args:
        trip_id: UUID of the trip
        added_by: User performing the change (must be owner)
        name: Display name of the traveller
        email: Contact email (optional)
        member_user: Registered user to link (optional)

    Returns:
        Created TripMember instance

    Raises:
        TripNotFoundError: If trip doesn't exist
        InsufficientPermissionsError: If added_by is not the owner
        DuplicateMemberError: If the person is already on the trip
    """
    trip = _lock_owned_trip(trip_id, added_by)

    if member_user is not None:
        email = email or member_user.email
        name = name or member_user.display_name
        if trip.members.filter(user=member_user).exists():
            raise DuplicateMemberError(f"{member_user.email} is already on {trip.name}")

    if email and trip.members.filter(email__iexact=email).exists():
        raise DuplicateMemberError(f"{email} is already on {trip.name}")

    member = TripMember.objects.create(
        trip=trip,
        user=member_user,
        name=name,
        email=email,
        is_owner=False,
    )
    logger.info("Member %s added to trip %s", member.id, trip.id)
    return member


@guard_store(StoreUnavailableError, "Trips are temporarily unavailable")
@transaction.atomic
def remove_member(*, trip_id: UUID, member_id: UUID, removed_by: User) -> None:
    """
    Remove a traveller from a trip (owner only).

    Raises:
        TripNotFoundError: If trip doesn't exist
        InsufficientPermissionsError: If removed_by is not the owner
        MemberNotFoundError: If the member is not on this trip
        CannotRemoveOwnerError: If trying to remove the owner
    """
    trip = _lock_owned_trip(trip_id, removed_by)

    try:
        member = trip.members.get(id=member_id)
    except TripMember.DoesNotExist:
        raise MemberNotFoundError(f"Member with ID {member_id} not found on this trip")

    if member.is_owner:
        raise CannotRemoveOwnerError("Cannot remove the trip owner")

    member.delete()


@guard_store(StoreUnavailableError, "Trips are temporarily unavailable")
def get_trip_members(*, trip_id: UUID) -> List[TripMember]:
    """Get all members of a trip, owner first."""
    return list(
        TripMember.objects
        .filter(trip_id=trip_id)
        .select_related('user')
    )
