"""
Trips app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and row locks.
"""

from .exceptions import (
    TripsServiceError,
    TripNotFoundError,
    InsufficientPermissionsError,
    InvalidDateRangeError,
    MemberNotFoundError,
    DuplicateMemberError,
    CannotRemoveOwnerError,
    StoreUnavailableError,
)

from .trip_management import (
    list_trips,
    get_trip,
    create_trip,
    update_trip,
    delete_trip,
)

from .member_management import (
    add_member,
    remove_member,
    get_trip_members,
)


__all__ = [
    # Exceptions
    'TripsServiceError',
    'TripNotFoundError',
    'InsufficientPermissionsError',
    'InvalidDateRangeError',
    'MemberNotFoundError',
    'DuplicateMemberError',
    'CannotRemoveOwnerError',
    'StoreUnavailableError',

    # Trip Management
    'list_trips',
    'get_trip',
    'create_trip',
    'update_trip',
    'delete_trip',

    # Member Management
    'add_member',
    'remove_member',
    'get_trip_members',
]
