import pytest
from decimal import Decimal
from datetime import date, datetime, timezone as dt_timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.expenses.models import Expense
from apps.trips.models import Trip, TripMember
from apps.trips.services import create_trip


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def _moment(day):
    return datetime(day.year, day.month, day.day, 12, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def analytics_user(db):
    """Create the trip owner."""
    return User.objects.create_user(
        email='analytics_user@example.com',
        password='TestPass123!',
        display_name='Analytics User',
    )


@pytest.fixture
def analytics_member(db):
    """Create a registered traveller on the owner's trip."""
    return User.objects.create_user(
        email='analytics_member@example.com',
        password='TestPass123!',
        display_name='Analytics Member',
    )


@pytest.fixture
def analytics_outsider(db):
    """Create a user not on any trip."""
    return User.objects.create_user(
        email='analytics_outsider@example.com',
        password='TestPass123!',
        display_name='Analytics Outsider',
    )


@pytest.fixture
def analytics_user_client(analytics_user):
    return _client_for(analytics_user)


@pytest.fixture
def analytics_member_client(analytics_member):
    return _client_for(analytics_member)


@pytest.fixture
def analytics_outsider_client(analytics_outsider):
    return _client_for(analytics_outsider)


# =============================================================================
# Trips and expenses
# =============================================================================

@pytest.fixture
def reference_day():
    return date(2025, 5, 3)


@pytest.fixture
def goa_trip(analytics_user, analytics_member):
    """
    Four travellers, 3000 budget, running 2025-05-02 to 2025-05-06.

    Members: the owner, one registered user and two name-only travellers.
    """
    return create_trip(
        owner=analytics_user,
        name='Goa Getaway',
        start_date=date(2025, 5, 2),
        end_date=date(2025, 5, 6),
        total_budget=Decimal('3000'),
        category_budgets={'Food': '1200', 'Transport': '500'},
        members=[
            {'user': analytics_member, 'name': 'Analytics Member'},
            {'name': 'Asha'},
            {'name': 'Ravi', 'email': 'ravi@example.com'},
        ],
    )


@pytest.fixture
def goa_expenses(goa_trip, analytics_user):
    """1250 spent across two days."""
    return [
        Expense.objects.create(
            trip=goa_trip,
            title='Seafood dinner',
            category='Food',
            amount=Decimal('1000.00'),
            date=_moment(date(2025, 5, 2)),
            created_by=analytics_user,
        ),
        Expense.objects.create(
            trip=goa_trip,
            title='Scooter rental',
            category='Transport',
            amount=Decimal('250.00'),
            date=_moment(date(2025, 5, 3)),
            created_by=analytics_user,
        ),
    ]


@pytest.fixture
def past_trip(analytics_user):
    trip = create_trip(
        owner=analytics_user,
        name='Kerala Backwaters',
        start_date=date(2025, 1, 10),
        end_date=date(2025, 1, 14),
        total_budget=Decimal('2000'),
    )
    Expense.objects.create(
        trip=trip,
        title='Houseboat',
        category='Accommodation',
        amount=Decimal('1500.00'),
        date=_moment(date(2025, 1, 10)),
        created_by=analytics_user,
    )
    return trip


@pytest.fixture
def future_trip(analytics_user):
    return create_trip(
        owner=analytics_user,
        name='Ladakh Ride',
        start_date=date(2025, 8, 1),
        end_date=date(2025, 8, 12),
        total_budget=Decimal('5000'),
    )


@pytest.fixture
def undated_trip(analytics_user):
    return create_trip(owner=analytics_user, name='Someday Trip')


@pytest.fixture
def outsider_trip(analytics_outsider):
    """A trip nobody else can see."""
    trip = Trip.objects.create(
        owner=analytics_outsider,
        name='Private Trip',
        start_date=date(2025, 5, 1),
        end_date=date(2025, 5, 2),
        total_budget=Decimal('100'),
    )
    TripMember.objects.create(trip=trip, user=analytics_outsider, is_owner=True)
    return trip


@pytest.fixture
def add_expense_on():
    """Factory adding one expense on a given day."""
    def _add(trip, amount, category='Other', day=None, user=None):
        return Expense.objects.create(
            trip=trip,
            title=f'{category} expense',
            category=category,
            amount=Decimal(str(amount)),
            date=_moment(day) if day else None,
            created_by=user or trip.owner,
        )
    return _add
