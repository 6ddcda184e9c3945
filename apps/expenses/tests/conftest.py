import pytest
from decimal import Decimal
from datetime import date, datetime, timezone as dt_timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.expenses.models import Expense
from apps.trips.services import create_trip


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def owner(db):
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Trip Owner',
    )


@pytest.fixture
def traveller(db):
    return User.objects.create_user(
        email='traveller@example.com',
        password='TestPass123!',
        display_name='Fellow Traveller',
    )


@pytest.fixture
def outsider(db):
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        display_name='Outsider',
    )


@pytest.fixture
def owner_client(owner):
    return _client_for(owner)


@pytest.fixture
def traveller_client(traveller):
    return _client_for(traveller)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)


@pytest.fixture
def trip(owner, traveller):
    """3000 budget, owner plus one registered traveller."""
    return create_trip(
        owner=owner,
        name='Goa Getaway',
        start_date=date(2025, 5, 2),
        end_date=date(2025, 5, 6),
        total_budget=Decimal('3000'),
        members=[{'user': traveller, 'name': 'Fellow Traveller'}],
    )


@pytest.fixture
def other_trip(outsider):
    return create_trip(owner=outsider, name='Elsewhere', total_budget=Decimal('100'))


@pytest.fixture
def expenses(trip, owner, traveller):
    """One expense by the owner and one by the traveller."""
    return {
        'dinner': Expense.objects.create(
            trip=trip,
            title='Seafood dinner',
            category='Food',
            amount=Decimal('1000.00'),
            date=datetime(2025, 5, 2, 20, 0, tzinfo=dt_timezone.utc),
            created_by=owner,
        ),
        'scooter': Expense.objects.create(
            trip=trip,
            title='Scooter rental',
            category='Transport',
            amount=Decimal('250.00'),
            date=datetime(2025, 5, 3, 9, 0, tzinfo=dt_timezone.utc),
            paid_by='Fellow Traveller',
            created_by=traveller,
        ),
    }
