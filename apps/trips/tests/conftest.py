import pytest
from decimal import Decimal
from datetime import date
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.trips.models import TripMember
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
    """Owner plus one registered traveller."""
    return create_trip(
        owner=owner,
        name='Goa Getaway',
        description='Beaches and seafood',
        start_date=date(2025, 5, 2),
        end_date=date(2025, 5, 6),
        total_budget=Decimal('3000'),
        members=[{'user': traveller, 'name': 'Fellow Traveller', 'email': traveller.email}],
    )


@pytest.fixture
def traveller_member(trip, traveller):
    return TripMember.objects.get(trip=trip, user=traveller)


@pytest.fixture
def owner_member(trip, owner):
    return TripMember.objects.get(trip=trip, is_owner=True)


@pytest.fixture
def trip_payload():
    return {
        'name': 'Ladakh Ride',
        'start_date': '2025-08-01',
        'end_date': '2025-08-12',
        'category_budgets': {'Food': '1500', 'Transport': '2500', 'Shopping': None},
        'members': [{'name': 'Asha'}, {'name': 'Ravi', 'email': 'ravi@example.com'}],
    }
