import uuid
import pytest
from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from apps.expenses.models import Expense
from apps.notifications.models import Notification, NotificationType
from apps.notifications.stores import DatabaseMarkerStore
from apps.trips.models import Trip, TripMember
from apps.trips.views import TripViewSet


# =============================================================================
# Trip CRUD
# =============================================================================

@pytest.mark.django_db
class TestTripList:
    """Tests for GET /api/trips/"""

    def test_lists_owned_and_joined_trips(self, owner_client, traveller_client, trip):
        url = reverse('trips:trip-list')

        owner_response = owner_client.get(url)
        traveller_response = traveller_client.get(url)

        assert owner_response.status_code == status.HTTP_200_OK
        assert owner_response.data['count'] == 1
        assert traveller_response.data['count'] == 1
        assert traveller_response.data['results'][0]['name'] == 'Goa Getaway'

    def test_list_fields(self, owner_client, trip):
        response = owner_client.get(reverse('trips:trip-list'))

        item = response.data['results'][0]
        assert item['member_count'] == 2
        assert item['total_budget'] == '3000.00'
        assert item['status'] in ('active', 'upcoming', 'historical')

    def test_outsider_sees_nothing(self, outsider_client, trip):
        response = outsider_client.get(reverse('trips:trip-list'))

        assert response.data['count'] == 0

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('trips:trip-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestTripCreate:
    """Tests for POST /api/trips/"""

    def test_create_trip(self, owner_client, owner, trip_payload):
        response = owner_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Ladakh Ride'
        assert response.data['owner']['email'] == owner.email
        assert response.data['member_count'] == 3

    def test_owner_becomes_owner_member(self, owner_client, owner, trip_payload):
        response = owner_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        members = response.data['members']
        assert members[0]['is_owner'] is True
        assert members[0]['email'] == owner.email
        assert sorted(member['display_name'] for member in members[1:]) == ['Asha', 'Ravi']

    def test_total_budget_from_categories(self, owner_client, trip_payload):
        response = owner_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.data['total_budget'] == '4000.00'
        assert response.data['category_budgets'] == {'Food': '1500.00', 'Transport': '2500.00'}

    def test_explicit_total_budget_wins(self, owner_client, trip_payload):
        trip_payload['total_budget'] = '10000'
        response = owner_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.data['total_budget'] == '10000.00'

    def test_minimal_trip(self, owner_client):
        response = owner_client.post(reverse('trips:trip-list'), {'name': 'Someday'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['total_budget'] == '0.00'
        assert response.data['member_count'] == 1
        assert response.data['status'] == 'unclassifiable'

    def test_end_before_start(self, owner_client, trip_payload):
        trip_payload['end_date'] = '2025-07-01'
        response = owner_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Trip.objects.filter(name='Ladakh Ride').exists()

    def test_blank_name(self, owner_client):
        response = owner_client.post(reverse('trips:trip-list'), {'name': '   '}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_negative_budget(self, owner_client):
        response = owner_client.post(
            reverse('trips:trip-list'),
            {'name': 'Broke', 'total_budget': '-5'},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_member_without_identity(self, owner_client):
        response = owner_client.post(
            reverse('trips:trip-list'),
            {'name': 'Goa', 'members': [{'name': ''}]},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_creation_notifies_creator(self, owner_client, owner, trip_payload):
        owner_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        notification = Notification.objects.get(user=owner)
        assert notification.title == 'Trip Created'
        assert notification.message == 'Trip "Ladakh Ride" has been created successfully!'
        assert notification.notification_type == NotificationType.TRIP_EVENT


@pytest.mark.django_db
class TestTripDetail:
    """Tests for GET /api/trips/{id}/"""

    def test_owner_and_member_can_view(self, owner_client, traveller_client, trip):
        url = reverse('trips:trip-detail', kwargs={'pk': trip.id})

        assert owner_client.get(url).status_code == status.HTTP_200_OK
        assert traveller_client.get(url).status_code == status.HTTP_200_OK

    def test_detail_fields(self, owner_client, trip):
        response = owner_client.get(reverse('trips:trip-detail', kwargs={'pk': trip.id}))

        assert response.data['description'] == 'Beaches and seafood'
        assert response.data['start_date'] == '2025-05-02'
        assert len(response.data['members']) == 2

    def test_outsider_gets_404(self, outsider_client, trip):
        response = outsider_client.get(reverse('trips:trip-detail', kwargs={'pk': trip.id}))

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestTripUpdate:
    """Tests for PATCH /api/trips/{id}/"""

    def test_owner_updates(self, owner_client, trip):
        url = reverse('trips:trip-detail', kwargs={'pk': trip.id})
        response = owner_client.patch(url, {'name': 'Goa Again', 'total_budget': '3500'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'Goa Again'
        assert response.data['total_budget'] == '3500.00'
        assert response.data['description'] == 'Beaches and seafood'

    def test_member_cannot_update(self, traveller_client, trip):
        url = reverse('trips:trip-detail', kwargs={'pk': trip.id})
        response = traveller_client.patch(url, {'name': 'Mine now'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        trip.refresh_from_db()
        assert trip.name == 'Goa Getaway'

    def test_update_breaking_date_range(self, owner_client, trip):
        url = reverse('trips:trip-detail', kwargs={'pk': trip.id})
        response = owner_client.patch(url, {'end_date': '2025-04-30'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        trip.refresh_from_db()
        assert str(trip.end_date) == '2025-05-06'

    def test_update_notifies(self, owner_client, owner, trip):
        url = reverse('trips:trip-detail', kwargs={'pk': trip.id})
        owner_client.patch(url, {'name': 'Goa Again'}, format='json')

        assert Notification.objects.get(user=owner).title == 'Trip Updated'


@pytest.mark.django_db
class TestTripDelete:
    """Tests for DELETE /api/trips/{id}/"""

    def test_owner_deletes_with_expenses(self, owner_client, owner, trip):
        Expense.objects.create(trip=trip, title='Dinner', amount='100', created_by=owner)
        url = reverse('trips:trip-detail', kwargs={'pk': trip.id})

        response = owner_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Trip.objects.filter(id=trip.id).exists()
        assert not TripMember.objects.filter(trip_id=trip.id).exists()
        assert not Expense.objects.filter(trip_id=trip.id).exists()

    def test_delete_notifies(self, owner_client, owner, trip):
        owner_client.delete(reverse('trips:trip-detail', kwargs={'pk': trip.id}))

        notification = Notification.objects.get(user=owner)
        assert notification.title == 'Trip Deleted'
        assert notification.trip is None

    def test_member_cannot_delete(self, traveller_client, trip):
        response = traveller_client.delete(reverse('trips:trip-detail', kwargs={'pk': trip.id}))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Trip.objects.filter(id=trip.id).exists()


# =============================================================================
# Members
# =============================================================================

@pytest.mark.django_db
class TestTripMembers:
    """Tests for /api/trips/{id}/members/"""

    def test_list_members(self, traveller_client, trip):
        response = traveller_client.get(reverse('trips:trip-members', kwargs={'pk': trip.id}))

        assert response.status_code == status.HTTP_200_OK
        assert [member['is_owner'] for member in response.data] == [True, False]

    def test_add_member_by_name(self, owner_client, trip):
        url = reverse('trips:trip-members', kwargs={'pk': trip.id})
        response = owner_client.post(url, {'name': 'Asha'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['display_name'] == 'Asha'
        assert trip.members.count() == 3

    def test_add_registered_user(self, owner_client, outsider, trip):
        url = reverse('trips:trip-members', kwargs={'pk': trip.id})
        response = owner_client.post(url, {'user': str(outsider.id)}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['email'] == outsider.email
        assert trip.has_member(outsider)

    def test_duplicate_email(self, owner_client, trip, traveller):
        url = reverse('trips:trip-members', kwargs={'pk': trip.id})
        response = owner_client.post(url, {'email': traveller.email.upper()}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_member_cannot_add(self, traveller_client, trip):
        url = reverse('trips:trip-members', kwargs={'pk': trip.id})
        response = traveller_client.post(url, {'name': 'Gatecrasher'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_remove_member(self, owner_client, trip, traveller_member, traveller):
        url = reverse('trips:trip-remove-member', kwargs={'pk': trip.id, 'member_id': traveller_member.id})
        response = owner_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not trip.has_member(traveller)

    def test_cannot_remove_owner(self, owner_client, trip, owner_member):
        url = reverse('trips:trip-remove-member', kwargs={'pk': trip.id, 'member_id': owner_member.id})
        response = owner_client.delete(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_remove_unknown_member(self, owner_client, trip):
        url = reverse('trips:trip-remove-member', kwargs={'pk': trip.id, 'member_id': uuid.uuid4()})
        response = owner_client.delete(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_member_cannot_remove(self, traveller_client, trip, owner_member):
        url = reverse('trips:trip-remove-member', kwargs={'pk': trip.id, 'member_id': owner_member.id})
        response = traveller_client.delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Categories
# =============================================================================

@pytest.mark.django_db
class TestCategories:

    def test_starter_categories(self, owner_client):
        response = owner_client.get(reverse('trips:categories'))

        assert response.status_code == status.HTTP_200_OK
        names = [category['name'] for category in response.data]
        assert names[0] == 'Food'
        assert names[-1] == 'Other'
        assert response.data[0] == {'name': 'Food', 'color': 'orange', 'icon': 'fa-utensils'}


# =============================================================================
# Store Failures
# =============================================================================

def _store_down(*args, **kwargs):
    raise DatabaseError('down')


@pytest.mark.django_db
class TestTripStoreUnavailable:
    """Database failures surface as 503 so clients can retry."""

    def test_create(self, owner_client, trip_payload, monkeypatch):
        monkeypatch.setattr(Trip.objects, 'create', _store_down)

        response = owner_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['error'] == "Trips are temporarily unavailable"
        assert not TripMember.objects.filter(name='Asha').exists()

    def test_update(self, owner_client, trip, monkeypatch):
        monkeypatch.setattr(Trip, 'save', _store_down)
        url = reverse('trips:trip-detail', kwargs={'pk': trip.id})

        response = owner_client.patch(url, {'name': 'Renamed'}, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert Trip.objects.get(id=trip.id).name == 'Goa Getaway'

    def test_delete(self, owner_client, owner, trip, monkeypatch):
        monkeypatch.setattr(Trip, 'delete', _store_down)

        response = owner_client.delete(reverse('trips:trip-detail', kwargs={'pk': trip.id}))

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert Trip.objects.filter(id=trip.id).exists()
        assert not Notification.objects.filter(user=owner).exists()

    def test_add_member(self, owner_client, trip, monkeypatch):
        monkeypatch.setattr(TripMember, 'save', _store_down)
        url = reverse('trips:trip-members', kwargs={'pk': trip.id})

        response = owner_client.post(url, {'name': 'Asha'}, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_trip_lookup(self, owner_client, trip, monkeypatch):
        monkeypatch.setattr(TripViewSet, 'get_queryset', _store_down)
        url = reverse('trips:trip-members', kwargs={'pk': trip.id})

        response = owner_client.get(url)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_notification_failure_keeps_the_trip(self, owner_client, owner, trip_payload, monkeypatch):
        monkeypatch.setattr(DatabaseMarkerStore, 'has_marker', _store_down)

        response = owner_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert Trip.objects.filter(name='Ladakh Ride').exists()
        assert not Notification.objects.filter(user=owner).exists()
