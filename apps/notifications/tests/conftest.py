import itertools
import pytest
from datetime import datetime, timedelta, timezone as dt_timezone
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.notifications.exceptions import NotificationDeliveryError
from apps.notifications.models import Notification, NotificationType
from apps.notifications.sinks import NotificationSink
from apps.notifications.stores import InMemoryMarkerStore
from apps.notifications.tracker import NotificationTracker


class RecordingSink(NotificationSink):
    """
    Sink that remembers what it was asked to deliver.

    ``result`` is returned from ``emit``; when ``error`` is set it is raised
    instead.
    """

    def __init__(self):
        self.emitted = []
        self.result = True
        self.error = None

    def emit(self, title, body, **options):
        if self.error is not None:
            raise self.error
        if self.result:
            self.emitted.append({'title': title, 'body': body, **options})
        return self.result

    @property
    def keys(self):
        return [item['key'] for item in self.emitted]


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def store():
    return InMemoryMarkerStore(daily_limit=10)


@pytest.fixture
def clock():
    """Fixed morning of 2025-05-21 UTC, advancing one second per call."""
    start = datetime(2025, 5, 21, 9, 0, tzinfo=dt_timezone.utc)
    ticks = itertools.count()
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture
def tracker(store, sink, clock, settings):
    settings.TIME_ZONE = 'UTC'
    return NotificationTracker(store, sink, clock=clock, currency='INR')


@pytest.fixture
def failing_delivery():
    return NotificationDeliveryError("Push service unreachable")


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def user(db):
    return User.objects.create_user(
        email='traveller@example.com',
        password='TestPass123!',
        display_name='Traveller',
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Other Traveller',
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def notifications(user, other_user):
    """Two unread and one read notification for ``user``, one for ``other_user``."""
    created = {
        'alert': Notification.objects.create(
            user=user,
            key='budget-threshold-t1-50',
            title='Budget Alert for Goa',
            message="You've used 50% of your budget.",
            notification_type=NotificationType.BUDGET_ALERT,
        ),
        'reminder': Notification.objects.create(
            user=user,
            key='trip-upcoming-tomorrow-t1',
            title='Trip Tomorrow',
            message='Your trip "Goa" starts tomorrow!',
            notification_type=NotificationType.TRIP_REMINDER,
        ),
        'read': Notification.objects.create(
            user=user,
            key='trip-created-t1-1',
            title='Trip Created',
            message='Trip "Goa" has been created successfully!',
            notification_type=NotificationType.TRIP_EVENT,
            read=True,
        ),
        'foreign': Notification.objects.create(
            user=other_user,
            key='trip-created-t2-1',
            title='Trip Created',
            message='Trip "Elsewhere" has been created successfully!',
            notification_type=NotificationType.TRIP_EVENT,
        ),
    }
    # Distinct creation times, oldest first
    start = timezone.now() - timedelta(hours=1)
    for offset, notification in enumerate(created.values()):
        stamp = start + timedelta(minutes=offset)
        Notification.objects.filter(pk=notification.pk).update(created_at=stamp)
        notification.created_at = stamp
    return created
