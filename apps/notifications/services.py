"""
Notification services.

Wires trackers for a user and manages the in-app notification list.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction, DatabaseError

from apps.accounts.models import User
from apps.analytics.exceptions import StoreUnavailableError

from .exceptions import NotificationNotFoundError
from .models import Notification
from .sinks import (
    NotificationSink,
    InAppNotificationSink,
    EmailNotificationSink,
    LoggingNotificationSink,
)
from .stores import DatabaseMarkerStore
from .tracker import NotificationTracker

logger = logging.getLogger(__name__)

SINKS = {
    'in_app': InAppNotificationSink,
    'email': EmailNotificationSink,
    'log': LoggingNotificationSink,
}


def get_sink(user: User) -> NotificationSink:
    """
    Build the sink configured by ``NOTIFICATION_SINK``.

    Users who switched notifications off get the logging sink, so their
    events are still marked but never shown.
    """
    if not user.notifications_enabled:
        return LoggingNotificationSink(user)

    sink_class = SINKS.get(settings.NOTIFICATION_SINK)
    if sink_class is None:
        logger.warning("Unknown NOTIFICATION_SINK %r, falling back to in-app", settings.NOTIFICATION_SINK)
        sink_class = InAppNotificationSink
    return sink_class(user)


def build_tracker(user: User) -> NotificationTracker:
    store = DatabaseMarkerStore(user, daily_limit=settings.NOTIFICATION_DAILY_LIMIT)
    return NotificationTracker(store, get_sink(user))


def check_trip_budget(
    *,
    user: User,
    trip_id: Any,
    trip_name: str,
    summary: Dict[str, Any],
    today: Optional[date] = None
) -> List[str]:
    """Run the budget threshold check for one trip aggregation result."""
    return build_tracker(user).check_budget_thresholds(
        trip_id=trip_id,
        trip_name=trip_name,
        percent_spent=summary['percent_spent'],
        total_spent=summary['total_spent'],
        budget=summary['total_budget'],
        today=today,
    )


def run_follow_up(action, *args, **kwargs):
    """
    Run a notification step that follows an already committed write.

    The write stands even when the marker store or the aggregation cannot be
    reached, so store failures are logged and the step returns None.
    """
    try:
        return action(*args, **kwargs)
    except (DatabaseError, StoreUnavailableError):
        logger.exception("Follow-up notification step %s failed", getattr(action, "__name__", action))
        return None


def check_upcoming_trips_for_user(*, user: User, reference_date: Optional[date] = None) -> List[str]:
    """
    Send "starts today" / "starts tomorrow" reminders for the user's trips.

    Idempotent; clients call it once per session.
    """
    from apps.trips.services import list_trips

    tracker = build_tracker(user)
    return tracker.check_upcoming_trips(list_trips(user=user), reference_date=reference_date)


def list_notifications(*, user: User, unread_only: bool = False):
    queryset = Notification.objects.filter(user=user).select_related('trip')
    if unread_only:
        queryset = queryset.filter(read=False)
    return queryset


def unread_count(*, user: User) -> int:
    return Notification.objects.filter(user=user, read=False).count()


@transaction.atomic
def mark_as_read(*, user: User, notification_id: UUID) -> Notification:
    """
    Mark a single notification as read.

    Raises:
        NotificationNotFoundError: If it doesn't exist or belongs to someone else
    """
    try:
        notification = (
            Notification.objects
            .select_for_update()
            .get(id=notification_id, user=user)
        )
    except Notification.DoesNotExist:
        raise NotificationNotFoundError(f"Notification with ID {notification_id} not found")

    if not notification.read:
        notification.read = True
        notification.save(update_fields=['read'])
    return notification


def mark_all_as_read(*, user: User) -> int:
    """Mark every unread notification as read; returns how many changed."""
    return Notification.objects.filter(user=user, read=False).update(read=True)
