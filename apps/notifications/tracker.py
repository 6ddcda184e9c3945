"""
Notification-Threshold Tracker
==============================

Decides which notifications go out. Every emission passes through
``notify_once``, which enforces two rules:

    - idempotency: a key that has a marker never fires again
    - daily quota: at most ``store.daily_limit`` emissions per calendar day

The marker is written only after the sink reports a successful delivery,
and only then is the daily quota consumed. A failed delivery leaves the key
unmarked so the next check retries it. A crash between delivery and marking
may produce one duplicate.

Example:
    Wiring a tracker for tests::

        from apps.notifications.stores import InMemoryMarkerStore
        from apps.notifications.tracker import NotificationTracker

        tracker = NotificationTracker(InMemoryMarkerStore(daily_limit=10), sink)
        tracker.check_budget_thresholds(
            trip_id='t1',
            trip_name='Goa',
            percent_spent=Decimal('51'),
            total_spent=Decimal('1530'),
            budget=Decimal('3000'),
        )
        # ['budget-threshold-t1-50']
"""

import logging
import math
from datetime import date, timedelta
from typing import Any, Callable, Iterable, List, Optional

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from apps.analytics.records import coerce_amount
from apps.analytics.reports import format_money
from apps.analytics.timestamps import normalize_timestamp

from .exceptions import NotificationDeliveryError
from .models import NotificationType
from .sinks import NotificationSink
from .stores import MarkerStore

logger = logging.getLogger(__name__)

# smtplib errors subclass OSError
DELIVERY_ERRORS = (NotificationDeliveryError, DatabaseError, OSError)


class NotificationTracker:
    """
    Emits threshold, reminder and one-shot notifications at most once each.

    Args:
        store: Marker store holding idempotency markers and daily counters.
        sink: Delivery mechanism.
        clock (callable, optional): Returns the current aware datetime.
            Defaults to ``django.utils.timezone.now``.
        currency (str, optional): Currency code used in messages.
            Defaults to ``settings.DEFAULT_CURRENCY``.
    """

    BUDGET_THRESHOLDS = (50, 60, 70, 80, 90, 100)

    def __init__(
        self,
        store: MarkerStore,
        sink: NotificationSink,
        clock: Optional[Callable] = None,
        currency: Optional[str] = None,
    ):
        self.store = store
        self.sink = sink
        self.clock = clock or timezone.now
        self.currency = currency or settings.DEFAULT_CURRENCY

    def today(self) -> date:
        now = self.clock()
        if timezone.is_aware(now):
            now = timezone.localtime(now)
        return now.date()

    def _event_stamp(self) -> int:
        return int(self.clock().timestamp() * 1_000_000)

    def notify_once(self, key: str, title: str, body: str, today: Optional[date] = None, **options) -> bool:
        """
        Emit one notification unless ``key`` already fired or today's quota is spent.

        Args:
            key: Idempotency key.
            title: Notification title.
            body: Notification text.
            today (date, optional): Day whose quota is consulted.
            **options: Passed through to the sink.

        Returns:
            bool: True when the notification was delivered and marked.
        """
        day = today or self.today()

        if self.store.has_marker(key):
            return False

        if self.store.get_daily_quota_remaining(day) <= 0:
            logger.info("Daily notification quota reached for %s, skipped %s", day.isoformat(), key)
            return False

        try:
            delivered = self.sink.emit(title, body, key=key, **options)
        except DELIVERY_ERRORS:
            logger.warning("Could not deliver notification %s", key, exc_info=True)
            return False

        if not delivered:
            logger.warning("Notification sink rejected %s", key)
            return False

        self.store.set_marker(key)
        self.store.decrement_daily_quota(day)
        return True

    # =========================================================================
    # Budget thresholds
    # =========================================================================

    def check_budget_thresholds(
        self,
        trip_id: Any,
        trip_name: str,
        percent_spent: Any,
        total_spent: Any,
        budget: Any,
        today: Optional[date] = None,
    ) -> List[str]:
        """
        Fire one alert for every newly crossed budget threshold.

        A threshold ``t`` is crossed when ``floor(percent_spent) >= t``.
        Thresholds are visited in ascending order, so when the quota runs out
        mid-way the lowest pending thresholds are the ones delivered.

        Returns:
            list[str]: Keys emitted by this call.
        """
        percent = coerce_amount(percent_spent)
        if coerce_amount(budget) <= 0:
            return []

        reached = math.floor(percent)
        emitted = []
        for threshold in self.BUDGET_THRESHOLDS:
            if reached < threshold:
                break
            key = f"budget-threshold-{trip_id}-{threshold}"
            body = (
                f"You've used {reached}% of your budget "
                f"({format_money(coerce_amount(total_spent), self.currency)} of "
                f"{format_money(coerce_amount(budget), self.currency)})."
            )
            sent = self.notify_once(
                key,
                f"Budget Alert for {trip_name}",
                body,
                today=today,
                trip_id=trip_id,
                notification_type=NotificationType.BUDGET_ALERT,
            )
            if sent:
                emitted.append(key)
        return emitted

    # =========================================================================
    # Upcoming trip reminders
    # =========================================================================

    def check_upcoming_trips(self, trips: Iterable[Any], reference_date: Any = None) -> List[str]:
        """
        Remind about trips starting today or tomorrow.

        Safe to call any number of times; each trip gets at most one
        "starts tomorrow" and one "starts today" reminder ever. Trips
        without a readable start date are skipped.
        """
        reference = normalize_timestamp(reference_date) if reference_date is not None else self.today()
        if reference is None:
            return []
        tomorrow = reference + timedelta(days=1)
        emitted = []

        for trip in trips:
            start = normalize_timestamp(trip.start_date)
            if start is None:
                logger.debug("Trip %s has no readable start date", trip.id)
                continue

            if start == tomorrow:
                key = f"trip-upcoming-tomorrow-{trip.id}"
                title = "Trip Tomorrow"
                body = f'Your trip "{trip.name}" starts tomorrow!'
            elif start == reference:
                key = f"trip-start-today-{trip.id}"
                title = "Trip Starts Today"
                body = f'Your trip "{trip.name}" starts today!'
            else:
                continue

            sent = self.notify_once(
                key,
                title,
                body,
                today=reference,
                trip_id=trip.id,
                notification_type=NotificationType.TRIP_REMINDER,
            )
            if sent:
                emitted.append(key)
        return emitted

    # =========================================================================
    # One-shot events
    # =========================================================================

    def notify_trip_created(self, trip_id: Any, trip_name: str) -> bool:
        return self.notify_once(
            f"trip-created-{trip_id}-{self._event_stamp()}",
            "Trip Created",
            f'Trip "{trip_name}" has been created successfully!',
            trip_id=trip_id,
            notification_type=NotificationType.TRIP_EVENT,
        )

    def notify_trip_updated(self, trip_id: Any, trip_name: str) -> bool:
        return self.notify_once(
            f"trip-updated-{trip_id}-{self._event_stamp()}",
            "Trip Updated",
            f'Trip "{trip_name}" has been updated successfully!',
            trip_id=trip_id,
            notification_type=NotificationType.TRIP_EVENT,
        )

    def notify_trip_deleted(self, trip_id: Any, trip_name: str) -> bool:
        # The trip row is gone, so no trip reference is attached
        return self.notify_once(
            f"trip-deleted-{trip_id}-{self._event_stamp()}",
            "Trip Deleted",
            f'Trip "{trip_name}" has been deleted.',
            notification_type=NotificationType.TRIP_EVENT,
        )

    def notify_expense_added(self, trip_id: Any, trip_name: str, expense_id: Any, title: str, amount: Any) -> bool:
        money = format_money(coerce_amount(amount), self.currency)
        return self.notify_once(
            f"expense-added-{expense_id}-{self._event_stamp()}",
            "Expense Added",
            f'"{title}" ({money}) was added to {trip_name}.',
            trip_id=trip_id,
            notification_type=NotificationType.EXPENSE_EVENT,
        )

    def notify_expense_deleted(self, trip_id: Any, trip_name: str, expense_id: Any, title: str) -> bool:
        return self.notify_once(
            f"expense-deleted-{expense_id}-{self._event_stamp()}",
            "Expense Deleted",
            f'"{title}" was removed from {trip_name}.',
            trip_id=trip_id,
            notification_type=NotificationType.EXPENSE_EVENT,
        )
