"""
Idempotency-marker stores.

A store answers two questions for the tracker: has this key been notified
already, and how many notifications may still go out today. Both answers
must survive restarts for the database store; the in-memory store exists so
trackers can be exercised in isolation.
"""

import logging
from datetime import date
from typing import Dict, Set

from django.db import transaction
from django.db.models import F

from .models import NotificationMarker, DailyNotificationQuota

logger = logging.getLogger(__name__)


def quota_key(day: date) -> str:
    return f"noti-count-{day.isoformat()}"


class MarkerStore:
    """Interface shared by marker stores."""

    def __init__(self, daily_limit: int):
        self.daily_limit = daily_limit

    def has_marker(self, key: str) -> bool:
        raise NotImplementedError

    def set_marker(self, key: str) -> None:
        raise NotImplementedError

    def get_daily_quota_remaining(self, day: date) -> int:
        raise NotImplementedError

    def decrement_daily_quota(self, day: date) -> None:
        raise NotImplementedError


class InMemoryMarkerStore(MarkerStore):
    """Process-local store; state lives only as long as the instance."""

    def __init__(self, daily_limit: int = 10):
        super().__init__(daily_limit)
        self.markers: Set[str] = set()
        self.counts: Dict[str, int] = {}

    def has_marker(self, key: str) -> bool:
        return key in self.markers

    def set_marker(self, key: str) -> None:
        self.markers.add(key)

    def get_daily_quota_remaining(self, day: date) -> int:
        return max(0, self.daily_limit - self.counts.get(quota_key(day), 0))

    def decrement_daily_quota(self, day: date) -> None:
        key = quota_key(day)
        self.counts[key] = self.counts.get(key, 0) + 1


class DatabaseMarkerStore(MarkerStore):
    """Per-user store backed by the notification marker and quota tables."""

    def __init__(self, user, daily_limit: int = 10):
        super().__init__(daily_limit)
        self.user = user

    def has_marker(self, key: str) -> bool:
        return NotificationMarker.objects.filter(user=self.user, key=key).exists()

    def set_marker(self, key: str) -> None:
        NotificationMarker.objects.get_or_create(user=self.user, key=key)

    def get_daily_quota_remaining(self, day: date) -> int:
        sent = (
            DailyNotificationQuota.objects
            .filter(user=self.user, day=day)
            .values_list('sent_count', flat=True)
            .first()
        )
        return max(0, self.daily_limit - (sent or 0))

    @transaction.atomic
    def decrement_daily_quota(self, day: date) -> None:
        quota, _ = (
            DailyNotificationQuota.objects
            .select_for_update()
            .get_or_create(user=self.user, day=day)
        )
        DailyNotificationQuota.objects.filter(pk=quota.pk).update(
            sent_count=F('sent_count') + 1
        )
        logger.debug("Consumed one notification from %s for user %s", quota_key(day), self.user.id)
