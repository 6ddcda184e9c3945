"""
Notification sinks.

A sink delivers one notification and reports whether it went out. Sinks
may return False or raise ``NotificationDeliveryError``; the tracker
handles both the same way, so any sink can be wired in.
"""

import logging

from django.conf import settings
from django.core.mail import send_mail

from .exceptions import NotificationDeliveryError
from .models import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationSink:
    """Interface shared by sinks."""

    def emit(self, title: str, body: str, **options) -> bool:
        raise NotImplementedError


class InAppNotificationSink(NotificationSink):
    """Adds the notification to the user's in-app list."""

    def __init__(self, user):
        self.user = user

    def emit(self, title: str, body: str, **options) -> bool:
        Notification.objects.create(
            user=self.user,
            trip_id=options.get('trip_id'),
            key=options.get('key', ''),
            title=title,
            message=body,
            notification_type=options.get('notification_type', NotificationType.GENERAL),
        )
        return True


class EmailNotificationSink(NotificationSink):
    """Sends the notification to the user's email address."""

    def __init__(self, user):
        self.user = user

    def emit(self, title: str, body: str, **options) -> bool:
        if not self.user.email:
            raise NotificationDeliveryError("User has no email address")

        sent = send_mail(
            subject=title,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[self.user.email],
            fail_silently=False,
        )
        return sent > 0


class LoggingNotificationSink(NotificationSink):
    """Fallback sink that only writes the notification to the log."""

    def __init__(self, user=None):
        self.user = user

    def emit(self, title: str, body: str, **options) -> bool:
        logger.info("Notification %s: %s - %s", options.get('key', ''), title, body)
        return True
