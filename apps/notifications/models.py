from django.db import models
import uuid


class NotificationType(models.TextChoices):
    BUDGET_ALERT = 'budget_alert', 'Budget Alert'
    TRIP_REMINDER = 'trip_reminder', 'Trip Reminder'
    TRIP_EVENT = 'trip_event', 'Trip Event'
    EXPENSE_EVENT = 'expense_event', 'Expense Event'
    GENERAL = 'general', 'General'


class Notification(models.Model):
    """An in-app notification shown in the user's notification list."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    trip = models.ForeignKey(
        'trips.Trip',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications'
    )

    key = models.CharField(max_length=255, blank=True)
    title = models.CharField(max_length=200)
    message = models.TextField()
    notification_type = models.CharField(
        max_length=20,
        choices=NotificationType.choices,
        default=NotificationType.GENERAL
    )

    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['user', 'read'], name='notifications_user_read_idx'),
            models.Index(fields=['user', '-created_at'], name='notifications_user_new_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} -> {self.user.email}"


class NotificationMarker(models.Model):
    """
    Durable proof that the notification with ``key`` was emitted.

    Once a marker exists it is never removed; the key will not fire again.
    """

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='notification_markers'
    )
    key = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notification_markers'
        constraints = [
            models.UniqueConstraint(fields=['user', 'key'], name='unique_notification_marker'),
        ]

    def __str__(self):
        return self.key


class DailyNotificationQuota(models.Model):
    """Number of notifications sent to a user on one calendar day."""

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='notification_quotas'
    )
    day = models.DateField()
    sent_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'notification_daily_quotas'
        constraints = [
            models.UniqueConstraint(fields=['user', 'day'], name='unique_daily_quota'),
        ]

    def __str__(self):
        return f"noti-count-{self.day.isoformat()}: {self.sent_count}"
