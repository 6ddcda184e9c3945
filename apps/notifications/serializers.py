from rest_framework import serializers
from .models import Notification


# =============================================================================
# Input Serializers
# =============================================================================

class NotificationFilterSerializer(serializers.Serializer):
    """Validate query parameters for the notification list."""

    unread = serializers.BooleanField(required=False, default=False)


class CheckUpcomingSerializer(serializers.Serializer):
    """Optional reference day for the upcoming trip check."""

    reference_date = serializers.DateField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class NotificationSerializer(serializers.ModelSerializer):

    class Meta:
        model = Notification
        fields = [
            'id',
            'trip',
            'key',
            'title',
            'message',
            'notification_type',
            'read',
            'created_at',
        ]
        read_only_fields = fields


class UnreadCountSerializer(serializers.Serializer):
    unread_count = serializers.IntegerField()


class CheckUpcomingResultSerializer(serializers.Serializer):
    sent = serializers.ListField(child=serializers.CharField())
