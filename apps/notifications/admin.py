from django.contrib import admin
from .models import Notification, NotificationMarker, DailyNotificationQuota


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'notification_type', 'read', 'created_at']
    list_filter = ['notification_type', 'read', 'created_at']
    search_fields = ['title', 'message', 'key', 'user__email']
    readonly_fields = ['id', 'key', 'created_at']


@admin.register(NotificationMarker)
class NotificationMarkerAdmin(admin.ModelAdmin):
    list_display = ['key', 'user', 'created_at']
    search_fields = ['key', 'user__email']
    readonly_fields = ['created_at']


@admin.register(DailyNotificationQuota)
class DailyNotificationQuotaAdmin(admin.ModelAdmin):
    list_display = ['user', 'day', 'sent_count']
    list_filter = ['day']
