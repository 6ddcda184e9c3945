from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('', views.notification_list, name='notification-list'),
    path('unread-count/', views.notification_unread_count, name='unread-count'),
    path('read-all/', views.notification_mark_all_read, name='mark-all-read'),
    path('check-upcoming/', views.check_upcoming, name='check-upcoming'),
    path('<uuid:notification_id>/read/', views.notification_mark_read, name='mark-read'),
]
