from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Trip analytics
    path('trips/<uuid:trip_id>/summary/', views.trip_summary, name='trip-summary'),
    path('trips/<uuid:trip_id>/report/', views.trip_report, name='trip-report'),

    # User analytics
    path('dashboard/', views.dashboard, name='dashboard'),
    path('overview/', views.overview, name='overview'),
]
