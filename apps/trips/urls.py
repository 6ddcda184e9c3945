from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'trips'

router = DefaultRouter()
router.register(r'', views.TripViewSet, basename='trip')

urlpatterns = [
    # GET    /api/trips/                          - List trips
    # POST   /api/trips/                          - Create trip
    # GET    /api/trips/{id}/                     - Trip detail
    # PATCH  /api/trips/{id}/                     - Update trip (owner)
    # DELETE /api/trips/{id}/                     - Delete trip (owner)
    # GET    /api/trips/{id}/members/             - List members
    # POST   /api/trips/{id}/members/             - Add member (owner)
    # DELETE /api/trips/{id}/members/{member_id}/ - Remove member (owner)

    # Must come before the router so it is not read as a trip id
    path('categories/', views.categories, name='categories'),

    path('', include(router.urls)),
]
