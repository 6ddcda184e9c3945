"""
Custom permission classes for analytics app.

Permission Classes:
    IsTripMemberForAnalytics - Requires trip membership for trip analytics

Usage:
    from apps.analytics.permissions import IsTripMemberForAnalytics

    @api_view(['GET'])
    @permission_classes([IsAuthenticated, IsTripMemberForAnalytics])
    def trip_summary(request, trip_id):
        ...
"""

from rest_framework.permissions import BasePermission
from apps.trips.models import Trip


class IsTripMemberForAnalytics(BasePermission):
    """
    Permission check for trip analytics access.

    Reads ``trip_id`` from the URL kwargs. A trip that does not exist is let
    through so the view can answer 404; an existing trip requires the user
    to own it or travel on it.
    """

    message = 'You must be a member of this trip to view its analytics.'

    def has_permission(self, request, view):
        trip_id = view.kwargs.get('trip_id')
        if not trip_id:
            return True

        try:
            trip = Trip.objects.get(id=trip_id)
        except Trip.DoesNotExist:
            return True
        return trip.has_member(request.user)
