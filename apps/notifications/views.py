from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.trips.services import StoreUnavailableError

from .exceptions import NotificationNotFoundError
from .serializers import (
    NotificationFilterSerializer,
    CheckUpcomingSerializer,
    NotificationSerializer,
    UnreadCountSerializer,
    CheckUpcomingResultSerializer,
)
from .services import (
    list_notifications,
    unread_count,
    mark_as_read,
    mark_all_as_read,
    check_upcoming_trips_for_user,
)


class NotificationPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(
    parameters=[
        OpenApiParameter('unread', bool, description='Only unread notifications'),
    ],
    responses={200: NotificationSerializer(many=True)},
    description="List the current user's notifications, newest first.",
    tags=['notifications'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """List notifications for the current user."""
    filter_serializer = NotificationFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)

    queryset = list_notifications(
        user=request.user,
        unread_only=filter_serializer.validated_data['unread']
    )

    paginator = NotificationPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = NotificationSerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)


@extend_schema(
    responses={200: UnreadCountSerializer},
    description="Number of unread notifications (for the badge).",
    tags=['notifications'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_unread_count(request):
    return Response({'unread_count': unread_count(user=request.user)})


@extend_schema(
    request=None,
    responses={200: NotificationSerializer},
    description="Mark one notification as read.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, notification_id):
    try:
        notification = mark_as_read(user=request.user, notification_id=notification_id)
    except NotificationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(NotificationSerializer(notification).data)


@extend_schema(
    request=None,
    description="Mark all notifications as read.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    updated = mark_all_as_read(user=request.user)
    return Response({'updated': updated})


@extend_schema(
    request=CheckUpcomingSerializer,
    responses={200: CheckUpcomingResultSerializer},
    description=(
        "Send reminders for trips starting today or tomorrow. "
        "Safe to call repeatedly; each reminder is sent once."
    ),
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def check_upcoming(request):
    serializer = CheckUpcomingSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        sent = check_upcoming_trips_for_user(
            user=request.user,
            reference_date=serializer.validated_data.get('reference_date')
        )
    except StoreUnavailableError as e:
        return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return Response({'sent': sent})
