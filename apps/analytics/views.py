from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.notifications.services import check_trip_budget
from apps.trips.services import (
    get_trip,
    TripNotFoundError,
    StoreUnavailableError as TripStoreUnavailableError,
)
from .analytics import AnalyticsQueries
from .exceptions import StoreUnavailableError
from .permissions import IsTripMemberForAnalytics
from .serializers import (
    # Input serializers
    ReferenceDateQuerySerializer,
    ReportQuerySerializer,
    # Response serializers
    TripSummaryResponseSerializer,
    TripReportResponseSerializer,
    DashboardResponseSerializer,
    OverviewResponseSerializer,
    ErrorSerializer,
)

REFERENCE_DATE_PARAMETER = OpenApiParameter(
    'reference_date',
    OpenApiTypes.DATE,
    description='Day to classify trips against (YYYY-MM-DD, default today)'
)


def _unavailable(e):
    return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


@extend_schema(
    parameters=[REFERENCE_DATE_PARAMETER],
    responses={
        200: TripSummaryResponseSerializer,
        403: ErrorSerializer,
        404: ErrorSerializer,
        503: ErrorSerializer,
    },
    description=(
        "Aggregate a trip's expenses: totals, remaining budget, percent spent, "
        "per-category and per-day totals, per-person share. Also fires any "
        "newly crossed budget threshold notification."
    ),
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTripMemberForAnalytics])
def trip_summary(request, trip_id):
    """Trip aggregation - thin HTTP handler."""
    query_serializer = ReferenceDateQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    reference_date = query_serializer.validated_data.get('reference_date')

    try:
        trip = get_trip(trip_id=trip_id, user=request.user)
        data = AnalyticsQueries.trip_summary(trip, reference_date=reference_date)
    except TripNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except (StoreUnavailableError, TripStoreUnavailableError) as e:
        return _unavailable(e)

    data['notifications_sent'] = check_trip_budget(
        user=request.user,
        trip_id=trip.id,
        trip_name=trip.name,
        summary=data['summary'],
    )
    return Response(data)


@extend_schema(
    parameters=[
        OpenApiParameter('currency', OpenApiTypes.STR, description='Currency code (default from settings)'),
    ],
    responses={
        200: TripReportResponseSerializer,
        404: ErrorSerializer,
    },
    description="Plain-text trip report for sharing.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTripMemberForAnalytics])
def trip_report(request, trip_id):
    query_serializer = ReportQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    try:
        trip = get_trip(trip_id=trip_id, user=request.user)
        report = AnalyticsQueries.trip_report(
            trip,
            currency=query_serializer.validated_data.get('currency')
        )
    except TripNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except (StoreUnavailableError, TripStoreUnavailableError) as e:
        return _unavailable(e)

    return Response({'trip_id': str(trip.id), 'report': report})


@extend_schema(
    parameters=[REFERENCE_DATE_PARAMETER],
    responses={200: DashboardResponseSerializer, 503: ErrorSerializer},
    description="All of the current user's trips with spend, grouped into active, upcoming and historical.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Get dashboard data for current user."""
    query_serializer = ReferenceDateQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    try:
        data = AnalyticsQueries.user_dashboard(
            request.user,
            reference_date=query_serializer.validated_data.get('reference_date')
        )
    except StoreUnavailableError as e:
        return _unavailable(e)

    return Response(data)


@extend_schema(
    parameters=[REFERENCE_DATE_PARAMETER],
    responses={200: OverviewResponseSerializer, 503: ErrorSerializer},
    description="Profile statistics: total trips, active trips and lifetime spend.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def overview(request):
    query_serializer = ReferenceDateQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    try:
        data = AnalyticsQueries.user_overview(
            request.user,
            reference_date=query_serializer.validated_data.get('reference_date')
        )
    except StoreUnavailableError as e:
        return _unavailable(e)

    return Response(data)
