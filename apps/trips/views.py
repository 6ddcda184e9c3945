from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from django.db import DatabaseError
from django.db.models import Prefetch, Q
from drf_spectacular.utils import extend_schema

from apps.notifications.services import build_tracker, run_follow_up

from .categories import get_categories
from .models import Trip, TripMember
from .permissions import IsTripMember, IsTripOwner
from .serializers import (
    TripInputSerializer,
    TripMemberInputSerializer,
    TripSerializer,
    TripListSerializer,
    TripMemberSerializer,
    CategorySerializer,
)
from .services import (
    list_trips,
    create_trip,
    update_trip,
    delete_trip,
    add_member,
    remove_member,
    get_trip,
    get_trip_members,
    # Exceptions
    TripNotFoundError,
    InsufficientPermissionsError,
    InvalidDateRangeError,
    MemberNotFoundError,
    DuplicateMemberError,
    CannotRemoveOwnerError,
    StoreUnavailableError,
)


class TripPagination(PageNumberPagination):
    """Custom pagination for trips."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class TripViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Trip CRUD operations.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all trips the user owns or travels on
    create: Create a new trip (creator becomes owner member)
    retrieve: Get a specific trip
    update: Update a trip (owner only)
    partial_update: Partially update a trip (owner only)
    destroy: Delete a trip with its expenses (owner only)
    """

    serializer_class = TripSerializer
    permission_classes = [IsAuthenticated, IsTripMember]
    pagination_class = TripPagination

    def get_queryset(self):
        """Return only trips the user is on."""
        user = self.request.user
        return (
            Trip.objects
            .filter(Q(owner=user) | Q(members__user=user))
            .distinct()
            .select_related('owner')
            .prefetch_related(
                Prefetch('members', queryset=TripMember.objects.select_related('user'))
            )
        )

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return TripListSerializer
        elif self.action in ['create', 'update', 'partial_update']:
            return TripInputSerializer
        return TripSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['update', 'partial_update', 'destroy', 'remove_member']:
            return [IsAuthenticated(), IsTripOwner()]
        if self.action == 'members' and self.request.method == 'POST':
            return [IsAuthenticated(), IsTripOwner()]
        return [IsAuthenticated(), IsTripMember()]

    def get_object(self):
        try:
            return super().get_object()
        except DatabaseError as e:
            raise StoreUnavailableError("Trips are temporarily unavailable") from e

    def list(self, request, *args, **kwargs):
        """List the user's trips."""
        try:
            trips = list_trips(user=request.user)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        page = self.paginate_queryset(trips)
        serializer = TripListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request, *args, **kwargs):
        """Create a new trip."""
        serializer = TripInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            trip = create_trip(owner=request.user, **serializer.validated_data)
            run_follow_up(build_tracker(request.user).notify_trip_created, trip.id, trip.name)
            trip = get_trip(trip_id=trip.id, user=request.user)
        except InvalidDateRangeError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        output_serializer = TripSerializer(trip, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update a trip; PUT and PATCH both apply only the given fields."""
        try:
            trip = self.get_object()
            serializer = TripInputSerializer(data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            changes = dict(serializer.validated_data)
            changes.pop('members', None)

            trip = update_trip(trip_id=trip.id, user=request.user, **changes)
            run_follow_up(build_tracker(request.user).notify_trip_updated, trip.id, trip.name)
            trip = get_trip(trip_id=trip.id, user=request.user)
        except TripNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except InvalidDateRangeError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response(TripSerializer(trip, context={'request': request}).data)

    def destroy(self, request, *args, **kwargs):
        """Delete a trip."""
        try:
            trip = self.get_object()
            trip_id, trip_name = trip.id, trip.name
            delete_trip(trip_id=trip_id, user=request.user)
        except TripNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        run_follow_up(build_tracker(request.user).notify_trip_deleted, trip_id, trip_name)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        methods=['GET'],
        responses={200: TripMemberSerializer(many=True)},
    )
    @extend_schema(
        methods=['POST'],
        request=TripMemberInputSerializer,
        responses={201: TripMemberSerializer},
    )
    @action(detail=True, methods=['get', 'post'])
    def members(self, request, pk=None):
        """List members, or add one (owner only)."""
        try:
            trip = self.get_object()
            if request.method == 'GET':
                serializer = TripMemberSerializer(get_trip_members(trip_id=trip.id), many=True)
                return Response(serializer.data)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        input_serializer = TripMemberInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        try:
            member = add_member(
                trip_id=trip.id,
                added_by=request.user,
                name=data.get('name', ''),
                email=data.get('email', ''),
                member_user=data.get('user')
            )
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except DuplicateMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response(TripMemberSerializer(member).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['delete'], url_path=r'members/(?P<member_id>[0-9a-f-]+)')
    def remove_member(self, request, pk=None, member_id=None):
        """Remove a member from the trip (owner only)."""
        try:
            trip = self.get_object()
            remove_member(trip_id=trip.id, member_id=member_id, removed_by=request.user)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except MemberNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except CannotRemoveOwnerError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    responses={200: CategorySerializer(many=True)},
    description="Starter expense categories with display color and icon.",
    tags=['trips'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def categories(request):
    return Response(CategorySerializer(get_categories(), many=True).data)
