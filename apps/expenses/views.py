from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.analytics.analytics import AnalyticsQueries
from apps.notifications.services import build_tracker, check_trip_budget, run_follow_up

from .serializers import (
    ExpenseFilterSerializer,
    ExpenseCreateSerializer,
    ExpenseUpdateSerializer,
    ExpenseSerializer,
)
from .services import (
    list_expenses,
    get_expense,
    add_expense,
    update_expense,
    delete_expense,
    # Exceptions
    ExpenseNotFoundError,
    TripNotFoundError,
    InsufficientPermissionsError,
    StoreUnavailableError,
)


class ExpensePagination(PageNumberPagination):
    """Custom pagination for expenses."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


def _recheck_budget(user, trip):
    """Recompute the trip's totals and fire any newly crossed threshold."""
    summary = AnalyticsQueries.trip_summary(trip)['summary']
    return check_trip_budget(
        user=user,
        trip_id=trip.id,
        trip_name=trip.name,
        summary=summary,
    )


class ExpenseViewSet(viewsets.ViewSet):
    """
    Expense endpoints.

    list: Expenses from the user's trips, filterable
    create: Record an expense (any trip member)
    retrieve: Get a specific expense
    partial_update: Edit an expense (creator or trip owner)
    destroy: Delete an expense (creator or trip owner)

    Recording or deleting an expense re-runs the budget threshold check for
    its trip.
    """

    permission_classes = [IsAuthenticated]
    pagination_class = ExpensePagination
    lookup_value_regex = r'[0-9a-fA-F-]{36}'

    @extend_schema(
        parameters=[ExpenseFilterSerializer],
        responses={200: ExpenseSerializer(many=True)},
    )
    def list(self, request):
        filter_serializer = ExpenseFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        try:
            expenses = list_expenses(
                user=request.user,
                trip_id=params.get('trip'),
                category=params.get('category'),
                date_from=params.get('date_from'),
                date_to=params.get('date_to'),
            )
        except TripNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(expenses, request, view=self)
        return paginator.get_paginated_response(ExpenseSerializer(page, many=True).data)

    @extend_schema(request=ExpenseCreateSerializer, responses={201: ExpenseSerializer})
    def create(self, request):
        serializer = ExpenseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        try:
            expense = add_expense(user=request.user, trip_id=data.pop('trip'), **data)
        except TripNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        trip = expense.trip
        run_follow_up(
            build_tracker(request.user).notify_expense_added,
            trip.id, trip.name, expense.id, expense.title, expense.amount
        )
        run_follow_up(_recheck_budget, request.user, trip)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ExpenseSerializer})
    def retrieve(self, request, pk=None):
        try:
            expense = get_expense(expense_id=pk, user=request.user)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response(ExpenseSerializer(expense).data)

    @extend_schema(request=ExpenseUpdateSerializer, responses={200: ExpenseSerializer})
    def partial_update(self, request, pk=None):
        serializer = ExpenseUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = update_expense(expense_id=pk, user=request.user, **serializer.validated_data)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        run_follow_up(_recheck_budget, request.user, expense.trip)
        return Response(ExpenseSerializer(expense).data)

    def destroy(self, request, pk=None):
        try:
            expense = delete_expense(expense_id=pk, user=request.user)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except StoreUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        trip = expense.trip
        run_follow_up(build_tracker(request.user).notify_expense_deleted, trip.id, trip.name, pk, expense.title)
        run_follow_up(_recheck_budget, request.user, trip)

        return Response(status=status.HTTP_204_NO_CONTENT)
