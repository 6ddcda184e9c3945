"""
Analytics Module
=================

Database-backed entry points to the aggregation engine. Each method loads
one snapshot of trips and expenses, converts it to strict records and hands
it to ``TripAggregation``; nothing is cached between calls.

Classes:
    AnalyticsQueries: Static methods for trip and user level analytics.

Key Features:
    - Full aggregation for a single trip
    - Dashboard with trips bucketed by lifecycle
    - Profile overview (trip counts, lifetime spend)
    - Shareable text report

Example:
    Getting a trip summary::

        from apps.analytics.analytics import AnalyticsQueries

        result = AnalyticsQueries.trip_summary(trip)
        print(f"Spent {result['summary']['total_spent']} of {result['summary']['total_budget']}")

Note:
    This module is read-only and doesn't modify any data. All methods
    are static and can be called without instantiation.
"""

import logging

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Prefetch, Q
from decimal import Decimal

from apps.expenses.models import Expense
from apps.trips.models import Trip, TripMember
from .aggregation import TripAggregation, TripStatus
from .exceptions import StoreUnavailableError
from .records import expense_record_from_model, trip_record_from_model
from .reports import format_trip_report
from .timestamps import normalize_timestamp, today

logger = logging.getLogger(__name__)


def _trip_info(record, status):
    return {
        'id': record.id,
        'name': record.name,
        'start_date': record.start_date,
        'end_date': record.end_date,
        'member_count': record.member_count,
        'status': status,
    }


class AnalyticsQueries:
    """
    Trip analytics over the ORM.

    Methods:
        trip_summary: Aggregation result and status of one trip.
        trip_report: Plain-text shareable report of one trip.
        user_dashboard: All of a user's trips, enriched and bucketed.
        user_overview: Profile statistics for a user.

    Note:
        All methods return plain dictionaries (or a string for the report),
        not Django objects, making them suitable for JSON responses.
    """

    @staticmethod
    def _user_trips(user):
        return (
            Trip.objects
            .filter(Q(owner=user) | Q(members__user=user))
            .distinct()
            .prefetch_related(
                Prefetch('members', queryset=TripMember.objects.select_related('user')),
                Prefetch('expenses', queryset=Expense.objects.order_by('-created_at')),
            )
        )

    @staticmethod
    def _records(trip):
        record = trip_record_from_model(trip)
        expenses = [expense_record_from_model(expense) for expense in trip.expenses.all()]
        return record, expenses

    @staticmethod
    def trip_summary(trip, reference_date=None):
        """
        Aggregate a single trip.

        Args:
            trip (Trip): Trip instance. Expenses and members are read through
                its related managers, so prefetched data is reused.
            reference_date (date, optional): Day used for the status.
                Defaults to today.

        Returns:
            dict: A dictionary containing:
                - trip (dict): id, name, start_date, end_date, member_count, status
                - summary (dict): The ``TripAggregation.summarize`` result.

        Raises:
            StoreUnavailableError: If the expenses cannot be loaded.
        """
        try:
            record, expenses = AnalyticsQueries._records(trip)
        except DatabaseError as e:
            logger.exception("Could not load expenses for trip %s", trip.id)
            raise StoreUnavailableError("Trip data is temporarily unavailable") from e

        summary = TripAggregation.snapshot(record, expenses, reference_date)
        status = summary.pop('status')
        return {
            'trip': _trip_info(record, status),
            'summary': summary,
        }

    @staticmethod
    def trip_report(trip, currency=None):
        """
        Render the shareable plain-text report of a trip.

        Args:
            trip (Trip): Trip instance.
            currency (str, optional): Currency code. Defaults to
                ``settings.DEFAULT_CURRENCY``.

        Returns:
            str: Multi-line report.
        """
        try:
            record, expenses = AnalyticsQueries._records(trip)
        except DatabaseError as e:
            logger.exception("Could not load expenses for trip %s", trip.id)
            raise StoreUnavailableError("Trip data is temporarily unavailable") from e

        summary = TripAggregation.summarize(
            budget=record.total_budget,
            expenses=expenses,
            members=record.member_count,
            category_budgets=record.category_budgets,
        )
        return format_trip_report(record, summary, currency or settings.DEFAULT_CURRENCY)

    @staticmethod
    def user_dashboard(user, reference_date=None):
        """
        Build the trip dashboard for a user.

        Every trip is summarized from one snapshot and placed in its lifecycle
        bucket. Trips whose dates cannot be classified are counted but not
        listed.

        Args:
            user (User): The user whose trips are shown.
            reference_date (date, optional): Day to classify against.

        Returns:
            dict: A dictionary containing:
                - reference_date (date)
                - active / upcoming / historical (list[dict]): Trip cards with
                  id, name, dates, cover_image, total_budget, total_spent,
                  remaining, percent_spent, member_count, status.
                - unclassified_count (int)
                - total_budget (Decimal): Across all trips.
                - total_spent (Decimal): Across all trips.

        Raises:
            StoreUnavailableError: If trips cannot be loaded.
        """
        reference = normalize_timestamp(reference_date) if reference_date is not None else today()

        try:
            trips = list(AnalyticsQueries._user_trips(user))
            snapshots = [AnalyticsQueries._records(trip) for trip in trips]
        except DatabaseError as e:
            logger.exception("Could not load dashboard for user %s", user.id)
            raise StoreUnavailableError("Trips are temporarily unavailable") from e

        cards = {}
        total_budget = Decimal('0.00')
        total_spent = Decimal('0.00')

        for trip, (record, expenses) in zip(trips, snapshots):
            summary = TripAggregation.snapshot(record, expenses, reference)
            total_budget += summary['total_budget']
            total_spent += summary['total_spent']
            cards[record.id] = {
                'id': record.id,
                'name': record.name,
                'start_date': record.start_date,
                'end_date': record.end_date,
                'cover_image': trip.cover_image,
                'total_budget': summary['total_budget'],
                'total_spent': summary['total_spent'],
                'remaining': summary['remaining'],
                'percent_spent': summary['percent_spent'],
                'member_count': summary['member_count'],
                'status': summary['status'],
            }

        buckets = TripAggregation.categorize_trips(
            [record for record, _ in snapshots], reference
        )

        result = {'reference_date': reference}
        for bucket, records in buckets.items():
            result[bucket] = [cards[record.id] for record in records]

        result['unclassified_count'] = sum(
            1 for card in cards.values() if card['status'] == TripStatus.UNCLASSIFIABLE
        )
        result['total_budget'] = total_budget
        result['total_spent'] = total_spent
        return result

    @staticmethod
    def user_overview(user, reference_date=None):
        """
        Profile statistics for a user.

        Returns:
            dict: A dictionary containing:
                - total_trips (int)
                - active_trips (int): Trips running on the reference day.
                - upcoming_trips (int)
                - total_spent (Decimal): Sum of all expenses on the user's trips.
        """
        dashboard = AnalyticsQueries.user_dashboard(user, reference_date)
        total_trips = (
            len(dashboard['active'])
            + len(dashboard['upcoming'])
            + len(dashboard['historical'])
            + dashboard['unclassified_count']
        )
        return {
            'total_trips': total_trips,
            'active_trips': len(dashboard['active']),
            'upcoming_trips': len(dashboard['upcoming']),
            'total_spent': dashboard['total_spent'],
        }
