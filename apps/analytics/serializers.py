"""
Serializers for analytics app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting
"""

from rest_framework import serializers


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class ReferenceDateQuerySerializer(serializers.Serializer):
    """
    Validate the optional reference day.

    Query Parameters:
        reference_date (date): Day to classify trips against (default today)
    """

    reference_date = serializers.DateField(required=False)


class ReportQuerySerializer(serializers.Serializer):
    """
    Query Parameters:
        currency (str): ISO currency code for amounts (default from settings)
    """

    currency = serializers.RegexField(
        regex=r'^[A-Za-z]{3}$',
        required=False,
        help_text='Three letter currency code'
    )


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class CategoryBreakdownSerializer(serializers.Serializer):
    category = serializers.CharField()
    spent = serializers.DecimalField(max_digits=14, decimal_places=2)
    budget = serializers.DecimalField(max_digits=14, decimal_places=2)
    remaining = serializers.DecimalField(max_digits=14, decimal_places=2)
    percent_spent = serializers.DecimalField(max_digits=5, decimal_places=2)


class AggregationSerializer(serializers.Serializer):
    """Result of aggregating one trip's expenses."""

    total_budget = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_spent = serializers.DecimalField(max_digits=14, decimal_places=2)
    remaining = serializers.DecimalField(max_digits=14, decimal_places=2)
    percent_spent = serializers.DecimalField(max_digits=5, decimal_places=2)
    per_category_totals = serializers.DictField(child=serializers.DecimalField(max_digits=14, decimal_places=2))
    daily_totals = serializers.DictField(child=serializers.DecimalField(max_digits=14, decimal_places=2))
    per_person_share = serializers.DecimalField(max_digits=14, decimal_places=2)
    daily_average = serializers.DecimalField(max_digits=14, decimal_places=2)
    expense_count = serializers.IntegerField()
    member_count = serializers.IntegerField()
    ungrouped_count = serializers.IntegerField()
    category_breakdown = CategoryBreakdownSerializer(many=True)


class TripInfoSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    start_date = serializers.DateField(allow_null=True)
    end_date = serializers.DateField(allow_null=True)
    member_count = serializers.IntegerField()
    status = serializers.CharField()


class TripSummaryResponseSerializer(serializers.Serializer):
    trip = TripInfoSerializer()
    summary = AggregationSerializer()
    notifications_sent = serializers.ListField(child=serializers.CharField())


class TripReportResponseSerializer(serializers.Serializer):
    trip_id = serializers.CharField()
    report = serializers.CharField()


class TripCardSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    start_date = serializers.DateField(allow_null=True)
    end_date = serializers.DateField(allow_null=True)
    cover_image = serializers.CharField(allow_blank=True)
    total_budget = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_spent = serializers.DecimalField(max_digits=14, decimal_places=2)
    remaining = serializers.DecimalField(max_digits=14, decimal_places=2)
    percent_spent = serializers.DecimalField(max_digits=5, decimal_places=2)
    member_count = serializers.IntegerField()
    status = serializers.CharField()


class DashboardResponseSerializer(serializers.Serializer):
    reference_date = serializers.DateField()
    active = TripCardSerializer(many=True)
    upcoming = TripCardSerializer(many=True)
    historical = TripCardSerializer(many=True)
    unclassified_count = serializers.IntegerField()
    total_budget = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_spent = serializers.DecimalField(max_digits=14, decimal_places=2)


class OverviewResponseSerializer(serializers.Serializer):
    total_trips = serializers.IntegerField()
    active_trips = serializers.IntegerField()
    upcoming_trips = serializers.IntegerField()
    total_spent = serializers.DecimalField(max_digits=14, decimal_places=2)


class ErrorSerializer(serializers.Serializer):
    """Standard error response."""

    error = serializers.CharField()
