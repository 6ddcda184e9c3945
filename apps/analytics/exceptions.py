"""
Domain exceptions for analytics app.

The aggregation engine itself never raises for bad data. These exceptions
cover the database-backed queries only.

Exception Hierarchy:
    AnalyticsServiceError (base)
    └── StoreUnavailableError

Usage:
    from apps.analytics.exceptions import StoreUnavailableError

    try:
        data = AnalyticsQueries.user_dashboard(user)
    except StoreUnavailableError as e:
        return Response({'error': str(e)}, status=503)
"""


class AnalyticsServiceError(Exception):
    """Base exception for all analytics service errors."""

    pass


class StoreUnavailableError(AnalyticsServiceError):
    """
    Raised when trip or expense data cannot be read.

    Views surface it as HTTP 503 so clients can offer a retry.
    """

    pass
